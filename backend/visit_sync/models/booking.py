# backend/visit_sync/models/booking.py
"""
Offender bookings and their visit-order entitlement.

VisitBalance counters are maintained outside this service; the core only
reads them and appends VisitBalanceAdjustment rows.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from ..database import Base

if TYPE_CHECKING:
    from .reference import Prison


class Offender(Base):
    __tablename__ = "offenders"

    id: Mapped[int] = mapped_column(primary_key=True)
    noms_id: Mapped[str] = mapped_column(String(10), unique=True, index=True, nullable=False)
    first_name: Mapped[str] = mapped_column(String(35), nullable=False)
    last_name: Mapped[str] = mapped_column(String(35), nullable=False)

    bookings: Mapped[List["OffenderBooking"]] = relationship(back_populates="offender")


class OffenderBooking(Base):
    """The custodial episode a visit is scheduled against."""

    __tablename__ = "offender_bookings"

    id: Mapped[int] = mapped_column(primary_key=True)
    offender_id: Mapped[int] = mapped_column(ForeignKey("offenders.id"), nullable=False, index=True)
    prison_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("agency_locations.id"), nullable=True
    )
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    booking_begin_date: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )

    offender: Mapped["Offender"] = relationship(back_populates="bookings")
    prison: Mapped[Optional["Prison"]] = relationship()
    visit_balance: Mapped[Optional["VisitBalance"]] = relationship(
        back_populates="booking", uselist=False
    )


class VisitBalance(Base):
    """Remaining visit orders for a booking."""

    __tablename__ = "offender_visit_balances"

    booking_id: Mapped[int] = mapped_column(ForeignKey("offender_bookings.id"), primary_key=True)
    remaining_visit_orders: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    remaining_privileged_visit_orders: Mapped[Optional[int]] = mapped_column(
        Integer, nullable=True
    )

    booking: Mapped["OffenderBooking"] = relationship(back_populates="visit_balance")
    adjustments: Mapped[List["VisitBalanceAdjustment"]] = relationship(
        back_populates="visit_balance", order_by="VisitBalanceAdjustment.id"
    )


class VisitBalanceAdjustment(Base):
    """
    Append-only ledger entry recording a signed change to one balance counter.

    Only one of the two delta columns is set per row, together with the
    matching previous-value snapshot.
    """

    __tablename__ = "offender_visit_balance_adjs"

    id: Mapped[int] = mapped_column(primary_key=True)
    booking_id: Mapped[int] = mapped_column(
        ForeignKey("offender_visit_balances.booking_id"), nullable=False, index=True
    )
    adjust_date: Mapped[date] = mapped_column(Date, nullable=False)
    adjust_reason_code: Mapped[str] = mapped_column(String(12), nullable=False)
    remaining_visit_orders: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    previous_remaining_visit_orders: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    remaining_privileged_visit_orders: Mapped[Optional[int]] = mapped_column(
        Integer, nullable=True
    )
    previous_remaining_privileged_visit_orders: Mapped[Optional[int]] = mapped_column(
        Integer, nullable=True
    )
    comment_text: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )

    visit_balance: Mapped["VisitBalance"] = relationship(back_populates="adjustments")
