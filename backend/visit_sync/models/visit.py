# backend/visit_sync/models/visit.py
"""
Visit aggregate: the visit, its visitors, and the visit order backing it.

Every visit carries one status-tracking visitor row that has no person but
references the booking. It mirrors the visit's event status and outcome and
owns the visit's event id.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from ..core.enums import VisitStatus
from ..database import Base

if TYPE_CHECKING:
    from .booking import OffenderBooking
    from .reference import Person, Prison
    from .scheduling import Room, SchedulingSlot


class VisitOrder(Base):
    """One consumable entitlement unit allocated to a visit at creation time."""

    __tablename__ = "offender_visit_orders"

    id: Mapped[int] = mapped_column(primary_key=True)
    booking_id: Mapped[int] = mapped_column(
        ForeignKey("offender_bookings.id"), nullable=False, index=True
    )
    visit_order_number: Mapped[int] = mapped_column(Integer, unique=True, nullable=False)
    visit_order_type: Mapped[str] = mapped_column(String(12), nullable=False)
    status: Mapped[str] = mapped_column(String(12), nullable=False)
    outcome_reason_code: Mapped[Optional[str]] = mapped_column(String(12), nullable=True)
    issue_date: Mapped[date] = mapped_column(Date, nullable=False)
    expiry_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    comment_text: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    booking: Mapped["OffenderBooking"] = relationship()
    visitors: Mapped[List["VisitOrderVisitor"]] = relationship(
        back_populates="visit_order",
        cascade="all, delete-orphan",
        order_by="VisitOrderVisitor.id",
    )

    @property
    def group_leader(self) -> Optional["VisitOrderVisitor"]:
        return next((visitor for visitor in self.visitors if visitor.group_leader), None)


class VisitOrderVisitor(Base):
    __tablename__ = "offender_visit_order_visitors"

    id: Mapped[int] = mapped_column(primary_key=True)
    visit_order_id: Mapped[int] = mapped_column(
        ForeignKey("offender_visit_orders.id"), nullable=False, index=True
    )
    person_id: Mapped[int] = mapped_column(ForeignKey("persons.id"), nullable=False)
    group_leader: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    visit_order: Mapped["VisitOrder"] = relationship(back_populates="visitors")
    person: Mapped["Person"] = relationship()


class Visit(Base):
    """One scheduled attendance event for one booking."""

    __tablename__ = "offender_visits"

    id: Mapped[int] = mapped_column(primary_key=True)
    booking_id: Mapped[int] = mapped_column(
        ForeignKey("offender_bookings.id"), nullable=False, index=True
    )
    prison_id: Mapped[str] = mapped_column(ForeignKey("agency_locations.id"), nullable=False)
    visit_date: Mapped[date] = mapped_column(Date, nullable=False)
    start_date_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    end_date_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    visit_type: Mapped[str] = mapped_column(String(12), nullable=False)
    visit_status: Mapped[str] = mapped_column(
        String(12), nullable=False, default=VisitStatus.SCHEDULED.value, index=True
    )
    room_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("agency_internal_locations.id"), nullable=True
    )
    visit_slot_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("agency_visit_slots.id"), nullable=True
    )
    comment_text: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    visit_order_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("offender_visit_orders.id"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime, nullable=True, onupdate=func.now()
    )

    booking: Mapped["OffenderBooking"] = relationship()
    prison: Mapped["Prison"] = relationship()
    room: Mapped[Optional["Room"]] = relationship()
    visit_slot: Mapped[Optional["SchedulingSlot"]] = relationship()
    visit_order: Mapped[Optional["VisitOrder"]] = relationship()
    visitors: Mapped[List["VisitVisitor"]] = relationship(
        back_populates="visit",
        cascade="all, delete-orphan",
        order_by="VisitVisitor.id",
    )

    @property
    def status_record(self) -> Optional["VisitVisitor"]:
        return next((visitor for visitor in self.visitors if visitor.is_status_record), None)

    @property
    def person_visitors(self) -> List["VisitVisitor"]:
        return [visitor for visitor in self.visitors if not visitor.is_status_record]


class VisitVisitor(Base):
    """
    A visitor row. Either a person attending, or the status-tracking row
    (booking_id set, person_id null).
    """

    __tablename__ = "offender_visit_visitors"

    id: Mapped[int] = mapped_column(primary_key=True)
    visit_id: Mapped[int] = mapped_column(
        ForeignKey("offender_visits.id"), nullable=False, index=True
    )
    person_id: Mapped[Optional[int]] = mapped_column(ForeignKey("persons.id"), nullable=True)
    booking_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("offender_bookings.id"), nullable=True
    )
    event_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    event_status: Mapped[Optional[str]] = mapped_column(String(12), nullable=True)
    event_outcome: Mapped[Optional[str]] = mapped_column(String(12), nullable=True)
    outcome_reason_code: Mapped[Optional[str]] = mapped_column(String(12), nullable=True)

    visit: Mapped["Visit"] = relationship(back_populates="visitors")
    person: Mapped[Optional["Person"]] = relationship()

    @property
    def is_status_record(self) -> bool:
        return self.booking_id is not None
