# backend/visit_sync/models/scheduling.py
"""
Weekly visit scheduling configuration.

The legacy estate files every visit under a (day, time, room) hierarchy:

    SchedulingDay  (prison, weekday)
      SchedulingTime  (prison, weekday, sequence) start/end time
        SchedulingSlot  time + Room

Rows are provisioned on first demand by SlotProvisioner and never updated.
Unique constraints make concurrent first-time provisioning detectable.
"""

from __future__ import annotations

from datetime import date, time
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    Date,
    ForeignKey,
    ForeignKeyConstraint,
    Integer,
    String,
    Time,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..database import Base
from .reference import Prison


class Room(Base):
    """An internal location of a prison where visits take place."""

    __tablename__ = "agency_internal_locations"
    __table_args__ = (
        UniqueConstraint("prison_id", "description", name="uq_internal_location_description"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    prison_id: Mapped[str] = mapped_column(
        ForeignKey("agency_locations.id"), nullable=False, index=True
    )
    parent_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("agency_internal_locations.id"), nullable=True
    )
    description: Mapped[str] = mapped_column(String(240), nullable=False)
    location_code: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    location_type: Mapped[str] = mapped_column(String(12), nullable=False)
    user_description: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    capacity: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    list_sequence: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    tracking: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    current_occupancy: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    certified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    prison: Mapped["Prison"] = relationship()
    parent: Mapped[Optional["Room"]] = relationship(remote_side="Room.id")

    def __repr__(self) -> str:
        return f"<Room {self.id} {self.description}>"


class SchedulingDay(Base):
    __tablename__ = "agency_visit_days"

    prison_id: Mapped[str] = mapped_column(ForeignKey("agency_locations.id"), primary_key=True)
    week_day: Mapped[str] = mapped_column(String(3), primary_key=True)


class SchedulingTime(Base):
    """
    A weekday time slot.

    effective_date and expiry_date are set in the past so the legacy
    recurring schedule never offers the slot, while visits can still
    reference it.
    """

    __tablename__ = "agency_visit_times"
    __table_args__ = (
        ForeignKeyConstraint(
            ["prison_id", "week_day"],
            ["agency_visit_days.prison_id", "agency_visit_days.week_day"],
        ),
        UniqueConstraint("prison_id", "week_day", "start_time", name="uq_visit_time_start"),
    )

    prison_id: Mapped[str] = mapped_column(String(6), primary_key=True)
    week_day: Mapped[str] = mapped_column(String(3), primary_key=True)
    time_slot_sequence: Mapped[int] = mapped_column(Integer, primary_key=True)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)
    effective_date: Mapped[date] = mapped_column(Date, nullable=False)
    expiry_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    day: Mapped["SchedulingDay"] = relationship()
    slots: Mapped[List["SchedulingSlot"]] = relationship(back_populates="scheduling_time")


class SchedulingSlot(Base):
    """A time slot offered in a particular room. Capacity is not tracked here."""

    __tablename__ = "agency_visit_slots"
    __table_args__ = (
        ForeignKeyConstraint(
            ["prison_id", "week_day", "time_slot_sequence"],
            [
                "agency_visit_times.prison_id",
                "agency_visit_times.week_day",
                "agency_visit_times.time_slot_sequence",
            ],
        ),
        UniqueConstraint(
            "room_id", "prison_id", "week_day", "time_slot_sequence", name="uq_visit_slot_room"
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    prison_id: Mapped[str] = mapped_column(String(6), nullable=False)
    week_day: Mapped[str] = mapped_column(String(3), nullable=False)
    time_slot_sequence: Mapped[int] = mapped_column(Integer, nullable=False)
    room_id: Mapped[int] = mapped_column(ForeignKey("agency_internal_locations.id"), nullable=False)
    max_groups: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    max_adults: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    scheduling_time: Mapped["SchedulingTime"] = relationship(back_populates="slots")
    room: Mapped["Room"] = relationship()
