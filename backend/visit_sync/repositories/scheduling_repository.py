# backend/visit_sync/repositories/scheduling_repository.py
"""
Scheduling Repositories

Lookups used by the slot provisioner to find the day, time, slot and room
rows a visit is filed under. Creation goes through BaseRepository.create so
unique key collisions surface as UniqueConstraintViolation.
"""

from datetime import time
import logging
from typing import Optional, Sequence

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..models.scheduling import Room, SchedulingDay, SchedulingSlot, SchedulingTime
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class RoomRepository(BaseRepository[Room]):
    def __init__(self, db: Session):
        super().__init__(db, Room)

    def find_top_level_visits_room(
        self, prison_id: str, location_codes: Sequence[str]
    ) -> Optional[Room]:
        """
        Find the prison's active, parentless visits location.

        Returns None for prisons whose visits area is not a top-level room.
        """
        query = (
            self._build_query()
            .filter(
                Room.prison_id == prison_id,
                Room.active.is_(True),
                Room.location_code.in_(list(location_codes)),
                Room.parent_id.is_(None),
            )
            .order_by(Room.id)
        )
        return self._first(query)

    def find_by_description(self, prison_id: str, description: str) -> Optional[Room]:
        return self.find_one_by(prison_id=prison_id, description=description)


class SchedulingDayRepository(BaseRepository[SchedulingDay]):
    def __init__(self, db: Session):
        super().__init__(db, SchedulingDay)

    def find(self, prison_id: str, week_day: str) -> Optional[SchedulingDay]:
        return self.get_by_id((prison_id, week_day))


class SchedulingTimeRepository(BaseRepository[SchedulingTime]):
    def __init__(self, db: Session):
        super().__init__(db, SchedulingTime)

    def find_by_start_time(
        self, prison_id: str, week_day: str, start_time: time
    ) -> Optional[SchedulingTime]:
        return self.find_one_by(prison_id=prison_id, week_day=week_day, start_time=start_time)

    def max_sequence(self, prison_id: str, week_day: str) -> int:
        """Highest time slot sequence used for the prison's weekday, 0 if none."""
        query = self.db.query(func.max(SchedulingTime.time_slot_sequence)).filter(
            SchedulingTime.prison_id == prison_id,
            SchedulingTime.week_day == week_day,
        )
        return self._execute_scalar(query) or 0


class SchedulingSlotRepository(BaseRepository[SchedulingSlot]):
    def __init__(self, db: Session):
        super().__init__(db, SchedulingSlot)

    def find_by_room_and_time(
        self, room_description: str, start_time: time, week_day: str, prison_id: str
    ) -> Optional[SchedulingSlot]:
        """Find the slot keyed by (room description, start time, weekday)."""
        query = (
            self._build_query()
            .join(SchedulingSlot.room)
            .join(SchedulingSlot.scheduling_time)
            .filter(
                Room.description == room_description,
                SchedulingSlot.prison_id == prison_id,
                SchedulingSlot.week_day == week_day,
                SchedulingTime.start_time == start_time,
            )
        )
        return self._first(query)
