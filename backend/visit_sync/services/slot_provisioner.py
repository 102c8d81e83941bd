# backend/visit_sync/services/slot_provisioner.py
"""
Slot Provisioner

Every visit in the legacy estate must be filed under a weekly scheduling
hierarchy: a day of the week, a time slot on that day, and a slot tying the
time to a room. Bookings made by the external service do not follow that
configuration, so the rows are created on first demand here:

    Room (VSIP_SOC / VSIP_CLO)
    SchedulingDay (prison, weekday)
    SchedulingTime (prison, weekday, sequence)
    SchedulingSlot (time + room)

Each step is a find-or-create against a unique key. A concurrent request may
create the same row between our lookup and our insert; the insert then fails
on the unique constraint, the savepoint is rolled back and the row is read
again.
"""

from datetime import datetime, timedelta
import logging
from typing import Callable, Optional, TypeVar

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.constants import (
    TOP_LEVEL_VISITS_ROOM_CODES,
    VISIT_ROOM_LOCATION_TYPE,
    VSIP_CLOSED_ROOM_CODE,
    VSIP_ROOM_LIST_SEQUENCE,
    VSIP_SOCIAL_ROOM_CODE,
    WEEKDAY_CODES,
)
from ..core.exceptions import BadDataException, ServiceException, UniqueConstraintViolation
from ..models.reference import Prison
from ..models.scheduling import Room, SchedulingDay, SchedulingSlot, SchedulingTime
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)

RowT = TypeVar("RowT")


def week_day_code(moment: datetime) -> str:
    """Legacy weekday code (MON..SUN) for a timestamp."""
    code = WEEKDAY_CODES.get(moment.isoweekday())
    if code is None:
        raise BadDataException(f"Invalid day of week: {moment.strftime('%A').upper()}")
    return code


class SlotProvisioner(BaseService):
    """Find-or-create of the room, day, time and slot a visit is filed under."""

    def __init__(self, db: Session):
        super().__init__(db)
        self.room_repository = RepositoryFactory.create_room_repository(db)
        self.day_repository = RepositoryFactory.create_scheduling_day_repository(db)
        self.time_repository = RepositoryFactory.create_scheduling_time_repository(db)
        self.slot_repository = RepositoryFactory.create_scheduling_slot_repository(db)
        self.sequence_repository = RepositoryFactory.create_sequence_repository(db)

    @BaseService.measure_operation("slot.resolve")
    def resolve_slot(
        self,
        prison: Prison,
        start_date_time: datetime,
        end_date_time: datetime,
        is_closed: bool,
    ) -> SchedulingSlot:
        """
        Return the slot for the prison, weekday, start time and openness.

        Repeated calls with the same arguments return the same slot. Nothing
        is committed here; the caller owns the transaction.

        Raises:
            BadDataException: the weekday cannot be derived
            ServiceException: a row could not be created or re-read
        """
        week_day = week_day_code(start_date_time)
        room = self._resolve_room(prison, is_closed)
        day = self._resolve_day(prison.id, week_day)
        scheduling_time = self._resolve_time(day, start_date_time, end_date_time)
        return self._resolve_scheduling_slot(scheduling_time, room)

    def _find_or_create(
        self,
        kind: str,
        lookup: Callable[[], Optional[RowT]],
        create: Callable[[], RowT],
    ) -> RowT:
        attempts = settings.slot_provisioning_retries + 1
        for attempt in range(1, attempts + 1):
            existing = lookup()
            if existing is not None:
                return existing

            try:
                with self.db.begin_nested():
                    created = create()
            except UniqueConstraintViolation:
                prometheus_metrics.inc_provisioning_race(kind)
                self.logger.info(
                    "Concurrent %s creation detected (attempt %s/%s), re-reading",
                    kind,
                    attempt,
                    attempts,
                )
                existing = lookup()
                if existing is not None:
                    return existing
                continue

            prometheus_metrics.inc_scheduling_row_provisioned(kind)
            return created

        raise ServiceException(
            f"Unable to provision {kind} after {attempts} attempts",
            details={"kind": kind},
        )

    def _resolve_room(self, prison: Prison, is_closed: bool) -> Room:
        # Rooms hang off the prison's top-level visits location when it has one
        top_level = self.room_repository.find_top_level_visits_room(
            prison.id, TOP_LEVEL_VISITS_ROOM_CODES
        )
        room_code = VSIP_CLOSED_ROOM_CODE if is_closed else VSIP_SOCIAL_ROOM_CODE
        if top_level is not None:
            description = f"{top_level.description}-{room_code}"
        else:
            description = f"{prison.id}-VISITS-{room_code}"

        def create() -> Room:
            self.logger.info("Creating VSIP visit room: %s (%s)", description, room_code)
            return self.room_repository.create(
                prison_id=prison.id,
                parent_id=top_level.id if top_level is not None else None,
                description=description,
                location_code=room_code,
                location_type=VISIT_ROOM_LOCATION_TYPE,
                user_description=f"VISITS - {'CLOSED' if is_closed else 'SOCIAL'}",
                active=True,
                capacity=settings.vsip_room_capacity,
                list_sequence=VSIP_ROOM_LIST_SEQUENCE,
                tracking=True,
                current_occupancy=0,
                certified=False,
            )

        return self._find_or_create(
            "room",
            lambda: self.room_repository.find_by_description(prison.id, description),
            create,
        )

    def _resolve_day(self, prison_id: str, week_day: str) -> SchedulingDay:
        return self._find_or_create(
            "day",
            lambda: self.day_repository.find(prison_id, week_day),
            lambda: self.day_repository.create(prison_id=prison_id, week_day=week_day),
        )

    def _resolve_time(
        self, day: SchedulingDay, start_date_time: datetime, end_date_time: datetime
    ) -> SchedulingTime:
        prison_id, week_day = day.prison_id, day.week_day
        start_time = start_date_time.time()
        # Effective and expiry in the past so the recurring schedule never offers it
        hidden_from = start_date_time.date() - timedelta(days=1)

        def create() -> SchedulingTime:
            sequence = self.sequence_repository.next_time_slot_sequence(
                prison_id,
                week_day,
                floor=self.time_repository.max_sequence(prison_id, week_day),
            )
            return self.time_repository.create(
                prison_id=prison_id,
                week_day=week_day,
                time_slot_sequence=sequence,
                start_time=start_time,
                end_time=end_date_time.time(),
                effective_date=hidden_from,
                expiry_date=hidden_from,
            )

        return self._find_or_create(
            "time",
            lambda: self.time_repository.find_by_start_time(prison_id, week_day, start_time),
            create,
        )

    def _resolve_scheduling_slot(self, scheduling_time: SchedulingTime, room: Room) -> SchedulingSlot:
        def create() -> SchedulingSlot:
            self.logger.info(
                "Creating visit slot for day of week %s, start time: %s at %s",
                scheduling_time.week_day,
                scheduling_time.start_time.isoformat(),
                room.prison_id,
            )
            return self.slot_repository.create(
                prison_id=scheduling_time.prison_id,
                week_day=scheduling_time.week_day,
                time_slot_sequence=scheduling_time.time_slot_sequence,
                room_id=room.id,
                max_groups=0,
                max_adults=0,
            )

        return self._find_or_create(
            "slot",
            lambda: self.slot_repository.find_by_room_and_time(
                room.description,
                scheduling_time.start_time,
                scheduling_time.week_day,
                scheduling_time.prison_id,
            ),
            create,
        )
