# backend/visit_sync/repositories/sequence_repository.py
"""
Sequence allocation.

Hands out monotonic values from named counters held in sequence_counters.
Counters are incremented under a row lock, so concurrent transactions
serialise on the counter row instead of racing on a max() + 1 query.
"""

import logging

from sqlalchemy.orm import Session

from ..core.constants import TIME_SLOT_SEQUENCE_PREFIX, VISIT_EVENT_SEQUENCE, VISIT_ORDER_SEQUENCE
from ..core.exceptions import UniqueConstraintViolation
from ..models.sequence import SequenceCounter
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class SequenceRepository(BaseRepository[SequenceCounter]):
    def __init__(self, db: Session):
        super().__init__(db, SequenceCounter)

    def _lock_counter(self, name: str) -> SequenceCounter | None:
        query = (
            self._build_query()
            .filter(SequenceCounter.name == name)
            .with_for_update()
            .populate_existing()
        )
        return self._first(query)

    def next_value(self, name: str, floor: int = 0) -> int:
        """
        Return the next value of the named counter.

        Args:
            name: Counter name
            floor: Highest value already in use outside the counter; the result
                is always greater than it

        Returns:
            The allocated value
        """
        counter = self._lock_counter(name)
        if counter is None:
            try:
                with self.db.begin_nested():
                    counter = self.create(name=name, value=floor)
            except UniqueConstraintViolation:
                self.logger.info("Sequence %s created concurrently, re-reading", name)
                counter = self._lock_counter(name)
                if counter is None:
                    raise
        counter.value = max(counter.value, floor) + 1
        self.flush()
        return counter.value

    def next_event_id(self, floor: int = 0) -> int:
        return self.next_value(VISIT_EVENT_SEQUENCE, floor=floor)

    def next_visit_order_number(self, floor: int = 0) -> int:
        return self.next_value(VISIT_ORDER_SEQUENCE, floor=floor)

    def next_time_slot_sequence(self, prison_id: str, week_day: str, floor: int = 0) -> int:
        return self.next_value(f"{TIME_SLOT_SEQUENCE_PREFIX}:{prison_id}:{week_day}", floor=floor)
