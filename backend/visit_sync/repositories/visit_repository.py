# backend/visit_sync/repositories/visit_repository.py
"""
Visit Repository

Data access for the visit aggregate. Visitors and the visit order are
loaded eagerly because every write path walks them.
"""

from datetime import datetime
import logging
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Query, Session, selectinload

from ..models.booking import Offender, OffenderBooking
from ..models.visit import Visit, VisitOrder, VisitVisitor
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class VisitRepository(BaseRepository[Visit]):
    def __init__(self, db: Session):
        super().__init__(db, Visit)

    def _with_aggregate(self, query: Query) -> Query:
        return query.options(
            selectinload(Visit.visitors),
            selectinload(Visit.visit_order).selectinload(VisitOrder.visitors),
            selectinload(Visit.booking).selectinload(OffenderBooking.offender),
            selectinload(Visit.booking).selectinload(OffenderBooking.visit_balance),
        )

    def get_visit(self, visit_id: int) -> Optional[Visit]:
        """Load a visit with its visitors, order and booking."""
        query = self._with_aggregate(self._build_query()).filter(Visit.id == visit_id)
        return self._first(query)

    def get_visit_for_offender(self, visit_id: int, offender_no: str) -> Optional[Visit]:
        """Load a visit only if it belongs to the offender with the given number."""
        query = (
            self._with_aggregate(self._build_query())
            .join(Visit.booking)
            .join(OffenderBooking.offender)
            .filter(Visit.id == visit_id, Offender.noms_id == offender_no)
        )
        return self._first(query)

    def find_duplicate(
        self,
        *,
        booking_id: int,
        start_date_time: datetime,
        end_date_time: datetime,
        comment_text: Optional[str],
        visit_status: str,
        room_id: Optional[int],
    ) -> Optional[Visit]:
        """Find an existing visit identical in booking, timing, comment, status and room."""
        return self.find_one_by(
            booking_id=booking_id,
            start_date_time=start_date_time,
            end_date_time=end_date_time,
            comment_text=comment_text,
            visit_status=visit_status,
            room_id=room_id,
        )

    def max_visit_order_number(self) -> int:
        """Highest visit order number on file, 0 if none."""
        return self._execute_scalar(self.db.query(func.max(VisitOrder.visit_order_number))) or 0

    def max_event_id(self) -> int:
        """Highest visitor event id on file, 0 if none."""
        return self._execute_scalar(self.db.query(func.max(VisitVisitor.event_id))) or 0
