# backend/visit_sync/repositories/booking_repository.py
"""
Repositories for offender bookings and the visit balance ledger.

The ledger repository only ever appends. There is deliberately no update or
delete path for adjustments.
"""

from datetime import date
import logging
from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

from ..models.booking import Offender, OffenderBooking, VisitBalanceAdjustment
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class OffenderBookingRepository(BaseRepository[OffenderBooking]):
    def __init__(self, db: Session):
        super().__init__(db, OffenderBooking)

    def find_active_by_offender_no(self, offender_no: str) -> Optional[OffenderBooking]:
        """Return the active booking of the offender with the given number."""
        query = (
            self._build_query()
            .join(OffenderBooking.offender)
            .options(joinedload(OffenderBooking.visit_balance))
            .filter(Offender.noms_id == offender_no, OffenderBooking.active.is_(True))
        )
        return self._first(query)


class VisitBalanceAdjustmentRepository(BaseRepository[VisitBalanceAdjustment]):
    def __init__(self, db: Session):
        super().__init__(db, VisitBalanceAdjustment)

    def append(
        self,
        *,
        booking_id: int,
        adjust_date: date,
        adjust_reason_code: str,
        comment_text: Optional[str],
        remaining_visit_orders: Optional[int] = None,
        previous_remaining_visit_orders: Optional[int] = None,
        remaining_privileged_visit_orders: Optional[int] = None,
        previous_remaining_privileged_visit_orders: Optional[int] = None,
    ) -> VisitBalanceAdjustment:
        """Append one ledger entry."""
        adjustment = self.create(
            booking_id=booking_id,
            adjust_date=adjust_date,
            adjust_reason_code=adjust_reason_code,
            comment_text=comment_text,
            remaining_visit_orders=remaining_visit_orders,
            previous_remaining_visit_orders=previous_remaining_visit_orders,
            remaining_privileged_visit_orders=remaining_privileged_visit_orders,
            previous_remaining_privileged_visit_orders=previous_remaining_privileged_visit_orders,
        )
        self.logger.debug(
            "Appended %s adjustment %s for booking %s", adjust_reason_code, adjustment.id, booking_id
        )
        return adjustment

    def find_for_booking(self, booking_id: int) -> List[VisitBalanceAdjustment]:
        return (
            self._build_query()
            .filter(VisitBalanceAdjustment.booking_id == booking_id)
            .order_by(VisitBalanceAdjustment.id)
            .all()
        )
