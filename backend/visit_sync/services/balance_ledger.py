# backend/visit_sync/services/balance_ledger.py
"""
Balance Ledger

Consumes and restores a booking's visit order entitlement. Every allocation
or reversal appends one adjustment row holding a signed delta and a snapshot
of the counter it affects. The live counters on the balance are only read;
folding adjustments into them is done elsewhere.
"""

from datetime import date, timedelta
import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.constants import CANCELLATION_ADJUSTMENT_COMMENT
from ..core.enums import AdjustmentReason, VisitOrderType, VisitStatus
from ..models.booking import OffenderBooking, VisitBalance
from ..models.visit import VisitOrder
from ..repositories import RepositoryFactory
from .base import BaseService
from .reference_data_service import ReferenceDataService

logger = logging.getLogger(__name__)


class BalanceLedger(BaseService):
    """Visit order allocation and reversal against the adjustment ledger."""

    def __init__(self, db: Session, reference_data: Optional[ReferenceDataService] = None):
        super().__init__(db)
        self.reference_data = reference_data or ReferenceDataService(db)
        self.adjustment_repository = RepositoryFactory.create_visit_balance_adjustment_repository(db)
        self.sequence_repository = RepositoryFactory.create_sequence_repository(db)
        self.visit_repository = RepositoryFactory.create_visit_repository(db)

    def _allocation_owned_elsewhere(self, booking: OffenderBooking) -> bool:
        return self.reference_data.is_allocation_switched_on(booking.prison_id or "NONE")

    @BaseService.measure_operation("ledger.allocate")
    def allocate_order(
        self, booking: OffenderBooking, issue_date: date, comment: Optional[str]
    ) -> Optional[VisitOrder]:
        """
        Draw one visit order from the booking's balance.

        Privileged orders are consumed first. A booking without a balance gets
        no order at all. The standard branch does not check that the counter
        is positive, so a balance may go negative here.

        Returns:
            An unsaved VisitOrder for the caller to attach, or None
        """
        balance = booking.visit_balance
        if balance is None:
            self.logger.debug("Booking %s has no visit balance, no order allocated", booking.id)
            return None

        privileged = (balance.remaining_privileged_visit_orders or 0) > 0
        order_type = VisitOrderType.PRIVILEGED if privileged else VisitOrderType.STANDARD

        if self._allocation_owned_elsewhere(booking):
            self.logger.info(
                "Visit allocation for %s is owned externally, skipping %s adjustment",
                booking.prison_id,
                order_type.value,
            )
        elif privileged:
            self.adjustment_repository.append(
                booking_id=booking.id,
                adjust_date=issue_date,
                adjust_reason_code=AdjustmentReason.PRIVILEGED_VISIT_ORDER_ISSUE.value,
                comment_text=comment,
                remaining_privileged_visit_orders=-1,
                previous_remaining_privileged_visit_orders=balance.remaining_privileged_visit_orders,
            )
        else:
            self.adjustment_repository.append(
                booking_id=booking.id,
                adjust_date=issue_date,
                adjust_reason_code=AdjustmentReason.VISIT_ORDER_ISSUE.value,
                comment_text=comment,
                remaining_visit_orders=-1,
                previous_remaining_visit_orders=balance.remaining_visit_orders,
            )

        return VisitOrder(
            booking_id=booking.id,
            visit_order_number=self.sequence_repository.next_visit_order_number(
                floor=self.visit_repository.max_visit_order_number()
            ),
            visit_order_type=order_type.value,
            status=VisitStatus.SCHEDULED.value,
            issue_date=issue_date,
            expiry_date=issue_date + timedelta(days=settings.visit_order_expiry_days),
            comment_text=comment,
        )

    @BaseService.measure_operation("ledger.reverse")
    def reverse_order(self, order: VisitOrder, booking: OffenderBooking, today: date) -> None:
        """Give back the order's unit with one compensating +1 adjustment."""
        balance: Optional[VisitBalance] = booking.visit_balance
        if balance is None:
            self.logger.debug("Booking %s has no visit balance, nothing to reverse", booking.id)
            return
        if self._allocation_owned_elsewhere(booking):
            self.logger.info(
                "Visit allocation for %s is owned externally, skipping reversal of order %s",
                booking.prison_id,
                order.visit_order_number,
            )
            return

        if VisitOrderType(order.visit_order_type).is_privileged:
            self.adjustment_repository.append(
                booking_id=booking.id,
                adjust_date=today,
                adjust_reason_code=AdjustmentReason.PRIVILEGED_VISIT_ORDER_CANCEL.value,
                comment_text=CANCELLATION_ADJUSTMENT_COMMENT,
                remaining_privileged_visit_orders=1,
                previous_remaining_privileged_visit_orders=balance.remaining_privileged_visit_orders,
            )
        else:
            self.adjustment_repository.append(
                booking_id=booking.id,
                adjust_date=today,
                adjust_reason_code=AdjustmentReason.VISIT_ORDER_CANCEL.value,
                comment_text=CANCELLATION_ADJUSTMENT_COMMENT,
                remaining_visit_orders=1,
                previous_remaining_visit_orders=balance.remaining_visit_orders,
            )
