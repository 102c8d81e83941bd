# backend/tests/services/test_balance_ledger.py
"""
Tests for BalanceLedger allocation and reversal.

The ledger appends adjustments and never touches the live balance counters.
"""

from datetime import date

from visit_sync.models import ServiceAgencySwitch, VisitBalance, VisitBalanceAdjustment, VisitOrder
from visit_sync.repositories import RepositoryFactory
from visit_sync.services.balance_ledger import BalanceLedger

ISSUE_DATE = date(2024, 1, 8)
TODAY = date(2024, 1, 5)


def _adjustments(db, booking_id):
    repository = RepositoryFactory.create_visit_balance_adjustment_repository(db)
    return repository.find_for_booking(booking_id)


def _order(order_type: str, booking_id: int) -> VisitOrder:
    return VisitOrder(
        booking_id=booking_id,
        visit_order_number=99,
        visit_order_type=order_type,
        status="CANC",
        issue_date=ISSUE_DATE,
    )


class TestAllocateOrder:
    def test_no_balance_allocates_nothing(self, db, make_booking):
        booking = make_booking(with_balance=False)

        order = BalanceLedger(db).allocate_order(booking, ISSUE_DATE, "Created by VSIP")

        assert order is None
        assert _adjustments(db, booking.id) == []

    def test_privileged_order_consumed_first(self, db, make_booking):
        booking = make_booking(remaining_visit_orders=4, remaining_privileged_visit_orders=1)

        order = BalanceLedger(db).allocate_order(booking, ISSUE_DATE, "Created by VSIP")

        assert order.visit_order_type == "PVO"
        assert order.status == "SCH"
        assert order.issue_date == ISSUE_DATE
        assert order.expiry_date == date(2024, 2, 5)
        assert order.comment_text == "Created by VSIP"
        assert order.visit_order_number == 1

        [adjustment] = _adjustments(db, booking.id)
        assert adjustment.adjust_reason_code == "PVO_ISSUE"
        assert adjustment.adjust_date == ISSUE_DATE
        assert adjustment.remaining_privileged_visit_orders == -1
        assert adjustment.previous_remaining_privileged_visit_orders == 1
        assert adjustment.remaining_visit_orders is None
        assert adjustment.previous_remaining_visit_orders is None

    def test_standard_order_when_no_privileged_left(self, db, make_booking):
        booking = make_booking(remaining_visit_orders=4, remaining_privileged_visit_orders=0)

        order = BalanceLedger(db).allocate_order(booking, ISSUE_DATE, "order comment")

        assert order.visit_order_type == "VO"
        [adjustment] = _adjustments(db, booking.id)
        assert adjustment.adjust_reason_code == "VO_ISSUE"
        assert adjustment.remaining_visit_orders == -1
        assert adjustment.previous_remaining_visit_orders == 4
        assert adjustment.remaining_privileged_visit_orders is None
        assert adjustment.comment_text == "order comment"

    def test_standard_order_consumed_even_when_exhausted(self, db, make_booking):
        """Standard orders are drawn without a positivity check."""
        booking = make_booking(remaining_visit_orders=0, remaining_privileged_visit_orders=0)

        order = BalanceLedger(db).allocate_order(booking, ISSUE_DATE, None)

        assert order.visit_order_type == "VO"
        [adjustment] = _adjustments(db, booking.id)
        assert adjustment.remaining_visit_orders == -1
        assert adjustment.previous_remaining_visit_orders == 0

    def test_live_counters_are_not_modified(self, db, make_booking):
        booking = make_booking(remaining_visit_orders=4, remaining_privileged_visit_orders=1)

        BalanceLedger(db).allocate_order(booking, ISSUE_DATE, None)
        db.commit()

        balance = db.get(VisitBalance, booking.id)
        db.refresh(balance)
        assert balance.remaining_visit_orders == 4
        assert balance.remaining_privileged_visit_orders == 1

    def test_order_numbers_are_sequential(self, db, make_booking):
        booking = make_booking()
        ledger = BalanceLedger(db)

        numbers = [ledger.allocate_order(booking, ISSUE_DATE, None).visit_order_number for _ in range(3)]

        assert numbers == [1, 2, 3]

    def test_switched_prison_creates_order_without_adjustment(self, db, make_booking):
        booking = make_booking()
        db.add(ServiceAgencySwitch(service_code="VISIT_ALLOCATION", prison_id="MDI"))
        db.commit()

        order = BalanceLedger(db).allocate_order(booking, ISSUE_DATE, None)

        assert order is not None
        assert order.visit_order_type == "PVO"
        assert _adjustments(db, booking.id) == []


class TestReverseOrder:
    def test_privileged_order_restored(self, db, make_booking):
        booking = make_booking(remaining_visit_orders=4, remaining_privileged_visit_orders=2)

        BalanceLedger(db).reverse_order(_order("PVO", booking.id), booking, TODAY)

        [adjustment] = _adjustments(db, booking.id)
        assert adjustment.adjust_reason_code == "PVO_CANCEL"
        assert adjustment.adjust_date == TODAY
        assert adjustment.remaining_privileged_visit_orders == 1
        assert adjustment.previous_remaining_privileged_visit_orders == 2
        assert adjustment.remaining_visit_orders is None
        assert adjustment.comment_text == "Booking cancelled by VSIP"

    def test_standard_order_restored(self, db, make_booking):
        booking = make_booking(remaining_visit_orders=3, remaining_privileged_visit_orders=0)

        BalanceLedger(db).reverse_order(_order("VO", booking.id), booking, TODAY)

        [adjustment] = _adjustments(db, booking.id)
        assert adjustment.adjust_reason_code == "VO_CANCEL"
        assert adjustment.remaining_visit_orders == 1
        assert adjustment.previous_remaining_visit_orders == 3

    def test_no_balance_writes_nothing(self, db, make_booking):
        booking = make_booking(with_balance=False)

        BalanceLedger(db).reverse_order(_order("VO", booking.id), booking, TODAY)

        assert db.query(VisitBalanceAdjustment).count() == 0

    def test_switched_prison_writes_nothing(self, db, make_booking):
        booking = make_booking()
        db.add(ServiceAgencySwitch(service_code="VISIT_ALLOCATION", prison_id="MDI"))
        db.commit()

        BalanceLedger(db).reverse_order(_order("PVO", booking.id), booking, TODAY)

        assert _adjustments(db, booking.id) == []
