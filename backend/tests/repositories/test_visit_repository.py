# backend/tests/repositories/test_visit_repository.py
"""Tests for visit and booking lookups."""

from visit_sync.repositories import RepositoryFactory

from conftest import OFFENDER_NO


class TestOffenderBookingRepository:
    def test_finds_active_booking_with_balance(self, db, booking):
        repository = RepositoryFactory.create_offender_booking_repository(db)

        found = repository.find_active_by_offender_no(OFFENDER_NO)

        assert found.id == booking.id
        assert found.visit_balance.remaining_privileged_visit_orders == 1

    def test_ignores_inactive_bookings(self, db, booking):
        booking.active = False
        db.commit()

        repository = RepositoryFactory.create_offender_booking_repository(db)
        assert repository.find_active_by_offender_no(OFFENDER_NO) is None


class TestVisitRepository:
    def test_get_visit_for_offender_checks_ownership(self, db, booking, visit_service, create_request):
        visit_id = visit_service.create_visit(OFFENDER_NO, create_request())
        repository = RepositoryFactory.create_visit_repository(db)

        assert repository.get_visit_for_offender(visit_id, OFFENDER_NO).id == visit_id
        assert repository.get_visit_for_offender(visit_id, "Z9999ZZ") is None

    def test_find_duplicate_matches_on_all_fields(self, db, booking, visit_service, create_request):
        visit_id = visit_service.create_visit(OFFENDER_NO, create_request())
        repository = RepositoryFactory.create_visit_repository(db)
        visit = repository.get_visit(visit_id)
        criteria = {
            "booking_id": visit.booking_id,
            "start_date_time": visit.start_date_time,
            "end_date_time": visit.end_date_time,
            "comment_text": visit.comment_text,
            "visit_status": "SCH",
            "room_id": visit.room_id,
        }

        assert repository.find_duplicate(**criteria).id == visit_id
        assert repository.find_duplicate(**{**criteria, "visit_status": "CANC"}) is None
        assert repository.find_duplicate(**{**criteria, "comment_text": "other"}) is None
