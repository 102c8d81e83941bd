# backend/tests/routes/test_visit_routes.py
"""
Route tests for the v1 visit endpoints.

The app is exercised through TestClient with the database dependency
pointed at the test session.
"""

from datetime import date
from unittest.mock import Mock

from fastapi.testclient import TestClient
import pytest

from visit_sync.api.dependencies.database import get_db
from visit_sync.api.dependencies.services import get_event_publisher
from visit_sync.events import EventPublisher
from visit_sync.main import app
from visit_sync.models import Visit, VisitOrder
from visit_sync.repositories.visit_repository import VisitRepository

from conftest import OFFENDER_NO

CREATE_BODY = {
    "visit_type": "SCON",
    "start_date_time": "2024-01-08T10:00:00",
    "end_time": "11:00",
    "prison_id": "MDI",
    "visitor_person_ids": [101, 102],
    "issue_date": "2024-01-08",
    "open_closed_status": "OPEN",
    "room": "Main visits hall",
}


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_event_publisher] = lambda: Mock(spec=EventPublisher)
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def _create(client) -> int:
    response = client.post(f"/api/v1/prisoners/{OFFENDER_NO}/visits", json=CREATE_BODY)
    assert response.status_code == 201, response.text
    return response.json()["visit_id"]


class TestCreateVisitRoute:
    def test_creates_visit(self, client, booking, db):
        visit_id = _create(client)

        assert db.get(Visit, visit_id) is not None

    def test_malformed_offender_no_rejected(self, client, booking):
        response = client.post("/api/v1/prisoners/not-a-number/visits", json=CREATE_BODY)

        assert response.status_code == 422

    def test_unknown_field_rejected(self, client, booking):
        response = client.post(
            f"/api/v1/prisoners/{OFFENDER_NO}/visits", json={**CREATE_BODY, "colour": "blue"}
        )

        assert response.status_code == 422

    def test_invalid_openness_rejected(self, client, booking):
        response = client.post(
            f"/api/v1/prisoners/{OFFENDER_NO}/visits",
            json={**CREATE_BODY, "open_closed_status": "AJAR"},
        )

        assert response.status_code == 422

    def test_unknown_offender_is_404(self, client, booking):
        response = client.post("/api/v1/prisoners/Z9999ZZ/visits", json=CREATE_BODY)

        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "NotFoundException"

    def test_unknown_visit_type_is_400(self, client, booking):
        response = client.post(
            f"/api/v1/prisoners/{OFFENDER_NO}/visits", json={**CREATE_BODY, "visit_type": "XXXX"}
        )

        assert response.status_code == 400
        assert response.json()["detail"]["message"] == "Invalid visit type: XXXX"

    def test_duplicate_is_409_with_existing_id(self, client, booking):
        visit_id = _create(client)

        response = client.post(f"/api/v1/prisoners/{OFFENDER_NO}/visits", json=CREATE_BODY)

        assert response.status_code == 409
        assert response.json()["detail"]["details"]["entity_id"] == str(visit_id)

    def test_order_number_collision_is_500_with_error_body(self, client, booking, db, monkeypatch):
        # Pretend the existing order is invisible so the counter reissues its number
        monkeypatch.setattr(VisitRepository, "max_visit_order_number", lambda self: 0)
        db.add(
            VisitOrder(
                booking_id=booking.id,
                visit_order_number=1,
                visit_order_type="VO",
                status="SCH",
                issue_date=date(2023, 12, 1),
            )
        )
        db.commit()

        response = client.post(f"/api/v1/prisoners/{OFFENDER_NO}/visits", json=CREATE_BODY)

        assert response.status_code == 500
        detail = response.json()["detail"]
        assert detail["code"] == "ServiceException"
        assert detail["details"] == {"error_type": "UniqueConstraintViolation"}
        assert db.query(Visit).count() == 0


class TestCancelVisitRoute:
    def test_cancel_then_repeat_cancel(self, client, booking):
        visit_id = _create(client)
        url = f"/api/v1/prisoners/{OFFENDER_NO}/visits/{visit_id}/cancel"

        first = client.put(url, json={"outcome": "VISCANC"})
        second = client.put(url, json={"outcome": "VISCANC"})

        assert first.status_code == 200
        assert first.content == b""
        assert second.status_code == 409
        assert second.json()["detail"]["message"] == "Visit already cancelled, with outcome VISCANC"

    def test_unknown_visit_is_404(self, client, booking):
        response = client.put(
            f"/api/v1/prisoners/{OFFENDER_NO}/visits/999/cancel", json={"outcome": "VISCANC"}
        )

        assert response.status_code == 404


class TestUpdateVisitRoute:
    def test_update_visit(self, client, booking, db):
        visit_id = _create(client)

        response = client.put(
            f"/api/v1/prisoners/{OFFENDER_NO}/visits/{visit_id}",
            json={
                "start_date_time": "2024-01-09T14:00:00",
                "end_time": "15:00",
                "visitor_person_ids": [103],
                "open_closed_status": "CLOSED",
                "visit_comment": "Moved",
            },
        )

        assert response.status_code == 200
        db.expire_all()
        visit = db.get(Visit, visit_id)
        assert [v.person_id for v in visit.person_visitors] == [103]
        assert visit.comment_text == "Moved"


class TestGetVisitRoute:
    def test_get_visit(self, client, booking):
        visit_id = _create(client)

        response = client.get(f"/api/v1/visits/{visit_id}")

        assert response.status_code == 200
        body = response.json()
        assert body["visit_id"] == visit_id
        assert body["offender_no"] == OFFENDER_NO
        assert body["visit_status"] == {"code": "SCH", "description": "Scheduled"}
        assert body["lead_visitor"] == {"person_id": 101, "full_name": "JOHN SMITH"}

    def test_unknown_visit_is_404(self, client, booking):
        assert client.get("/api/v1/visits/999").status_code == 404


class TestOperationalRoutes:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_metrics_exposes_service_timings(self, client, booking):
        _create(client)

        response = client.get("/metrics")

        assert response.status_code == 200
        assert "visit_sync_service_operations_total" in response.text
        assert "visit_sync_visit_transitions_total" in response.text
