# backend/tests/conftest.py
"""
Shared fixtures for the visit sync test suite.

Every test gets its own in-memory SQLite database with the schema created,
reference codes seeded, two prisons, a handful of persons and an offender
with an active booking.
"""

from datetime import date, datetime, time
from typing import Callable, Optional
from unittest.mock import Mock

import pytest
from sqlalchemy.orm import Session, sessionmaker

from visit_sync.core.enums import OpenClosedStatus
from visit_sync.database import build_engine, init_db
from visit_sync.events import EventPublisher
from visit_sync.models import (
    Offender,
    OffenderBooking,
    Person,
    Prison,
    VisitBalance,
)
from visit_sync.schemas.visit import CreateVisitRequest
from visit_sync.seed import seed_reference_data
from visit_sync.services.visit_service import VisitService

TODAY = date(2024, 1, 1)
OFFENDER_NO = "A1234BC"
# 2024-01-08 is a Monday
VISIT_START = datetime(2024, 1, 8, 10, 0)


@pytest.fixture
def engine():
    test_engine = build_engine("sqlite+pysqlite:///:memory:")
    init_db(test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture
def db(engine) -> Session:
    """Session bound to a fresh database with reference codes seeded."""
    TestSession = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    session = TestSession()
    seed_reference_data(session)
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def prisons(db: Session) -> dict[str, Prison]:
    rows = {
        "MDI": Prison(id="MDI", description="Moorland (HMP & YOI)"),
        "LEI": Prison(id="LEI", description="Leeds (HMP)"),
    }
    db.add_all(rows.values())
    db.commit()
    return rows


@pytest.fixture
def persons(db: Session) -> dict[int, Person]:
    rows = {
        101: Person(id=101, first_name="JOHN", last_name="SMITH"),
        102: Person(id=102, first_name="JANE", last_name="SMITH"),
        103: Person(id=103, first_name="JOE", last_name="BLOGGS"),
        104: Person(id=104, first_name="ANN", last_name="JONES"),
    }
    db.add_all(rows.values())
    db.commit()
    return rows


@pytest.fixture
def make_booking(db: Session, prisons) -> Callable[..., OffenderBooking]:
    """Factory for an offender with an active booking and, optionally, a balance."""

    def _make(
        noms_id: str = OFFENDER_NO,
        prison_id: str = "MDI",
        remaining_visit_orders: Optional[int] = 4,
        remaining_privileged_visit_orders: Optional[int] = 1,
        with_balance: bool = True,
    ) -> OffenderBooking:
        offender = Offender(noms_id=noms_id, first_name="BOB", last_name="PRISONER")
        booking = OffenderBooking(offender=offender, prison_id=prison_id, active=True)
        db.add(booking)
        db.flush()
        if with_balance:
            db.add(
                VisitBalance(
                    booking_id=booking.id,
                    remaining_visit_orders=remaining_visit_orders,
                    remaining_privileged_visit_orders=remaining_privileged_visit_orders,
                )
            )
        db.commit()
        db.refresh(booking)
        return booking

    return _make


@pytest.fixture
def booking(make_booking, persons) -> OffenderBooking:
    return make_booking()


@pytest.fixture
def event_publisher() -> Mock:
    return Mock(spec=EventPublisher)


@pytest.fixture
def visit_service(db: Session, event_publisher: Mock) -> VisitService:
    return VisitService(db, event_publisher=event_publisher, today=lambda: TODAY)


@pytest.fixture
def create_request() -> Callable[..., CreateVisitRequest]:
    """Factory for a create request for an open visit on Monday 8 January 2024."""

    def _make(**overrides) -> CreateVisitRequest:
        payload = {
            "visit_type": "SCON",
            "start_date_time": VISIT_START,
            "end_time": time(11, 0),
            "prison_id": "MDI",
            "visitor_person_ids": [101, 102],
            "issue_date": date(2024, 1, 8),
            "open_closed_status": OpenClosedStatus.OPEN,
        }
        payload.update(overrides)
        return CreateVisitRequest(**payload)

    return _make
