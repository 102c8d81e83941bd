# backend/tests/core/test_exceptions.py
"""Tests for domain exception to HTTP mapping."""

from fastapi import HTTPException
import pytest

from visit_sync.core.exceptions import (
    BadDataException,
    ConflictException,
    NotFoundException,
    ServiceException,
    UnmappedReferenceDataException,
    ValidationException,
)
from visit_sync.routes.v1.visits import handle_domain_exception


@pytest.mark.parametrize(
    ("exc", "status_code"),
    [
        (BadDataException("bad"), 400),
        (NotFoundException("missing"), 404),
        (ConflictException("clash"), 409),
        (ServiceException("boom"), 500),
        (UnmappedReferenceDataException("EVENT_STS", "SCH"), 500),
    ],
)
def test_status_codes(exc, status_code):
    assert exc.to_http_exception().status_code == status_code


def test_bad_data_is_a_validation_error():
    assert isinstance(BadDataException("bad"), ValidationException)


def test_detail_carries_message_code_and_details():
    detail = NotFoundException("Visit id 1 not found", details={"visit_id": 1}).to_http_exception().detail

    assert detail == {
        "message": "Visit id 1 not found",
        "code": "NotFoundException",
        "details": {"visit_id": 1},
    }


def test_conflict_entity_id_is_merged_into_details():
    exc = ConflictException("Visit already exists 7", details={"source": "create"}, entity_id="7")

    assert exc.details == {"source": "create", "entity_id": "7"}


def test_unmapped_reference_data_names_the_code():
    exc = UnmappedReferenceDataException("OUTCOMES", "ABS")

    assert exc.code == "UNMAPPED_REFERENCE_DATA"
    assert exc.details == {"domain": "OUTCOMES", "code": "ABS"}
    assert "OUTCOMES/ABS" in exc.message


def test_handle_domain_exception_raises_http_exception():
    with pytest.raises(HTTPException) as exc_info:
        handle_domain_exception(ConflictException("clash"))

    assert exc_info.value.status_code == 409
