# backend/visit_sync/schemas/visit.py
"""
Visit schemas.

Inbound bodies come from the external booking service. Visits carry a start
timestamp and an end time of day; the end timestamp is always on the start
date.
"""

from datetime import date, datetime, time
from typing import List, Optional

from pydantic import Field, field_validator

from ..core.constants import DEFAULT_VISIT_COMMENT, DEFAULT_VISIT_ORDER_COMMENT
from ..core.enums import OpenClosedStatus
from ._strict_base import StrictModel, StrictRequestModel


def _end_on_start_date(start_date_time: datetime, end_time: time) -> datetime:
    return datetime.combine(start_date_time.date(), end_time)


class _VisitTiming(StrictRequestModel):
    start_date_time: datetime = Field(..., description="Visit start")
    end_time: time = Field(..., description="Visit end time, on the start date")
    visitor_person_ids: List[int] = Field(..., description="Person ids of the visitors")
    open_closed_status: OpenClosedStatus = Field(..., description="OPEN or CLOSED visit")

    @field_validator("start_date_time")
    @classmethod
    def _strip_timezone(cls, value: datetime) -> datetime:
        # Legacy timestamps are naive prison-local times
        return value.replace(tzinfo=None)

    @property
    def end_date_time(self) -> datetime:
        return _end_on_start_date(self.start_date_time, self.end_time)

    @property
    def is_closed(self) -> bool:
        return self.open_closed_status is OpenClosedStatus.CLOSED


class CreateVisitRequest(_VisitTiming):
    """Book a visit for a prisoner."""

    visit_type: str = Field(..., min_length=1, description="Visit type code, e.g. SCON")
    prison_id: str = Field(..., min_length=1, max_length=6, description="Prison id, e.g. MDI")
    issue_date: date = Field(..., description="Issue date of the visit order")
    visit_comment: str = Field(default=DEFAULT_VISIT_COMMENT, description="Visit comment")
    visit_order_comment: str = Field(
        default=DEFAULT_VISIT_ORDER_COMMENT, description="Visit order comment"
    )
    room: Optional[str] = Field(
        default=None, description="Room name as known to the booking service (informational)"
    )


class UpdateVisitRequest(_VisitTiming):
    """Move a visit and change who is attending."""

    visit_comment: Optional[str] = Field(
        default=None, description="Replacement visit comment; left unchanged when absent"
    )


class CancelVisitRequest(StrictRequestModel):
    outcome: str = Field(..., min_length=1, description="Cancellation outcome reason, e.g. VISCANC")


class CreateVisitResponse(StrictModel):
    visit_id: int


class CodeDescription(StrictModel):
    code: str
    description: Optional[str] = None


class VisitorResponse(StrictModel):
    person_id: int
    lead_visitor: bool = False


class LeadVisitor(StrictModel):
    person_id: int
    full_name: str


class VisitResponse(StrictModel):
    """A visit as held in the legacy system of record."""

    visit_id: int
    offender_no: str
    prison_id: str
    start_date_time: datetime
    end_date_time: datetime
    visit_type: CodeDescription
    visit_status: CodeDescription
    visit_outcome: Optional[CodeDescription] = None
    agency_internal_location: Optional[CodeDescription] = None
    comment_text: Optional[str] = None
    visit_order_number: Optional[int] = None
    visitors: List[VisitorResponse] = Field(default_factory=list)
    lead_visitor: Optional[LeadVisitor] = None
    when_created: Optional[datetime] = None
    when_updated: Optional[datetime] = None
