# backend/visit_sync/routes/v1/visits.py
"""
Visit routes - API v1

Endpoints the external booking service calls to keep the legacy system of
record in step with its bookings. All business logic delegated to
VisitService.

Endpoints:
    POST /prisoners/{offender_no}/visits - Create a visit
    PUT /prisoners/{offender_no}/visits/{visit_id} - Move a visit / change visitors
    PUT /prisoners/{offender_no}/visits/{visit_id}/cancel - Cancel a visit
    GET /visits/{visit_id} - Visit details
"""

import asyncio
import logging
from typing import Any, NoReturn

from fastapi import APIRouter, Body, Depends, HTTPException, Path, Response, status

from ...api.dependencies import get_visit_service
from ...core.constants import OFFENDER_NO_PATTERN
from ...core.exceptions import DomainException
from ...schemas.visit import (
    CancelVisitRequest,
    CreateVisitRequest,
    CreateVisitResponse,
    UpdateVisitRequest,
    VisitResponse,
)
from ...services.visit_service import VisitService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["visits-v1"])


def _offender_no_path() -> Any:
    return Path(
        ...,
        description="Prisoner number",
        pattern=OFFENDER_NO_PATTERN,
        examples=["A1234BC"],
    )


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


@router.post(
    "/prisoners/{offender_no}/visits",
    response_model=CreateVisitResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_visit(
    offender_no: str = _offender_no_path(),
    visit_data: CreateVisitRequest = Body(...),
    visit_service: VisitService = Depends(get_visit_service),
) -> CreateVisitResponse:
    """
    Create a visit for the prisoner's active booking.

    Provisions the scheduling slot the visit is filed under and draws a
    visit order from the prisoner's balance when one exists.
    """
    try:
        visit_id = await asyncio.to_thread(visit_service.create_visit, offender_no, visit_data)
        return CreateVisitResponse(visit_id=visit_id)
    except DomainException as e:
        handle_domain_exception(e)


@router.put(
    "/prisoners/{offender_no}/visits/{visit_id}",
    status_code=status.HTTP_200_OK,
    response_class=Response,
)
async def update_visit(
    offender_no: str = _offender_no_path(),
    visit_id: int = Path(..., ge=1, description="Visit id"),
    update_data: UpdateVisitRequest = Body(...),
    visit_service: VisitService = Depends(get_visit_service),
) -> Response:
    """Change the timing, openness and visitors of a visit."""
    try:
        await asyncio.to_thread(visit_service.update_visit, offender_no, visit_id, update_data)
        return Response(status_code=status.HTTP_200_OK)
    except DomainException as e:
        handle_domain_exception(e)


@router.put(
    "/prisoners/{offender_no}/visits/{visit_id}/cancel",
    status_code=status.HTTP_200_OK,
    response_class=Response,
)
async def cancel_visit(
    offender_no: str = _offender_no_path(),
    visit_id: int = Path(..., ge=1, description="Visit id"),
    cancel_data: CancelVisitRequest = Body(...),
    visit_service: VisitService = Depends(get_visit_service),
) -> Response:
    """Cancel a scheduled visit and return its visit order to the balance."""
    try:
        await asyncio.to_thread(visit_service.cancel_visit, offender_no, visit_id, cancel_data)
        return Response(status_code=status.HTTP_200_OK)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/visits/{visit_id}", response_model=VisitResponse)
async def get_visit(
    visit_id: int = Path(..., ge=1, description="Visit id"),
    visit_service: VisitService = Depends(get_visit_service),
) -> VisitResponse:
    """Get a visit with its visitors, lead visitor, room and outcome."""
    try:
        return await asyncio.to_thread(visit_service.get_visit, visit_id)
    except DomainException as e:
        handle_domain_exception(e)
