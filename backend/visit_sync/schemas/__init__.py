"""Request and response schemas for the visit sync API."""

from .visit import (
    CancelVisitRequest,
    CodeDescription,
    CreateVisitRequest,
    CreateVisitResponse,
    LeadVisitor,
    UpdateVisitRequest,
    VisitorResponse,
    VisitResponse,
)

__all__ = [
    "CancelVisitRequest",
    "CodeDescription",
    "CreateVisitRequest",
    "CreateVisitResponse",
    "LeadVisitor",
    "UpdateVisitRequest",
    "VisitorResponse",
    "VisitResponse",
]
