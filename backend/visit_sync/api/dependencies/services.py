# backend/visit_sync/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

Factory functions that build service instances around the request's
database session.
"""

from functools import lru_cache
import logging

from fastapi import Depends
from sqlalchemy.orm import Session

from ...events import EventPublisher
from ...services.visit_service import VisitService
from .database import get_db

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_event_publisher() -> EventPublisher:
    """Get the process-wide event publisher."""
    return EventPublisher()


def get_visit_service(
    db: Session = Depends(get_db),
    event_publisher: EventPublisher = Depends(get_event_publisher),
) -> VisitService:
    """
    Get visit service instance with all dependencies.

    Args:
        db: Database session
        event_publisher: Publisher for visit telemetry

    Returns:
        VisitService instance
    """
    return VisitService(db, event_publisher=event_publisher)
