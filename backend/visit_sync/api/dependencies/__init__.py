"""
Central export point for API dependencies.
"""

from .database import get_db
from .services import get_event_publisher, get_visit_service

__all__ = [
    # Database
    "get_db",
    # Services
    "get_event_publisher",
    "get_visit_service",
]
