"""Visit domain events and their publisher."""

from .publisher import EventPublisher
from .visit_events import VisitCancelled, VisitCreated, VisitDuplicate

__all__ = ["EventPublisher", "VisitCancelled", "VisitCreated", "VisitDuplicate"]
