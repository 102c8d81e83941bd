"""Event publisher - hands visit telemetry to the log pipeline."""
from datetime import date, datetime
import json
import logging
from typing import Any, Dict, Protocol

logger = logging.getLogger(__name__)


class Event(Protocol):
    """Protocol for event types."""

    name: str

    def to_dict(self) -> Dict[str, Any]:
        ...


class EventPublisher:
    """Publishes domain events as structured log records."""

    def __init__(self, event_logger: logging.Logger | None = None):
        self.logger = event_logger or logger

    def publish(self, event: Event) -> None:
        """
        Emit an event.

        Payload values that are dates or datetimes are rendered as ISO strings
        so the record can be shipped as JSON.
        """
        payload = event.to_dict()

        for key, value in payload.items():
            if isinstance(value, (datetime, date)):
                payload[key] = value.isoformat()

        self.logger.info(
            "event:%s %s",
            event.name,
            json.dumps(payload, sort_keys=True),
            extra={"event_name": event.name, "event_payload": payload},
        )
