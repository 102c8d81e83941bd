"""Visit domain events."""
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, ClassVar, Dict, Optional


@dataclass
class VisitCreated:
    """Fired after a visit and its order are written."""

    name: ClassVar[str] = "visit-created"

    visit_id: int
    offender_no: str
    prison_id: str
    start_date_time: datetime
    visit_order_number: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class VisitCancelled:
    """Fired after a visit is cancelled."""

    name: ClassVar[str] = "visit-cancelled"

    visit_id: int
    offender_no: str
    outcome: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class VisitDuplicate:
    """Fired when a create request matches a visit that already exists."""

    name: ClassVar[str] = "visit-duplicate"

    existing_visit_id: int
    offender_no: str
    prison_id: str
    start_date_time: datetime

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
