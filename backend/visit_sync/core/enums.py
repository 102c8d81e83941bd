# backend/visit_sync/core/enums.py
"""
Reference code domains and the fixed codes the visit core relies on.

Codes are stored as plain strings on the visit tables; the reference_codes
table holds their descriptions and active flags.
"""

from enum import Enum


class ReferenceDomain(str, Enum):
    VISIT_TYPE = "VISIT_TYPE"
    VISIT_STATUS = "VIS_STS"
    EVENT_STATUS = "EVENT_STS"
    EVENT_OUTCOME = "OUTCOMES"
    OUTCOME_REASON = "MOVE_CANC_RS"
    VISIT_ORDER_TYPE = "VIS_ORD_TYPE"
    ADJUSTMENT_REASON = "VIS_ORD_ADJ"


class VisitStatus(str, Enum):
    """Visit lifecycle statuses handled by this service."""

    SCHEDULED = "SCH"
    CANCELLED = "CANC"


class EventStatus(str, Enum):
    SCHEDULED_APPROVED = "SCH"
    CANCELLED = "CANC"


class EventOutcome(str, Enum):
    ATTENDED = "ATT"
    ABSENT = "ABS"


class VisitOrderType(str, Enum):
    STANDARD = "VO"
    PRIVILEGED = "PVO"

    @property
    def is_privileged(self) -> bool:
        return self is VisitOrderType.PRIVILEGED


class AdjustmentReason(str, Enum):
    VISIT_ORDER_ISSUE = "VO_ISSUE"
    PRIVILEGED_VISIT_ORDER_ISSUE = "PVO_ISSUE"
    VISIT_ORDER_CANCEL = "VO_CANCEL"
    PRIVILEGED_VISIT_ORDER_CANCEL = "PVO_CANCEL"


class OpenClosedStatus(str, Enum):
    OPEN = "OPEN"
    CLOSED = "CLOSED"


class ServiceCode(str, Enum):
    """Services that can take ownership of a function for a prison."""

    VISIT_ALLOCATION = "VISIT_ALLOCATION"
