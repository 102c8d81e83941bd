"""Application-wide constants for the visit sync service."""

from __future__ import annotations

# ISO weekday (Monday=1) to legacy weekday code
WEEKDAY_CODES: dict[int, str] = {
    1: "MON",
    2: "TUE",
    3: "WED",
    4: "THU",
    5: "FRI",
    6: "SAT",
    7: "SUN",
}

# Provisioned visit rooms
VSIP_CLOSED_ROOM_CODE = "VSIP_CLO"
VSIP_SOCIAL_ROOM_CODE = "VSIP_SOC"
VISIT_ROOM_LOCATION_TYPE = "VISIT"
TOP_LEVEL_VISITS_ROOM_CODES = ("VISITS", "VISIT")
VSIP_ROOM_LIST_SEQUENCE = 99

# Free text written on behalf of the booking service
DEFAULT_VISIT_COMMENT = "Created by VSIP"
DEFAULT_VISIT_ORDER_COMMENT = "Created by VSIP"
CANCELLATION_ADJUSTMENT_COMMENT = "Booking cancelled by VSIP"

# Named sequences
VISIT_EVENT_SEQUENCE = "visit_event_id"
VISIT_ORDER_SEQUENCE = "visit_order_number"
TIME_SLOT_SEQUENCE_PREFIX = "visit_time_slot"

OFFENDER_NO_PATTERN = r"^[A-Z]\d{4}[A-Z]{2}$"
