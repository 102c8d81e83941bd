# backend/visit_sync/seed.py
"""
Reference code seed data.

The visit core resolves statuses, outcomes and reasons through the
reference_codes table. These rows exist in every legacy estate; seeding
them lets a fresh database serve requests.
"""

import logging
from typing import Dict, Tuple

from sqlalchemy.orm import Session

from .core.enums import ReferenceDomain
from .repositories import RepositoryFactory

logger = logging.getLogger(__name__)

REFERENCE_CODES: Dict[ReferenceDomain, Tuple[Tuple[str, str], ...]] = {
    ReferenceDomain.VISIT_TYPE: (
        ("SCON", "Social Contact"),
        ("OFFI", "Official Visit"),
    ),
    ReferenceDomain.VISIT_STATUS: (
        ("SCH", "Scheduled"),
        ("CANC", "Cancelled"),
        ("NORM", "Normal Completion"),
        ("EXP", "Expired"),
    ),
    ReferenceDomain.EVENT_STATUS: (
        ("SCH", "Scheduled (Approved)"),
        ("CANC", "Cancelled"),
        ("COMP", "Completed"),
    ),
    ReferenceDomain.EVENT_OUTCOME: (
        ("ATT", "Attended"),
        ("ABS", "Absence"),
    ),
    ReferenceDomain.OUTCOME_REASON: (
        ("VISCANC", "Visitor Cancelled"),
        ("OFFCANC", "Offender Cancelled"),
        ("ADMIN", "Administrative Cancellation"),
        ("HMP", "Operational Reasons-All Visits Cancelled"),
        ("NO_ID", "No Identification - Refused Entry"),
        ("NO_VO", "No Visiting Order"),
        ("NSHOW", "Visitor Did Not Arrive"),
        ("REFUSED", "Offender Refused Visit"),
    ),
    ReferenceDomain.VISIT_ORDER_TYPE: (
        ("VO", "Visiting Order"),
        ("PVO", "Privileged Visiting Order"),
    ),
    ReferenceDomain.ADJUSTMENT_REASON: (
        ("VO_ISSUE", "VO Issue"),
        ("PVO_ISSUE", "PVO Issue"),
        ("VO_CANCEL", "VO Cancellation"),
        ("PVO_CANCEL", "PVO Cancelled"),
    ),
}


def seed_reference_data(db: Session) -> int:
    """
    Insert any missing reference codes. Existing rows are left untouched.

    Returns:
        Number of rows inserted
    """
    repository = RepositoryFactory.create_reference_code_repository(db)
    inserted = 0
    for domain, codes in REFERENCE_CODES.items():
        for code, description in codes:
            if repository.get_by_id((domain.value, code)) is None:
                repository.create(domain=domain.value, code=code, description=description)
                inserted += 1
    db.commit()
    if inserted:
        logger.info("Seeded %s reference codes", inserted)
    return inserted
