# backend/visit_sync/repositories/reference_repository.py
"""
Repositories for reference and identity data.

These back the collaborator lookups the visit core depends on: reference
codes, prisons, persons and service agency switches.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..models.reference import Person, Prison, ReferenceCode, ServiceAgencySwitch
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class ReferenceCodeRepository(BaseRepository[ReferenceCode]):
    def __init__(self, db: Session):
        super().__init__(db, ReferenceCode)

    def find_active(self, domain: str, code: str) -> Optional[ReferenceCode]:
        """Return the active reference code for (domain, code), or None."""
        return self.find_one_by(domain=domain, code=code, active=True)


class PrisonRepository(BaseRepository[Prison]):
    def __init__(self, db: Session):
        super().__init__(db, Prison)


class PersonRepository(BaseRepository[Person]):
    def __init__(self, db: Session):
        super().__init__(db, Person)


class ServiceAgencySwitchRepository(BaseRepository[ServiceAgencySwitch]):
    def __init__(self, db: Session):
        super().__init__(db, ServiceAgencySwitch)

    def is_switched_on(self, service_code: str, prison_id: str) -> bool:
        """True when the named service has taken over the function for the prison."""
        return self.exists(service_code=service_code, prison_id=prison_id)
