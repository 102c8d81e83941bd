# backend/visit_sync/services/reference_data_service.py
"""
Reference Data Service

Resolves the codes and ids a visit request names into validated rows:
- Visit types and cancellation reasons (bad data when unknown)
- Prisons and persons (bad data when absent)
- Fixed seed codes the visit core always relies on (fatal when missing)
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..core.enums import ReferenceDomain, ServiceCode
from ..core.exceptions import BadDataException, UnmappedReferenceDataException
from ..models.reference import Person, Prison, ReferenceCode
from ..repositories import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)


class ReferenceDataService(BaseService):
    """Lookups against reference codes, prisons, persons and service switches."""

    def __init__(self, db: Session):
        super().__init__(db)
        self.reference_code_repository = RepositoryFactory.create_reference_code_repository(db)
        self.prison_repository = RepositoryFactory.create_prison_repository(db)
        self.person_repository = RepositoryFactory.create_person_repository(db)
        self.switch_repository = RepositoryFactory.create_service_agency_switch_repository(db)

    def _lookup(self, domain: ReferenceDomain, code: Optional[str]) -> Optional[ReferenceCode]:
        if not code:
            return None
        return self.reference_code_repository.find_active(domain.value, code)

    def resolve_visit_type(self, code: str) -> ReferenceCode:
        visit_type = self._lookup(ReferenceDomain.VISIT_TYPE, code)
        if visit_type is None:
            raise BadDataException(f"Invalid visit type: {code}", details={"visit_type": code})
        return visit_type

    def resolve_outcome_reason(self, code: str) -> ReferenceCode:
        reason = self._lookup(ReferenceDomain.OUTCOME_REASON, code)
        if reason is None:
            raise BadDataException(
                f"Invalid cancellation reason: {code}", details={"outcome": code}
            )
        return reason

    def resolve_prison(self, prison_id: str) -> Prison:
        prison = self.prison_repository.get_by_id(prison_id)
        if prison is None:
            raise BadDataException(
                f"Prison with id={prison_id} does not exist", details={"prison_id": prison_id}
            )
        return prison

    def resolve_person(self, person_id: int) -> Person:
        person = self.person_repository.get_by_id(person_id)
        if person is None:
            raise BadDataException(
                f"Person with id={person_id} does not exist", details={"person_id": person_id}
            )
        return person

    def require(self, domain: ReferenceDomain, code: str) -> ReferenceCode:
        """
        Resolve a seed code that must always be present.

        Raises:
            UnmappedReferenceDataException: the code is missing or inactive
        """
        reference = self._lookup(domain, code)
        if reference is None:
            self.logger.error("Seed reference code %s/%s is missing", domain.value, code)
            raise UnmappedReferenceDataException(domain.value, code)
        return reference

    def describe(self, domain: ReferenceDomain, code: Optional[str]) -> Optional[str]:
        """Description of a code, or None when the code is empty or unknown."""
        reference = self._lookup(domain, code)
        return reference.description if reference else None

    def is_allocation_switched_on(self, prison_id: str) -> bool:
        """True when visit allocation for the prison is owned by the external allocation service."""
        return self.switch_repository.is_switched_on(ServiceCode.VISIT_ALLOCATION.value, prison_id)
