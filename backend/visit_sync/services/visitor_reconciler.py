# backend/visit_sync/services/visitor_reconciler.py
"""
Visitor Set Reconciler

Brings a visit's person visitors in line with a requested list of person
ids and mirrors the result onto the visit order.
"""

import logging
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from ..models.visit import Visit, VisitOrderVisitor, VisitVisitor
from .base import BaseService
from .reference_data_service import ReferenceDataService

logger = logging.getLogger(__name__)


def unique_person_ids(person_ids: Iterable[int]) -> List[int]:
    """Drop repeated ids, keeping first-seen order."""
    seen: dict[int, None] = {}
    for person_id in person_ids:
        seen.setdefault(person_id, None)
    return list(seen)


class VisitorReconciler(BaseService):
    def __init__(self, db: Session, reference_data: Optional[ReferenceDataService] = None):
        super().__init__(db)
        self.reference_data = reference_data or ReferenceDataService(db)

    def reconcile(self, visit: Visit, requested_person_ids: Iterable[int]) -> None:
        """
        Remove person visitors that are no longer requested and add the new
        ones, then rebuild the order's visitor list.

        The status-tracking row is never removed. Added visitors take its
        current event status.

        Raises:
            BadDataException: a requested person does not exist
        """
        requested = unique_person_ids(requested_person_ids)
        status_record = visit.status_record
        event_status = status_record.event_status if status_record is not None else None

        current_ids = {visitor.person_id for visitor in visit.person_visitors}
        to_remove = [
            visitor for visitor in visit.person_visitors if visitor.person_id not in requested
        ]
        to_add = [person_id for person_id in requested if person_id not in current_ids]

        for visitor in to_remove:
            visit.visitors.remove(visitor)
        for person_id in to_add:
            person = self.reference_data.resolve_person(person_id)
            visit.visitors.append(VisitVisitor(person_id=person.id, event_status=event_status))

        if to_remove or to_add:
            self.logger.info(
                "Visit %s visitors reconciled: removed %s, added %s",
                visit.id,
                sorted(visitor.person_id for visitor in to_remove),
                to_add,
            )

        self.rebuild_order_visitors(visit)

    def rebuild_order_visitors(self, visit: Visit) -> None:
        """
        Replace the order's visitors with the visit's person visitors.

        The first person becomes group leader. The external booking service
        has no notion of a lead visitor but the legacy schema needs one.
        """
        order = visit.visit_order
        if order is None:
            return

        order.visitors.clear()
        for position, visitor in enumerate(visit.person_visitors):
            order.visitors.append(
                VisitOrderVisitor(person_id=visitor.person_id, group_leader=position == 0)
            )
