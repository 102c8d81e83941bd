"""
Service layer for the visit sync service.

Services own transactions and business rules; repositories own queries.
"""

from .balance_ledger import BalanceLedger
from .base import BaseService
from .reference_data_service import ReferenceDataService
from .slot_provisioner import SlotProvisioner
from .visit_service import VisitService
from .visitor_reconciler import VisitorReconciler

__all__ = [
    "BalanceLedger",
    "BaseService",
    "ReferenceDataService",
    "SlotProvisioner",
    "VisitService",
    "VisitorReconciler",
]
