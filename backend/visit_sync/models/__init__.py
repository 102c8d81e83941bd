"""
Database models for the visit sync service.

The models are organized by functionality:
- Reference and identity data (prisons, persons, reference codes, switches)
- Offender bookings, visit balances and the adjustment ledger
- Weekly scheduling configuration (rooms, days, times, slots)
- The visit aggregate (visits, visitors, visit orders)
- Named sequence counters
"""

from .booking import Offender, OffenderBooking, VisitBalance, VisitBalanceAdjustment
from .reference import Person, Prison, ReferenceCode, ServiceAgencySwitch
from .scheduling import Room, SchedulingDay, SchedulingSlot, SchedulingTime
from .sequence import SequenceCounter
from .visit import Visit, VisitOrder, VisitOrderVisitor, VisitVisitor

__all__ = [
    "Offender",
    "OffenderBooking",
    "Person",
    "Prison",
    "ReferenceCode",
    "Room",
    "SchedulingDay",
    "SchedulingSlot",
    "SchedulingTime",
    "SequenceCounter",
    "ServiceAgencySwitch",
    "Visit",
    "VisitBalance",
    "VisitBalanceAdjustment",
    "VisitOrder",
    "VisitOrderVisitor",
    "VisitVisitor",
]
