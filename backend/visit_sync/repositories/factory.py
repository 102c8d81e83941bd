# backend/visit_sync/repositories/factory.py
"""
Repository Factory for the visit sync service.

Provides centralized creation of repository instances,
ensuring consistent initialization and dependency injection.
"""

from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

# Avoid circular imports
if TYPE_CHECKING:
    from .booking_repository import (
        OffenderBookingRepository,
        VisitBalanceAdjustmentRepository,
    )
    from .reference_repository import (
        PersonRepository,
        PrisonRepository,
        ReferenceCodeRepository,
        ServiceAgencySwitchRepository,
    )
    from .scheduling_repository import (
        RoomRepository,
        SchedulingDayRepository,
        SchedulingSlotRepository,
        SchedulingTimeRepository,
    )
    from .sequence_repository import SequenceRepository
    from .visit_repository import VisitRepository


class RepositoryFactory:
    """
    Factory class for creating repository instances.

    Centralizes repository creation to ensure consistent initialization
    and makes it easy to swap implementations if needed.
    """

    @staticmethod
    def create_visit_repository(db: Session) -> "VisitRepository":
        from .visit_repository import VisitRepository

        return VisitRepository(db)

    @staticmethod
    def create_offender_booking_repository(db: Session) -> "OffenderBookingRepository":
        from .booking_repository import OffenderBookingRepository

        return OffenderBookingRepository(db)

    @staticmethod
    def create_visit_balance_adjustment_repository(
        db: Session,
    ) -> "VisitBalanceAdjustmentRepository":
        """Create the append-only balance ledger repository."""
        from .booking_repository import VisitBalanceAdjustmentRepository

        return VisitBalanceAdjustmentRepository(db)

    @staticmethod
    def create_reference_code_repository(db: Session) -> "ReferenceCodeRepository":
        from .reference_repository import ReferenceCodeRepository

        return ReferenceCodeRepository(db)

    @staticmethod
    def create_prison_repository(db: Session) -> "PrisonRepository":
        from .reference_repository import PrisonRepository

        return PrisonRepository(db)

    @staticmethod
    def create_person_repository(db: Session) -> "PersonRepository":
        from .reference_repository import PersonRepository

        return PersonRepository(db)

    @staticmethod
    def create_service_agency_switch_repository(db: Session) -> "ServiceAgencySwitchRepository":
        from .reference_repository import ServiceAgencySwitchRepository

        return ServiceAgencySwitchRepository(db)

    @staticmethod
    def create_room_repository(db: Session) -> "RoomRepository":
        from .scheduling_repository import RoomRepository

        return RoomRepository(db)

    @staticmethod
    def create_scheduling_day_repository(db: Session) -> "SchedulingDayRepository":
        from .scheduling_repository import SchedulingDayRepository

        return SchedulingDayRepository(db)

    @staticmethod
    def create_scheduling_time_repository(db: Session) -> "SchedulingTimeRepository":
        from .scheduling_repository import SchedulingTimeRepository

        return SchedulingTimeRepository(db)

    @staticmethod
    def create_scheduling_slot_repository(db: Session) -> "SchedulingSlotRepository":
        from .scheduling_repository import SchedulingSlotRepository

        return SchedulingSlotRepository(db)

    @staticmethod
    def create_sequence_repository(db: Session) -> "SequenceRepository":
        """Create repository for named sequence allocation."""
        from .sequence_repository import SequenceRepository

        return SequenceRepository(db)
