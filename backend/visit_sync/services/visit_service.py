# backend/visit_sync/services/visit_service.py
"""
Visit Service

Owns the visit lifecycle against the legacy system of record:

    SCH --cancel--> CANC

Create, update and cancel each run in one transaction that also covers the
scheduling rows provisioned for the visit, the visit order drawn from the
booking's balance and the visitor rows. Any failure rolls all of it back.
"""

from datetime import date
import logging
from typing import Callable, Optional

from sqlalchemy.orm import Session

from ..core.enums import EventOutcome, EventStatus, ReferenceDomain, VisitStatus
from ..core.exceptions import BadDataException, ConflictException, NotFoundException
from ..events import EventPublisher, VisitCancelled, VisitCreated, VisitDuplicate
from ..models.booking import OffenderBooking
from ..models.visit import Visit, VisitVisitor
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories import RepositoryFactory
from ..schemas.visit import (
    CancelVisitRequest,
    CodeDescription,
    CreateVisitRequest,
    LeadVisitor,
    UpdateVisitRequest,
    VisitorResponse,
    VisitResponse,
)
from .balance_ledger import BalanceLedger
from .base import BaseService
from .reference_data_service import ReferenceDataService
from .slot_provisioner import SlotProvisioner
from .visitor_reconciler import VisitorReconciler, unique_person_ids

logger = logging.getLogger(__name__)


class VisitService(BaseService):
    """
    Service layer for visit create, update, cancel and lookup.

    Collaborators are built from the session unless supplied, so tests can
    swap any of them out.
    """

    def __init__(
        self,
        db: Session,
        event_publisher: Optional[EventPublisher] = None,
        reference_data: Optional[ReferenceDataService] = None,
        slot_provisioner: Optional[SlotProvisioner] = None,
        balance_ledger: Optional[BalanceLedger] = None,
        visitor_reconciler: Optional[VisitorReconciler] = None,
        today: Callable[[], date] = date.today,
    ):
        """
        Initialize visit service.

        Args:
            db: Database session
            event_publisher: Publisher for visit telemetry events
            reference_data: Reference code, prison and person lookups
            slot_provisioner: Scheduling row find-or-create
            balance_ledger: Visit order allocation and reversal
            visitor_reconciler: Visitor list reconciliation
            today: Clock used for cancellation dates
        """
        super().__init__(db)
        self.event_publisher = event_publisher or EventPublisher()
        self.reference_data = reference_data or ReferenceDataService(db)
        self.slot_provisioner = slot_provisioner or SlotProvisioner(db)
        self.balance_ledger = balance_ledger or BalanceLedger(db, self.reference_data)
        self.visitor_reconciler = visitor_reconciler or VisitorReconciler(db, self.reference_data)
        self.today = today
        self.visit_repository = RepositoryFactory.create_visit_repository(db)
        self.booking_repository = RepositoryFactory.create_offender_booking_repository(db)
        self.sequence_repository = RepositoryFactory.create_sequence_repository(db)

    def _active_booking(self, offender_no: str) -> OffenderBooking:
        booking = self.booking_repository.find_active_by_offender_no(offender_no)
        if booking is None:
            raise NotFoundException(
                f"No active booking found for offender {offender_no}",
                details={"offender_no": offender_no},
            )
        return booking

    @BaseService.measure_operation("visit.create")
    def create_visit(self, offender_no: str, request: CreateVisitRequest) -> int:
        """
        Create a scheduled visit for the offender's active booking.

        Returns:
            The new visit id

        Raises:
            NotFoundException: no active booking for the offender
            BadDataException: unknown visit type, prison or person
            ConflictException: an identical visit already exists
        """
        with self.transaction():
            booking = self._active_booking(offender_no)
            visit_type = self.reference_data.resolve_visit_type(request.visit_type)
            prison = self.reference_data.resolve_prison(request.prison_id)
            scheduled = self.reference_data.require(
                ReferenceDomain.VISIT_STATUS, VisitStatus.SCHEDULED.value
            )
            scheduled_event = self.reference_data.require(
                ReferenceDomain.EVENT_STATUS, EventStatus.SCHEDULED_APPROVED.value
            )
            attended = self.reference_data.require(
                ReferenceDomain.EVENT_OUTCOME, EventOutcome.ATTENDED.value
            )

            slot = self.slot_provisioner.resolve_slot(
                prison, request.start_date_time, request.end_date_time, request.is_closed
            )

            duplicate = self.visit_repository.find_duplicate(
                booking_id=booking.id,
                start_date_time=request.start_date_time,
                end_date_time=request.end_date_time,
                comment_text=request.visit_comment,
                visit_status=scheduled.code,
                room_id=slot.room_id,
            )
            if duplicate is not None:
                # Same message delivered twice by the booking service
                self.event_publisher.publish(
                    VisitDuplicate(
                        existing_visit_id=duplicate.id,
                        offender_no=offender_no,
                        prison_id=prison.id,
                        start_date_time=request.start_date_time,
                    )
                )
                raise ConflictException(
                    f"Visit already exists {duplicate.id}", entity_id=str(duplicate.id)
                )

            visit_order = self.balance_ledger.allocate_order(
                booking, request.issue_date, request.visit_order_comment
            )

            visit = Visit(
                booking_id=booking.id,
                prison_id=prison.id,
                visit_date=request.start_date_time.date(),
                start_date_time=request.start_date_time,
                end_date_time=request.end_date_time,
                visit_type=visit_type.code,
                visit_status=scheduled.code,
                room_id=slot.room_id,
                visit_slot_id=slot.id,
                comment_text=request.visit_comment,
                visit_order=visit_order,
            )
            # Person-less row carrying the visit's own event id and status
            visit.visitors.append(
                VisitVisitor(
                    booking_id=booking.id,
                    event_id=self.sequence_repository.next_event_id(
                        floor=self.visit_repository.max_event_id()
                    ),
                    event_status=scheduled_event.code,
                    event_outcome=attended.code,
                )
            )
            for person_id in unique_person_ids(request.visitor_person_ids):
                person = self.reference_data.resolve_person(person_id)
                visit.visitors.append(
                    VisitVisitor(
                        person_id=person.id,
                        event_status=scheduled_event.code,
                        event_outcome=attended.code,
                    )
                )
            self.visitor_reconciler.rebuild_order_visitors(visit)

            self.visit_repository.add(visit)
            order_number = visit_order.visit_order_number if visit_order is not None else None

        self.logger.info(
            "Visit %s created for %s at %s (order %s)",
            visit.id,
            offender_no,
            prison.id,
            order_number,
        )
        prometheus_metrics.inc_visit_transition("created")
        self.event_publisher.publish(
            VisitCreated(
                visit_id=visit.id,
                offender_no=offender_no,
                prison_id=prison.id,
                start_date_time=visit.start_date_time,
                visit_order_number=order_number,
            )
        )
        return visit.id

    @BaseService.measure_operation("visit.cancel")
    def cancel_visit(self, offender_no: str, visit_id: int, request: CancelVisitRequest) -> None:
        """
        Cancel a scheduled visit and give back its visit order.

        Raises:
            NotFoundException: the visit does not exist
            ConflictException: the visit is not scheduled
            BadDataException: the visit belongs to another offender, or the
                outcome reason is unknown
        """
        today = self.today()

        with self.transaction():
            visit = self.visit_repository.get_visit(visit_id)
            if visit is None:
                raise NotFoundException(f"Visit id {visit_id} not found")

            visit_order = visit.visit_order
            if visit.visit_status == VisitStatus.CANCELLED.value:
                outcome = (
                    f"outcome {visit_order.outcome_reason_code}"
                    if visit_order is not None
                    else "no outcome"
                )
                message = f"Visit already cancelled, with {outcome}"
                self.logger.error("%s for visit id = %s", message, visit_id)
                raise ConflictException(message, details={"visit_status": visit.visit_status})
            if visit.visit_status != VisitStatus.SCHEDULED.value:
                message = f"Visit status is not scheduled but is {visit.visit_status}"
                self.logger.error("%s for visit id = %s", message, visit_id)
                raise ConflictException(message, details={"visit_status": visit.visit_status})

            owner = visit.booking.offender.noms_id
            if owner != offender_no:
                message = f"Visit's offenderNo = {owner} does not match argument = {offender_no}"
                self.logger.error("%s for visit id = %s", message, visit_id)
                raise BadDataException(message)

            reason = self.reference_data.resolve_outcome_reason(request.outcome)
            cancelled = self.reference_data.require(
                ReferenceDomain.VISIT_STATUS, VisitStatus.CANCELLED.value
            )
            cancelled_event = self.reference_data.require(
                ReferenceDomain.EVENT_STATUS, EventStatus.CANCELLED.value
            )
            absent = self.reference_data.require(
                ReferenceDomain.EVENT_OUTCOME, EventOutcome.ABSENT.value
            )

            visit.visit_status = cancelled.code
            for visitor in visit.visitors:
                visitor.event_outcome = absent.code
                visitor.event_status = cancelled_event.code
                visitor.outcome_reason_code = reason.code

            if visit_order is not None:
                visit_order.status = cancelled.code
                visit_order.outcome_reason_code = reason.code
                visit_order.expiry_date = today
                self.balance_ledger.reverse_order(visit_order, visit.booking, today)

            self.visit_repository.flush()

        self.logger.info("Visit %s cancelled for %s with %s", visit_id, offender_no, reason.code)
        prometheus_metrics.inc_visit_transition("cancelled")
        self.event_publisher.publish(
            VisitCancelled(visit_id=visit_id, offender_no=offender_no, outcome=reason.code)
        )

    @BaseService.measure_operation("visit.update")
    def update_visit(self, offender_no: str, visit_id: int, request: UpdateVisitRequest) -> None:
        """
        Move a visit and reconcile its visitors.

        The visit order keeps its type and dates; only its visitor list is
        rebuilt. No status guard is applied, so a cancelled visit can still
        be updated.

        Raises:
            NotFoundException: the visit does not exist for the offender
            BadDataException: an added person does not exist
        """
        with self.transaction():
            visit = self.visit_repository.get_visit_for_offender(visit_id, offender_no)
            if visit is None:
                raise NotFoundException(f"Visit id {visit_id} not found for offender {offender_no}")

            self.visitor_reconciler.reconcile(visit, request.visitor_person_ids)

            slot = self.slot_provisioner.resolve_slot(
                visit.prison, request.start_date_time, request.end_date_time, request.is_closed
            )
            visit.visit_slot = slot
            visit.room = slot.room
            visit.visit_date = request.start_date_time.date()
            visit.start_date_time = request.start_date_time
            visit.end_date_time = request.end_date_time
            if request.visit_comment is not None:
                visit.comment_text = request.visit_comment

            self.visit_repository.flush()

        self.log_operation("update_visit", visit_id=visit_id, offender_no=offender_no)
        prometheus_metrics.inc_visit_transition("updated")

    @BaseService.measure_operation("visit.get")
    def get_visit(self, visit_id: int) -> VisitResponse:
        visit = self.visit_repository.get_visit(visit_id)
        if visit is None:
            raise NotFoundException(f"visit id {visit_id}")
        return self._to_response(visit)

    def _code(self, domain: ReferenceDomain, code: str) -> CodeDescription:
        return CodeDescription(code=code, description=self.reference_data.describe(domain, code))

    def _to_response(self, visit: Visit) -> VisitResponse:
        leader = visit.visit_order.group_leader if visit.visit_order is not None else None
        leader_id = leader.person_id if leader is not None else None

        outcome = None
        status_record = visit.status_record
        if status_record is not None and status_record.outcome_reason_code:
            reason_code = status_record.outcome_reason_code
            outcome = CodeDescription(
                code=reason_code,
                description=self.reference_data.describe(ReferenceDomain.OUTCOME_REASON, reason_code)
                or reason_code,
            )

        room = None
        if visit.room is not None:
            room = CodeDescription(
                code=visit.room.location_code or visit.room.description,
                description=visit.room.description,
            )

        return VisitResponse(
            visit_id=visit.id,
            offender_no=visit.booking.offender.noms_id,
            prison_id=visit.prison_id,
            start_date_time=visit.start_date_time,
            end_date_time=visit.end_date_time,
            visit_type=self._code(ReferenceDomain.VISIT_TYPE, visit.visit_type),
            visit_status=self._code(ReferenceDomain.VISIT_STATUS, visit.visit_status),
            visit_outcome=outcome,
            agency_internal_location=room,
            comment_text=visit.comment_text,
            visit_order_number=(
                visit.visit_order.visit_order_number if visit.visit_order is not None else None
            ),
            visitors=[
                VisitorResponse(
                    person_id=visitor.person_id, lead_visitor=visitor.person_id == leader_id
                )
                for visitor in visit.person_visitors
            ],
            lead_visitor=(
                LeadVisitor(person_id=leader.person_id, full_name=leader.person.full_name)
                if leader is not None
                else None
            ),
            when_created=visit.created_at,
            when_updated=visit.updated_at,
        )
