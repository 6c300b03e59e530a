# backend/app/services/booking_service.py
"""
Booking Service for the salon scheduling platform.

Handles all booking-related business logic including:
- Creating bookings from one or more offered services
- Moving and resizing bookings
- Status transitions (accept, complete, cancel)
- Working-hours and availability validation

Every check-then-write sequence runs under the professional's schedule
lock, and inside a single transaction that row-locks the professional
before the conflict read. A write that still loses a race at the
database is reported as TimeSlotUnavailable.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
import logging
from typing import Any, Callable, Dict, List, Optional, Sequence

from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from ..core.booking_lock import schedule_lock
from ..core.exceptions import (
    InvalidStatusTransitionException,
    MisconfiguredHoursException,
    NotFoundException,
    OutsideWorkingHoursException,
    ServiceNotOfferedException,
    TimeSlotUnavailableException,
    ValidationException,
)
from ..core.timezone_utils import ensure_utc
from ..database import with_db_retry
from ..domain.duration_grid import normalize_buffer, normalize_duration, resolve_total_duration
from ..domain.intervals import Commitment, TimeInterval
from ..domain.working_hours import (
    DEFAULT_WORKING_HOURS,
    WorkingHoursCheck,
    WorkingHoursViolation,
    is_within_working_hours,
)
from ..models.booking import Booking, BookingStatus
from ..models.professional import ProfessionalProfile
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories import RepositoryFactory
from ..schemas.booking import BookingCreate
from .base import BaseService
from .conflict_checker import ConflictChecker
from .notification_service import NotificationEvent, NotificationService

logger = logging.getLogger(__name__)


class BookingInitiator(str, Enum):
    PROFESSIONAL = "PROFESSIONAL"
    CLIENT = "CLIENT"


@dataclass
class ScheduleAssessment:
    """Outcome of checking one candidate interval, without raising."""

    interval: TimeInterval
    working_hours: Optional[WorkingHoursCheck] = None
    conflicts: List[Commitment] = field(default_factory=list)

    @property
    def outside_working_hours(self) -> bool:
        return bool(
            self.working_hours is not None
            and self.working_hours.reason is WorkingHoursViolation.OUTSIDE_WORKING_HOURS
        )

    @property
    def misconfigured_hours(self) -> bool:
        return bool(
            self.working_hours is not None
            and self.working_hours.reason is WorkingHoursViolation.MISCONFIGURED_HOURS
        )


def _is_lost_race(exc: Exception) -> bool:
    if isinstance(exc, IntegrityError):
        return True
    message = str(exc).lower()
    return isinstance(exc, OperationalError) and (
        "deadlock" in message or "could not serialize" in message
    )


class BookingService(BaseService):
    """
    Service layer for booking operations.

    Centralizes the scheduling rules so the API layer, the pending-change
    workflow and tests all go through the same validation.
    """

    def __init__(
        self,
        db: Session,
        notification_service: Optional[NotificationService] = None,
        conflict_checker: Optional[ConflictChecker] = None,
    ):
        super().__init__(db)
        self.repository = RepositoryFactory.create_booking_repository(db)
        self.catalog_repository = RepositoryFactory.create_service_catalog_repository(db)
        self.professional_repository = RepositoryFactory.create_professional_profile_repository(db)
        self.client_repository = RepositoryFactory.create_client_profile_repository(db)
        self.conflict_checker = conflict_checker or ConflictChecker(db)
        self.notification_service = notification_service or NotificationService(db)

    # Lookups

    def get_professional(self, professional_id: str) -> ProfessionalProfile:
        professional = with_db_retry(
            "get_professional",
            lambda: self.professional_repository.get_by_id(
                professional_id, load_relationships=False
            ),
        )
        if not professional:
            raise NotFoundException("Professional not found", details={"id": professional_id})
        return professional

    def get_booking(self, professional_id: str, booking_id: str) -> Booking:
        booking = with_db_retry(
            "get_booking",
            lambda: self.repository.get_for_professional(booking_id, professional_id),
        )
        if not booking:
            raise NotFoundException("Booking not found", details={"id": booking_id})
        return booking

    def list_bookings(
        self,
        professional_id: str,
        range_start: Optional[datetime] = None,
        range_end: Optional[datetime] = None,
        statuses: Optional[Sequence[str]] = None,
    ) -> List[Booking]:
        return with_db_retry(
            "list_bookings",
            lambda: self.repository.list_for_professional(
                professional_id, range_start, range_end, statuses
            ),
        )

    # Validation

    def assess_interval(
        self,
        professional: ProfessionalProfile,
        candidate: TimeInterval,
        *,
        duration_minutes: int,
        buffer_minutes: int,
        check_working_hours: bool = True,
        exclude_ids: Sequence[str] = (),
    ) -> ScheduleAssessment:
        assessment = ScheduleAssessment(interval=candidate)
        if check_working_hours:
            assessment.working_hours = is_within_working_hours(
                candidate,
                professional.working_hours or DEFAULT_WORKING_HOURS,
                professional.time_zone,
            )
        assessment.conflicts = self.conflict_checker.check_conflicts(
            professional.id,
            candidate,
            duration_minutes=duration_minutes,
            buffer_minutes=buffer_minutes,
            exclude_ids=exclude_ids,
        )
        return assessment

    def ensure_schedulable(
        self,
        professional: ProfessionalProfile,
        candidate: TimeInterval,
        *,
        duration_minutes: int,
        buffer_minutes: int,
        allow_outside_hours: bool = False,
        exclude_ids: Sequence[str] = (),
    ) -> ScheduleAssessment:
        """
        Raise the first scheduling error for ``candidate``.

        Working hours are checked before conflicts; ``allow_outside_hours``
        skips only the working-hours step.
        """
        assessment = self.assess_interval(
            professional,
            candidate,
            duration_minutes=duration_minutes,
            buffer_minutes=buffer_minutes,
            check_working_hours=not allow_outside_hours,
            exclude_ids=exclude_ids,
        )
        if assessment.misconfigured_hours:
            prometheus_metrics.record_scheduling_rejection("MISCONFIGURED_HOURS")
            weekday = assessment.working_hours.weekday if assessment.working_hours else None
            raise MisconfiguredHoursException(weekday)
        if assessment.outside_working_hours:
            prometheus_metrics.record_scheduling_rejection("OUTSIDE_WORKING_HOURS")
            raise OutsideWorkingHoursException()
        if assessment.conflicts:
            prometheus_metrics.record_scheduling_rejection("TIME_SLOT_UNAVAILABLE")
            raise TimeSlotUnavailableException(
                conflicts=[conflict.to_dict() for conflict in assessment.conflicts]
            )
        return assessment

    def _resolve_line_items(
        self, professional_id: str, service_ids: Sequence[str], location_type: str
    ) -> List[Dict[str, Any]]:
        unique_ids = list(dict.fromkeys(service_ids))
        offerings = self.catalog_repository.get_offerings_for_services(professional_id, unique_ids)

        items: List[Dict[str, Any]] = []
        for service_id in unique_ids:
            offering = offerings.get(service_id)
            if offering is None:
                raise ServiceNotOfferedException(service_id)
            if not offering.offers(location_type):
                raise ServiceNotOfferedException(service_id, location_type)
            items.append(
                {
                    "service_id": service_id,
                    "offering_id": offering.id,
                    "service_name": offering.service.name,
                    "duration_minutes": normalize_duration(offering.duration_for(location_type)),
                    "price_cents": offering.price_cents_for(location_type),
                }
            )
        return items

    def lock_professional(self, professional_id: str) -> ProfessionalProfile:
        """Row-lock the professional inside the open transaction."""
        professional = self.professional_repository.lock_for_scheduling(professional_id)
        if not professional:
            raise NotFoundException("Professional not found", details={"id": professional_id})
        return professional

    def _commit_locked(
        self,
        professional_id: str,
        operation: str,
        check: Callable[[ProfessionalProfile], Any],
        write: Callable[[], Booking],
    ) -> Booking:
        """
        Run ``check`` then ``write`` in one transaction holding the row lock.

        A lost race at the database is mapped to a slot conflict.
        """
        try:
            with self.transaction():
                check(self.lock_professional(professional_id))
                return write()
        except (IntegrityError, OperationalError) as exc:
            if not _is_lost_race(exc):
                raise
            self.logger.warning(
                f"{operation} lost a scheduling race for professional {professional_id}"
            )
            prometheus_metrics.record_scheduling_rejection("TIME_SLOT_UNAVAILABLE")
            raise TimeSlotUnavailableException() from exc

    # Create

    @BaseService.measure_operation("create_booking")
    def create_booking(
        self,
        professional_id: str,
        booking_data: BookingCreate,
        *,
        initiator: BookingInitiator = BookingInitiator.PROFESSIONAL,
    ) -> Booking:
        """
        Create a booking on ``professional_id``'s calendar.

        Professional-created bookings start ACCEPTED and may bypass working
        hours with ``allow_outside_hours``; client requests start PENDING
        and never bypass working hours.

        Raises:
            ValidationException: missing client or services
            ServiceNotOfferedException: a service is not offered for the location
            OutsideWorkingHoursException / MisconfiguredHoursException
            TimeSlotUnavailableException: overlap with a booking or block
        """
        if not booking_data.service_ids:
            raise ValidationException("At least one service is required.")

        self.get_professional(professional_id)
        client = self.client_repository.get_by_id(booking_data.client_id, load_relationships=False)
        if not client:
            raise ValidationException(
                "Client not found.", details={"client_id": booking_data.client_id}
            )

        location_type = booking_data.location_type.value
        items = self._resolve_line_items(professional_id, booking_data.service_ids, location_type)

        scheduled_for = ensure_utc(booking_data.scheduled_for)
        buffer_minutes = normalize_buffer(booking_data.buffer_minutes or 0)
        total_minutes = resolve_total_duration(
            booking_data.total_duration_minutes, [item["duration_minutes"] for item in items]
        )
        subtotal_cents = sum(item["price_cents"] for item in items)
        candidate = TimeInterval.from_minutes(scheduled_for, total_minutes, buffer_minutes)

        by_professional = initiator is BookingInitiator.PROFESSIONAL
        allow_outside = bool(booking_data.allow_outside_hours) and by_professional

        with schedule_lock(professional_id) as acquired:
            if not acquired:
                raise TimeSlotUnavailableException(
                    "Another change to this calendar is in progress. Please try again."
                )
            now = datetime.now(timezone.utc)
            booking = self._commit_locked(
                professional_id,
                "create_booking",
                lambda locked: self.ensure_schedulable(
                    locked,
                    candidate,
                    duration_minutes=total_minutes,
                    buffer_minutes=buffer_minutes,
                    allow_outside_hours=allow_outside,
                ),
                lambda: self.repository.create_with_items(
                    {
                        "professional_id": professional_id,
                        "client_id": client.id,
                        "scheduled_for": scheduled_for,
                        "total_duration_minutes": total_minutes,
                        "buffer_minutes": buffer_minutes,
                        "subtotal_cents": subtotal_cents,
                        "status": (
                            BookingStatus.ACCEPTED.value
                            if by_professional
                            else BookingStatus.PENDING.value
                        ),
                        "accepted_at": now if by_professional else None,
                        "location_type": location_type,
                        "notes": booking_data.notes,
                    },
                    items,
                ),
            )

        self.log_operation(
            "create_booking",
            booking_id=booking.id,
            professional_id=professional_id,
            initiator=initiator.value,
            outside_hours_override=allow_outside,
        )
        event = (
            NotificationEvent.BOOKING_CREATED
            if by_professional
            else NotificationEvent.BOOKING_REQUESTED
        )
        self.notification_service.notify_booking(event, booking)
        return booking

    # Move / resize

    @BaseService.measure_operation("reschedule_booking")
    def reschedule_booking(
        self,
        professional_id: str,
        booking_id: str,
        next_start: datetime,
        next_duration_minutes: Optional[int] = None,
        *,
        buffer_minutes: Optional[int] = None,
        allow_outside_hours: bool = False,
    ) -> Booking:
        """
        Move a booking, optionally changing its length.

        The booking's own current interval is never treated as a conflict.
        """
        booking = self.get_booking(professional_id, booking_id)
        if booking.is_terminal:
            raise InvalidStatusTransitionException(booking.status, "RESCHEDULED")

        scheduled_for = ensure_utc(next_start)
        total_minutes = resolve_total_duration(
            next_duration_minutes, booking.total_duration_minutes
        )
        buffer = (
            booking.buffer_minutes if buffer_minutes is None else normalize_buffer(buffer_minutes)
        )
        candidate = TimeInterval.from_minutes(scheduled_for, total_minutes, buffer)

        with schedule_lock(professional_id) as acquired:
            if not acquired:
                raise TimeSlotUnavailableException(
                    "Another change to this calendar is in progress. Please try again."
                )
            booking = self._commit_locked(
                professional_id,
                "reschedule_booking",
                lambda locked: self.ensure_schedulable(
                    locked,
                    candidate,
                    duration_minutes=total_minutes,
                    buffer_minutes=buffer,
                    allow_outside_hours=allow_outside_hours,
                    exclude_ids=[booking.id],
                ),
                lambda: self.repository.update_schedule(
                    booking,
                    scheduled_for=scheduled_for,
                    total_duration_minutes=total_minutes,
                    buffer_minutes=buffer,
                ),
            )

        self.log_operation(
            "reschedule_booking",
            booking_id=booking.id,
            professional_id=professional_id,
            scheduled_for=scheduled_for.isoformat(),
            total_duration_minutes=total_minutes,
        )
        self.notification_service.notify_booking(NotificationEvent.BOOKING_RESCHEDULED, booking)
        return booking

    @BaseService.measure_operation("resize_booking")
    def resize_booking(
        self,
        professional_id: str,
        booking_id: str,
        next_duration_minutes: int,
        *,
        allow_outside_hours: bool = False,
    ) -> Booking:
        booking = self.get_booking(professional_id, booking_id)
        return self.reschedule_booking(
            professional_id,
            booking_id,
            booking.scheduled_for,
            resolve_total_duration(next_duration_minutes, next_duration_minutes),
            allow_outside_hours=allow_outside_hours,
        )

    # Status transitions

    @BaseService.measure_operation("accept_booking")
    def accept_booking(self, professional_id: str, booking_id: str) -> Booking:
        booking = self.get_booking(professional_id, booking_id)
        with self.transaction():
            booking.accept()
        self.log_operation("accept_booking", booking_id=booking.id)
        self.notification_service.notify_booking(NotificationEvent.BOOKING_ACCEPTED, booking)
        return booking

    @BaseService.measure_operation("complete_booking")
    def complete_booking(self, professional_id: str, booking_id: str) -> Booking:
        booking = self.get_booking(professional_id, booking_id)
        with self.transaction():
            booking.complete()
        self.log_operation("complete_booking", booking_id=booking.id)
        return booking

    @BaseService.measure_operation("cancel_booking")
    def cancel_booking(
        self, professional_id: str, booking_id: str, reason: Optional[str] = None
    ) -> Booking:
        booking = self.get_booking(professional_id, booking_id)
        with self.transaction():
            booking.cancel(reason)
        self.log_operation("cancel_booking", booking_id=booking.id, reason=reason)
        self.notification_service.notify_booking(NotificationEvent.BOOKING_CANCELLED, booking)
        return booking
