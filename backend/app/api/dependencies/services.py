# backend/app/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

This module provides factory functions that create service instances
with their required dependencies properly injected.
"""

import logging

from fastapi import Depends
from sqlalchemy.orm import Session

from ...services.availability_service import AvailabilityService
from ...services.booking_service import BookingService
from ...services.calendar_block_service import CalendarBlockService
from ...services.conflict_checker import ConflictChecker
from ...services.last_minute_service import LastMinuteService
from ...services.notification_service import NotificationService
from ...services.pending_change_service import PendingChangeService
from ...services.professional_service import ProfessionalService
from .database import get_db

logger = logging.getLogger(__name__)


def get_conflict_checker(db: Session = Depends(get_db)) -> ConflictChecker:
    return ConflictChecker(db)


def get_notification_service(db: Session = Depends(get_db)) -> NotificationService:
    return NotificationService(db)


def get_booking_service(
    db: Session = Depends(get_db),
    notification_service: NotificationService = Depends(get_notification_service),
    conflict_checker: ConflictChecker = Depends(get_conflict_checker),
) -> BookingService:
    """
    Get booking service instance with all dependencies.

    Args:
        db: Database session
        notification_service: Client notification writer
        conflict_checker: Availability conflict detection

    Returns:
        BookingService instance
    """
    return BookingService(db, notification_service, conflict_checker)


def get_calendar_block_service(
    db: Session = Depends(get_db),
    conflict_checker: ConflictChecker = Depends(get_conflict_checker),
) -> CalendarBlockService:
    return CalendarBlockService(db, conflict_checker)


def get_pending_change_service(
    db: Session = Depends(get_db),
    booking_service: BookingService = Depends(get_booking_service),
    block_service: CalendarBlockService = Depends(get_calendar_block_service),
) -> PendingChangeService:
    return PendingChangeService(db, booking_service, block_service)


def get_last_minute_service(
    db: Session = Depends(get_db),
    conflict_checker: ConflictChecker = Depends(get_conflict_checker),
) -> LastMinuteService:
    return LastMinuteService(db, conflict_checker)


def get_professional_service(db: Session = Depends(get_db)) -> ProfessionalService:
    """Provide professional settings service instance for dependency injection."""

    return ProfessionalService(db)


def get_availability_service(
    db: Session = Depends(get_db),
    conflict_checker: ConflictChecker = Depends(get_conflict_checker),
) -> AvailabilityService:
    return AvailabilityService(db, conflict_checker)
