# backend/app/repositories/__init__.py
"""
Repository Pattern Implementation for the salon scheduling platform.

This package provides the repository layer for data access,
separating business logic from database queries.

Usage:
    from app.repositories import RepositoryFactory

    # In a service:
    repository = RepositoryFactory.create_booking_repository(db)
    booking = repository.get_by_id(booking_id)
"""

from .base_repository import BaseRepository
from .booking_repository import BookingRepository
from .calendar_block_repository import CalendarBlockRepository
from .conflict_checker_repository import ConflictCheckerRepository
from .factory import RepositoryFactory
from .last_minute_repository import LastMinuteRepository
from .notification_repository import NotificationRepository
from .profile_repository import ClientProfileRepository, ProfessionalProfileRepository
from .service_catalog_repository import ServiceCatalogRepository

__all__ = [
    "BaseRepository",
    "BookingRepository",
    "CalendarBlockRepository",
    "ClientProfileRepository",
    "ConflictCheckerRepository",
    "LastMinuteRepository",
    "NotificationRepository",
    "ProfessionalProfileRepository",
    "RepositoryFactory",
    "ServiceCatalogRepository",
]
