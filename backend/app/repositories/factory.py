# backend/app/repositories/factory.py
"""
Repository Factory for the salon scheduling platform.

Provides centralized creation of repository instances,
ensuring consistent initialization and dependency injection.
"""

from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

# Avoid circular imports
if TYPE_CHECKING:
    from .booking_repository import BookingRepository
    from .calendar_block_repository import CalendarBlockRepository
    from .conflict_checker_repository import ConflictCheckerRepository
    from .last_minute_repository import LastMinuteRepository
    from .notification_repository import NotificationRepository
    from .profile_repository import ClientProfileRepository, ProfessionalProfileRepository
    from .service_catalog_repository import ServiceCatalogRepository


class RepositoryFactory:
    """
    Factory class for creating repository instances.

    Centralizes repository creation to ensure consistent initialization
    and makes it easy to swap implementations if needed.
    """

    @staticmethod
    def create_booking_repository(db: Session) -> "BookingRepository":
        """Create repository for booking operations."""
        from .booking_repository import BookingRepository

        return BookingRepository(db)

    @staticmethod
    def create_conflict_checker_repository(db: Session) -> "ConflictCheckerRepository":
        """Create repository for conflict checking queries."""
        from .conflict_checker_repository import ConflictCheckerRepository

        return ConflictCheckerRepository(db)

    @staticmethod
    def create_calendar_block_repository(db: Session) -> "CalendarBlockRepository":
        from .calendar_block_repository import CalendarBlockRepository

        return CalendarBlockRepository(db)

    @staticmethod
    def create_service_catalog_repository(db: Session) -> "ServiceCatalogRepository":
        from .service_catalog_repository import ServiceCatalogRepository

        return ServiceCatalogRepository(db)

    @staticmethod
    def create_professional_profile_repository(db: Session) -> "ProfessionalProfileRepository":
        from .profile_repository import ProfessionalProfileRepository

        return ProfessionalProfileRepository(db)

    @staticmethod
    def create_client_profile_repository(db: Session) -> "ClientProfileRepository":
        from .profile_repository import ClientProfileRepository

        return ClientProfileRepository(db)

    @staticmethod
    def create_last_minute_repository(db: Session) -> "LastMinuteRepository":
        from .last_minute_repository import LastMinuteRepository

        return LastMinuteRepository(db)

    @staticmethod
    def create_notification_repository(db: Session) -> "NotificationRepository":
        from .notification_repository import NotificationRepository

        return NotificationRepository(db)
