# backend/app/api/dependencies/__init__.py
"""
Central export point for all dependencies.

This module re-exports all dependencies from submodules
for convenient access throughout the application.
"""

from .auth import get_current_client, get_current_professional
from .database import get_db
from .services import (
    get_booking_service,
    get_calendar_block_service,
    get_last_minute_service,
    get_notification_service,
    get_pending_change_service,
    get_professional_service,
)

__all__ = [
    # Auth
    "get_current_client",
    "get_current_professional",
    # Database
    "get_db",
    # Services
    "get_booking_service",
    "get_calendar_block_service",
    "get_last_minute_service",
    "get_notification_service",
    "get_pending_change_service",
    "get_professional_service",
]
