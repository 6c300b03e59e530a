"""
Database models for the salon scheduling platform.

- Professional and client profiles
- Service catalog and per-professional offerings
- Bookings with per-service line items
- Calendar blocks (personal time)
- Last-minute settings, service rules and blackout blocks
- Client notifications
"""

from .booking import Booking, BookingServiceItem, BookingStatus, LocationType
from .calendar_block import CalendarBlock
from .last_minute import LastMinuteBlock, LastMinuteServiceRule, LastMinuteSettings
from .notification import ClientNotification
from .professional import ClientProfile, ProfessionalProfile
from .service import ProfessionalServiceOffering, Service

__all__ = [
    "Booking",
    "BookingServiceItem",
    "BookingStatus",
    "CalendarBlock",
    "ClientNotification",
    "ClientProfile",
    "LastMinuteBlock",
    "LastMinuteServiceRule",
    "LastMinuteSettings",
    "LocationType",
    "ProfessionalProfile",
    "ProfessionalServiceOffering",
    "Service",
]
