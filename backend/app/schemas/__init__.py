# backend/app/schemas/__init__.py
"""Pydantic schemas for the salon scheduling API."""

from .booking import (
    BookingCancel,
    BookingCreate,
    BookingItemResponse,
    BookingListResponse,
    BookingReschedule,
    BookingResize,
    BookingResponse,
    ClientBookingRequest,
)
from .calendar import (
    CalendarBlockCreate,
    CalendarBlockListResponse,
    CalendarBlockResponse,
    ConflictResponse,
    DeletedResponse,
    PendingChangeCancelResponse,
    PendingChangeConfirm,
    PendingChangeConfirmResponse,
    PendingChangeRequest,
    PendingChangeResponse,
)
from .common import ErrorResponse, HealthResponse
from .last_minute import (
    ClassifyRequest,
    ClassifyResponse,
    LastMinuteBlockCreate,
    LastMinuteBlockResponse,
    LastMinuteRuleUpdate,
    LastMinuteSettingsResponse,
    LastMinuteSettingsUpdate,
    OpeningListResponse,
    OpeningResponse,
)
from .working_hours import DayHours, WorkingHoursResponse, WorkingHoursUpdate

__all__ = [
    "BookingCancel",
    "BookingCreate",
    "BookingItemResponse",
    "BookingListResponse",
    "BookingReschedule",
    "BookingResize",
    "BookingResponse",
    "CalendarBlockCreate",
    "CalendarBlockListResponse",
    "CalendarBlockResponse",
    "ClientBookingRequest",
    "ClassifyRequest",
    "ClassifyResponse",
    "ConflictResponse",
    "DayHours",
    "DeletedResponse",
    "ErrorResponse",
    "HealthResponse",
    "LastMinuteBlockCreate",
    "LastMinuteBlockResponse",
    "LastMinuteRuleUpdate",
    "LastMinuteSettingsResponse",
    "LastMinuteSettingsUpdate",
    "OpeningListResponse",
    "OpeningResponse",
    "PendingChangeCancelResponse",
    "PendingChangeConfirm",
    "PendingChangeConfirmResponse",
    "PendingChangeRequest",
    "PendingChangeResponse",
    "WorkingHoursResponse",
    "WorkingHoursUpdate",
]
