# backend/app/core/exceptions.py
"""
Domain-specific exceptions for the salon scheduling platform.

These exceptions provide clear, business-focused error messages
that can be caught and handled appropriately at the API layer.
Each one carries a stable ``code`` that clients branch on.
"""

from typing import Any, Dict, Iterable, Optional

from fastapi import HTTPException, status

HTTP_422_UNPROCESSABLE: int = getattr(status, "HTTP_422_UNPROCESSABLE_CONTENT", 422)


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_code: str = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}
        super().__init__(self.message)

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"errorCode": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload

    def to_http_exception(self) -> HTTPException:
        return HTTPException(status_code=self.status_code, detail=self.to_payload())


class ValidationException(DomainException):
    """Raised when request data fails business validation."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "VALIDATION_ERROR"


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    status_code = status.HTTP_404_NOT_FOUND
    default_code = "NOT_FOUND"


class ConflictException(DomainException):
    """Raised when there's a conflict with existing data."""

    status_code = status.HTTP_409_CONFLICT
    default_code = "CONFLICT"


class BusinessRuleException(DomainException):
    """Raised when a business rule is violated."""

    status_code = HTTP_422_UNPROCESSABLE
    default_code = "BUSINESS_RULE_VIOLATION"


# Specific scheduling exceptions


class ServiceNotOfferedException(ValidationException):
    """A requested service is not an active offering for this location type."""

    def __init__(self, service_id: str, location_type: Optional[str] = None):
        message = "One or more services are invalid for this professional."
        if location_type:
            message = f"One or more services are not offered for {location_type.lower()} bookings."
        super().__init__(
            message=message,
            code="SERVICE_NOT_OFFERED",
            details={"service_id": service_id, "location_type": location_type},
        )


class OutsideWorkingHoursException(BusinessRuleException):
    """The interval falls outside the professional's working hours."""

    def __init__(self, message: Optional[str] = None):
        super().__init__(
            message=message or "That time is outside your working hours.",
            code="OUTSIDE_WORKING_HOURS",
        )


class MisconfiguredHoursException(BusinessRuleException):
    """The stored working-hours policy for the weekday cannot be evaluated."""

    def __init__(self, weekday: Optional[str] = None):
        super().__init__(
            message="Your working hours are misconfigured.",
            code="MISCONFIGURED_HOURS",
            details={"weekday": weekday} if weekday else None,
        )


class TimeSlotUnavailableException(ConflictException):
    """The interval overlaps an existing booking or blocked time."""

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        conflicts: Optional[Iterable[Dict[str, Any]]] = None,
    ):
        conflict_list = list(conflicts or [])
        super().__init__(
            message=message or "That time is not available.",
            code="TIME_SLOT_UNAVAILABLE",
            details={"conflicts": conflict_list} if conflict_list else None,
        )
        self.conflicts = conflict_list


class ScheduleLockUnavailableException(DomainException):
    """The schedule lock could not be taken because its store is unreachable."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_code = "SCHEDULE_LOCK_UNAVAILABLE"

    def __init__(self, message: Optional[str] = None):
        super().__init__(
            message=message or "Scheduling is temporarily unavailable. Please try again."
        )


class InvalidTimeZoneException(ValidationException):
    """An IANA time zone identifier could not be resolved."""

    def __init__(self, time_zone: Optional[str]):
        super().__init__(
            message=f"Invalid time zone: {time_zone!r}",
            code="INVALID_TIME_ZONE",
            details={"time_zone": time_zone},
        )


class InvalidStatusTransitionException(BusinessRuleException):
    """A status change is not allowed from the booking's current status."""

    def __init__(self, current: str, target: str):
        super().__init__(
            message=f"Cannot change a {current.lower()} booking to {target.lower()}.",
            code="INVALID_STATUS_TRANSITION",
            details={"current": current, "target": target},
        )


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    This exception is used when data access operations fail,
    such as database connection issues, query failures, or
    constraint violations.
    """
