# backend/app/schemas/booking.py
"""
Booking schemas for the salon scheduling platform.

Requests carry UTC instants; naive datetimes are read as UTC. Durations
are minutes and money crosses the wire as decimal strings.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from ..domain.money import format_cents
from ..models.booking import Booking, BookingServiceItem, BookingStatus, LocationType
from ._strict_base import StrictModel, StrictRequestModel


class BookingCreate(StrictRequestModel):
    """Create a booking for one or more services offered by the professional."""

    client_id: str = Field(..., min_length=1, description="Client the booking is for")
    scheduled_for: datetime = Field(..., description="Start instant (UTC)")
    service_ids: List[str] = Field(default_factory=list, description="Services to book")
    location_type: LocationType = LocationType.SALON
    buffer_minutes: Optional[int] = Field(None, ge=0, description="Cleanup time after the service")
    total_duration_minutes: Optional[int] = Field(
        None, ge=0, description="Explicit total; ignored unless on the 15-minute grid"
    )
    allow_outside_hours: bool = False
    notes: Optional[str] = Field(None, max_length=1000)

    @field_validator("service_ids")
    @classmethod
    def strip_blank_ids(cls, value: List[str]) -> List[str]:
        return [service_id.strip() for service_id in value if service_id and service_id.strip()]


class BookingReschedule(StrictRequestModel):
    scheduled_for: datetime
    total_duration_minutes: Optional[int] = Field(None, ge=0)
    buffer_minutes: Optional[int] = Field(None, ge=0)
    allow_outside_hours: bool = False


class BookingResize(StrictRequestModel):
    total_duration_minutes: int = Field(..., ge=0)
    allow_outside_hours: bool = False


class BookingCancel(StrictRequestModel):
    reason: Optional[str] = Field(None, max_length=500)


class BookingItemResponse(StrictModel):
    service_id: str
    service_name: str
    duration_minutes: int
    price: str

    @classmethod
    def from_item(cls, item: BookingServiceItem) -> "BookingItemResponse":
        return cls(
            service_id=item.service_id,
            service_name=item.service_name,
            duration_minutes=item.duration_minutes,
            price=format_cents(item.price_cents) or "0.00",
        )


class BookingResponse(StrictModel):
    id: str
    professional_id: str
    client_id: str
    scheduled_for: datetime
    ends_at: datetime
    total_duration_minutes: int
    buffer_minutes: int
    status: BookingStatus
    location_type: LocationType
    subtotal: str
    notes: Optional[str] = None
    cancellation_reason: Optional[str] = None
    items: List[BookingItemResponse] = Field(default_factory=list)

    @classmethod
    def from_booking(cls, booking: Booking) -> "BookingResponse":
        return cls(
            id=booking.id,
            professional_id=booking.professional_id,
            client_id=booking.client_id,
            scheduled_for=booking.scheduled_for,
            ends_at=booking.ends_at,
            total_duration_minutes=booking.total_duration_minutes,
            buffer_minutes=booking.buffer_minutes,
            status=BookingStatus(booking.status),
            location_type=LocationType(booking.location_type),
            subtotal=format_cents(booking.subtotal_cents) or "0.00",
            notes=booking.notes,
            cancellation_reason=booking.cancellation_reason,
            items=[BookingItemResponse.from_item(item) for item in booking.service_items],
        )


class BookingListResponse(StrictModel):
    bookings: List[BookingResponse]
    total: int


class ClientBookingRequest(StrictRequestModel):
    """A client asking a professional for an appointment."""

    professional_id: str = Field(..., min_length=1)
    scheduled_for: datetime
    service_ids: List[str] = Field(default_factory=list)
    location_type: LocationType = LocationType.SALON
    notes: Optional[str] = Field(None, max_length=1000)

    def to_booking_create(self, client_id: str) -> BookingCreate:
        return BookingCreate(
            client_id=client_id,
            scheduled_for=self.scheduled_for,
            service_ids=self.service_ids,
            location_type=self.location_type,
            notes=self.notes,
        )
