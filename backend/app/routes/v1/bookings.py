# backend/app/routes/v1/bookings.py
"""
Bookings routes - API v1

Professional-side booking endpoints under /api/v1/bookings.
All business logic delegated to BookingService.

Endpoints:
    GET /                         → List bookings in a range
    POST /                        → Create a booking
    GET /{booking_id}             → Get one booking
    POST /{booking_id}/reschedule → Move (and optionally resize) a booking
    POST /{booking_id}/resize     → Change a booking's length
    POST /{booking_id}/accept     → Accept a pending request
    POST /{booking_id}/complete   → Mark as completed
    POST /{booking_id}/cancel     → Cancel
"""

from datetime import datetime
import logging
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Query, status

from ...api.dependencies.auth import get_current_professional
from ...api.dependencies.services import get_booking_service
from ...core.exceptions import DomainException
from ...errors import handle_domain_exception
from ...models.professional import ProfessionalProfile
from ...schemas.booking import (
    BookingCancel,
    BookingCreate,
    BookingListResponse,
    BookingReschedule,
    BookingResize,
    BookingResponse,
)
from ...services.booking_service import BookingService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["bookings-v1"])


@router.get("", response_model=BookingListResponse)
def list_bookings(
    start: Optional[datetime] = Query(None, description="Only bookings starting at or after"),
    end: Optional[datetime] = Query(None, description="Only bookings starting before"),
    statuses: Optional[List[str]] = Query(None, alias="status"),
    professional: ProfessionalProfile = Depends(get_current_professional),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingListResponse:
    bookings = booking_service.list_bookings(professional.id, start, end, statuses)
    return BookingListResponse(
        bookings=[BookingResponse.from_booking(booking) for booking in bookings],
        total=len(bookings),
    )


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
def create_booking(
    booking_data: BookingCreate = Body(...),
    professional: ProfessionalProfile = Depends(get_current_professional),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    """
    Create a booking on the caller's calendar.

    Professional-created bookings are accepted immediately.
    """
    try:
        booking = booking_service.create_booking(professional.id, booking_data)
        return BookingResponse.from_booking(booking)
    except DomainException as exc:
        handle_domain_exception(exc)


@router.get("/{booking_id}", response_model=BookingResponse)
def get_booking(
    booking_id: str,
    professional: ProfessionalProfile = Depends(get_current_professional),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    try:
        return BookingResponse.from_booking(
            booking_service.get_booking(professional.id, booking_id)
        )
    except DomainException as exc:
        handle_domain_exception(exc)


@router.post("/{booking_id}/reschedule", response_model=BookingResponse)
def reschedule_booking(
    booking_id: str,
    payload: BookingReschedule = Body(...),
    professional: ProfessionalProfile = Depends(get_current_professional),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    try:
        booking = booking_service.reschedule_booking(
            professional.id,
            booking_id,
            payload.scheduled_for,
            payload.total_duration_minutes,
            buffer_minutes=payload.buffer_minutes,
            allow_outside_hours=payload.allow_outside_hours,
        )
        return BookingResponse.from_booking(booking)
    except DomainException as exc:
        handle_domain_exception(exc)


@router.post("/{booking_id}/resize", response_model=BookingResponse)
def resize_booking(
    booking_id: str,
    payload: BookingResize = Body(...),
    professional: ProfessionalProfile = Depends(get_current_professional),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    try:
        booking = booking_service.resize_booking(
            professional.id,
            booking_id,
            payload.total_duration_minutes,
            allow_outside_hours=payload.allow_outside_hours,
        )
        return BookingResponse.from_booking(booking)
    except DomainException as exc:
        handle_domain_exception(exc)


@router.post("/{booking_id}/accept", response_model=BookingResponse)
def accept_booking(
    booking_id: str,
    professional: ProfessionalProfile = Depends(get_current_professional),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    try:
        return BookingResponse.from_booking(
            booking_service.accept_booking(professional.id, booking_id)
        )
    except DomainException as exc:
        handle_domain_exception(exc)


@router.post("/{booking_id}/complete", response_model=BookingResponse)
def complete_booking(
    booking_id: str,
    professional: ProfessionalProfile = Depends(get_current_professional),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    try:
        return BookingResponse.from_booking(
            booking_service.complete_booking(professional.id, booking_id)
        )
    except DomainException as exc:
        handle_domain_exception(exc)


@router.post("/{booking_id}/cancel", response_model=BookingResponse)
def cancel_booking(
    booking_id: str,
    payload: Optional[BookingCancel] = Body(None),
    professional: ProfessionalProfile = Depends(get_current_professional),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    try:
        booking = booking_service.cancel_booking(
            professional.id, booking_id, payload.reason if payload else None
        )
        return BookingResponse.from_booking(booking)
    except DomainException as exc:
        handle_domain_exception(exc)
