# backend/app/routes/v1/client_bookings.py
"""
Client booking requests - API v1

Endpoints:
    POST /  → Request an appointment (starts PENDING, working hours enforced)
"""

import logging

from fastapi import APIRouter, Body, Depends, status

from ...api.dependencies.auth import get_current_client
from ...api.dependencies.services import get_booking_service
from ...core.exceptions import DomainException
from ...errors import handle_domain_exception
from ...models.professional import ClientProfile
from ...schemas.booking import BookingResponse, ClientBookingRequest
from ...services.booking_service import BookingInitiator, BookingService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["client-bookings-v1"])


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
def request_booking(
    payload: ClientBookingRequest = Body(...),
    client: ClientProfile = Depends(get_current_client),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    try:
        booking = booking_service.create_booking(
            payload.professional_id,
            payload.to_booking_create(client.id),
            initiator=BookingInitiator.CLIENT,
        )
        return BookingResponse.from_booking(booking)
    except DomainException as exc:
        handle_domain_exception(exc)
