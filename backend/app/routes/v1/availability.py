# backend/app/routes/v1/availability.py
"""
Public availability routes - API v1

Endpoints:
    GET /day → Bookable starts for a professional's service on a local day
"""

from datetime import date, datetime
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ...api.dependencies.services import get_availability_service
from ...core.exceptions import DomainException
from ...errors import handle_domain_exception
from ...models.booking import LocationType
from ...schemas.availability import DayAvailabilityResponse
from ...services.availability_service import AvailabilityService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["availability-v1"])


@router.get("/day", response_model=DayAvailabilityResponse)
def get_day_availability(
    professional_id: str = Query(..., alias="professionalId"),
    service_id: str = Query(..., alias="serviceId"),
    day: date = Query(..., description="Local calendar day, YYYY-MM-DD"),
    location_type: Optional[LocationType] = Query(None, alias="locationType"),
    step_minutes: Optional[int] = Query(None, alias="stepMinutes"),
    lead_minutes: Optional[int] = Query(None, alias="leadMinutes"),
    now: Optional[datetime] = Query(None, description="Evaluation instant; defaults to now"),
    service: AvailabilityService = Depends(get_availability_service),
) -> DayAvailabilityResponse:
    try:
        result = service.day_slots(
            professional_id,
            service_id,
            day,
            location_type.value if location_type else None,
            now,
            step_minutes=step_minutes,
            lead_minutes=lead_minutes,
        )
        return DayAvailabilityResponse(
            professional_id=result.professional_id,
            service_id=result.service_id,
            day=result.day,
            time_zone=result.time_zone,
            location_type=LocationType(result.location_type),
            duration_minutes=result.duration_minutes,
            step_minutes=result.step_minutes,
            lead_minutes=result.lead_minutes,
            slots=result.slots,
        )
    except DomainException as exc:
        handle_domain_exception(exc)
