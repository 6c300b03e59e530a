# backend/app/routes/v1/professional.py
"""
Professional calendar settings - API v1

Endpoints:
    GET /working-hours  → Time zone and weekly working hours
    PUT /working-hours  → Replace working hours (and optionally the time zone)
"""

import logging

from fastapi import APIRouter, Body, Depends

from ...api.dependencies.auth import get_current_professional
from ...api.dependencies.services import get_professional_service
from ...core.exceptions import DomainException, ValidationException
from ...errors import handle_domain_exception
from ...models.professional import ProfessionalProfile
from ...schemas.working_hours import DayHours, WorkingHoursResponse, WorkingHoursUpdate
from ...services.professional_service import ProfessionalService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["professional-v1"])


def _response(time_zone: str, policy: dict) -> WorkingHoursResponse:
    return WorkingHoursResponse(
        time_zone=time_zone,
        working_hours={day: DayHours(**rule) for day, rule in policy.items()},
    )


@router.get("/working-hours", response_model=WorkingHoursResponse)
def get_working_hours(
    professional: ProfessionalProfile = Depends(get_current_professional),
    service: ProfessionalService = Depends(get_professional_service),
) -> WorkingHoursResponse:
    time_zone, policy = service.get_working_hours(professional.id)
    return _response(time_zone, policy)


@router.put("/working-hours", response_model=WorkingHoursResponse)
def update_working_hours(
    payload: WorkingHoursUpdate = Body(...),
    professional: ProfessionalProfile = Depends(get_current_professional),
    service: ProfessionalService = Depends(get_professional_service),
) -> WorkingHoursResponse:
    try:
        try:
            service.update_working_hours(professional.id, payload.policy(), payload.time_zone)
        except ValueError as exc:
            raise ValidationException(str(exc)) from exc
        time_zone, policy = service.get_working_hours(professional.id)
        return _response(time_zone, policy)
    except DomainException as exc:
        handle_domain_exception(exc)
