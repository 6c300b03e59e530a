# backend/app/routes/v1/last_minute.py
"""
Last-minute routes - API v1

Endpoints:
    GET /settings            → Current settings (created with defaults on first read)
    PATCH /settings          → Partial update
    PATCH /rules             → Create or update a per-service rule
    POST /blocks             → Add a blackout range
    DELETE /blocks/{block_id} → Remove a blackout range
    POST /classify           → Classify one candidate start
    GET /openings            → Eligible free starts for a service on a local day
"""

from datetime import date, datetime
import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, Query, status

from ...api.dependencies.auth import get_current_professional
from ...api.dependencies.services import get_last_minute_service
from ...core.exceptions import DomainException
from ...errors import handle_domain_exception
from ...models.professional import ProfessionalProfile
from ...schemas.calendar import DeletedResponse
from ...schemas.last_minute import (
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
from ...services.last_minute_service import LastMinuteService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["last-minute-v1"])


@router.get("/settings", response_model=LastMinuteSettingsResponse)
def get_settings(
    professional: ProfessionalProfile = Depends(get_current_professional),
    service: LastMinuteService = Depends(get_last_minute_service),
) -> LastMinuteSettingsResponse:
    return LastMinuteSettingsResponse.from_settings(service.get_settings(professional.id))


@router.patch("/settings", response_model=LastMinuteSettingsResponse)
def update_settings(
    payload: LastMinuteSettingsUpdate = Body(...),
    professional: ProfessionalProfile = Depends(get_current_professional),
    service: LastMinuteService = Depends(get_last_minute_service),
) -> LastMinuteSettingsResponse:
    try:
        settings = service.update_settings(professional.id, payload)
        return LastMinuteSettingsResponse.from_settings(settings)
    except DomainException as exc:
        handle_domain_exception(exc)


@router.patch("/rules", response_model=LastMinuteSettingsResponse)
def upsert_rule(
    payload: LastMinuteRuleUpdate = Body(...),
    professional: ProfessionalProfile = Depends(get_current_professional),
    service: LastMinuteService = Depends(get_last_minute_service),
) -> LastMinuteSettingsResponse:
    try:
        settings = service.upsert_rule(professional.id, payload)
        return LastMinuteSettingsResponse.from_settings(settings)
    except DomainException as exc:
        handle_domain_exception(exc)


@router.post(
    "/blocks", response_model=LastMinuteBlockResponse, status_code=status.HTTP_201_CREATED
)
def add_block(
    payload: LastMinuteBlockCreate = Body(...),
    professional: ProfessionalProfile = Depends(get_current_professional),
    service: LastMinuteService = Depends(get_last_minute_service),
) -> LastMinuteBlockResponse:
    try:
        block = service.add_block(professional.id, payload.start_at, payload.end_at, payload.reason)
        return LastMinuteBlockResponse.from_block(block)
    except DomainException as exc:
        handle_domain_exception(exc)


@router.delete("/blocks/{block_id}", response_model=DeletedResponse)
def delete_block(
    block_id: str,
    professional: ProfessionalProfile = Depends(get_current_professional),
    service: LastMinuteService = Depends(get_last_minute_service),
) -> DeletedResponse:
    try:
        service.delete_block(professional.id, block_id)
        return DeletedResponse(id=block_id)
    except DomainException as exc:
        handle_domain_exception(exc)


@router.post("/classify", response_model=ClassifyResponse)
def classify_opening(
    payload: ClassifyRequest = Body(...),
    professional: ProfessionalProfile = Depends(get_current_professional),
    service: LastMinuteService = Depends(get_last_minute_service),
) -> ClassifyResponse:
    try:
        result = service.classify(
            professional.id,
            payload.start_at,
            now=payload.now,
            service_id=payload.service_id,
            base_price_cents=payload.base_price_cents,
            end_at=payload.end_at,
        )
        return ClassifyResponse.from_classification(result)
    except DomainException as exc:
        handle_domain_exception(exc)


@router.get("/openings", response_model=OpeningListResponse)
def list_openings(
    service_id: str = Query(..., alias="serviceId"),
    day: date = Query(..., description="Local calendar day, YYYY-MM-DD"),
    now: Optional[datetime] = Query(None, description="Evaluation instant; defaults to now"),
    professional: ProfessionalProfile = Depends(get_current_professional),
    service: LastMinuteService = Depends(get_last_minute_service),
) -> OpeningListResponse:
    try:
        openings = service.list_openings(professional.id, service_id, day, now)
        return OpeningListResponse(
            openings=[OpeningResponse.from_opening(opening) for opening in openings]
        )
    except DomainException as exc:
        handle_domain_exception(exc)
