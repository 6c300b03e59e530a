# backend/app/routes/v1/calendar.py
"""
Calendar routes - API v1

Interactive edits and personal blocked time under /api/v1/calendar.

Endpoints:
    POST /changes/propose      → Validate a move/resize without writing
    POST /changes/confirm      → Re-validate and commit a proposed change
    POST /changes/cancel       → Abandon a proposal
    GET /blocks                → List blocked time in a range
    POST /blocks               → Block off time
    DELETE /blocks/{block_id}  → Remove blocked time
"""

from datetime import datetime
import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, Query, status

from ...api.dependencies.auth import get_current_professional
from ...api.dependencies.services import (
    get_calendar_block_service,
    get_pending_change_service,
)
from ...core.exceptions import DomainException
from ...errors import handle_domain_exception
from ...models.booking import Booking
from ...models.professional import ProfessionalProfile
from ...schemas.booking import BookingResponse
from ...schemas.calendar import (
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
from ...services.calendar_block_service import CalendarBlockService
from ...services.pending_change_service import PendingChangeService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["calendar-v1"])


@router.post("/changes/propose", response_model=PendingChangeResponse)
def propose_change(
    change: PendingChangeRequest = Body(...),
    professional: ProfessionalProfile = Depends(get_current_professional),
    service: PendingChangeService = Depends(get_pending_change_service),
) -> PendingChangeResponse:
    """
    Check a drag-to-move or drag-to-resize.

    ``ok`` is false when the new interval collides with anything.
    ``requiresConfirmation`` is true when a booking would land outside
    working hours; confirm it with ``allowOutsideHours``.
    """
    try:
        proposal = service.propose(professional.id, change)
    except DomainException as exc:
        handle_domain_exception(exc)
    return PendingChangeResponse(
        ok=proposal.ok,
        requires_confirmation=proposal.requires_confirmation,
        outside_working_hours=proposal.outside_working_hours,
        conflicts=[ConflictResponse.from_commitment(c) for c in proposal.conflicts],
        start=proposal.interval.start,
        end=proposal.interval.end,
    )


@router.post("/changes/confirm", response_model=PendingChangeConfirmResponse)
def confirm_change(
    change: PendingChangeConfirm = Body(...),
    professional: ProfessionalProfile = Depends(get_current_professional),
    service: PendingChangeService = Depends(get_pending_change_service),
) -> PendingChangeConfirmResponse:
    try:
        result = service.confirm(
            professional.id, change, allow_outside_hours=change.allow_outside_hours
        )
    except DomainException as exc:
        handle_domain_exception(exc)

    if isinstance(result, Booking):
        return PendingChangeConfirmResponse(
            entity_type="booking", booking=BookingResponse.from_booking(result)
        )
    return PendingChangeConfirmResponse(
        entity_type="block", block=CalendarBlockResponse.from_block(result)
    )


@router.post("/changes/cancel", response_model=PendingChangeCancelResponse)
def cancel_change(
    change: PendingChangeRequest = Body(...),
    professional: ProfessionalProfile = Depends(get_current_professional),
    service: PendingChangeService = Depends(get_pending_change_service),
) -> PendingChangeCancelResponse:
    return PendingChangeCancelResponse(cancelled=service.cancel(professional.id, change))


@router.get("/blocks", response_model=CalendarBlockListResponse)
def list_blocks(
    start: Optional[datetime] = Query(None),
    end: Optional[datetime] = Query(None),
    professional: ProfessionalProfile = Depends(get_current_professional),
    service: CalendarBlockService = Depends(get_calendar_block_service),
) -> CalendarBlockListResponse:
    blocks = service.list_blocks(professional.id, start, end)
    return CalendarBlockListResponse(
        blocks=[CalendarBlockResponse.from_block(block) for block in blocks]
    )


@router.post("/blocks", response_model=CalendarBlockResponse, status_code=status.HTTP_201_CREATED)
def create_block(
    payload: CalendarBlockCreate = Body(...),
    professional: ProfessionalProfile = Depends(get_current_professional),
    service: CalendarBlockService = Depends(get_calendar_block_service),
) -> CalendarBlockResponse:
    try:
        block = service.create_block(
            professional.id, payload.start_at, payload.end_at, payload.note
        )
        return CalendarBlockResponse.from_block(block)
    except DomainException as exc:
        handle_domain_exception(exc)


@router.delete("/blocks/{block_id}", response_model=DeletedResponse)
def delete_block(
    block_id: str,
    professional: ProfessionalProfile = Depends(get_current_professional),
    service: CalendarBlockService = Depends(get_calendar_block_service),
) -> DeletedResponse:
    try:
        service.delete_block(professional.id, block_id)
        return DeletedResponse(id=block_id)
    except DomainException as exc:
        handle_domain_exception(exc)
