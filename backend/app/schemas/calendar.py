"""Calendar blocks and the propose/confirm change protocol."""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field, model_validator

from ..domain.intervals import Commitment
from ..models.calendar_block import CalendarBlock
from ._strict_base import StrictModel, StrictRequestModel
from .booking import BookingResponse


class PendingChangeRequest(StrictRequestModel):
    """A proposed move or resize of a booking or calendar block."""

    entity_type: Literal["booking", "block"]
    entity_id: str = Field(..., min_length=1)
    kind: Literal["move", "resize"]
    next_start: Optional[datetime] = None
    next_duration_minutes: Optional[int] = Field(None, ge=0)

    @model_validator(mode="after")
    def check_target(self) -> "PendingChangeRequest":
        if self.kind == "move" and self.next_start is None:
            raise ValueError("nextStart is required for a move")
        if self.kind == "resize" and self.next_duration_minutes is None:
            raise ValueError("nextDurationMinutes is required for a resize")
        return self


class PendingChangeConfirm(PendingChangeRequest):
    allow_outside_hours: bool = False


class ConflictResponse(StrictModel):
    kind: str
    id: str
    start: datetime
    end: datetime
    label: Optional[str] = None

    @classmethod
    def from_commitment(cls, commitment: Commitment) -> "ConflictResponse":
        return cls(
            kind=commitment.kind,
            id=commitment.id,
            start=commitment.interval.start,
            end=commitment.interval.end,
            label=commitment.label,
        )


class PendingChangeResponse(StrictModel):
    ok: bool
    requires_confirmation: bool
    outside_working_hours: bool
    conflicts: List[ConflictResponse] = Field(default_factory=list)
    start: datetime
    end: datetime


class PendingChangeCancelResponse(StrictModel):
    cancelled: bool = True


class CalendarBlockCreate(StrictRequestModel):
    start_at: datetime
    end_at: datetime
    note: Optional[str] = Field(None, max_length=500)

    @model_validator(mode="after")
    def check_order(self) -> "CalendarBlockCreate":
        if self.end_at <= self.start_at:
            raise ValueError("endAt must be after startAt")
        return self


class CalendarBlockResponse(StrictModel):
    id: str
    start_at: datetime
    end_at: datetime
    note: Optional[str] = None

    @classmethod
    def from_block(cls, block: CalendarBlock) -> "CalendarBlockResponse":
        return cls(id=block.id, start_at=block.start_at, end_at=block.end_at, note=block.note)


class CalendarBlockListResponse(StrictModel):
    blocks: List[CalendarBlockResponse]


class DeletedResponse(StrictModel):
    deleted: bool = True
    id: str


class PendingChangeConfirmResponse(StrictModel):
    entity_type: Literal["booking", "block"]
    booking: Optional[BookingResponse] = None
    block: Optional[CalendarBlockResponse] = None
