# backend/app/schemas/availability.py
"""Client-facing day availability."""

from datetime import date, datetime
from typing import List

from ..models.booking import LocationType
from ._strict_base import StrictModel


class DayAvailabilityResponse(StrictModel):
    professional_id: str
    service_id: str
    day: date
    time_zone: str
    location_type: LocationType
    duration_minutes: int
    step_minutes: int
    lead_minutes: int
    slots: List[datetime]
