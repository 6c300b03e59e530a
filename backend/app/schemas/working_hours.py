"""Weekly working hours and the professional's time zone."""

from typing import Dict, Optional

from pydantic import Field, field_validator

from ..domain.working_hours import normalize_policy
from ._strict_base import StrictModel, StrictRequestModel


class DayHours(StrictModel):
    enabled: bool = False
    start: str = Field("09:00", description="HH:MM, local wall clock")
    end: str = Field("17:00", description="HH:MM, local wall clock")


class WorkingHoursUpdate(StrictRequestModel):
    """Replace the weekly policy. Omitted days fall back to the defaults."""

    time_zone: Optional[str] = Field(None, description="IANA zone id, e.g. America/New_York")
    working_hours: Dict[str, DayHours]

    @field_validator("working_hours")
    @classmethod
    def validate_policy(cls, value: Dict[str, DayHours]) -> Dict[str, DayHours]:
        normalized = normalize_policy({day: hours.model_dump() for day, hours in value.items()})
        return {day: DayHours(**rule) for day, rule in normalized.items()}

    def policy(self) -> Dict[str, Dict[str, object]]:
        return {day: hours.model_dump() for day, hours in self.working_hours.items()}


class WorkingHoursResponse(StrictModel):
    time_zone: str
    working_hours: Dict[str, DayHours]
