# backend/app/services/availability_service.py
"""
Availability Service for the salon scheduling platform

Computes the bookable starts a client sees for one service on one local
day. Bookings (with their buffer), calendar blocks and last-minute
blackouts are all busy time; starts inside the lead-time cutoff are
dropped.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone
import logging
from typing import List, Optional, Set

from sqlalchemy.orm import Session

from ..core.exceptions import (
    MisconfiguredHoursException,
    NotFoundException,
    ServiceNotOfferedException,
    ValidationException,
)
from ..core.timezone_utils import WEEKDAY_KEYS, CivilTime, civil_to_utc, ensure_utc, utc_to_civil
from ..domain.duration_grid import normalize_duration
from ..domain.intervals import MAX_COMMITMENT_MINUTES, TimeInterval, find_conflicts
from ..domain.working_hours import (
    DEFAULT_WORKING_HOURS,
    WorkingHoursViolation,
    is_within_working_hours,
    working_window,
)
from ..models.booking import LocationType
from ..models.professional import ProfessionalProfile
from ..models.service import ProfessionalServiceOffering
from ..repositories import RepositoryFactory
from .base import BaseService
from .conflict_checker import ConflictChecker

logger = logging.getLogger(__name__)

DEFAULT_STEP_MINUTES = 30
MIN_STEP_MINUTES = 5
MAX_STEP_MINUTES = 60

DEFAULT_LEAD_MINUTES = 10
MAX_LEAD_MINUTES = 240

MAX_DAYS_AHEAD = 365


def _clamp(value: Optional[int], default: int, low: int, high: int) -> int:
    if value is None:
        return default
    return max(low, min(high, value))


@dataclass
class DaySlots:
    """Bookable starts for one service on one local day."""

    professional_id: str
    service_id: str
    day: date
    time_zone: str
    location_type: str
    duration_minutes: int
    step_minutes: int
    lead_minutes: int
    slots: List[datetime] = field(default_factory=list)


class AvailabilityService(BaseService):
    def __init__(self, db: Session, conflict_checker: Optional[ConflictChecker] = None):
        super().__init__(db)
        self.catalog_repository = RepositoryFactory.create_service_catalog_repository(db)
        self.professional_repository = RepositoryFactory.create_professional_profile_repository(db)
        self.conflict_checker = conflict_checker or ConflictChecker(db)

    def _get_professional(self, professional_id: str) -> ProfessionalProfile:
        professional = self.professional_repository.get_by_id(
            professional_id, load_relationships=False
        )
        if not professional:
            raise NotFoundException("Professional not found", details={"id": professional_id})
        return professional

    @staticmethod
    def _pick_location(
        offering: ProfessionalServiceOffering, requested: Optional[str]
    ) -> str:
        if requested is not None:
            if not offering.offers(requested):
                raise ServiceNotOfferedException(offering.service_id, requested)
            return requested
        if offering.offers(LocationType.SALON.value):
            return LocationType.SALON.value
        return LocationType.MOBILE.value

    @BaseService.measure_operation("day_slots")
    def day_slots(
        self,
        professional_id: str,
        service_id: str,
        day: date,
        location_type: Optional[str] = None,
        now: Optional[datetime] = None,
        *,
        step_minutes: Optional[int] = None,
        lead_minutes: Optional[int] = None,
    ) -> DaySlots:
        """
        Walk the day's working window and keep every free start.

        Args:
            professional_id: Calendar owner
            service_id: Catalog service being booked
            day: Local calendar day in the professional's zone
            location_type: SALON or MOBILE; defaults to salon when offered
            now: Evaluation instant; defaults to the current time
            step_minutes: Spacing between candidate starts, clamped to 5..60
            lead_minutes: Minimum notice before a start, clamped to 0..240

        Returns:
            DaySlots whose ``slots`` are UTC instants in ascending order;
            empty when the day is closed

        Raises:
            NotFoundException: unknown professional
            ServiceNotOfferedException: service not offered, or not at the location
            ValidationException: day in the past or too far ahead
            MisconfiguredHoursException: the day's working-hours rule is broken
        """
        now = ensure_utc(now or datetime.now(timezone.utc))
        professional = self._get_professional(professional_id)
        time_zone = professional.time_zone

        offering = self.catalog_repository.get_offering(professional_id, service_id)
        if offering is None:
            raise ServiceNotOfferedException(service_id)
        location = self._pick_location(offering, location_type)
        duration = normalize_duration(offering.duration_for(location))

        today = utc_to_civil(now, time_zone).date
        days_ahead = (day - today).days
        if days_ahead < 0:
            raise ValidationException("Date is in the past.", details={"day": day.isoformat()})
        if days_ahead > MAX_DAYS_AHEAD:
            raise ValidationException(
                f"You can book up to {MAX_DAYS_AHEAD} days in advance.",
                details={"day": day.isoformat()},
            )

        result = DaySlots(
            professional_id=professional_id,
            service_id=service_id,
            day=day,
            time_zone=time_zone,
            location_type=location,
            duration_minutes=duration,
            step_minutes=_clamp(
                step_minutes, DEFAULT_STEP_MINUTES, MIN_STEP_MINUTES, MAX_STEP_MINUTES
            ),
            lead_minutes=_clamp(lead_minutes, DEFAULT_LEAD_MINUTES, 0, MAX_LEAD_MINUTES),
        )

        hours = professional.working_hours or DEFAULT_WORKING_HOURS
        weekday = WEEKDAY_KEYS[day.weekday()]
        window, reason = working_window(hours, weekday)
        if reason is WorkingHoursViolation.MISCONFIGURED_HOURS:
            raise MisconfiguredHoursException(weekday)
        if window is None:
            return result

        day_start = civil_to_utc(CivilTime.combine(day, time.min), time_zone)
        commitments = self.conflict_checker.load_commitments(
            professional_id,
            day_start - timedelta(minutes=MAX_COMMITMENT_MINUTES),
            day_start + timedelta(days=1, minutes=MAX_COMMITMENT_MINUTES),
        )
        cutoff = now + timedelta(minutes=result.lead_minutes)

        window_start, window_end = window
        seen: Set[datetime] = set()
        for minute in range(window_start, window_end - duration + 1, result.step_minutes):
            civil = CivilTime(day.year, day.month, day.day, minute // 60, minute % 60)
            start = civil_to_utc(civil, time_zone)
            # A spring-forward gap maps two wall times onto one instant.
            if start in seen or start < cutoff:
                continue
            seen.add(start)

            candidate = TimeInterval.from_minutes(start, duration)
            if not is_within_working_hours(candidate, hours, time_zone).ok:
                continue
            if find_conflicts(candidate, commitments):
                continue
            result.slots.append(start)

        self.logger.debug(
            f"{len(result.slots)} slots for professional {professional_id} on {day.isoformat()}"
        )
        return result
