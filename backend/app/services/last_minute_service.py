# backend/app/services/last_minute_service.py
"""
Last-minute openings for a professional.

Settings are read fresh for every evaluation and turned into an
immutable policy snapshot; classification itself lives in
``app.domain.last_minute`` and always receives ``now`` explicitly.
"""

from datetime import date, datetime, time, timedelta, timezone
import logging
from typing import List, Optional, Set

from sqlalchemy.orm import Session

from ..core.booking_lock import schedule_lock
from ..core.exceptions import (
    NotFoundException,
    ServiceNotOfferedException,
    TimeSlotUnavailableException,
    ValidationException,
)
from ..core.timezone_utils import WEEKDAY_KEYS, CivilTime, civil_to_utc, ensure_utc
from ..database import with_db_retry
from ..domain.duration_grid import GRID_MINUTES, normalize_duration
from ..domain.intervals import MAX_COMMITMENT_MINUTES, TimeInterval, find_conflicts
from ..domain.last_minute import (
    Classification,
    LastMinutePolicy,
    Opening,
    ServiceRule,
    clamp_pct,
    classify,
)
from ..domain.working_hours import (
    DEFAULT_WORKING_HOURS,
    is_within_working_hours,
    working_window,
)
from ..models.booking import LocationType
from ..models.last_minute import (
    WEEKDAY_DISABLE_COLUMNS,
    LastMinuteBlock,
    LastMinuteSettings,
)
from ..models.professional import ProfessionalProfile
from ..models.service import ProfessionalServiceOffering
from ..repositories import RepositoryFactory
from ..schemas.last_minute import LastMinuteRuleUpdate, LastMinuteSettingsUpdate
from .base import BaseService
from .conflict_checker import ConflictChecker

logger = logging.getLogger(__name__)


def build_policy(settings: Optional[LastMinuteSettings]) -> LastMinutePolicy:
    """Snapshot persisted settings; a professional without settings is disabled."""
    if settings is None:
        return LastMinutePolicy()
    return LastMinutePolicy(
        enabled=bool(settings.enabled),
        discounts_enabled=bool(settings.discounts_enabled),
        same_day_pct=clamp_pct(settings.window_same_day_pct),
        within_24h_pct=clamp_pct(settings.window_24h_pct),
        min_price_cents=settings.min_price_cents,
        disabled_weekdays=settings.disabled_weekdays,
        service_rules={
            rule.service_id: ServiceRule(
                enabled=bool(rule.enabled), min_price_cents=rule.min_price_cents
            )
            for rule in settings.service_rules
        },
        blocks=tuple(TimeInterval(block.start_at, block.end_at) for block in settings.blocks),
    )


def _booking_location(offering: ProfessionalServiceOffering) -> str:
    if offering.offers(LocationType.SALON.value):
        return LocationType.SALON.value
    return LocationType.MOBILE.value


class LastMinuteService(BaseService):
    def __init__(self, db: Session, conflict_checker: Optional[ConflictChecker] = None):
        super().__init__(db)
        self.repository = RepositoryFactory.create_last_minute_repository(db)
        self.catalog_repository = RepositoryFactory.create_service_catalog_repository(db)
        self.professional_repository = RepositoryFactory.create_professional_profile_repository(db)
        self.conflict_checker = conflict_checker or ConflictChecker(db)

    # Settings

    def get_settings(self, professional_id: str) -> LastMinuteSettings:
        with self.transaction():
            settings = self.repository.get_or_create_settings(professional_id)
        return settings

    @BaseService.measure_operation("update_last_minute_settings")
    def update_settings(
        self, professional_id: str, update: LastMinuteSettingsUpdate
    ) -> LastMinuteSettings:
        provided = update.model_fields_set
        with self.transaction():
            settings = self.repository.get_or_create_settings(professional_id)
            if update.enabled is not None:
                settings.enabled = update.enabled
            if update.discounts_enabled is not None:
                settings.discounts_enabled = update.discounts_enabled
            if update.window_same_day_pct is not None:
                settings.window_same_day_pct = clamp_pct(update.window_same_day_pct)
            if update.window_24h_pct is not None:
                settings.window_24h_pct = clamp_pct(update.window_24h_pct)
            if "min_price" in provided:
                settings.min_price_cents = update.min_price_cents
            if update.disabled_weekdays is not None:
                disabled = set(update.disabled_weekdays)
                for day, column in WEEKDAY_DISABLE_COLUMNS.items():
                    setattr(settings, column, day in disabled)

        self.log_operation(
            "update_last_minute_settings",
            professional_id=professional_id,
            fields=sorted(provided),
        )
        return settings

    @BaseService.measure_operation("upsert_last_minute_rule")
    def upsert_rule(
        self, professional_id: str, update: LastMinuteRuleUpdate
    ) -> LastMinuteSettings:
        if self.catalog_repository.get_by_id(update.service_id, load_relationships=False) is None:
            raise NotFoundException("Service not found", details={"id": update.service_id})

        with self.transaction():
            settings = self.repository.get_or_create_settings(professional_id)
            rule = self.repository.get_rule(settings.id, update.service_id)
            if rule is None:
                rule = self.repository.add_rule(settings, update.service_id)
            if update.enabled is not None:
                rule.enabled = update.enabled
            if "min_price" in update.model_fields_set:
                rule.min_price_cents = update.min_price_cents

        self.log_operation(
            "upsert_last_minute_rule", professional_id=professional_id, service_id=rule.service_id
        )
        return settings

    # Blocks

    @BaseService.measure_operation("add_last_minute_block")
    def add_block(
        self,
        professional_id: str,
        start_at: datetime,
        end_at: datetime,
        reason: Optional[str] = None,
    ) -> LastMinuteBlock:
        start_at, end_at = ensure_utc(start_at), ensure_utc(end_at)
        if end_at <= start_at:
            raise ValidationException("Block must end after it starts.")

        with schedule_lock(professional_id) as acquired:
            if not acquired:
                raise TimeSlotUnavailableException(
                    "Another change to this calendar is in progress. Please try again."
                )
            with self.transaction():
                if not self.professional_repository.lock_for_scheduling(professional_id):
                    raise NotFoundException(
                        "Professional not found", details={"id": professional_id}
                    )
                settings = self.repository.get_or_create_settings(professional_id)
                overlapping = self.repository.find_blocks_overlapping(
                    settings.id, start_at, end_at
                )
                if overlapping:
                    raise TimeSlotUnavailableException(
                        "That range overlaps an existing last-minute block.",
                        conflicts=[
                            {
                                "kind": "last_minute_block",
                                "id": block.id,
                                "start": block.start_at.isoformat(),
                                "end": block.end_at.isoformat(),
                            }
                            for block in overlapping
                        ],
                    )
                block = self.repository.add_block(settings, start_at, end_at, reason)

        self.log_operation("add_last_minute_block", block_id=block.id)
        return block

    @BaseService.measure_operation("delete_last_minute_block")
    def delete_block(self, professional_id: str, block_id: str) -> None:
        settings = self.repository.get_settings(professional_id)
        block = self.repository.get_block(settings.id, block_id) if settings else None
        if block is None:
            raise NotFoundException("Last-minute block not found", details={"id": block_id})
        with self.transaction():
            self.repository.delete_block(block)
        self.log_operation("delete_last_minute_block", block_id=block_id)

    # Evaluation

    def load_policy(self, professional_id: str) -> LastMinutePolicy:
        settings = with_db_retry(
            "get_last_minute_settings", lambda: self.repository.get_settings(professional_id)
        )
        return build_policy(settings)

    def _get_professional(self, professional_id: str) -> ProfessionalProfile:
        professional = self.professional_repository.get_by_id(
            professional_id, load_relationships=False
        )
        if not professional:
            raise NotFoundException("Professional not found", details={"id": professional_id})
        return professional

    @BaseService.measure_operation("classify_opening")
    def classify(
        self,
        professional_id: str,
        start_at: datetime,
        *,
        now: Optional[datetime] = None,
        service_id: Optional[str] = None,
        base_price_cents: Optional[int] = None,
        end_at: Optional[datetime] = None,
    ) -> Classification:
        """
        Classify one candidate start for ``professional_id``.

        When ``service_id`` names an offering, its price and length fill in
        a missing ``base_price_cents`` and ``end_at``, so the price floor is
        enforced and blocks are checked against the whole appointment.
        """
        professional = self._get_professional(professional_id)
        start_at = ensure_utc(start_at)
        if service_id and (base_price_cents is None or end_at is None):
            offering = self.catalog_repository.get_offering(professional_id, service_id)
            if offering is not None:
                location = _booking_location(offering)
                if base_price_cents is None:
                    base_price_cents = offering.price_cents_for(location)
                if end_at is None:
                    end_at = start_at + timedelta(
                        minutes=normalize_duration(offering.duration_for(location))
                    )

        return classify(
            self.load_policy(professional_id),
            start_at,
            ensure_utc(now or datetime.now(timezone.utc)),
            professional.time_zone,
            service_id=service_id,
            base_price_cents=base_price_cents,
            end=ensure_utc(end_at) if end_at else None,
        )

    @BaseService.measure_operation("list_openings")
    def list_openings(
        self,
        professional_id: str,
        service_id: str,
        day: date,
        now: Optional[datetime] = None,
    ) -> List[Opening]:
        """
        Free, eligible starts for ``service_id`` on the local ``day``.

        Starts step through the day's working window on the booking grid;
        a start is kept when the whole appointment fits inside working
        hours, collides with nothing, and classifies as eligible.
        """
        now = ensure_utc(now or datetime.now(timezone.utc))
        professional = self._get_professional(professional_id)
        offering = self.catalog_repository.get_offering(professional_id, service_id)
        if offering is None:
            raise ServiceNotOfferedException(service_id)

        location = _booking_location(offering)
        duration = normalize_duration(offering.duration_for(location))
        base_price = offering.price_cents_for(location)
        hours = professional.working_hours or DEFAULT_WORKING_HOURS
        time_zone = professional.time_zone

        window, reason = working_window(hours, WEEKDAY_KEYS[day.weekday()])
        if window is None:
            self.logger.info(
                f"No working window for professional {professional_id} on {day.isoformat()}",
                extra={"reason": reason.value if reason else None},
            )
            return []

        policy = self.load_policy(professional_id)
        if not policy.enabled:
            return []

        window_start, window_end = window
        day_start = civil_to_utc(CivilTime.combine(day, time.min), time_zone)
        commitments = self.conflict_checker.load_commitments(
            professional_id,
            day_start - timedelta(minutes=MAX_COMMITMENT_MINUTES),
            day_start + timedelta(days=1, minutes=MAX_COMMITMENT_MINUTES),
        )

        openings: List[Opening] = []
        seen: Set[datetime] = set()
        for minute in range(window_start, window_end - duration + 1, GRID_MINUTES):
            civil = CivilTime(day.year, day.month, day.day, minute // 60, minute % 60)
            start = civil_to_utc(civil, time_zone)
            if start in seen:
                continue
            seen.add(start)

            candidate = TimeInterval.from_minutes(start, duration)
            if not is_within_working_hours(candidate, hours, time_zone).ok:
                continue
            if find_conflicts(candidate, commitments):
                continue

            result = classify(
                policy,
                start,
                now,
                time_zone,
                service_id=service_id,
                base_price_cents=base_price,
                end=candidate.end,
            )
            if not result.eligible:
                continue
            openings.append(
                Opening(
                    professional_id=professional_id,
                    service_id=service_id,
                    start_at=candidate.start,
                    end_at=candidate.end,
                    tier=result.tier,  # type: ignore[arg-type]
                    discount_pct=result.discount_pct or 0,
                    base_price_cents=base_price,
                    discounted_price_cents=result.discounted_price_cents,
                )
            )
        return openings
