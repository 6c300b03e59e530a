# backend/app/services/professional_service.py
"""Professional calendar settings: IANA time zone and weekly working hours."""

import logging
from typing import Any, Dict, Optional, Tuple

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import NotFoundException
from ..core.timezone_utils import get_zone, sanitize
from ..database import with_db_retry
from ..domain.working_hours import DEFAULT_WORKING_HOURS, normalize_policy
from ..models.professional import ProfessionalProfile
from ..repositories import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)


class ProfessionalService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)
        self.repository = RepositoryFactory.create_professional_profile_repository(db)

    def get_professional(self, professional_id: str) -> ProfessionalProfile:
        professional = with_db_retry(
            "get_professional",
            lambda: self.repository.get_by_id(professional_id, load_relationships=False),
        )
        if not professional:
            raise NotFoundException("Professional not found", details={"id": professional_id})
        return professional

    def get_working_hours(self, professional_id: str) -> Tuple[str, Dict[str, Dict[str, Any]]]:
        """
        Return ``(time_zone, policy)`` for display.

        A stored zone that no longer resolves is shown as the configured
        default so the editor can still render.
        """
        professional = self.get_professional(professional_id)
        time_zone = sanitize(professional.time_zone, settings.default_time_zone)
        try:
            policy = normalize_policy(professional.working_hours)
        except ValueError:
            self.logger.warning(
                f"Stored working hours for professional {professional_id} are invalid; "
                "showing defaults"
            )
            policy = normalize_policy(DEFAULT_WORKING_HOURS)
        return time_zone, policy

    @BaseService.measure_operation("update_working_hours")
    def update_working_hours(
        self,
        professional_id: str,
        working_hours: Dict[str, Dict[str, Any]],
        time_zone: Optional[str] = None,
    ) -> ProfessionalProfile:
        """
        Replace the weekly policy and optionally the time zone.

        Raises:
            InvalidTimeZoneException: ``time_zone`` is not an IANA id
            ValueError: an enabled day has an invalid window
        """
        if time_zone is not None:
            get_zone(time_zone)
        policy = normalize_policy(working_hours)

        professional = self.get_professional(professional_id)
        with self.transaction():
            professional.working_hours = policy
            if time_zone is not None:
                professional.time_zone = time_zone.strip()

        self.log_operation(
            "update_working_hours",
            professional_id=professional_id,
            time_zone=professional.time_zone,
        )
        return professional
