# backend/app/repositories/service_catalog_repository.py
"""
Service catalog queries: catalog entries and the offerings a
professional sells from them.
"""

import logging
from typing import Dict, Optional, Sequence

from sqlalchemy.orm import Session, joinedload

from ..models.service import ProfessionalServiceOffering, Service
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class ServiceCatalogRepository(BaseRepository[Service]):
    def __init__(self, db: Session):
        super().__init__(db, Service)

    def get_offerings_for_services(
        self, professional_id: str, service_ids: Sequence[str]
    ) -> Dict[str, ProfessionalServiceOffering]:
        """Active offerings of ``professional_id`` keyed by service id."""
        if not service_ids:
            return {}
        query = (
            self.db.query(ProfessionalServiceOffering)
            .options(joinedload(ProfessionalServiceOffering.service))
            .join(Service, ProfessionalServiceOffering.service_id == Service.id)
            .filter(
                ProfessionalServiceOffering.professional_id == professional_id,
                ProfessionalServiceOffering.service_id.in_(list(service_ids)),
                ProfessionalServiceOffering.is_active.is_(True),
                Service.is_active.is_(True),
            )
        )
        return {offering.service_id: offering for offering in self._execute_query(query)}

    def get_offering(
        self, professional_id: str, service_id: str
    ) -> Optional[ProfessionalServiceOffering]:
        return self.get_offerings_for_services(professional_id, [service_id]).get(service_id)
