# backend/app/repositories/profile_repository.py
from typing import Optional

from sqlalchemy.orm import Session

from ..models.professional import ClientProfile, ProfessionalProfile
from .base_repository import BaseRepository


class ProfessionalProfileRepository(BaseRepository[ProfessionalProfile]):
    def __init__(self, db: Session):
        super().__init__(db, ProfessionalProfile)

    def lock_for_scheduling(self, professional_id: str) -> Optional[ProfessionalProfile]:
        """
        Row-lock the professional for the rest of the current transaction.

        Concurrent check-then-write sequences for the same professional queue
        behind this lock, so the conflict read that follows sees every commit
        made before it. Returns a freshly loaded profile.
        """
        return (
            self.db.query(ProfessionalProfile)
            .filter(ProfessionalProfile.id == professional_id)
            .populate_existing()
            .with_for_update()
            .one_or_none()
        )


class ClientProfileRepository(BaseRepository[ClientProfile]):
    def __init__(self, db: Session):
        super().__init__(db, ClientProfile)
