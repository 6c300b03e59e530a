# backend/app/repositories/notification_repository.py
from typing import List

from sqlalchemy.orm import Session

from ..models.notification import ClientNotification
from .base_repository import BaseRepository


class NotificationRepository(BaseRepository[ClientNotification]):
    def __init__(self, db: Session):
        super().__init__(db, ClientNotification)

    def exists_for_key(self, dedupe_key: str) -> bool:
        return (
            self.db.query(ClientNotification.id)
            .filter(ClientNotification.dedupe_key == dedupe_key)
            .first()
            is not None
        )

    def list_for_client(self, client_id: str) -> List[ClientNotification]:
        query = (
            self.db.query(ClientNotification)
            .filter(ClientNotification.client_id == client_id)
            .order_by(ClientNotification.created_at.desc())
        )
        return self._execute_query(query)
