# backend/app/repositories/last_minute_repository.py
"""Last-minute settings, per-service rules and blackout blocks."""

from datetime import datetime
import logging
from typing import List, Optional

from sqlalchemy.orm import Session, selectinload

from ..models.last_minute import LastMinuteBlock, LastMinuteServiceRule, LastMinuteSettings
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class LastMinuteRepository(BaseRepository[LastMinuteSettings]):
    def __init__(self, db: Session):
        super().__init__(db, LastMinuteSettings)

    def get_settings(self, professional_id: str) -> Optional[LastMinuteSettings]:
        results = self._execute_query(
            self.db.query(LastMinuteSettings)
            .options(
                selectinload(LastMinuteSettings.service_rules),
                selectinload(LastMinuteSettings.blocks),
            )
            .filter(LastMinuteSettings.professional_id == professional_id)
            .populate_existing()
            .limit(1)
        )
        return results[0] if results else None

    def get_or_create_settings(self, professional_id: str) -> LastMinuteSettings:
        settings = self.get_settings(professional_id)
        if settings is None:
            settings = self.create(professional_id=professional_id)
            self.logger.info(
                "Created default last-minute settings",
                extra={"professional_id": professional_id},
            )
        return settings

    def get_rule(self, settings_id: str, service_id: str) -> Optional[LastMinuteServiceRule]:
        return (
            self.db.query(LastMinuteServiceRule)
            .filter(
                LastMinuteServiceRule.settings_id == settings_id,
                LastMinuteServiceRule.service_id == service_id,
            )
            .first()
        )

    def add_rule(self, settings: LastMinuteSettings, service_id: str) -> LastMinuteServiceRule:
        rule = LastMinuteServiceRule(service_id=service_id)
        settings.service_rules.append(rule)
        self.db.flush()
        return rule

    def find_blocks_overlapping(
        self, settings_id: str, start_at: datetime, end_at: datetime
    ) -> List[LastMinuteBlock]:
        query = self.db.query(LastMinuteBlock).filter(
            LastMinuteBlock.settings_id == settings_id,
            LastMinuteBlock.start_at < end_at,
            LastMinuteBlock.end_at > start_at,
        )
        return self._execute_query(query)

    def add_block(
        self,
        settings: LastMinuteSettings,
        start_at: datetime,
        end_at: datetime,
        reason: Optional[str],
    ) -> LastMinuteBlock:
        block = LastMinuteBlock(start_at=start_at, end_at=end_at, reason=reason)
        settings.blocks.append(block)
        self.db.flush()
        return block

    def get_block(self, settings_id: str, block_id: str) -> Optional[LastMinuteBlock]:
        return (
            self.db.query(LastMinuteBlock)
            .filter(LastMinuteBlock.id == block_id, LastMinuteBlock.settings_id == settings_id)
            .first()
        )

    def delete_block(self, block: LastMinuteBlock) -> None:
        self.db.delete(block)
        self.db.flush()
