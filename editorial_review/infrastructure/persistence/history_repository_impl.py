# -*- coding: utf-8 -*-
"""
PostgreSQL реализация журнала истории.

Только INSERT и SELECT: записи журнала никогда не изменяются.
"""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from editorial_review.domain.entities.history_entry import HistoryEntry
from editorial_review.domain.repositories.history_repository import (
    DEFAULT_BATCH_SIZE,
    IHistoryRepository,
)
from editorial_review.domain.value_objects.article_status import ArticleStatus
from editorial_review.domain.value_objects.review_action import ReviewAction
from editorial_review.infrastructure.persistence.models import HistoryEntryModel
from editorial_review.shared.exceptions.infrastructure_exceptions import PersistenceFailureError


class HistoryRepositoryImpl(IHistoryRepository):
    """Журнал переходов в PostgreSQL."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def append(self, entry: HistoryEntry) -> HistoryEntry:
        try:
            self.session.add(self._to_model(entry))
            await self.session.flush()
        except SQLAlchemyError as e:
            raise PersistenceFailureError(
                f"Failed to append history entry #{entry.sequence} for article {entry.article_id}: {e}"
            ) from e
        return entry

    async def fetch_batch(
        self,
        article_id: UUID,
        after_sequence: int = 0,
        limit: int = DEFAULT_BATCH_SIZE,
    ) -> List[HistoryEntry]:
        query = (
            select(HistoryEntryModel)
            .where(HistoryEntryModel.article_id == article_id)
            .where(HistoryEntryModel.sequence > after_sequence)
            .order_by(HistoryEntryModel.sequence)
            .limit(limit)
        )
        try:
            result = await self.session.execute(query)
        except SQLAlchemyError as e:
            raise PersistenceFailureError(f"Failed to read history for article {article_id}: {e}") from e
        return [self._to_entity(m) for m in result.scalars().all()]

    async def last_for(self, article_id: UUID) -> Optional[HistoryEntry]:
        query = (
            select(HistoryEntryModel)
            .where(HistoryEntryModel.article_id == article_id)
            .order_by(HistoryEntryModel.sequence.desc())
            .limit(1)
        )
        try:
            result = await self.session.execute(query)
        except SQLAlchemyError as e:
            raise PersistenceFailureError(f"Failed to read history for article {article_id}: {e}") from e
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    # =========================================================================
    # Маппинг Entity ↔ Model
    # =========================================================================

    @staticmethod
    def _to_model(entry: HistoryEntry) -> HistoryEntryModel:
        return HistoryEntryModel(
            id=entry.id,
            article_id=entry.article_id,
            sequence=entry.sequence,
            action=entry.action.value,
            from_status=entry.from_status.value if entry.from_status else None,
            to_status=entry.to_status.value,
            performed_by=entry.performed_by,
            reason=entry.reason,
            notes=entry.notes,
            entry_metadata=entry.metadata,
            confidence_score=entry.confidence_score,
            ai_model=entry.ai_model,
            processing_time_ms=entry.processing_time_ms,
            created_at=entry.created_at,
        )

    @staticmethod
    def _to_entity(model: HistoryEntryModel) -> HistoryEntry:
        return HistoryEntry(
            id=model.id,
            article_id=model.article_id,
            sequence=model.sequence,
            action=ReviewAction(model.action),
            from_status=ArticleStatus(model.from_status) if model.from_status else None,
            to_status=ArticleStatus(model.to_status),
            performed_by=model.performed_by,
            reason=model.reason or "",
            notes=model.notes,
            metadata=model.entry_metadata or {},
            confidence_score=model.confidence_score,
            ai_model=model.ai_model,
            processing_time_ms=model.processing_time_ms,
            created_at=model.created_at,
        )
