"""
Repository Interface: IHistoryRepository

Журнал переходов статусов (append-only).
Операций изменения и удаления нет: исправления — это новые записи.
"""

from abc import ABC, abstractmethod
from typing import AsyncIterator, List, Optional
from uuid import UUID

from editorial_review.domain.entities.history_entry import HistoryEntry

DEFAULT_BATCH_SIZE = 100


class IHistoryRepository(ABC):
    """Интерфейс журнала истории статей."""

    @abstractmethod
    async def append(self, entry: HistoryEntry) -> HistoryEntry:
        """
        Дописать запись в журнал.

        Падает только при недоступности хранилища (PersistenceFailureError).
        """
        pass

    @abstractmethod
    async def fetch_batch(
        self,
        article_id: UUID,
        after_sequence: int = 0,
        limit: int = DEFAULT_BATCH_SIZE,
    ) -> List[HistoryEntry]:
        """
        Получить пачку записей статьи с sequence > after_sequence.

        Args:
            article_id: UUID статьи
            after_sequence: Последний уже полученный номер
            limit: Размер пачки

        Returns:
            Записи, упорядоченные по sequence
        """
        pass

    @abstractmethod
    async def last_for(self, article_id: UUID) -> Optional[HistoryEntry]:
        """Последняя запись журнала статьи или None."""
        pass

    async def iter_for(
        self,
        article_id: UUID,
        after_sequence: int = 0,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> AsyncIterator[HistoryEntry]:
        """
        Ленивый обход журнала статьи в порядке создания.

        Перезапускается с любого места через after_sequence.
        """
        cursor = after_sequence
        while True:
            batch = await self.fetch_batch(article_id, after_sequence=cursor, limit=batch_size)
            for entry in batch:
                yield entry
            if len(batch) < batch_size:
                return
            cursor = batch[-1].sequence

    async def list_for(self, article_id: UUID) -> List[HistoryEntry]:
        """Полный журнал статьи."""
        return [entry async for entry in self.iter_for(article_id)]

    async def next_sequence(self, article_id: UUID) -> int:
        """Номер для следующей записи журнала статьи."""
        last = await self.last_for(article_id)
        return last.sequence + 1 if last else 1
