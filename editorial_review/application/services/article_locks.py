"""
Per-article блокировки.

Не больше одного перехода на статью одновременно; разные статьи
обрабатываются параллельно. Блокировки локальны для процесса; между
процессами строку статьи защищает SELECT ... FOR UPDATE.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict
from uuid import UUID


class ArticleLockRegistry:
    """
    Реестр asyncio.Lock по ID статьи.

    Блокировка живёт, пока у неё есть владелец или ожидающие; после
    последнего hold() она удаляется из реестра.
    """

    def __init__(self):
        self._locks: Dict[UUID, asyncio.Lock] = {}
        self._holders: Dict[UUID, int] = {}

    def active_count(self) -> int:
        """Число статей с владельцем или ожидающими."""
        return len(self._locks)

    @asynccontextmanager
    async def hold(self, article_id: UUID) -> AsyncIterator[None]:
        """Сериализовать доступ к одной статье."""
        lock = self._locks.get(article_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[article_id] = lock
        self._holders[article_id] = self._holders.get(article_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._holders[article_id] -= 1
            if not self._holders[article_id]:
                del self._holders[article_id]
                del self._locks[article_id]
