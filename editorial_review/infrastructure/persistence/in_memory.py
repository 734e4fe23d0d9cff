# -*- coding: utf-8 -*-
"""
Хранилище в памяти.

Используется при PERSISTENCE_BACKEND=memory и в тестах. Записи единицы
работы копятся в staging-области и переносятся в InMemoryStore только в
commit(), поэтому статья и журнал фиксируются вместе или не фиксируются.
Все чтения возвращают копии: изменение сущности вне commit() не влияет
на хранилище.
"""

import asyncio
import copy
from dataclasses import dataclass, field
from typing import Dict, List, Optional
from uuid import UUID

from editorial_review.domain.entities.analysis_result import AnalysisResult
from editorial_review.domain.entities.article import Article
from editorial_review.domain.entities.history_entry import HistoryEntry
from editorial_review.domain.repositories.analysis_repository import IAnalysisResultRepository
from editorial_review.domain.repositories.article_repository import IArticleRepository
from editorial_review.domain.repositories.history_repository import (
    DEFAULT_BATCH_SIZE,
    IHistoryRepository,
)
from editorial_review.domain.repositories.unit_of_work import IUnitOfWork
from editorial_review.domain.value_objects.article_status import ArticleStatus
from editorial_review.shared.exceptions.infrastructure_exceptions import PersistenceFailureError


@dataclass
class InMemoryStore:
    """Зафиксированное состояние (общее для всех единиц работы)."""

    articles: Dict[UUID, Article] = field(default_factory=dict)
    history: Dict[UUID, List[HistoryEntry]] = field(default_factory=dict)
    analyses: Dict[UUID, List[AnalysisResult]] = field(default_factory=dict)


class InMemoryArticleRepository(IArticleRepository):

    def __init__(self, store: InMemoryStore):
        self.store = store
        self.staged: Dict[UUID, Article] = {}

    async def add(self, article: Article) -> Article:
        if article.id in self.store.articles or article.id in self.staged:
            raise PersistenceFailureError(f"Article {article.id} already exists")
        self.staged[article.id] = copy.deepcopy(article)
        return article

    async def update(self, article: Article) -> Article:
        if article.id not in self.store.articles and article.id not in self.staged:
            raise PersistenceFailureError(f"Article {article.id} disappeared from storage")
        self.staged[article.id] = copy.deepcopy(article)
        return article

    async def find_by_id(self, article_id: UUID, for_update: bool = False) -> Optional[Article]:
        article = self.staged.get(article_id) or self.store.articles.get(article_id)
        return copy.deepcopy(article) if article else None

    async def find_all(self, status: Optional[ArticleStatus] = None) -> List[Article]:
        merged = {**self.store.articles, **self.staged}
        articles = [a for a in merged.values() if status is None or a.status == status]
        articles.sort(key=lambda a: a.created_at, reverse=True)
        return copy.deepcopy(articles)


class InMemoryHistoryRepository(IHistoryRepository):

    def __init__(self, store: InMemoryStore):
        self.store = store
        self.staged: List[HistoryEntry] = []

    async def append(self, entry: HistoryEntry) -> HistoryEntry:
        existing = await self.last_for(entry.article_id)
        if existing and existing.sequence >= entry.sequence:
            raise PersistenceFailureError(
                f"History entry #{entry.sequence} for article {entry.article_id} already exists"
            )
        self.staged.append(entry)
        return entry

    def _entries(self, article_id: UUID) -> List[HistoryEntry]:
        entries = list(self.store.history.get(article_id, []))
        entries.extend(e for e in self.staged if e.article_id == article_id)
        return entries

    async def fetch_batch(
        self,
        article_id: UUID,
        after_sequence: int = 0,
        limit: int = DEFAULT_BATCH_SIZE,
    ) -> List[HistoryEntry]:
        entries = [e for e in self._entries(article_id) if e.sequence > after_sequence]
        entries.sort(key=lambda e: e.sequence)
        return entries[:limit]

    async def last_for(self, article_id: UUID) -> Optional[HistoryEntry]:
        entries = self._entries(article_id)
        return max(entries, key=lambda e: e.sequence) if entries else None


class InMemoryAnalysisResultRepository(IAnalysisResultRepository):

    def __init__(self, store: InMemoryStore):
        self.store = store
        self.staged: List[AnalysisResult] = []

    async def add(self, result: AnalysisResult) -> AnalysisResult:
        self.staged.append(result)
        return result

    async def find_latest(self, article_id: UUID) -> Optional[AnalysisResult]:
        results = await self.find_all_for(article_id)
        return results[-1] if results else None

    async def find_all_for(self, article_id: UUID) -> List[AnalysisResult]:
        results = list(self.store.analyses.get(article_id, []))
        results.extend(r for r in self.staged if r.article_id == article_id)
        results.sort(key=lambda r: r.analyzed_at)
        return results


class InMemoryUnitOfWork(IUnitOfWork):
    """Unit of Work поверх InMemoryStore."""

    def __init__(self, store: InMemoryStore):
        self.store = store
        self.articles = InMemoryArticleRepository(store)
        self.history = InMemoryHistoryRepository(store)
        self.analyses = InMemoryAnalysisResultRepository(store)

    async def commit(self) -> None:
        await asyncio.sleep(0)
        for article_id, article in self.articles.staged.items():
            self.store.articles[article_id] = article
        for entry in self.history.staged:
            self.store.history.setdefault(entry.article_id, []).append(entry)
        for result in self.analyses.staged:
            self.store.analyses.setdefault(result.article_id, []).append(result)
        self._clear()

    async def rollback(self) -> None:
        self._clear()

    def _clear(self) -> None:
        self.articles.staged = {}
        self.history.staged = []
        self.analyses.staged = []
