"""
Unit of Work: IUnitOfWork

Группирует репозитории одной транзакции. Переход статуса, запись журнала
и результат анализа фиксируются вместе через commit() или не фиксируются
вовсе.

Использование:
    async with uow_factory() as uow:
        article = await uow.articles.find_by_id(article_id, for_update=True)
        ...
        await uow.history.append(entry)
        await uow.commit()
"""

from abc import ABC, abstractmethod

from editorial_review.domain.repositories.analysis_repository import IAnalysisResultRepository
from editorial_review.domain.repositories.article_repository import IArticleRepository
from editorial_review.domain.repositories.history_repository import IHistoryRepository


class IUnitOfWork(ABC):
    """Интерфейс единицы работы."""

    articles: IArticleRepository
    history: IHistoryRepository
    analyses: IAnalysisResultRepository

    async def __aenter__(self) -> "IUnitOfWork":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        # Незафиксированные изменения откатываются всегда
        await self.rollback()

    @abstractmethod
    async def commit(self) -> None:
        """Зафиксировать все изменения атомарно."""
        pass

    @abstractmethod
    async def rollback(self) -> None:
        """Отменить незафиксированные изменения."""
        pass
