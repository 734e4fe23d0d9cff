# -*- coding: utf-8 -*-
"""
SQLAlchemy Unit of Work.

Одна AsyncSession на единицу работы: статья, журнал и результаты анализа
фиксируются одной транзакцией.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from editorial_review.domain.repositories.unit_of_work import IUnitOfWork
from editorial_review.infrastructure.persistence.analysis_repository_impl import AnalysisResultRepositoryImpl
from editorial_review.infrastructure.persistence.article_repository_impl import ArticleRepositoryImpl
from editorial_review.infrastructure.persistence.history_repository_impl import HistoryRepositoryImpl
from editorial_review.shared.exceptions.infrastructure_exceptions import PersistenceFailureError

logger = logging.getLogger(__name__)


class SqlAlchemyUnitOfWork(IUnitOfWork):
    """Unit of Work поверх async_sessionmaker."""

    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory
        self.session = None

    async def __aenter__(self) -> "SqlAlchemyUnitOfWork":
        self.session = self.session_factory()
        self.articles = ArticleRepositoryImpl(self.session)
        self.history = HistoryRepositoryImpl(self.session)
        self.analyses = AnalysisResultRepositoryImpl(self.session)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        try:
            await self.rollback()
        finally:
            await self.session.close()

    async def commit(self) -> None:
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            logger.error(f"[UnitOfWork] Commit failed: {e}")
            await self.session.rollback()
            raise PersistenceFailureError(f"Transaction was not committed: {e}") from e

    async def rollback(self) -> None:
        await self.session.rollback()
