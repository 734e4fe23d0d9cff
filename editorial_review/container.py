# -*- coding: utf-8 -*-
"""
Сборка зависимостей приложения.

Один контейнер на процесс: FastAPI хранит его в app.state, CLI создаёт
свой на время команды.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine

from editorial_review.application.handlers.article_command_handler import ArticleCommandHandler
from editorial_review.application.services.article_locks import ArticleLockRegistry
from editorial_review.application.services.article_service import ArticleService
from editorial_review.application.services.review_orchestrator import ReviewOrchestrator
from editorial_review.application.services.workflow_service import WorkflowService
from editorial_review.domain.services.analysis_engine import IAnalysisEngine
from editorial_review.domain.services.decision_policy import DecisionPolicy
from editorial_review.infrastructure.analysis.http_analysis_engine import HttpAnalysisEngine
from editorial_review.infrastructure.auth.static_authorization import StaticReviewerAuthorization
from editorial_review.infrastructure.config.database import create_engine, create_session_factory
from editorial_review.infrastructure.config.settings import Settings
from editorial_review.infrastructure.persistence import (
    InMemoryStore,
    InMemoryUnitOfWork,
    SqlAlchemyUnitOfWork,
)

logger = logging.getLogger(__name__)


@dataclass
class Container:
    """Собранные сервисы приложения."""

    settings: Settings
    workflow: WorkflowService
    orchestrator: ReviewOrchestrator
    articles: ArticleService
    analysis_engine: IAnalysisEngine
    db_engine: Optional[AsyncEngine] = None
    store: Optional[InMemoryStore] = None

    async def start(self) -> None:
        if isinstance(self.analysis_engine, HttpAnalysisEngine):
            await self.analysis_engine.start()

    async def close(self) -> None:
        await self.orchestrator.shutdown()
        if isinstance(self.analysis_engine, HttpAnalysisEngine):
            await self.analysis_engine.close()
        if self.db_engine is not None:
            await self.db_engine.dispose()


def build_container(
    settings: Settings,
    analysis_engine: Optional[IAnalysisEngine] = None,
) -> Container:
    """
    Собрать контейнер по настройкам.

    Аргументы:
        settings: Настройки приложения
        analysis_engine: Движок анализа (по умолчанию HttpAnalysisEngine)
    """
    db_engine = None
    store = None

    if settings.is_memory_backend():
        store = InMemoryStore()
        uow_factory = lambda: InMemoryUnitOfWork(store)  # noqa: E731
        logger.info("[Container] Using in-memory persistence")
    else:
        db_engine = create_engine(settings)
        session_factory = create_session_factory(db_engine)
        uow_factory = lambda: SqlAlchemyUnitOfWork(session_factory)  # noqa: E731
        logger.info("[Container] Using PostgreSQL persistence")

    if analysis_engine is None:
        analysis_engine = HttpAnalysisEngine(
            base_url=settings.analysis_engine_url,
            api_key=settings.analysis_engine_api_key,
            model=settings.analysis_model,
            min_word_count=settings.min_word_count,
            max_word_count=settings.max_word_count,
        )

    locks = ArticleLockRegistry()
    workflow = WorkflowService(
        uow_factory,
        StaticReviewerAuthorization(settings.get_reviewers()),
        locks=locks,
    )
    orchestrator = ReviewOrchestrator(
        workflow,
        analysis_engine,
        DecisionPolicy(settings.get_policy_thresholds()),
        retry_policy=settings.get_retry_policy(),
    )
    articles = ArticleService(
        uow_factory,
        ArticleCommandHandler(uow_factory, locks, workflow),
    )

    return Container(
        settings=settings,
        workflow=workflow,
        orchestrator=orchestrator,
        articles=articles,
        analysis_engine=analysis_engine,
        db_engine=db_engine,
        store=store,
    )
