# -*- coding: utf-8 -*-
"""
Application Service: WorkflowService

Применяет операции ReviewStateMachine к хранимым статьям:
- per-article блокировка на время перехода
- статья, записи журнала и результат анализа фиксируются одной
  единицей работы (всё или ничего)
- проверка прав ревьюера через внешний IReviewerAuthorization
"""

import logging
from dataclasses import dataclass
from typing import AsyncIterator, Callable, List, Optional
from uuid import UUID

from editorial_review.application.services.article_locks import ArticleLockRegistry
from editorial_review.domain.entities.analysis_result import AnalysisResult
from editorial_review.domain.entities.article import Article
from editorial_review.domain.entities.history_entry import SYSTEM_ACTOR, HistoryEntry
from editorial_review.domain.repositories.unit_of_work import IUnitOfWork
from editorial_review.domain.services.authorization import IReviewerAuthorization
from editorial_review.domain.services.state_machine import ReviewStateMachine
from editorial_review.domain.value_objects.review_decision import ReviewDecision
from editorial_review.shared.exceptions.domain_exceptions import (
    EntityNotFoundError,
    ForbiddenActionError,
    InvalidTransitionError,
)
from editorial_review.shared.exceptions.infrastructure_exceptions import PersistenceFailureError

logger = logging.getLogger(__name__)

UnitOfWorkFactory = Callable[[], IUnitOfWork]


@dataclass
class ArticleReviewState:
    """Статус статьи вместе с активным результатом анализа."""

    article: Article
    latest_analysis: Optional[AnalysisResult] = None


class WorkflowService:
    """
    Application Service переходов статуса.

    Координирует ReviewStateMachine, репозитории и авторизацию.
    """

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        authorization: IReviewerAuthorization,
        locks: Optional[ArticleLockRegistry] = None,
    ):
        self.uow_factory = uow_factory
        self.authorization = authorization
        self.locks = locks or ArticleLockRegistry()

    # =========================================================================
    # Переходы
    # =========================================================================

    async def submit(self, article_id: UUID, performed_by: str = SYSTEM_ACTOR) -> Article:
        """DRAFT → SUBMITTED_FOR_APPROVAL → UNDER_AI_REVIEW."""
        return await self._transition(
            article_id, "submit", lambda m: m.submit(performed_by)
        )

    async def apply_analysis(self, article_id: UUID, result: AnalysisResult) -> Article:
        """UNDER_AI_REVIEW → AI_APPROVED / AI_REJECTED / MANUAL_REVIEW_REQUIRED."""
        return await self._transition(
            article_id, "apply_analysis", lambda m: m.apply_analysis(result), analysis=result
        )

    async def reanalyze(self, article_id: UUID, performed_by: str, reason: str = "") -> Article:
        """Явный возврат в UNDER_AI_REVIEW."""
        return await self._transition(
            article_id, "reanalyze", lambda m: m.reanalyze(performed_by, reason)
        )

    async def manual_decide(
        self,
        article_id: UUID,
        decision: ReviewDecision,
        performed_by: str,
        reason: str,
        notes: Optional[str] = None,
    ) -> Article:
        """Ручное решение ревьюера (AI_REJECTED / MANUAL_REVIEW_REQUIRED)."""
        return await self._transition(
            article_id,
            "manual_decide",
            lambda m: m.manual_decide(decision, performed_by, reason, notes),
            reviewer=performed_by,
        )

    async def confirm_approval(self, article_id: UUID, performed_by: str, reason: str = "") -> Article:
        """AI_APPROVED → APPROVED."""
        return await self._transition(
            article_id,
            "confirm_approval",
            lambda m: m.confirm_approval(performed_by, reason),
            reviewer=performed_by,
        )

    async def escalate(self, article_id: UUID, performed_by: str, reason: str) -> Article:
        """AI_REJECTED → MANUAL_REVIEW_REQUIRED."""
        return await self._transition(
            article_id,
            "escalate",
            lambda m: m.escalate(performed_by, reason),
            reviewer=performed_by,
        )

    async def publish(self, article_id: UUID, performed_by: str = SYSTEM_ACTOR) -> Article:
        """AI_APPROVED / APPROVED → PUBLISHED."""
        return await self._transition(
            article_id, "publish", lambda m: m.publish(performed_by)
        )

    async def archive(self, article_id: UUID, performed_by: str = SYSTEM_ACTOR, reason: str = "") -> Article:
        """PUBLISHED / REJECTED → ARCHIVED."""
        return await self._transition(
            article_id, "archive", lambda m: m.archive(performed_by, reason)
        )

    # =========================================================================
    # Чтение
    # =========================================================================

    async def get_article(self, article_id: UUID) -> Article:
        async with self.uow_factory() as uow:
            return await self._load(uow, article_id)

    async def get_review_state(self, article_id: UUID) -> ArticleReviewState:
        """Статус статьи + последний результат анализа."""
        async with self.uow_factory() as uow:
            article = await self._load(uow, article_id)
            latest = await uow.analyses.find_latest(article_id)
            return ArticleReviewState(article=article, latest_analysis=latest)

    async def get_latest_analysis(self, article_id: UUID) -> AnalysisResult:
        async with self.uow_factory() as uow:
            article = await self._load(uow, article_id)
            latest = await uow.analyses.find_latest(article_id)
            if latest is None:
                raise EntityNotFoundError(
                    f"No analysis result for article {article_id}",
                    current_status=article.status.value,
                )
            return latest

    async def get_history(self, article_id: UUID) -> List[HistoryEntry]:
        """Полный журнал статьи в порядке создания."""
        async with self.uow_factory() as uow:
            await self._load(uow, article_id)
            return await uow.history.list_for(article_id)

    async def iter_history(self, article_id: UUID, after_sequence: int = 0) -> AsyncIterator[HistoryEntry]:
        """Ленивый обход журнала, начиная после after_sequence."""
        async with self.uow_factory() as uow:
            await self._load(uow, article_id)
            async for entry in uow.history.iter_for(article_id, after_sequence=after_sequence):
                yield entry

    # =========================================================================
    # Внутреннее
    # =========================================================================

    async def _transition(
        self,
        article_id: UUID,
        operation: str,
        apply: Callable[[ReviewStateMachine], object],
        analysis: Optional[AnalysisResult] = None,
        reviewer: Optional[str] = None,
    ) -> Article:
        async with self.locks.hold(article_id):
            async with self.uow_factory() as uow:
                article = await self._load(uow, article_id, for_update=True)
                committed_status = article.status

                if reviewer is not None and not await self.authorization.can_review(reviewer):
                    logger.warning(f"[Workflow] {operation} denied for '{reviewer}' on article {article_id}")
                    raise ForbiddenActionError(reviewer, operation, current_status=committed_status.value)

                machine = ReviewStateMachine(article, await uow.history.next_sequence(article_id))
                try:
                    apply(machine)
                except InvalidTransitionError as e:
                    logger.info(f"[Workflow] {operation} rejected: {e}")
                    raise

                try:
                    await uow.articles.update(article)
                    for entry in machine.pending_entries:
                        await uow.history.append(entry)
                    if analysis is not None:
                        await uow.analyses.add(analysis)
                    await uow.commit()
                except PersistenceFailureError as e:
                    e.current_status = committed_status.value
                    logger.error(f"[Workflow] {operation} not committed for article {article_id}: {e}")
                    raise

        path = " → ".join(
            [committed_status.value] + [entry.to_status.value for entry in machine.pending_entries]
        )
        logger.info(f"[Workflow] Article {article_id} {operation}: {path}")
        return article

    @staticmethod
    async def _load(uow: IUnitOfWork, article_id: UUID, for_update: bool = False) -> Article:
        article = await uow.articles.find_by_id(article_id, for_update=for_update)
        if article is None:
            raise EntityNotFoundError(f"Article {article_id} not found")
        return article
