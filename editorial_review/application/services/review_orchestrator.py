# -*- coding: utf-8 -*-
"""
Оркестратор проверки статей.

Сценарии:
- submit_for_review: DRAFT → UNDER_AI_REVIEW → анализ → решение политики
- trigger_manual_analysis: явный повторный анализ
- retry_pending_analysis: повтор анализа для статьи, ожидающей в UNDER_AI_REVIEW
- cancel_review: отмена фонового анализа (статья остаётся в UNDER_AI_REVIEW)

Движок анализа вызывается без per-article блокировки; блокировка берётся
снова только для применения результата. Таймауты, ошибки и отмена статус
не меняют: UNDER_AI_REVIEW — безопасное состояние ожидания.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Optional
from uuid import UUID

from editorial_review.application.services.retry_policy import RetryPolicy
from editorial_review.application.services.workflow_service import WorkflowService
from editorial_review.domain.entities.analysis_result import AnalysisResult
from editorial_review.domain.entities.article import Article
from editorial_review.domain.entities.history_entry import SYSTEM_ACTOR
from editorial_review.domain.services.analysis_engine import IAnalysisEngine
from editorial_review.domain.services.decision_policy import DecisionPolicy
from editorial_review.domain.value_objects.article_status import ArticleStatus
from editorial_review.shared.exceptions.domain_exceptions import (
    BusinessRuleViolation,
    InvalidTransitionError,
)
from editorial_review.shared.exceptions.infrastructure_exceptions import (
    AnalysisEngineError,
    AnalysisUnavailableError,
)

logger = logging.getLogger(__name__)


@dataclass
class ReviewOutcome:
    """
    Результат сценария проверки.

    pending=True: анализ выполняется в фоне, article — состояние на момент
    постановки (UNDER_AI_REVIEW), analysis — None.
    """

    article: Article
    analysis: Optional[AnalysisResult] = None
    pending: bool = False


class ReviewOrchestrator:
    """
    Оркестратор: WorkflowService + внешний движок анализа + DecisionPolicy.
    """

    def __init__(
        self,
        workflow: WorkflowService,
        engine: IAnalysisEngine,
        policy: DecisionPolicy,
        retry_policy: RetryPolicy = RetryPolicy(),
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.workflow = workflow
        self.engine = engine
        self.policy = policy
        self.retry_policy = retry_policy
        self._sleep = sleep
        self._tasks: Dict[UUID, asyncio.Task] = {}
        self._failures: Dict[UUID, AnalysisUnavailableError] = {}

    # =========================================================================
    # Сценарии
    # =========================================================================

    async def submit_for_review(
        self,
        article_id: UUID,
        performed_by: str = SYSTEM_ACTOR,
        wait: bool = True,
    ) -> ReviewOutcome:
        """
        Отправить черновик на проверку.

        Аргументы:
            article_id: ID статьи в DRAFT
            performed_by: Автор отправки
            wait: Дождаться анализа (False — анализ в фоне)

        Исключения:
            InvalidTransitionError: Статья не в DRAFT
            AnalysisUnavailableError: Анализ не получен (только при wait=True)
        """
        article = await self.workflow.submit(article_id, performed_by)
        return await self._analyse(article, wait)

    async def trigger_manual_analysis(
        self,
        article_id: UUID,
        performed_by: str,
        reason: str = "",
        wait: bool = True,
    ) -> ReviewOutcome:
        """
        Запустить анализ вручную.

        Из DRAFT работает как submit_for_review; из решённых нефинальных
        статусов сначала явно возвращает статью в UNDER_AI_REVIEW.
        """
        article = await self.workflow.get_article(article_id)
        if article.status == ArticleStatus.DRAFT:
            return await self.submit_for_review(article_id, performed_by, wait=wait)

        article = await self.workflow.reanalyze(article_id, performed_by, reason)
        return await self._analyse(article, wait)

    async def retry_pending_analysis(self, article_id: UUID, wait: bool = True) -> ReviewOutcome:
        """Повторить анализ для статьи, ожидающей в UNDER_AI_REVIEW."""
        article = await self.workflow.get_article(article_id)
        if article.status != ArticleStatus.UNDER_AI_REVIEW:
            raise InvalidTransitionError(
                article_id,
                article.status.value,
                None,
                allowed=[s.value for s in article.status.allowed_targets()],
                reason="only articles waiting in UNDER_AI_REVIEW can retry analysis",
            )
        if self.is_pending(article_id):
            raise BusinessRuleViolation(
                f"Analysis for article {article_id} is already in progress",
                current_status=article.status.value,
            )
        return await self._analyse(article, wait)

    async def cancel_review(self, article_id: UUID) -> bool:
        """
        Отменить фоновый анализ.

        Статья остаётся в UNDER_AI_REVIEW, отката в SUBMITTED_FOR_APPROVAL нет.

        Возвращает:
            True если был отменён незавершённый анализ
        """
        task = self._tasks.get(article_id)
        if task is None or task.done():
            return False

        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.debug(f"[Orchestrator] Cancelled task for article {article_id} ended with: {e}")
        logger.info(f"[Orchestrator] Review cancelled for article {article_id}")
        return True

    def is_pending(self, article_id: UUID) -> bool:
        """Выполняется ли фоновый анализ статьи."""
        task = self._tasks.get(article_id)
        return task is not None and not task.done()

    def last_failure(self, article_id: UUID) -> Optional[AnalysisUnavailableError]:
        """
        Ошибка последнего анализа статьи.

        Сбрасывается при запуске нового анализа.
        """
        return self._failures.get(article_id)

    async def shutdown(self) -> None:
        """Отменить все фоновые анализы."""
        tasks = [t for t in self._tasks.values() if not t.done()]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.info(f"[Orchestrator] Cancelled {len(tasks)} pending review(s)")
        self._tasks.clear()

    # =========================================================================
    # Анализ
    # =========================================================================

    async def _analyse(self, article: Article, wait: bool) -> ReviewOutcome:
        self._failures.pop(article.id, None)
        if wait:
            return await self._run_analysis(article)

        task = asyncio.create_task(self._run_analysis(article))
        self._tasks[article.id] = task
        task.add_done_callback(lambda t, article_id=article.id: self._on_task_done(article_id, t))
        return ReviewOutcome(article=article, pending=True)

    async def _run_analysis(self, article: Article) -> ReviewOutcome:
        try:
            result = await self._call_engine(article)
        except AnalysisUnavailableError as e:
            self._failures[article.id] = e
            raise
        decision = self.policy.decide(result)
        decided = result.with_decision(decision)

        logger.info(
            f"[Orchestrator] Article {article.id}: confidence={decided.confidence_score:.2f} "
            f"→ {decision.value}"
        )
        updated = await self.workflow.apply_analysis(article.id, decided)
        return ReviewOutcome(article=updated, analysis=decided)

    async def _call_engine(self, article: Article) -> AnalysisResult:
        policy = self.retry_policy
        last_error = ""
        attempt = 0

        for attempt in range(1, policy.max_attempts + 1):
            started = time.monotonic()
            try:
                result = await asyncio.wait_for(
                    self.engine.analyze(article),
                    timeout=policy.timeout_seconds,
                )
                logger.debug(
                    f"[Orchestrator] Analysis for {article.id} took {time.monotonic() - started:.2f}s "
                    f"(attempt {attempt})"
                )
                return result
            except asyncio.TimeoutError:
                last_error = f"timed out after {policy.timeout_seconds}s"
            except AnalysisEngineError as e:
                last_error = str(e)
                if e.permanent:
                    logger.error(f"[Orchestrator] Permanent analysis failure for {article.id}: {e}")
                    break
            except Exception as e:
                # неожиданная ошибка движка считается временной
                last_error = f"{type(e).__name__}: {e}"
                logger.exception(f"[Orchestrator] Unexpected analysis error for {article.id}")

            if attempt < policy.max_attempts:
                delay = policy.delay_for(attempt)
                logger.warning(
                    f"[Orchestrator] Attempt {attempt}/{policy.max_attempts} for {article.id} failed "
                    f"({last_error}), retry in {delay:.1f}s..."
                )
                await self._sleep(delay)

        logger.error(f"[Orchestrator] Analysis unavailable for {article.id}: {last_error}")
        raise AnalysisUnavailableError(
            article.id,
            attempts=attempt,
            last_error=last_error,
            current_status=ArticleStatus.UNDER_AI_REVIEW.value,
        )

    def _on_task_done(self, article_id: UUID, task: asyncio.Task) -> None:
        if self._tasks.get(article_id) is task:
            del self._tasks[article_id]
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"[Orchestrator] Background review for {article_id} failed: {error}")
