"""
Tests для ReviewOrchestrator с подменённым движком анализа.
"""

import asyncio
from unittest.mock import AsyncMock, call

import pytest

from conftest import REVIEWER, FakeAnalysisEngine, scores
from editorial_review.application.services.retry_policy import RetryPolicy
from editorial_review.application.services.review_orchestrator import ReviewOrchestrator
from editorial_review.domain.entities.history_entry import SYSTEM_ACTOR
from editorial_review.domain.services.decision_policy import DecisionPolicy
from editorial_review.domain.value_objects.article_status import ArticleStatus
from editorial_review.domain.value_objects.review_action import ReviewAction
from editorial_review.domain.value_objects.review_decision import ReviewDecision
from editorial_review.shared.exceptions.domain_exceptions import (
    BusinessRuleViolation,
    InvalidTransitionError,
)
from editorial_review.shared.exceptions.infrastructure_exceptions import (
    AnalysisEngineError,
    AnalysisUnavailableError,
)

S = ArticleStatus


def blocking_response():
    """Ответ движка, который никогда не приходит."""
    never = asyncio.Event()

    async def _wait(article):
        await never.wait()

    return _wait


@pytest.fixture
def sleep():
    return AsyncMock()


@pytest.fixture
def make_orchestrator(workflow, sleep):
    def _make(*responses, **retry):
        engine = FakeAnalysisEngine(responses)
        orchestrator = ReviewOrchestrator(
            workflow,
            engine,
            DecisionPolicy(),
            retry_policy=RetryPolicy(**{"timeout_seconds": 5.0, **retry}),
            sleep=sleep,
        )
        return orchestrator, engine

    return _make


@pytest.mark.asyncio
async def test_end_to_end_approval_and_publish(make_orchestrator, workflow, create_draft):
    """Тест - DRAFT → анализ (0.85, все 0.7) → AI_APPROVED → PUBLISHED."""
    orchestrator, engine = make_orchestrator(scores(0.85, 0.7))
    article = await create_draft()

    outcome = await orchestrator.submit_for_review(article.id)

    assert outcome.pending is False
    assert outcome.article.status == S.AI_APPROVED
    assert outcome.analysis.decision == ReviewDecision.APPROVED
    history = await workflow.get_history(article.id)
    assert [e.to_status for e in history] == [S.SUBMITTED_FOR_APPROVAL, S.UNDER_AI_REVIEW, S.AI_APPROVED]
    assert history[-1].performed_by == SYSTEM_ACTOR
    assert history[-1].confidence_score == 0.85

    published = await workflow.publish(article.id)

    assert published.status == S.PUBLISHED
    assert published.published_at is not None
    assert (await workflow.get_history(article.id))[-1].to_status == S.PUBLISHED
    assert len(engine.calls) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("response, status", [
    (scores(0.2, 0.9), S.AI_REJECTED),
    (scores(0.9, 0.9, readability_score=0.1), S.MANUAL_REVIEW_REQUIRED),
    (scores(0.6, 0.9), S.MANUAL_REVIEW_REQUIRED),
])
async def test_policy_decides_status(make_orchestrator, create_draft, response, status):
    """Тест - статус определяется политикой, а не движком."""
    orchestrator, _ = make_orchestrator(response)
    article = await create_draft()

    outcome = await orchestrator.submit_for_review(article.id)

    assert outcome.article.status == status


@pytest.mark.asyncio
async def test_transient_failures_are_retried(make_orchestrator, create_draft, sleep):
    """Тест - временные ошибки повторяются с экспоненциальной паузой."""
    orchestrator, engine = make_orchestrator(
        AnalysisEngineError("HTTP 503"),
        AnalysisEngineError("HTTP 503"),
        scores(0.9, 0.9),
    )
    article = await create_draft()

    outcome = await orchestrator.submit_for_review(article.id)

    assert outcome.article.status == S.AI_APPROVED
    assert len(engine.calls) == 3
    assert sleep.await_args_list == [call(1.0), call(2.0)]


@pytest.mark.asyncio
async def test_retries_exhausted(make_orchestrator, workflow, create_draft):
    """Тест - после всех попыток статья остаётся в UNDER_AI_REVIEW."""
    orchestrator, engine = make_orchestrator(*[AnalysisEngineError("HTTP 502")] * 3)
    article = await create_draft()

    with pytest.raises(AnalysisUnavailableError) as exc_info:
        await orchestrator.submit_for_review(article.id)

    assert exc_info.value.attempts == 3
    assert exc_info.value.current_status == "UNDER_AI_REVIEW"
    assert (await workflow.get_article(article.id)).status == S.UNDER_AI_REVIEW
    assert len(await workflow.get_history(article.id)) == 2


@pytest.mark.asyncio
async def test_timeout_keeps_article_waiting(make_orchestrator, workflow, create_draft):
    """Тест - таймаут не меняет статус."""
    slow = blocking_response()
    orchestrator, engine = make_orchestrator(slow, slow, timeout_seconds=0.05, max_attempts=2)
    article = await create_draft()

    with pytest.raises(AnalysisUnavailableError) as exc_info:
        await orchestrator.submit_for_review(article.id)

    assert "timed out" in exc_info.value.last_error
    assert len(engine.calls) == 2
    assert (await workflow.get_article(article.id)).status == S.UNDER_AI_REVIEW


@pytest.mark.asyncio
async def test_permanent_failure_is_not_retried(make_orchestrator, create_draft, sleep):
    """Тест - постоянная ошибка не повторяется."""
    orchestrator, engine = make_orchestrator(AnalysisEngineError("HTTP 400", permanent=True))
    article = await create_draft()

    with pytest.raises(AnalysisUnavailableError) as exc_info:
        await orchestrator.submit_for_review(article.id)

    assert exc_info.value.attempts == 1
    assert len(engine.calls) == 1
    sleep.assert_not_awaited()


@pytest.mark.asyncio
async def test_unexpected_engine_error_is_retried(make_orchestrator, workflow, create_draft, sleep):
    """Тест - неожиданное исключение движка повторяется и даёт типизированную ошибку."""
    orchestrator, engine = make_orchestrator(
        UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid start byte"),
        ValueError("broken payload"),
        max_attempts=2,
    )
    article = await create_draft()

    with pytest.raises(AnalysisUnavailableError) as exc_info:
        await orchestrator.submit_for_review(article.id)

    assert exc_info.value.attempts == 2
    assert exc_info.value.current_status == "UNDER_AI_REVIEW"
    assert "ValueError" in exc_info.value.last_error
    assert len(engine.calls) == 2
    assert sleep.await_args_list == [call(1.0)]
    assert (await workflow.get_article(article.id)).status == S.UNDER_AI_REVIEW


@pytest.mark.asyncio
async def test_retry_pending_analysis(make_orchestrator, workflow, create_draft):
    """Тест - повтор анализа для статьи, ожидающей в UNDER_AI_REVIEW."""
    orchestrator, _ = make_orchestrator(
        AnalysisEngineError("down", permanent=True),
        scores(0.9, 0.9),
    )
    article = await create_draft()
    with pytest.raises(AnalysisUnavailableError):
        await orchestrator.submit_for_review(article.id)

    outcome = await orchestrator.retry_pending_analysis(article.id)

    assert outcome.article.status == S.AI_APPROVED
    assert len(await workflow.get_history(article.id)) == 3


@pytest.mark.asyncio
async def test_retry_pending_requires_waiting_article(make_orchestrator, create_draft):
    """Тест - повтор только из UNDER_AI_REVIEW."""
    orchestrator, _ = make_orchestrator()
    article = await create_draft()

    with pytest.raises(InvalidTransitionError):
        await orchestrator.retry_pending_analysis(article.id)


@pytest.mark.asyncio
async def test_background_analysis(make_orchestrator, workflow, create_draft):
    """Тест - wait=False возвращает ответ сразу, анализ завершается в фоне."""
    orchestrator, _ = make_orchestrator(scores(0.9, 0.9))
    article = await create_draft()

    outcome = await orchestrator.submit_for_review(article.id, wait=False)

    assert outcome.pending is True
    assert outcome.article.status == S.UNDER_AI_REVIEW
    await orchestrator._tasks[article.id]
    assert (await workflow.get_article(article.id)).status == S.AI_APPROVED
    assert not orchestrator.is_pending(article.id)


@pytest.mark.asyncio
async def test_background_failure_is_recorded(make_orchestrator, workflow, create_draft):
    """Тест - ошибка фонового анализа доступна до следующего запуска."""
    orchestrator, _ = make_orchestrator(
        AnalysisEngineError("HTTP 400", permanent=True),
        scores(0.9, 0.9),
    )
    article = await create_draft()

    await orchestrator.submit_for_review(article.id, wait=False)
    task = orchestrator._tasks[article.id]
    with pytest.raises(AnalysisUnavailableError):
        await task

    failure = orchestrator.last_failure(article.id)
    assert not orchestrator.is_pending(article.id)
    assert failure is not None
    assert failure.current_status == "UNDER_AI_REVIEW"
    assert "HTTP 400" in failure.last_error
    assert (await workflow.get_article(article.id)).status == S.UNDER_AI_REVIEW

    outcome = await orchestrator.retry_pending_analysis(article.id)

    assert outcome.article.status == S.AI_APPROVED
    assert orchestrator.last_failure(article.id) is None


@pytest.mark.asyncio
async def test_cancel_review(make_orchestrator, workflow, create_draft):
    """Тест - отмена фонового анализа оставляет статью в UNDER_AI_REVIEW."""
    orchestrator, _ = make_orchestrator(blocking_response())
    article = await create_draft()
    await orchestrator.submit_for_review(article.id, wait=False)
    await asyncio.sleep(0)

    assert orchestrator.is_pending(article.id)
    assert await orchestrator.cancel_review(article.id) is True
    assert not orchestrator.is_pending(article.id)
    assert await orchestrator.cancel_review(article.id) is False

    history = await workflow.get_history(article.id)
    assert (await workflow.get_article(article.id)).status == S.UNDER_AI_REVIEW
    assert history[-1].to_status == S.UNDER_AI_REVIEW


@pytest.mark.asyncio
async def test_retry_while_pending_is_refused(make_orchestrator, create_draft):
    """Тест - второй анализ не запускается, пока идёт первый."""
    orchestrator, _ = make_orchestrator(blocking_response())
    article = await create_draft()
    await orchestrator.submit_for_review(article.id, wait=False)

    with pytest.raises(BusinessRuleViolation):
        await orchestrator.retry_pending_analysis(article.id)

    await orchestrator.shutdown()


@pytest.mark.asyncio
async def test_shutdown_cancels_background_reviews(make_orchestrator, create_draft):
    """Тест - shutdown отменяет все фоновые анализы."""
    orchestrator, _ = make_orchestrator(blocking_response(), blocking_response())
    first = await create_draft(title="Первая")
    second = await create_draft(title="Вторая")
    await orchestrator.submit_for_review(first.id, wait=False)
    await orchestrator.submit_for_review(second.id, wait=False)

    await orchestrator.shutdown()

    assert not orchestrator.is_pending(first.id)
    assert not orchestrator.is_pending(second.id)


@pytest.mark.asyncio
async def test_manual_analysis_after_rejection(make_orchestrator, workflow, create_draft):
    """Тест - ручной запуск анализа после отклонения."""
    orchestrator, engine = make_orchestrator(scores(0.1, 0.9), scores(0.9, 0.9))
    article = await create_draft()
    await orchestrator.submit_for_review(article.id)

    outcome = await orchestrator.trigger_manual_analysis(article.id, REVIEWER, "Исправлены ошибки")

    assert outcome.article.status == S.AI_APPROVED
    history = await workflow.get_history(article.id)
    assert [e.action for e in history] == [
        ReviewAction.SUBMITTED,
        ReviewAction.AI_ANALYSIS_STARTED,
        ReviewAction.AUTO_REJECTED,
        ReviewAction.REANALYSIS_REQUESTED,
        ReviewAction.AUTO_APPROVED,
    ]
    assert len(engine.calls) == 2


@pytest.mark.asyncio
async def test_manual_analysis_from_draft_submits(make_orchestrator, create_draft):
    """Тест - ручной запуск из DRAFT равен отправке."""
    orchestrator, _ = make_orchestrator(scores(0.9, 0.9))
    article = await create_draft()

    outcome = await orchestrator.trigger_manual_analysis(article.id, REVIEWER)

    assert outcome.article.status == S.AI_APPROVED


@pytest.mark.asyncio
async def test_manual_analysis_refused_while_under_review(make_orchestrator, workflow, create_draft):
    """Тест - ручной запуск недоступен в UNDER_AI_REVIEW."""
    orchestrator, engine = make_orchestrator()
    article = await create_draft()
    await workflow.submit(article.id)

    with pytest.raises(InvalidTransitionError) as exc_info:
        await orchestrator.trigger_manual_analysis(article.id, REVIEWER)

    assert exc_info.value.current_status == "UNDER_AI_REVIEW"
    assert engine.calls == []
