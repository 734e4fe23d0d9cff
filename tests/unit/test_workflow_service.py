"""
Tests для WorkflowService на хранилище в памяти.
"""

import asyncio
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from conftest import REVIEWER, SECOND_REVIEWER
from editorial_review.application.commands.update_article_command import UpdateArticleCommand
from editorial_review.domain.entities.analysis_result import AnalysisResult
from editorial_review.domain.value_objects.article_status import ArticleStatus
from editorial_review.domain.value_objects.review_action import ReviewAction
from editorial_review.domain.value_objects.review_decision import ReviewDecision
from editorial_review.infrastructure.persistence.in_memory import InMemoryHistoryRepository
from editorial_review.shared.exceptions.domain_exceptions import (
    EntityNotFoundError,
    ForbiddenActionError,
    InvalidTransitionError,
)
from editorial_review.shared.exceptions.infrastructure_exceptions import PersistenceFailureError

S = ArticleStatus


def decided(article_id, decision, confidence=0.5):
    return AnalysisResult(
        article_id=article_id,
        confidence_score=confidence,
        decision=decision,
        ai_model="test-model",
    )


async def article_in(workflow, create_draft, decision):
    """Черновик, прошедший анализ с заданным решением."""
    article = await create_draft()
    await workflow.submit(article.id)
    await workflow.apply_analysis(article.id, decided(article.id, decision))
    return article.id


async def assert_ledger_matches(workflow, article_id):
    article = await workflow.get_article(article_id)
    history = await workflow.get_history(article_id)
    assert history[-1].to_status == article.status
    for previous, current in zip(history, history[1:]):
        assert current.from_status == previous.to_status
    return history


@pytest.mark.asyncio
async def test_created_article_has_no_history(workflow, create_draft):
    """Тест - создание черновика не пишет в журнал."""
    article = await create_draft()

    assert (await workflow.get_article(article.id)).status == S.DRAFT
    assert await workflow.get_history(article.id) == []


@pytest.mark.asyncio
async def test_submit_persists_two_entries(workflow, create_draft):
    """Тест отправки на проверку."""
    article = await create_draft()

    updated = await workflow.submit(article.id, "author@example.com")

    assert updated.status == S.UNDER_AI_REVIEW
    history = await assert_ledger_matches(workflow, article.id)
    assert [e.action for e in history] == [ReviewAction.SUBMITTED, ReviewAction.AI_ANALYSIS_STARTED]
    assert history[0].from_status == S.DRAFT


@pytest.mark.asyncio
async def test_apply_analysis_stores_result(workflow, create_draft):
    """Тест - результат анализа сохраняется вместе с переходом."""
    article = await create_draft()
    await workflow.submit(article.id)
    result = decided(article.id, ReviewDecision.APPROVED, confidence=0.9)

    updated = await workflow.apply_analysis(article.id, result)

    state = await workflow.get_review_state(article.id)
    assert updated.status == S.AI_APPROVED
    assert state.latest_analysis.id == result.id
    assert (await workflow.get_latest_analysis(article.id)).decision == ReviewDecision.APPROVED
    await assert_ledger_matches(workflow, article.id)


@pytest.mark.asyncio
async def test_second_analysis_rejected(workflow, create_draft):
    """Тест - второй результат без reanalyze отклоняется."""
    article_id = await article_in(workflow, create_draft, ReviewDecision.APPROVED)

    with pytest.raises(InvalidTransitionError) as exc_info:
        await workflow.apply_analysis(article_id, decided(article_id, ReviewDecision.REJECTED))

    assert exc_info.value.current_status == "AI_APPROVED"
    assert len(await workflow.get_history(article_id)) == 3


@pytest.mark.asyncio
async def test_manual_decide_by_reviewer(workflow, create_draft):
    """Тест ручного решения."""
    article_id = await article_in(workflow, create_draft, ReviewDecision.MANUAL_REVIEW_REQUIRED)

    article = await workflow.manual_decide(
        article_id, ReviewDecision.APPROVED, REVIEWER, "Проверено", notes="ok"
    )

    history = await assert_ledger_matches(workflow, article_id)
    assert article.status == S.APPROVED
    assert article.approved_by == REVIEWER
    assert history[-1].performed_by == REVIEWER
    assert history[-1].notes == "ok"


@pytest.mark.asyncio
async def test_manual_decide_forbidden_for_non_reviewer(workflow, create_draft):
    """Тест - не-ревьюер не принимает решений."""
    article_id = await article_in(workflow, create_draft, ReviewDecision.MANUAL_REVIEW_REQUIRED)

    with pytest.raises(ForbiddenActionError) as exc_info:
        await workflow.manual_decide(article_id, ReviewDecision.APPROVED, "stranger", "let me in")

    assert exc_info.value.current_status == "MANUAL_REVIEW_REQUIRED"
    assert (await workflow.get_article(article_id)).status == S.MANUAL_REVIEW_REQUIRED
    assert len(await workflow.get_history(article_id)) == 3


@pytest.mark.asyncio
async def test_concurrent_manual_decisions(workflow, create_draft):
    """Тест - из двух одновременных решений проходит ровно одно."""
    article_id = await article_in(workflow, create_draft, ReviewDecision.MANUAL_REVIEW_REQUIRED)

    results = await asyncio.gather(
        workflow.manual_decide(article_id, ReviewDecision.APPROVED, REVIEWER, "Одобряю"),
        workflow.manual_decide(article_id, ReviewDecision.REJECTED, SECOND_REVIEWER, "Отклоняю"),
        return_exceptions=True,
    )

    succeeded = [r for r in results if not isinstance(r, Exception)]
    failed = [r for r in results if isinstance(r, Exception)]
    assert len(succeeded) == 1
    assert len(failed) == 1
    assert isinstance(failed[0], InvalidTransitionError)
    assert failed[0].current_status == succeeded[0].status.value

    history = await assert_ledger_matches(workflow, article_id)
    decisions = [e for e in history if e.action in (ReviewAction.MANUALLY_APPROVED, ReviewAction.MANUALLY_REJECTED)]
    assert len(decisions) == 1


@pytest.mark.asyncio
async def test_operations_on_different_articles_interleave(workflow, create_draft):
    """Тест - разные статьи обрабатываются независимо."""
    first = await create_draft(title="Первая")
    second = await create_draft(title="Вторая")

    await asyncio.gather(workflow.submit(first.id), workflow.submit(second.id))

    for article_id in (first.id, second.id):
        history = await assert_ledger_matches(workflow, article_id)
        assert [e.sequence for e in history] == [1, 2]


@pytest.mark.asyncio
async def test_confirm_then_publish(workflow, create_draft):
    """Тест подтверждения и публикации."""
    article_id = await article_in(workflow, create_draft, ReviewDecision.APPROVED)

    await workflow.confirm_approval(article_id, REVIEWER)
    article = await workflow.publish(article_id)

    assert article.status == S.PUBLISHED
    assert article.published_at is not None
    await assert_ledger_matches(workflow, article_id)


@pytest.mark.asyncio
async def test_escalate_requires_reviewer(workflow, create_draft):
    """Тест - эскалация доступна только ревьюеру."""
    article_id = await article_in(workflow, create_draft, ReviewDecision.REJECTED)

    with pytest.raises(ForbiddenActionError):
        await workflow.escalate(article_id, "author@example.com", "Несогласен")

    article = await workflow.escalate(article_id, REVIEWER, "Несогласен")
    assert article.status == S.MANUAL_REVIEW_REQUIRED


@pytest.mark.asyncio
async def test_archive_from_draft_fails(workflow, create_draft):
    """Тест - архивирование черновика отклоняется без записи в журнал."""
    article = await create_draft()

    with pytest.raises(InvalidTransitionError) as exc_info:
        await workflow.archive(article.id)

    assert exc_info.value.current_status == "DRAFT"
    assert await workflow.get_history(article.id) == []


@pytest.mark.asyncio
async def test_archive_after_rejection(workflow, create_draft):
    """Тест архивирования отклонённой статьи."""
    article_id = await article_in(workflow, create_draft, ReviewDecision.REJECTED)
    await workflow.manual_decide(article_id, ReviewDecision.REJECTED, REVIEWER, "Подтверждаю")

    article = await workflow.archive(article_id, REVIEWER, "Не актуально")

    assert article.status == S.ARCHIVED
    await assert_ledger_matches(workflow, article_id)


@pytest.mark.asyncio
async def test_reanalyze_returns_to_review(workflow, create_draft):
    """Тест явного повторного анализа."""
    article_id = await article_in(workflow, create_draft, ReviewDecision.APPROVED)

    article = await workflow.reanalyze(article_id, REVIEWER, "Обновлены источники")
    await workflow.apply_analysis(article_id, decided(article_id, ReviewDecision.REJECTED))

    assert article.status == S.UNDER_AI_REVIEW
    history = await assert_ledger_matches(workflow, article_id)
    assert history[-2].action == ReviewAction.REANALYSIS_REQUESTED
    assert history[-1].to_status == S.AI_REJECTED


@pytest.mark.asyncio
async def test_unknown_article(workflow):
    """Тест - неизвестная статья."""
    with pytest.raises(EntityNotFoundError):
        await workflow.submit(uuid4())
    with pytest.raises(EntityNotFoundError):
        await workflow.get_history(uuid4())


@pytest.mark.asyncio
async def test_latest_analysis_missing(workflow, create_draft):
    """Тест - анализа ещё нет."""
    article = await create_draft()

    with pytest.raises(EntityNotFoundError) as exc_info:
        await workflow.get_latest_analysis(article.id)

    assert exc_info.value.current_status == "DRAFT"


@pytest.mark.asyncio
async def test_persistence_failure_rolls_back(workflow, create_draft, monkeypatch):
    """Тест - сбой журнала откатывает переход целиком."""
    article = await create_draft()
    monkeypatch.setattr(
        InMemoryHistoryRepository,
        "append",
        AsyncMock(side_effect=PersistenceFailureError("history store unavailable")),
    )

    with pytest.raises(PersistenceFailureError) as exc_info:
        await workflow.submit(article.id)

    assert exc_info.value.current_status == "DRAFT"
    monkeypatch.undo()
    assert (await workflow.get_article(article.id)).status == S.DRAFT
    assert await workflow.get_history(article.id) == []


@pytest.mark.asyncio
async def test_analysis_not_stored_when_commit_fails(workflow, create_draft, store, monkeypatch):
    """Тест - результат анализа не сохраняется без перехода."""
    article = await create_draft()
    await workflow.submit(article.id)
    monkeypatch.setattr(
        InMemoryHistoryRepository,
        "append",
        AsyncMock(side_effect=PersistenceFailureError("history store unavailable")),
    )

    with pytest.raises(PersistenceFailureError):
        await workflow.apply_analysis(article.id, decided(article.id, ReviewDecision.APPROVED))

    assert store.analyses.get(article.id, []) == []
    assert store.articles[article.id].status == S.UNDER_AI_REVIEW


@pytest.mark.asyncio
async def test_iter_history_resumes(workflow, create_draft):
    """Тест - обход журнала с произвольного места."""
    article_id = await article_in(workflow, create_draft, ReviewDecision.APPROVED)

    entries = [e async for e in workflow.iter_history(article_id, after_sequence=1)]

    assert [e.sequence for e in entries] == [2, 3]


@pytest.mark.asyncio
async def test_update_draft_content(command_handler, workflow, create_draft):
    """Тест правки черновика и запрета правки после отправки."""
    article = await create_draft()

    updated = await command_handler.handle_update_article(
        UpdateArticleCommand(article_id=article.id, title="Новый заголовок")
    )
    assert updated.title == "Новый заголовок"
    assert (await workflow.get_article(article.id)).title == "Новый заголовок"

    await workflow.submit(article.id)
    with pytest.raises(InvalidTransitionError):
        await command_handler.handle_update_article(
            UpdateArticleCommand(article_id=article.id, content="Другое")
        )
