# -*- coding: utf-8 -*-
"""
FastAPI Routes для проверки статей.

Эндпоинты:
- POST   /articles/{id}/submit   - отправить черновик на проверку
- POST   /articles/{id}/review   - запустить анализ вручную
- POST   /articles/{id}/review/retry - повторить неудавшийся анализ
- GET    /articles/{id}/review   - последний результат анализа
- DELETE /articles/{id}/review   - отменить фоновый анализ
- POST   /articles/{id}/decision - решение ревьюера
- POST   /articles/{id}/confirm  - подтвердить AI_APPROVED
- POST   /articles/{id}/escalate - эскалировать AI_REJECTED
- POST   /articles/{id}/publish  - опубликовать
- POST   /articles/{id}/archive  - архивировать
"""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends

from editorial_review.api.dependencies import (
    get_article_service,
    get_orchestrator,
    get_workflow_service,
)
from editorial_review.api.schemas.article_schemas import (
    ActorRequest,
    AnalysisResultResponse,
    ArticleResponse,
    ArticleReviewResponse,
    ManualDecisionRequest,
    ReasonedActorRequest,
)
from editorial_review.application.commands.manual_decision_command import ManualDecisionCommand
from editorial_review.application.services.article_service import ArticleService
from editorial_review.application.services.review_orchestrator import ReviewOrchestrator, ReviewOutcome
from editorial_review.application.services.workflow_service import WorkflowService
from editorial_review.domain.entities.history_entry import SYSTEM_ACTOR

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/articles", tags=["reviews"])


def _outcome_response(outcome: ReviewOutcome) -> ArticleReviewResponse:
    return ArticleReviewResponse(
        article=ArticleResponse.from_entity(outcome.article),
        latest_analysis=(
            AnalysisResultResponse.from_entity(outcome.analysis) if outcome.analysis else None
        ),
        pending=outcome.pending,
    )


# =============================================================================
# Анализ
# =============================================================================

@router.post("/{article_id}/submit", response_model=ArticleReviewResponse)
async def submit_for_review(
    article_id: UUID,
    wait: bool = True,
    request: Optional[ActorRequest] = None,
    orchestrator: ReviewOrchestrator = Depends(get_orchestrator)
):
    """
    Отправить черновик на проверку.

    wait=false: анализ выполняется в фоне, ответ со статусом UNDER_AI_REVIEW.
    """
    actor = request.actor if request else SYSTEM_ACTOR
    logger.info(f"[Reviews API] Submit {article_id} by {actor} (wait={wait})")
    outcome = await orchestrator.submit_for_review(article_id, actor, wait=wait)
    return _outcome_response(outcome)


@router.post("/{article_id}/review", response_model=ArticleReviewResponse)
async def trigger_analysis(
    article_id: UUID,
    request: ActorRequest,
    wait: bool = True,
    orchestrator: ReviewOrchestrator = Depends(get_orchestrator)
):
    """Запустить анализ вручную (повторный анализ)."""
    logger.info(f"[Reviews API] Manual analysis {article_id} by {request.actor} (wait={wait})")
    outcome = await orchestrator.trigger_manual_analysis(
        article_id, request.actor, request.reason, wait=wait
    )
    return _outcome_response(outcome)


@router.post("/{article_id}/review/retry", response_model=ArticleReviewResponse)
async def retry_analysis(
    article_id: UUID,
    wait: bool = True,
    orchestrator: ReviewOrchestrator = Depends(get_orchestrator)
):
    """Повторить анализ для статьи, ожидающей в UNDER_AI_REVIEW."""
    logger.info(f"[Reviews API] Retry analysis {article_id} (wait={wait})")
    outcome = await orchestrator.retry_pending_analysis(article_id, wait=wait)
    return _outcome_response(outcome)


@router.get("/{article_id}/review", response_model=AnalysisResultResponse)
async def get_latest_review(
    article_id: UUID,
    workflow: WorkflowService = Depends(get_workflow_service)
):
    """Последний результат анализа."""
    result = await workflow.get_latest_analysis(article_id)
    return AnalysisResultResponse.from_entity(result)


@router.delete("/{article_id}/review")
async def cancel_review(
    article_id: UUID,
    orchestrator: ReviewOrchestrator = Depends(get_orchestrator)
):
    """Отменить фоновый анализ; статья остаётся в UNDER_AI_REVIEW."""
    cancelled = await orchestrator.cancel_review(article_id)
    return {"article_id": str(article_id), "cancelled": cancelled}


# =============================================================================
# Решения
# =============================================================================

@router.post("/{article_id}/decision", response_model=ArticleResponse)
async def manual_decision(
    article_id: UUID,
    request: ManualDecisionRequest,
    service: ArticleService = Depends(get_article_service)
):
    """Решение ревьюера по статье в AI_REJECTED или MANUAL_REVIEW_REQUIRED."""
    article = await service.decide(
        ManualDecisionCommand(
            article_id=article_id,
            decision=request.decision,
            actor=request.actor,
            reason=request.reason,
            notes=request.notes,
        )
    )
    return ArticleResponse.from_entity(article)


@router.post("/{article_id}/confirm", response_model=ArticleResponse)
async def confirm_approval(
    article_id: UUID,
    request: ActorRequest,
    workflow: WorkflowService = Depends(get_workflow_service)
):
    """AI_APPROVED → APPROVED."""
    article = await workflow.confirm_approval(article_id, request.actor, request.reason)
    return ArticleResponse.from_entity(article)


@router.post("/{article_id}/escalate", response_model=ArticleResponse)
async def escalate(
    article_id: UUID,
    request: ReasonedActorRequest,
    workflow: WorkflowService = Depends(get_workflow_service)
):
    """AI_REJECTED → MANUAL_REVIEW_REQUIRED."""
    article = await workflow.escalate(article_id, request.actor, request.reason)
    return ArticleResponse.from_entity(article)


@router.post("/{article_id}/publish", response_model=ArticleResponse)
async def publish(
    article_id: UUID,
    request: Optional[ActorRequest] = None,
    workflow: WorkflowService = Depends(get_workflow_service)
):
    """Опубликовать одобренную статью."""
    actor = request.actor if request else SYSTEM_ACTOR
    article = await workflow.publish(article_id, actor)
    return ArticleResponse.from_entity(article)


@router.post("/{article_id}/archive", response_model=ArticleResponse)
async def archive(
    article_id: UUID,
    request: Optional[ActorRequest] = None,
    workflow: WorkflowService = Depends(get_workflow_service)
):
    """Архивировать опубликованную или отклонённую статью."""
    actor = request.actor if request else SYSTEM_ACTOR
    reason = request.reason if request else ""
    article = await workflow.archive(article_id, actor, reason)
    return ArticleResponse.from_entity(article)
