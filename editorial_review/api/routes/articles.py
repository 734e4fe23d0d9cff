"""
FastAPI Routes для статей.
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends

from editorial_review.api.dependencies import (
    get_article_service,
    get_orchestrator,
    get_workflow_service,
)
from editorial_review.api.schemas.article_schemas import (
    AnalysisResultResponse,
    ArticleResponse,
    ArticleReviewResponse,
    CreateArticleRequest,
    HistoryEntryResponse,
    UpdateArticleRequest,
)
from editorial_review.application.commands.create_article_command import CreateArticleCommand
from editorial_review.application.commands.update_article_command import UpdateArticleCommand
from editorial_review.application.services.article_service import ArticleService
from editorial_review.application.services.review_orchestrator import ReviewOrchestrator
from editorial_review.application.services.workflow_service import WorkflowService
from editorial_review.domain.value_objects.article_status import ArticleStatus

router = APIRouter(prefix="/articles", tags=["articles"])


@router.post("/", response_model=ArticleResponse, status_code=201)
async def create_article(
    request: CreateArticleRequest,
    service: ArticleService = Depends(get_article_service)
):
    """Создать статью (DRAFT)."""
    command = CreateArticleCommand(
        title=request.title,
        content=request.content,
        featured_image=request.featured_image,
    )

    article = await service.create_article(command)
    return ArticleResponse.from_entity(article)


@router.patch("/{article_id}", response_model=ArticleResponse)
async def update_article(
    article_id: UUID,
    request: UpdateArticleRequest,
    service: ArticleService = Depends(get_article_service)
):
    """Изменить черновик."""
    command = UpdateArticleCommand(
        article_id=article_id,
        title=request.title,
        content=request.content,
        featured_image=request.featured_image,
    )

    article = await service.update_article(command)
    return ArticleResponse.from_entity(article)


@router.get("/", response_model=List[ArticleResponse])
async def list_articles(
    status: Optional[ArticleStatus] = None,
    service: ArticleService = Depends(get_article_service)
):
    """Получить список статей."""
    articles = await service.list_articles(status=status)
    return [ArticleResponse.from_entity(a) for a in articles]


@router.get("/{article_id}", response_model=ArticleReviewResponse)
async def get_article(
    article_id: UUID,
    workflow: WorkflowService = Depends(get_workflow_service),
    orchestrator: ReviewOrchestrator = Depends(get_orchestrator)
):
    """
    Статус статьи и последний результат анализа.

    pending: идёт фоновый анализ; last_error: последний анализ не получен,
    статья ждёт в UNDER_AI_REVIEW.
    """
    state = await workflow.get_review_state(article_id)
    failure = orchestrator.last_failure(article_id)
    waiting = state.article.status == ArticleStatus.UNDER_AI_REVIEW
    return ArticleReviewResponse(
        article=ArticleResponse.from_entity(state.article),
        latest_analysis=(
            AnalysisResultResponse.from_entity(state.latest_analysis)
            if state.latest_analysis else None
        ),
        pending=orchestrator.is_pending(article_id),
        last_error=failure.last_error if failure and waiting else None,
    )


@router.get("/{article_id}/history", response_model=List[HistoryEntryResponse])
async def get_history(
    article_id: UUID,
    workflow: WorkflowService = Depends(get_workflow_service)
):
    """Журнал переходов статьи."""
    entries = await workflow.get_history(article_id)
    return [HistoryEntryResponse.from_entity(e) for e in entries]
