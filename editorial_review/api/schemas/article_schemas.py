"""
Pydantic schemas для API.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from editorial_review.domain.entities.analysis_result import AnalysisResult
from editorial_review.domain.entities.article import Article
from editorial_review.domain.entities.history_entry import HistoryEntry
from editorial_review.domain.value_objects.review_decision import ReviewDecision


# =============================================================================
# Запросы
# =============================================================================

class CreateArticleRequest(BaseModel):
    """Запрос на создание статьи."""

    title: str = Field(..., min_length=1, max_length=500)
    content: str = Field(..., min_length=1)
    featured_image: Optional[str] = Field(None, max_length=500)


class UpdateArticleRequest(BaseModel):
    """Правка черновика: переданные поля заменяются."""

    title: Optional[str] = Field(None, min_length=1, max_length=500)
    content: Optional[str] = Field(None, min_length=1)
    featured_image: Optional[str] = Field(None, max_length=500)


class ActorRequest(BaseModel):
    """Запрос от имени пользователя."""

    actor: str = Field(..., min_length=1)
    reason: str = ""


class ReasonedActorRequest(BaseModel):
    """Запрос от имени пользователя с обязательной причиной."""

    actor: str = Field(..., min_length=1)
    reason: str = Field(..., min_length=1)


class ManualDecisionRequest(BaseModel):
    """Решение ревьюера."""

    decision: ReviewDecision
    actor: str = Field(..., min_length=1)
    reason: str = Field(..., min_length=1)
    notes: Optional[str] = None


# =============================================================================
# Ответы
# =============================================================================

class ArticleResponse(BaseModel):
    """Ответ со статьёй."""

    id: UUID
    title: str
    content: str
    featured_image: Optional[str]
    status: str
    is_published: bool
    feedback: Optional[str]
    created_at: datetime
    updated_at: datetime
    published_at: Optional[datetime]
    approved_at: Optional[datetime]
    approved_by: Optional[str]
    rejected_at: Optional[datetime]
    rejected_by: Optional[str]

    @classmethod
    def from_entity(cls, entity: Article) -> "ArticleResponse":
        """Создать из entity."""
        return cls(
            id=entity.id,
            title=entity.title,
            content=entity.content,
            featured_image=entity.featured_image,
            status=entity.status.value,
            is_published=entity.is_published,
            feedback=entity.feedback,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
            published_at=entity.published_at,
            approved_at=entity.approved_at,
            approved_by=entity.approved_by,
            rejected_at=entity.rejected_at,
            rejected_by=entity.rejected_by,
        )


class AnalysisResultResponse(BaseModel):
    """Результат анализа."""

    id: UUID
    article_id: UUID
    decision: Optional[str]
    confidence_score: float
    readability_score: Optional[float]
    grammar_score: Optional[float]
    seo_score: Optional[float]
    originality_score: Optional[float]
    analysis: str
    recommendations: str
    flagged_issues: List[str]
    ai_model: str
    processing_time_ms: Optional[int]
    analyzed_at: datetime

    @classmethod
    def from_entity(cls, entity: AnalysisResult) -> "AnalysisResultResponse":
        return cls(
            id=entity.id,
            article_id=entity.article_id,
            decision=entity.decision.value if entity.decision else None,
            confidence_score=entity.confidence_score,
            readability_score=entity.readability_score,
            grammar_score=entity.grammar_score,
            seo_score=entity.seo_score,
            originality_score=entity.originality_score,
            analysis=entity.analysis,
            recommendations=entity.recommendations,
            flagged_issues=list(entity.flagged_issues),
            ai_model=entity.ai_model,
            processing_time_ms=entity.processing_time_ms,
            analyzed_at=entity.analyzed_at,
        )


class ArticleReviewResponse(BaseModel):
    """Статус статьи и последний анализ."""

    article: ArticleResponse
    latest_analysis: Optional[AnalysisResultResponse] = None
    pending: bool = False
    last_error: Optional[str] = None


class HistoryEntryResponse(BaseModel):
    """Запись журнала."""

    sequence: int
    action: str
    from_status: Optional[str]
    to_status: str
    performed_by: str
    reason: str
    notes: Optional[str]
    metadata: Dict[str, Any]
    confidence_score: Optional[float]
    ai_model: Optional[str]
    processing_time_ms: Optional[int]
    created_at: datetime

    @classmethod
    def from_entity(cls, entity: HistoryEntry) -> "HistoryEntryResponse":
        return cls(
            sequence=entity.sequence,
            action=entity.action.value,
            from_status=entity.from_status.value if entity.from_status else None,
            to_status=entity.to_status.value,
            performed_by=entity.performed_by,
            reason=entity.reason,
            notes=entity.notes,
            metadata=dict(entity.metadata),
            confidence_score=entity.confidence_score,
            ai_model=entity.ai_model,
            processing_time_ms=entity.processing_time_ms,
            created_at=entity.created_at,
        )
