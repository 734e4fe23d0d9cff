# -*- coding: utf-8 -*-
"""
PostgreSQL реализация хранилища результатов анализа.
"""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from editorial_review.domain.entities.analysis_result import AnalysisResult
from editorial_review.domain.repositories.analysis_repository import IAnalysisResultRepository
from editorial_review.domain.value_objects.review_decision import ReviewDecision
from editorial_review.infrastructure.persistence.models import AnalysisResultModel
from editorial_review.shared.exceptions.infrastructure_exceptions import PersistenceFailureError


class AnalysisResultRepositoryImpl(IAnalysisResultRepository):
    """Результаты анализа в PostgreSQL."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def add(self, result: AnalysisResult) -> AnalysisResult:
        try:
            self.session.add(self._to_model(result))
            await self.session.flush()
        except SQLAlchemyError as e:
            raise PersistenceFailureError(
                f"Failed to store analysis result for article {result.article_id}: {e}"
            ) from e
        return result

    async def find_latest(self, article_id: UUID) -> Optional[AnalysisResult]:
        query = (
            select(AnalysisResultModel)
            .where(AnalysisResultModel.article_id == article_id)
            .order_by(AnalysisResultModel.analyzed_at.desc())
            .limit(1)
        )
        try:
            result = await self.session.execute(query)
        except SQLAlchemyError as e:
            raise PersistenceFailureError(f"Failed to load analysis for article {article_id}: {e}") from e
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def find_all_for(self, article_id: UUID) -> List[AnalysisResult]:
        query = (
            select(AnalysisResultModel)
            .where(AnalysisResultModel.article_id == article_id)
            .order_by(AnalysisResultModel.analyzed_at)
        )
        try:
            result = await self.session.execute(query)
        except SQLAlchemyError as e:
            raise PersistenceFailureError(f"Failed to load analyses for article {article_id}: {e}") from e
        return [self._to_entity(m) for m in result.scalars().all()]

    # =========================================================================
    # Маппинг Entity ↔ Model
    # =========================================================================

    @staticmethod
    def _to_model(entity: AnalysisResult) -> AnalysisResultModel:
        return AnalysisResultModel(
            id=entity.id,
            article_id=entity.article_id,
            decision=entity.decision.value,
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

    @staticmethod
    def _to_entity(model: AnalysisResultModel) -> AnalysisResult:
        return AnalysisResult(
            id=model.id,
            article_id=model.article_id,
            decision=ReviewDecision(model.decision),
            confidence_score=model.confidence_score,
            readability_score=model.readability_score,
            grammar_score=model.grammar_score,
            seo_score=model.seo_score,
            originality_score=model.originality_score,
            analysis=model.analysis or "",
            recommendations=model.recommendations or "",
            # None → пустой кортеж
            flagged_issues=tuple(model.flagged_issues or ()),
            ai_model=model.ai_model,
            processing_time_ms=model.processing_time_ms,
            analyzed_at=model.analyzed_at,
        )
