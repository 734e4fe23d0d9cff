# -*- coding: utf-8 -*-
"""
Доменная сущность: Результат анализа (AnalysisResult)

Один результат на каждый запуск анализа. Неизменяем после создания;
активным считается последний по analyzed_at.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Optional, Tuple
from uuid import UUID, uuid4

from editorial_review.domain.value_objects.review_decision import ReviewDecision
from editorial_review.shared.exceptions.domain_exceptions import DomainValidationError
from editorial_review.shared.time_utils import utcnow


@dataclass(frozen=True)
class AnalysisResult:
    """
    Результат одного запуска движка анализа.

    decision выставляется политикой принятия решений (DecisionPolicy);
    движок анализа может вернуть результат без решения.
    """

    article_id: UUID
    confidence_score: float
    readability_score: Optional[float] = None
    grammar_score: Optional[float] = None
    seo_score: Optional[float] = None
    originality_score: Optional[float] = None
    decision: Optional[ReviewDecision] = None
    analysis: str = ""
    recommendations: str = ""
    flagged_issues: Tuple[str, ...] = ()
    ai_model: str = "unknown"
    processing_time_ms: Optional[int] = None
    analyzed_at: datetime = field(default_factory=utcnow)
    id: UUID = field(default_factory=uuid4)

    def __post_init__(self):
        for name, value in self.scores().items():
            if value is None:
                continue
            if not 0.0 <= value <= 1.0:
                raise DomainValidationError(f"{name} must be between 0 and 1, got {value}")
        if self.confidence_score is None:
            raise DomainValidationError("confidence_score is required")
        if self.processing_time_ms is not None and self.processing_time_ms < 0:
            raise DomainValidationError("processing_time_ms cannot be negative")

    def scores(self) -> dict:
        """Все оценки результата по именам."""
        return {
            "confidence_score": self.confidence_score,
            "readability_score": self.readability_score,
            "grammar_score": self.grammar_score,
            "seo_score": self.seo_score,
            "originality_score": self.originality_score,
        }

    def quality_scores(self) -> Tuple[Optional[float], ...]:
        """Четыре оценки качества (readability, grammar, SEO, originality)."""
        return (
            self.readability_score,
            self.grammar_score,
            self.seo_score,
            self.originality_score,
        )

    def with_decision(self, decision: ReviewDecision) -> "AnalysisResult":
        """Копия результата с проставленным решением."""
        return replace(self, decision=decision)
