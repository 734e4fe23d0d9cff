"""
Domain Service: DecisionPolicy

Чистая функция: результат анализа -> решение. Без побочных эффектов и I/O.
Пороги — конфигурация, а не константы.
"""

from dataclasses import dataclass

from editorial_review.domain.entities.analysis_result import AnalysisResult
from editorial_review.domain.value_objects.review_decision import ReviewDecision
from editorial_review.shared.exceptions.domain_exceptions import DomainValidationError


@dataclass(frozen=True)
class PolicyThresholds:
    """
    Пороги политики.

    Атрибуты:
        approval_threshold: Минимальная уверенность для автоодобрения
        rejection_threshold: Максимальная уверенность для автоотклонения
        min_quality_score: Минимум для каждой из четырёх оценок качества
    """

    approval_threshold: float = 0.8
    rejection_threshold: float = 0.3
    min_quality_score: float = 0.5

    def __post_init__(self):
        for name in ("approval_threshold", "rejection_threshold", "min_quality_score"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise DomainValidationError(f"{name} must be between 0 and 1, got {value}")
        if self.rejection_threshold >= self.approval_threshold:
            raise DomainValidationError(
                "rejection_threshold must be lower than approval_threshold"
            )


class DecisionPolicy:
    """
    Политика принятия решений по результату анализа.

    Правила:
    - confidence >= approval_threshold и все оценки качества >= min_quality_score -> APPROVED
    - confidence <= rejection_threshold -> REJECTED
    - иначе (в т.ч. низкая оценка качества при высокой уверенности) -> MANUAL_REVIEW_REQUIRED

    Отсутствующая оценка качества считается ниже порога.
    """

    def __init__(self, thresholds: PolicyThresholds = PolicyThresholds()):
        self.thresholds = thresholds

    def decide(self, result: AnalysisResult) -> ReviewDecision:
        confidence = result.confidence_score

        if confidence >= self.thresholds.approval_threshold and self._quality_ok(result):
            return ReviewDecision.APPROVED

        if confidence <= self.thresholds.rejection_threshold:
            return ReviewDecision.REJECTED

        return ReviewDecision.MANUAL_REVIEW_REQUIRED

    def _quality_ok(self, result: AnalysisResult) -> bool:
        floor = self.thresholds.min_quality_score
        return all(score is not None and score >= floor for score in result.quality_scores())
