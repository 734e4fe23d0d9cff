"""
Value Object: ReviewDecision

Категориальный результат оценки статьи.
"""

from enum import Enum

from editorial_review.domain.value_objects.article_status import ArticleStatus


class ReviewDecision(str, Enum):
    """Решение по статье (анализ или ревьюер)."""

    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    MANUAL_REVIEW_REQUIRED = "MANUAL_REVIEW_REQUIRED"

    def ai_status(self) -> ArticleStatus:
        """Статус, в который переводит статью решение анализа."""
        return {
            ReviewDecision.APPROVED: ArticleStatus.AI_APPROVED,
            ReviewDecision.REJECTED: ArticleStatus.AI_REJECTED,
            ReviewDecision.MANUAL_REVIEW_REQUIRED: ArticleStatus.MANUAL_REVIEW_REQUIRED,
        }[self]
