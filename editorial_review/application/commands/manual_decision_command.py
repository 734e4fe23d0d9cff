"""
CQRS Command: ManualDecisionCommand

Решение ревьюера по статье.
"""

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from editorial_review.domain.value_objects.review_decision import ReviewDecision


@dataclass(frozen=True)
class ManualDecisionCommand:
    """Команда ручного решения (APPROVED / REJECTED)."""

    article_id: UUID
    decision: ReviewDecision
    actor: str
    reason: str
    notes: Optional[str] = None
