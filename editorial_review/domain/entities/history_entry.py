# -*- coding: utf-8 -*-
"""
Доменная сущность: Запись журнала (HistoryEntry)

Неизменяемая запись аудита о переходе статуса. Журнал только дописывается;
исправления оформляются новыми записями.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional
from uuid import UUID, uuid4

from editorial_review.domain.value_objects.article_status import ArticleStatus
from editorial_review.domain.value_objects.review_action import ReviewAction
from editorial_review.shared.time_utils import utcnow

SYSTEM_ACTOR = "ai-system"


@dataclass(frozen=True)
class HistoryEntry:
    """
    Запись о переходе статуса.

    Атрибуты:
        sequence: Порядковый номер в журнале статьи (с 1, без пропусков)
        from_status: Исходный статус (None для записи без предшественника)
        performed_by: SYSTEM_ACTOR или идентификатор пользователя
        confidence_score/ai_model/processing_time_ms: снимок анализа,
            если переход вызван результатом анализа
    """

    article_id: UUID
    sequence: int
    action: ReviewAction
    from_status: Optional[ArticleStatus]
    to_status: ArticleStatus
    performed_by: str
    reason: str = ""
    notes: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    confidence_score: Optional[float] = None
    ai_model: Optional[str] = None
    processing_time_ms: Optional[int] = None
    created_at: datetime = field(default_factory=utcnow)
    id: UUID = field(default_factory=uuid4)

    @property
    def is_analysis_driven(self) -> bool:
        """Переход вызван результатом анализа."""
        return self.confidence_score is not None

    def __repr__(self) -> str:
        source = self.from_status.value if self.from_status else None
        return (
            f"HistoryEntry(article_id={self.article_id}, #{self.sequence}, "
            f"{source} -> {self.to_status.value}, by={self.performed_by})"
        )
