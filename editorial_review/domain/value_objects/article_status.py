"""
Value Object: ArticleStatus

Статус статьи в процессе редакционной проверки.
"""

from enum import Enum
from typing import FrozenSet


class ArticleStatus(str, Enum):
    """Статусы жизненного цикла статьи."""

    DRAFT = "DRAFT"                                        # Черновик автора
    SUBMITTED_FOR_APPROVAL = "SUBMITTED_FOR_APPROVAL"      # Отправлена на проверку
    UNDER_AI_REVIEW = "UNDER_AI_REVIEW"                    # Ожидает результат анализа
    AI_APPROVED = "AI_APPROVED"                            # Одобрена анализом
    AI_REJECTED = "AI_REJECTED"                            # Отклонена анализом
    MANUAL_REVIEW_REQUIRED = "MANUAL_REVIEW_REQUIRED"      # Нужна ручная проверка
    APPROVED = "APPROVED"                                  # Одобрена человеком
    REJECTED = "REJECTED"                                  # Отклонена окончательно
    PUBLISHED = "PUBLISHED"                                # Опубликована
    ARCHIVED = "ARCHIVED"                                  # Архивирована

    def is_terminal(self) -> bool:
        """Проверка, является ли статус финальным (нет автоматических переходов)."""
        return self in (
            ArticleStatus.PUBLISHED,
            ArticleStatus.ARCHIVED,
            ArticleStatus.REJECTED,
        )

    def allowed_targets(self, reanalysis: bool = False) -> FrozenSet["ArticleStatus"]:
        """
        Допустимые статусы для перехода из текущего.

        Аргументы:
            reanalysis: Учитывать явный возврат в UNDER_AI_REVIEW
        """
        targets = _TRANSITIONS[self]
        if reanalysis and self in REANALYSIS_SOURCES:
            targets = targets | {ArticleStatus.UNDER_AI_REVIEW}
        return targets

    def can_transition_to(self, new_status: "ArticleStatus", reanalysis: bool = False) -> bool:
        """
        Проверка возможности перехода в новый статус.

        Правила переходов:
        - DRAFT -> SUBMITTED_FOR_APPROVAL
        - SUBMITTED_FOR_APPROVAL -> UNDER_AI_REVIEW
        - UNDER_AI_REVIEW -> AI_APPROVED, AI_REJECTED, MANUAL_REVIEW_REQUIRED
        - AI_APPROVED -> PUBLISHED, APPROVED
        - AI_REJECTED -> REJECTED, MANUAL_REVIEW_REQUIRED, APPROVED
        - MANUAL_REVIEW_REQUIRED -> APPROVED, REJECTED
        - APPROVED -> PUBLISHED
        - PUBLISHED, REJECTED -> ARCHIVED
        """
        return new_status in self.allowed_targets(reanalysis=reanalysis)


_TRANSITIONS = {
    ArticleStatus.DRAFT: frozenset({ArticleStatus.SUBMITTED_FOR_APPROVAL}),
    ArticleStatus.SUBMITTED_FOR_APPROVAL: frozenset({ArticleStatus.UNDER_AI_REVIEW}),
    ArticleStatus.UNDER_AI_REVIEW: frozenset({
        ArticleStatus.AI_APPROVED,
        ArticleStatus.AI_REJECTED,
        ArticleStatus.MANUAL_REVIEW_REQUIRED,
    }),
    ArticleStatus.AI_APPROVED: frozenset({ArticleStatus.PUBLISHED, ArticleStatus.APPROVED}),
    # APPROVED: человек отменяет решение анализа
    ArticleStatus.AI_REJECTED: frozenset({
        ArticleStatus.REJECTED,
        ArticleStatus.MANUAL_REVIEW_REQUIRED,
        ArticleStatus.APPROVED,
    }),
    ArticleStatus.MANUAL_REVIEW_REQUIRED: frozenset({ArticleStatus.APPROVED, ArticleStatus.REJECTED}),
    ArticleStatus.APPROVED: frozenset({ArticleStatus.PUBLISHED}),
    ArticleStatus.PUBLISHED: frozenset({ArticleStatus.ARCHIVED}),
    ArticleStatus.REJECTED: frozenset({ArticleStatus.ARCHIVED}),
    ArticleStatus.ARCHIVED: frozenset(),
}

# Статусы, из которых разрешён явный повторный анализ
REANALYSIS_SOURCES: FrozenSet[ArticleStatus] = frozenset({
    ArticleStatus.AI_APPROVED,
    ArticleStatus.AI_REJECTED,
    ArticleStatus.MANUAL_REVIEW_REQUIRED,
    ArticleStatus.APPROVED,
})
