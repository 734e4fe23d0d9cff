"""
Порт: IReviewerAuthorization

Внешняя проверка прав ревьюера.
"""

from abc import ABC, abstractmethod


class IReviewerAuthorization(ABC):
    """Интерфейс авторизации ревьюеров."""

    @abstractmethod
    async def can_review(self, actor: str) -> bool:
        """Может ли актор принимать ручные решения."""
        pass
