"""
Domain Exceptions

Исключения доменного слоя.

Все исключения, связанные с конкретной статьёй, несут её текущий статус
(current_status), чтобы вызывающая сторона могла синхронизировать UI
без повторного запроса.
"""

from typing import Iterable, Optional


class DomainException(Exception):
    """Базовое исключение домена."""

    def __init__(self, message: str, current_status: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.current_status = current_status


class DomainValidationError(DomainException):
    """Ошибка валидации доменной сущности."""
    pass


class EntityNotFoundError(DomainException):
    """Сущность не найдена."""
    pass


class BusinessRuleViolation(DomainException):
    """Нарушение бизнес-правила."""
    pass


class InvalidTransitionError(BusinessRuleViolation):
    """
    Недопустимый переход статуса.

    Атрибуты:
        article_id: ID статьи
        current_status: Текущий статус статьи
        target_status: Запрошенный статус
        allowed: Допустимые статусы из текущего
    """

    def __init__(
        self,
        article_id,
        current_status: str,
        target_status: Optional[str],
        allowed: Iterable[str] = (),
        reason: str = "",
    ):
        self.article_id = article_id
        self.target_status = target_status
        self.allowed = sorted(allowed)
        message = (
            f"Invalid transition for article {article_id}: "
            f"{current_status} -> {target_status or '?'}. "
            f"Allowed: {self.allowed}"
        )
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message, current_status=current_status)


class ForbiddenActionError(DomainException):
    """Актор не имеет права выполнять действие ревьюера."""

    def __init__(self, actor: str, action: str, current_status: Optional[str] = None):
        self.actor = actor
        self.action = action
        super().__init__(
            f"Actor '{actor}' is not allowed to {action}",
            current_status=current_status,
        )
