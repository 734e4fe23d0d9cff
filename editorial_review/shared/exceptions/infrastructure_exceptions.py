"""
Infrastructure Exceptions

Исключения инфраструктурного слоя.
"""

from typing import Optional


class InfrastructureException(Exception):
    """Базовое исключение инфраструктуры."""

    def __init__(self, message: str, current_status: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.current_status = current_status


class PersistenceFailureError(InfrastructureException):
    """
    Хранилище статей или журнала недоступно.

    Переход не зафиксирован; ошибка временная, операцию можно повторить.
    """
    pass


class ExternalServiceError(InfrastructureException):
    """Ошибка внешнего сервиса."""
    pass


class AnalysisEngineError(ExternalServiceError):
    """
    Ошибка движка анализа.

    permanent=True означает, что повтор не поможет (например, 4xx или
    контент не проходит предварительную проверку).
    """

    def __init__(self, message: str, permanent: bool = False):
        super().__init__(message)
        self.permanent = permanent


class AnalysisUnavailableError(ExternalServiceError):
    """
    Анализ не удалось получить после всех попыток.

    Статья остаётся в UNDER_AI_REVIEW (безопасное состояние ожидания).
    """

    def __init__(self, article_id, attempts: int, last_error: str, current_status: Optional[str] = None):
        self.article_id = article_id
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"Analysis unavailable for article {article_id} after {attempts} attempt(s): {last_error}",
            current_status=current_status,
        )
