"""
RetryPolicy — повторы вызова движка анализа.

Экспоненциальный backoff: backoff → 2×backoff → 4×backoff … не больше backoff_max.
"""

from dataclasses import dataclass

from editorial_review.shared.exceptions.domain_exceptions import DomainValidationError


@dataclass(frozen=True)
class RetryPolicy:
    """
    Ограниченное число попыток с таймаутом на каждую.

    Атрибуты:
        max_attempts: Всего попыток (>= 1)
        timeout_seconds: Таймаут одной попытки
        backoff_seconds: Пауза после первой неудачи
        backoff_max_seconds: Верхняя граница паузы
    """

    max_attempts: int = 3
    timeout_seconds: float = 60.0
    backoff_seconds: float = 1.0
    backoff_max_seconds: float = 30.0

    def __post_init__(self):
        if self.max_attempts < 1:
            raise DomainValidationError("max_attempts must be at least 1")
        if self.timeout_seconds <= 0:
            raise DomainValidationError("timeout_seconds must be positive")
        if self.backoff_seconds < 0 or self.backoff_max_seconds < 0:
            raise DomainValidationError("backoff must not be negative")

    def delay_for(self, attempt: int) -> float:
        """Пауза после неудачной попытки номер attempt (с 1)."""
        return min(self.backoff_seconds * (2 ** (attempt - 1)), self.backoff_max_seconds)
