"""
Порт: IAnalysisEngine

Внешний движок анализа. Может быть медленным и ненадёжным;
оркестратор считает его недоверенной зависимостью с повторами.
"""

from abc import ABC, abstractmethod

from editorial_review.domain.entities.analysis_result import AnalysisResult
from editorial_review.domain.entities.article import Article


class IAnalysisEngine(ABC):
    """Интерфейс движка анализа."""

    @abstractmethod
    async def analyze(self, article: Article) -> AnalysisResult:
        """
        Проанализировать статью.

        Raises:
            AnalysisEngineError: Ошибка движка (permanent=True — повтор бесполезен)
        """
        pass
