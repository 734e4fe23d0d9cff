"""
Repository Interface: IAnalysisResultRepository

Хранилище результатов анализа.
"""

from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from editorial_review.domain.entities.analysis_result import AnalysisResult


class IAnalysisResultRepository(ABC):
    """Интерфейс репозитория результатов анализа."""

    @abstractmethod
    async def add(self, result: AnalysisResult) -> AnalysisResult:
        """Сохранить результат анализа."""
        pass

    @abstractmethod
    async def find_latest(self, article_id: UUID) -> Optional[AnalysisResult]:
        """Активный (последний) результат анализа статьи."""
        pass

    @abstractmethod
    async def find_all_for(self, article_id: UUID) -> List[AnalysisResult]:
        """Все результаты анализа статьи, от старых к новым."""
        pass
