"""
Repository Interface: IArticleRepository

Порт (интерфейс) для работы с хранилищем статей.
Реализации (адаптеры) находятся в infrastructure layer.
"""

from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from editorial_review.domain.entities.article import Article
from editorial_review.domain.value_objects.article_status import ArticleStatus


class IArticleRepository(ABC):
    """
    Интерфейс репозитория статей.

    Следует Repository Pattern и является портом в Hexagonal Architecture.
    Статьи никогда не удаляются, поэтому операции delete нет.
    """

    @abstractmethod
    async def add(self, article: Article) -> Article:
        """
        Сохранить новую статью.

        Args:
            article: Статья для сохранения

        Returns:
            Сохранённая статья
        """
        pass

    @abstractmethod
    async def update(self, article: Article) -> Article:
        """
        Сохранить изменения существующей статьи.

        Args:
            article: Изменённая статья

        Returns:
            Сохранённая статья
        """
        pass

    @abstractmethod
    async def find_by_id(self, article_id: UUID, for_update: bool = False) -> Optional[Article]:
        """
        Найти статью по ID.

        Args:
            article_id: UUID статьи
            for_update: Заблокировать строку до конца транзакции

        Returns:
            Статья или None
        """
        pass

    @abstractmethod
    async def find_all(self, status: Optional[ArticleStatus] = None) -> List[Article]:
        """
        Получить список статей.

        Args:
            status: Фильтр по статусу

        Returns:
            Список статей (новые первыми)
        """
        pass
