# -*- coding: utf-8 -*-
"""
PostgreSQL Repository реализация для статей.

Репозиторий не делает commit: фиксацию выполняет SqlAlchemyUnitOfWork,
чтобы статус статьи и запись журнала попадали в одну транзакцию.
"""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from editorial_review.domain.entities.article import Article
from editorial_review.domain.repositories.article_repository import IArticleRepository
from editorial_review.domain.value_objects.article_status import ArticleStatus
from editorial_review.infrastructure.persistence.models import ArticleModel
from editorial_review.shared.exceptions.infrastructure_exceptions import PersistenceFailureError


class ArticleRepositoryImpl(IArticleRepository):
    """
    Реализация repository для PostgreSQL.

    Адаптер в Hexagonal Architecture.
    Преобразует доменные сущности Article в SQLAlchemy модели и обратно.
    """

    def __init__(self, session: AsyncSession):
        """
        Инициализация репозитория.

        Аргументы:
            session: Асинхронная сессия SQLAlchemy (общая для unit of work)
        """
        self.session = session

    async def add(self, article: Article) -> Article:
        """Добавить статью в сессию."""
        try:
            self.session.add(self._to_model(article))
            await self.session.flush()
        except SQLAlchemyError as e:
            raise PersistenceFailureError(f"Failed to store article {article.id}: {e}") from e
        return article

    async def update(self, article: Article) -> Article:
        """Перенести изменения сущности в модель."""
        try:
            model = await self.session.get(ArticleModel, article.id)
            if model is None:
                raise PersistenceFailureError(f"Article {article.id} disappeared from storage")
            self._copy_to_model(article, model)
            await self.session.flush()
        except SQLAlchemyError as e:
            raise PersistenceFailureError(f"Failed to update article {article.id}: {e}") from e
        return article

    async def find_by_id(self, article_id: UUID, for_update: bool = False) -> Optional[Article]:
        """Найти статью по ID."""
        query = select(ArticleModel).where(ArticleModel.id == article_id)
        if for_update:
            query = query.with_for_update()
        try:
            result = await self.session.execute(query)
        except SQLAlchemyError as e:
            raise PersistenceFailureError(f"Failed to load article {article_id}: {e}") from e
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def find_all(self, status: Optional[ArticleStatus] = None) -> List[Article]:
        """Получить список статей с фильтрацией по статусу."""
        query = select(ArticleModel)
        if status:
            query = query.where(ArticleModel.status == status.value)
        query = query.order_by(ArticleModel.created_at.desc())

        try:
            result = await self.session.execute(query)
        except SQLAlchemyError as e:
            raise PersistenceFailureError(f"Failed to list articles: {e}") from e
        return [self._to_entity(m) for m in result.scalars().all()]

    # =========================================================================
    # Маппинг Entity ↔ Model
    # =========================================================================

    def _to_model(self, entity: Article) -> ArticleModel:
        """Конвертация доменной сущности Article → ArticleModel."""
        model = ArticleModel(id=entity.id)
        self._copy_to_model(entity, model)
        return model

    @staticmethod
    def _copy_to_model(entity: Article, model: ArticleModel) -> None:
        model.title = entity.title
        model.content = entity.content
        model.featured_image = entity.featured_image
        model.status = entity.status.value
        model.is_published = entity.is_published
        model.feedback = entity.feedback
        model.created_at = entity.created_at
        model.updated_at = entity.updated_at
        model.published_at = entity.published_at
        model.approved_at = entity.approved_at
        model.approved_by = entity.approved_by
        model.rejected_at = entity.rejected_at
        model.rejected_by = entity.rejected_by

    @staticmethod
    def _to_entity(model: ArticleModel) -> Article:
        """Конвертация ArticleModel → доменная сущность Article."""
        return Article(
            id=model.id,
            title=model.title,
            content=model.content,
            featured_image=model.featured_image,
            status=ArticleStatus(model.status),
            is_published=bool(model.is_published),
            feedback=model.feedback,
            created_at=model.created_at,
            updated_at=model.updated_at,
            published_at=model.published_at,
            approved_at=model.approved_at,
            approved_by=model.approved_by,
            rejected_at=model.rejected_at,
            rejected_by=model.rejected_by,
        )
