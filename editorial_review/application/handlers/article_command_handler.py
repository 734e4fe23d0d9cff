"""
Command Handler для статей.
"""

import logging
from typing import Callable

from editorial_review.application.commands.create_article_command import CreateArticleCommand
from editorial_review.application.commands.manual_decision_command import ManualDecisionCommand
from editorial_review.application.commands.update_article_command import UpdateArticleCommand
from editorial_review.application.services.article_locks import ArticleLockRegistry
from editorial_review.application.services.workflow_service import WorkflowService
from editorial_review.domain.entities.article import Article
from editorial_review.domain.repositories.unit_of_work import IUnitOfWork
from editorial_review.shared.exceptions.domain_exceptions import EntityNotFoundError

logger = logging.getLogger(__name__)


class ArticleCommandHandler:
    """Handler для команд работы со статьями."""

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        locks: ArticleLockRegistry,
        workflow: WorkflowService,
    ):
        self.uow_factory = uow_factory
        self.locks = locks
        self.workflow = workflow

    async def handle_create_article(self, command: CreateArticleCommand) -> Article:
        """
        Обработка команды создания статьи.

        Args:
            command: Команда создания

        Returns:
            Созданная статья в DRAFT

        Raises:
            DomainValidationError: Пустой заголовок или контент
        """
        article = Article(
            title=command.title,
            content=command.content,
            featured_image=command.featured_image,
        )

        async with self.uow_factory() as uow:
            await uow.articles.add(article)
            await uow.commit()

        logger.info(f"[Articles] Created article {article.id} in DRAFT")
        return article

    async def handle_update_article(self, command: UpdateArticleCommand) -> Article:
        """
        Обработка команды изменения контента.

        Raises:
            EntityNotFoundError: Статья не найдена
            InvalidTransitionError: Статья уже не в DRAFT
        """
        async with self.locks.hold(command.article_id):
            async with self.uow_factory() as uow:
                article = await uow.articles.find_by_id(command.article_id, for_update=True)
                if article is None:
                    raise EntityNotFoundError(f"Article {command.article_id} not found")

                article.edit_content(
                    title=command.title,
                    content=command.content,
                    featured_image=command.featured_image,
                )
                await uow.articles.update(article)
                await uow.commit()

        return article

    async def handle_manual_decision(self, command: ManualDecisionCommand) -> Article:
        """Передать решение ревьюера в WorkflowService."""
        return await self.workflow.manual_decide(
            command.article_id,
            command.decision,
            command.actor,
            command.reason,
            notes=command.notes,
        )
