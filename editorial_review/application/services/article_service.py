"""
Application Service для управления статьями.
"""

from typing import List, Optional

from editorial_review.application.commands.create_article_command import CreateArticleCommand
from editorial_review.application.commands.manual_decision_command import ManualDecisionCommand
from editorial_review.application.commands.update_article_command import UpdateArticleCommand
from editorial_review.application.handlers.article_command_handler import ArticleCommandHandler
from editorial_review.application.services.workflow_service import UnitOfWorkFactory
from editorial_review.domain.entities.article import Article
from editorial_review.domain.value_objects.article_status import ArticleStatus


class ArticleService:
    """
    Application Service для статей.

    Координирует работу между handlers и репозиториями.
    """

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        command_handler: ArticleCommandHandler
    ):
        self.uow_factory = uow_factory
        self.command_handler = command_handler

    async def create_article(self, command: CreateArticleCommand) -> Article:
        """Создать статью."""
        return await self.command_handler.handle_create_article(command)

    async def update_article(self, command: UpdateArticleCommand) -> Article:
        """Изменить контент черновика."""
        return await self.command_handler.handle_update_article(command)

    async def decide(self, command: ManualDecisionCommand) -> Article:
        """Ручное решение ревьюера."""
        return await self.command_handler.handle_manual_decision(command)

    async def list_articles(self, status: Optional[ArticleStatus] = None) -> List[Article]:
        """Получить список статей."""
        async with self.uow_factory() as uow:
            return await uow.articles.find_all(status=status)
