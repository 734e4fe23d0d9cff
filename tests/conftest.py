"""
Общие фикстуры тестов.

Все сервисные тесты работают на хранилище в памяти.
"""

from typing import Callable, Iterable, List, Optional

import pytest

from editorial_review.application.commands.create_article_command import CreateArticleCommand
from editorial_review.application.handlers.article_command_handler import ArticleCommandHandler
from editorial_review.application.services.article_locks import ArticleLockRegistry
from editorial_review.application.services.workflow_service import WorkflowService
from editorial_review.domain.entities.analysis_result import AnalysisResult
from editorial_review.domain.entities.article import Article
from editorial_review.domain.services.analysis_engine import IAnalysisEngine
from editorial_review.infrastructure.auth.static_authorization import StaticReviewerAuthorization
from editorial_review.infrastructure.persistence import InMemoryStore, InMemoryUnitOfWork

REVIEWER = "editor@example.com"
SECOND_REVIEWER = "chief@example.com"

ARTICLE_CONTENT = " ".join(["Содержательный текст статьи о проверке контента."] * 20)


class FakeAnalysisEngine(IAnalysisEngine):
    """
    Движок анализа для тестов.

    Отвечает по очереди значениями из responses: исключение поднимается,
    словарь превращается в AnalysisResult для переданной статьи.
    """

    def __init__(self, responses: Iterable = ()):
        self.responses = list(responses)
        self.calls: List[Article] = []

    async def analyze(self, article: Article) -> AnalysisResult:
        self.calls.append(article)
        response = self.responses.pop(0) if self.responses else scores(0.85, 0.7)
        if isinstance(response, BaseException):
            raise response
        if callable(response):
            return await response(article)
        return AnalysisResult(article_id=article.id, **response)


def scores(confidence: float, quality: Optional[float] = None, **overrides) -> dict:
    """Параметры AnalysisResult: уверенность и одинаковые оценки качества."""
    values = {
        "confidence_score": confidence,
        "readability_score": quality,
        "grammar_score": quality,
        "seo_score": quality,
        "originality_score": quality,
        "analysis": f"confidence {confidence}",
        "ai_model": "test-model",
        "processing_time_ms": 12,
    }
    values.update(overrides)
    return values


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def uow_factory(store) -> Callable[[], InMemoryUnitOfWork]:
    return lambda: InMemoryUnitOfWork(store)


@pytest.fixture
def locks() -> ArticleLockRegistry:
    return ArticleLockRegistry()


@pytest.fixture
def authorization() -> StaticReviewerAuthorization:
    return StaticReviewerAuthorization({REVIEWER, SECOND_REVIEWER})


@pytest.fixture
def workflow(uow_factory, authorization, locks) -> WorkflowService:
    return WorkflowService(uow_factory, authorization, locks=locks)


@pytest.fixture
def command_handler(uow_factory, locks, workflow) -> ArticleCommandHandler:
    return ArticleCommandHandler(uow_factory, locks, workflow)


@pytest.fixture
def create_draft(command_handler):
    """Фабрика черновиков в хранилище."""

    async def _create(title: str = "Тестовая статья", content: str = ARTICLE_CONTENT) -> Article:
        return await command_handler.handle_create_article(
            CreateArticleCommand(title=title, content=content)
        )

    return _create
