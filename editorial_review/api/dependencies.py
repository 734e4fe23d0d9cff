"""
FastAPI Dependencies для DI.

Сервисы собираются один раз в lifespan (см. main.py) и берутся из app.state.
"""

from fastapi import Request

from editorial_review.application.services.article_service import ArticleService
from editorial_review.application.services.review_orchestrator import ReviewOrchestrator
from editorial_review.application.services.workflow_service import WorkflowService
from editorial_review.container import Container


def get_container(request: Request) -> Container:
    return request.app.state.container


async def get_article_service(request: Request) -> ArticleService:
    """DI для service."""
    return get_container(request).articles


async def get_workflow_service(request: Request) -> WorkflowService:
    """DI для workflow."""
    return get_container(request).workflow


async def get_orchestrator(request: Request) -> ReviewOrchestrator:
    """DI для оркестратора."""
    return get_container(request).orchestrator
