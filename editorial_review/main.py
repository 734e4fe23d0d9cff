"""
FastAPI Application Entry Point.

Путь: editorial_review/main.py

Запуск:
    uvicorn editorial_review.main:app --reload
"""

import logging
from contextlib import asynccontextmanager
from typing import Dict, Optional, Type

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from editorial_review.api.routes import articles
from editorial_review.api.routes import reviews
from editorial_review.container import build_container
from editorial_review.domain.services.analysis_engine import IAnalysisEngine
from editorial_review.infrastructure.config.database import create_tables
from editorial_review.infrastructure.config.settings import Settings, get_settings
from editorial_review.shared.exceptions.domain_exceptions import (
    BusinessRuleViolation,
    DomainException,
    DomainValidationError,
    EntityNotFoundError,
    ForbiddenActionError,
    InvalidTransitionError,
)
from editorial_review.shared.exceptions.infrastructure_exceptions import (
    AnalysisEngineError,
    AnalysisUnavailableError,
    InfrastructureException,
    PersistenceFailureError,
)
from editorial_review.shared.logging_config import setup_logging

VERSION = "1.0.0"

logger = logging.getLogger(__name__)

# Наиболее специфичный класс в MRO исключения определяет HTTP статус
ERROR_STATUS_CODES: Dict[Type[Exception], int] = {
    DomainValidationError: 422,
    EntityNotFoundError: 404,
    InvalidTransitionError: 409,
    BusinessRuleViolation: 409,
    ForbiddenActionError: 403,
    PersistenceFailureError: 503,
    AnalysisUnavailableError: 503,
    AnalysisEngineError: 502,
}


def status_code_for(error: Exception) -> int:
    for cls in type(error).__mro__:
        if cls in ERROR_STATUS_CODES:
            return ERROR_STATUS_CODES[cls]
    return 500


async def _error_handler(request: Request, exc: Exception) -> JSONResponse:
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.error(f"[API] {request.method} {request.url.path} → {status_code}: {exc}")
    return JSONResponse(
        status_code=status_code,
        content={
            "error": type(exc).__name__,
            "detail": str(exc),
            "current_status": getattr(exc, "current_status", None),
        },
    )


def create_app(
    settings: Optional[Settings] = None,
    analysis_engine: Optional[IAnalysisEngine] = None,
) -> FastAPI:
    """
    Создать приложение.

    Аргументы:
        settings: Настройки (по умолчанию get_settings())
        analysis_engine: Движок анализа вместо HTTP-клиента (для тестов)
    """
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        container = build_container(settings, analysis_engine=analysis_engine)
        if container.db_engine is not None:
            await create_tables(container.db_engine)
        await container.start()
        app.state.container = container
        logger.info("[API] Editorial Review started")
        try:
            yield
        finally:
            await container.close()
            logger.info("[API] Editorial Review stopped")

    app = FastAPI(
        title="Editorial Review API",
        description="Проверка статей: анализ контента, решения ревьюеров, публикация",
        version=VERSION,
        debug=settings.debug,
        lifespan=lifespan,
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(DomainException, _error_handler)
    app.add_exception_handler(InfrastructureException, _error_handler)

    # Routes
    app.include_router(articles.router, prefix="/api/v1")
    app.include_router(reviews.router, prefix="/api/v1")

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "version": VERSION,
            "persistence": settings.persistence_backend,
        }

    return app


app = create_app()
