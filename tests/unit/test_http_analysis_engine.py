"""
Tests для HttpAnalysisEngine с подменённой aiohttp-сессией.
"""

import json
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest

from conftest import ARTICLE_CONTENT
from editorial_review.domain.entities.article import Article
from editorial_review.infrastructure.analysis.http_analysis_engine import (
    FALLBACK_SCORE,
    MANUAL_REVIEW_NOTE,
    RAW_RESPONSE_PREVIEW,
    HttpAnalysisEngine,
)
from editorial_review.shared.exceptions.infrastructure_exceptions import AnalysisEngineError

PAYLOAD = {
    "overallScore": 0.87,
    "contentQuality": {"score": 0.9, "feedback": "Хорошая структура"},
    "grammar": {"score": 0.8, "feedback": "Мелкие опечатки"},
    "seo": {"score": 0.7, "suggestions": ["Добавить мета-описание"]},
    "originality": 0.95,
    "feedback": "Статья готова к публикации",
    "recommendations": ["Добавить мета-описание", "Сократить вступление"],
    "flaggedIssues": [],
}


@pytest.fixture
def article():
    return Article(title="Проверка контента", content=ARTICLE_CONTENT)


@pytest.fixture
def engine():
    client = HttpAnalysisEngine("http://engine.test/", api_key="secret", model="test-model", min_word_count=10)
    client.session = MagicMock()
    return client


def respond(engine, body=None, error=None):
    response = MagicMock()
    if isinstance(body, str):
        body = body.encode("utf-8")
    response.read = AsyncMock(return_value=body)
    if error is not None:
        response.raise_for_status.side_effect = error
    engine.session.request.return_value.__aenter__.return_value = response
    return response


def http_error(status):
    return aiohttp.ClientResponseError(
        request_info=MagicMock(), history=(), status=status, message="error"
    )


@pytest.mark.asyncio
async def test_analyze_parses_payload(engine, article):
    """Тест разбора ответа движка."""
    respond(engine, json.dumps(PAYLOAD))

    result = await engine.analyze(article)

    assert result.article_id == article.id
    assert result.confidence_score == 0.87
    assert result.readability_score == 0.9
    assert result.grammar_score == 0.8
    assert result.seo_score == 0.7
    assert result.originality_score == 0.95
    assert result.analysis == "Статья готова к публикации"
    assert result.recommendations == "Добавить мета-описание\nСократить вступление"
    assert result.flagged_issues == ()
    assert result.ai_model == "test-model"
    assert result.decision is None
    assert result.processing_time_ms >= 0

    method, url = engine.session.request.call_args.args
    assert method == "POST"
    assert url == "http://engine.test/api/v1/analyze"
    assert engine.session.request.call_args.kwargs["json"]["title"] == article.title


@pytest.mark.asyncio
async def test_analyze_extracts_json_from_code_block(engine, article):
    """Тест - JSON внутри markdown-блока."""
    respond(engine, "Вот анализ:\n```json\n" + json.dumps(PAYLOAD) + "\n```\nГотово.")

    result = await engine.analyze(article)

    assert result.confidence_score == 0.87


@pytest.mark.asyncio
async def test_unparseable_response_falls_back(engine, article):
    """Тест - неразбираемый ответ даёт нейтральный результат."""
    respond(engine, "Статья в целом неплохая")

    result = await engine.analyze(article)

    assert result.confidence_score == FALLBACK_SCORE
    assert result.readability_score is None
    assert MANUAL_REVIEW_NOTE in result.flagged_issues
    assert "Raw response: Статья в целом неплохая" in result.analysis


@pytest.mark.asyncio
async def test_invalid_utf8_response_is_decoded(engine, article):
    """Тест - невалидный UTF-8 в ответе не ломает разбор."""
    respond(engine, b'{"overallScore": 0.9, "feedback": "\xff\xfe"}')

    result = await engine.analyze(article)

    assert result.confidence_score == 0.9
    assert result.analysis == "\ufffd\ufffd"


def test_fallback_truncates_raw_response(engine, article):
    """Тест - в fallback попадает только начало ответа."""
    raw = "нет json " * 500

    result = engine.parse_response(article, raw)

    assert result.confidence_score == FALLBACK_SCORE
    assert raw[:RAW_RESPONSE_PREVIEW] in result.analysis
    assert raw not in result.analysis
    assert result.analysis.endswith("...")


def test_out_of_range_score_falls_back(engine, article):
    """Тест - оценка вне [0, 1] считается неразбираемым ответом."""
    payload = dict(PAYLOAD, overallScore=87)

    result = engine.parse_response(article, json.dumps(payload))

    assert result.confidence_score == FALLBACK_SCORE


def test_missing_overall_score_falls_back(engine, article):
    """Тест - без overallScore ответ не принимается."""
    payload = {k: v for k, v in PAYLOAD.items() if k != "overallScore"}

    result = engine.parse_response(article, json.dumps(payload))

    assert result.confidence_score == FALLBACK_SCORE


@pytest.mark.asyncio
async def test_server_error_is_transient(engine, article):
    """Тест - 5xx временная ошибка."""
    respond(engine, error=http_error(503))

    with pytest.raises(AnalysisEngineError) as exc_info:
        await engine.analyze(article)

    assert exc_info.value.permanent is False


@pytest.mark.asyncio
async def test_client_error_is_permanent(engine, article):
    """Тест - 4xx постоянная ошибка."""
    respond(engine, error=http_error(422))

    with pytest.raises(AnalysisEngineError) as exc_info:
        await engine.analyze(article)

    assert exc_info.value.permanent is True


@pytest.mark.asyncio
async def test_network_error_is_transient(engine, article):
    """Тест - сетевая ошибка временная."""
    engine.session.request.side_effect = aiohttp.ClientConnectionError("connection refused")

    with pytest.raises(AnalysisEngineError) as exc_info:
        await engine.analyze(article)

    assert exc_info.value.permanent is False


@pytest.mark.asyncio
async def test_short_article_rejected_before_request(engine):
    """Тест - слишком короткая статья не отправляется."""
    short = Article(title="Коротко", content="Всего три слова")

    with pytest.raises(AnalysisEngineError) as exc_info:
        await engine.analyze(short)

    assert exc_info.value.permanent is True
    engine.session.request.assert_not_called()


@pytest.mark.asyncio
async def test_requires_session(article):
    """Тест - клиент без сессии."""
    client = HttpAnalysisEngine("http://engine.test")

    with pytest.raises(RuntimeError):
        await client.analyze(article)
