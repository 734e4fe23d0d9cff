# -*- coding: utf-8 -*-
"""
HTTP-клиент внешнего движка анализа контента.

Ожидаемый ответ движка (JSON, можно внутри ```json``` блока):

    {
        "overallScore": 0.87,
        "contentQuality": {"score": 0.9, "feedback": "..."},
        "grammar": {"score": 0.8, "feedback": "..."},
        "seo": {"score": 0.7, "suggestions": ["..."]},
        "originality": 0.95,
        "feedback": "...",
        "recommendations": ["..."],
        "flaggedIssues": ["..."]
    }

Если ответ не разбирается, возвращается нейтральный результат (0.5),
который политика отправит на ручную проверку.
"""

import json
import logging
import re
import time
from typing import Any, Dict, Optional

import aiohttp

from editorial_review.domain.entities.analysis_result import AnalysisResult
from editorial_review.domain.entities.article import Article
from editorial_review.domain.services.analysis_engine import IAnalysisEngine
from editorial_review.shared.exceptions.domain_exceptions import DomainValidationError
from editorial_review.shared.exceptions.infrastructure_exceptions import AnalysisEngineError

logger = logging.getLogger(__name__)

_JSON_CODE_BLOCK = re.compile(r"```(?:json)?\s*(\{[\s\S]*?\})\s*```")
_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")

FALLBACK_SCORE = 0.5
MANUAL_REVIEW_NOTE = "Manual review required"
RAW_RESPONSE_PREVIEW = 500


class HttpAnalysisEngine(IAnalysisEngine):
    """
    Адаптер IAnalysisEngine поверх HTTP API.

    Использование:
        async with HttpAnalysisEngine(url, api_key, model) as engine:
            result = await engine.analyze(article)
    """

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        model: str = "gpt-4o-mini",
        min_word_count: int = 50,
        max_word_count: int = 5000,
    ):
        self.base_url = base_url.rstrip('/')
        self.api_key = api_key
        self.model = model
        self.min_word_count = min_word_count
        self.max_word_count = max_word_count
        self.session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def start(self) -> None:
        if self.session is None:
            headers = {}
            if self.api_key:
                headers["Authorization"] = f"Bearer {self.api_key}"
            self.session = aiohttp.ClientSession(headers=headers)

    async def close(self) -> None:
        if self.session:
            await self.session.close()
            self.session = None

    # =========================================================================
    # IAnalysisEngine
    # =========================================================================

    async def analyze(self, article: Article) -> AnalysisResult:
        """
        Проанализировать статью.

        Raises:
            AnalysisEngineError: permanent=True для 4xx и контента вне
                допустимого числа слов, иначе временная ошибка
        """
        self._check_content(article)

        started = time.monotonic()
        raw = await self._request(
            "POST",
            "api/v1/analyze",
            json={
                "articleId": str(article.id),
                "title": article.title,
                "content": article.content,
                "model": self.model,
            },
        )
        elapsed_ms = int((time.monotonic() - started) * 1000)

        result = self.parse_response(article, raw, elapsed_ms)
        logger.debug(
            f"[AnalysisEngine] Article {article.id}: overall={result.confidence_score:.2f}, "
            f"{elapsed_ms}ms"
        )
        return result

    # =========================================================================
    # HTTP
    # =========================================================================

    async def _request(self, method: str, endpoint: str, **kwargs) -> str:
        if not self.session:
            raise RuntimeError("Client not initialized. Use async with.")

        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        try:
            async with self.session.request(method, url, **kwargs) as response:
                response.raise_for_status()
                body = await response.read()
            # невалидные байты заменяются на U+FFFD
            return body.decode("utf-8", errors="replace")
        except aiohttp.ClientResponseError as e:
            permanent = 400 <= e.status < 500
            raise AnalysisEngineError(
                f"Analysis engine returned HTTP {e.status}: {e.message}",
                permanent=permanent,
            ) from e
        except aiohttp.ClientError as e:
            raise AnalysisEngineError(f"Analysis engine unreachable: {e}") from e

    # =========================================================================
    # Разбор ответа
    # =========================================================================

    def _check_content(self, article: Article) -> None:
        words = article.word_count()
        if not article.title.strip():
            raise AnalysisEngineError("Article has no title", permanent=True)
        if words < self.min_word_count or words > self.max_word_count:
            raise AnalysisEngineError(
                f"Article has {words} words, expected {self.min_word_count}-{self.max_word_count}",
                permanent=True,
            )

    def parse_response(self, article: Article, raw: str, processing_time_ms: int = 0) -> AnalysisResult:
        """
        Построить AnalysisResult из ответа движка.

        Неразбираемый ответ не является ошибкой: возвращается нейтральный
        результат с пометкой о ручной проверке.
        """
        payload = self._extract_json(raw)
        if payload is not None:
            try:
                return self._build_result(article, payload, processing_time_ms)
            except (KeyError, TypeError, ValueError, DomainValidationError) as e:
                logger.warning(f"[AnalysisEngine] Invalid payload for {article.id}: {e}")

        logger.warning(f"[AnalysisEngine] Failed to parse response for {article.id}, using fallback")
        return AnalysisResult(
            article_id=article.id,
            confidence_score=FALLBACK_SCORE,
            analysis=f"AI analysis completed but requires manual review. Raw response: {_preview(raw)}",
            recommendations=MANUAL_REVIEW_NOTE,
            flagged_issues=(MANUAL_REVIEW_NOTE,),
            ai_model=self.model,
            processing_time_ms=processing_time_ms,
        )

    @staticmethod
    def _extract_json(raw: Optional[str]) -> Optional[Dict[str, Any]]:
        if not raw or not raw.strip():
            return None

        candidates = []
        block = _JSON_CODE_BLOCK.search(raw)
        if block:
            candidates.append(block.group(1))
        obj = _JSON_OBJECT.search(raw)
        if obj:
            candidates.append(obj.group())

        for candidate in candidates:
            try:
                data = json.loads(candidate)
            except json.JSONDecodeError:
                continue
            if isinstance(data, dict):
                return data
        return None

    def _build_result(self, article: Article, data: Dict[str, Any], processing_time_ms: int) -> AnalysisResult:
        recommendations = data.get("recommendations") or []
        if isinstance(recommendations, str):
            recommendations = [recommendations]

        return AnalysisResult(
            article_id=article.id,
            confidence_score=float(data["overallScore"]),
            readability_score=_score(data.get("contentQuality")),
            grammar_score=_score(data.get("grammar")),
            seo_score=_score(data.get("seo")),
            originality_score=_score(data.get("originality")),
            analysis=str(data.get("feedback") or ""),
            recommendations="\n".join(str(r) for r in recommendations),
            flagged_issues=tuple(str(i) for i in data.get("flaggedIssues") or []),
            ai_model=str(data.get("model") or self.model),
            processing_time_ms=processing_time_ms,
        )


def _score(section: Any) -> Optional[float]:
    """Оценка секции: число или {"score": число}."""
    if section is None:
        return None
    if isinstance(section, dict):
        value = section.get("score")
        return None if value is None else float(value)
    return float(section)


def _preview(raw: Optional[str]) -> str:
    raw = raw or ""
    if len(raw) <= RAW_RESPONSE_PREVIEW:
        return raw
    return raw[:RAW_RESPONSE_PREVIEW] + "..."
