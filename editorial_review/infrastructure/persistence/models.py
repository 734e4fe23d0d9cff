# -*- coding: utf-8 -*-
"""
SQLAlchemy модели — инфраструктурный слой.

Таблицы:
- articles: статьи и их статус проверки
- analysis_results: результаты запусков анализа
- article_history: журнал переходов (только INSERT)
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    JSON,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import ARRAY, UUID
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ArticleModel(Base):
    """SQLAlchemy модель статьи."""

    __tablename__ = "articles"

    # =========================================================================
    # Основные поля
    # =========================================================================
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title = Column(String(500), nullable=False)
    content = Column(Text, nullable=False)
    featured_image = Column(String(500))

    # =========================================================================
    # Статус проверки
    # =========================================================================
    status = Column(String(50), nullable=False, default="DRAFT", index=True)
    is_published = Column(Boolean, nullable=False, default=False)
    feedback = Column(Text, comment="Обоснование последнего анализа")

    # =========================================================================
    # Временные метки
    # =========================================================================
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    published_at = Column(DateTime(timezone=True))
    approved_at = Column(DateTime(timezone=True))
    approved_by = Column(String(255))
    rejected_at = Column(DateTime(timezone=True))
    rejected_by = Column(String(255))

    def __repr__(self):
        return f"<ArticleModel(id={self.id}, status={self.status})>"


class AnalysisResultModel(Base):
    """SQLAlchemy модель результата анализа."""

    __tablename__ = "analysis_results"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    article_id = Column(
        UUID(as_uuid=True),
        ForeignKey("articles.id"),
        nullable=False,
        index=True,
    )
    decision = Column(String(50), nullable=False)
    confidence_score = Column(Float, nullable=False)

    # =========================================================================
    # Оценки качества
    # =========================================================================
    readability_score = Column(Float)
    grammar_score = Column(Float)
    seo_score = Column(Float)
    originality_score = Column(Float)

    analysis = Column(Text)
    recommendations = Column(Text)
    flagged_issues = Column(ARRAY(String), default=list)
    ai_model = Column(String(200), nullable=False)
    processing_time_ms = Column(Integer)
    analyzed_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, index=True)

    def __repr__(self):
        return f"<AnalysisResultModel(article_id={self.article_id}, decision={self.decision})>"


class HistoryEntryModel(Base):
    """
    SQLAlchemy модель записи журнала.

    Уникальность (article_id, sequence) не даёт двум писателям
    записать один и тот же переход.
    """

    __tablename__ = "article_history"
    __table_args__ = (
        UniqueConstraint("article_id", "sequence", name="uq_article_history_sequence"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    article_id = Column(
        UUID(as_uuid=True),
        ForeignKey("articles.id"),
        nullable=False,
        index=True,
    )
    sequence = Column(Integer, nullable=False)
    action = Column(String(50), nullable=False)
    from_status = Column(String(50))
    to_status = Column(String(50), nullable=False)
    performed_by = Column(String(255), nullable=False)
    reason = Column(Text)
    notes = Column(Text)

    # ВАЖНО: Названо entry_metadata (не metadata) чтобы не конфликтовать
    # с SQLAlchemy.metadata. В доменной сущности это поле называется metadata.
    entry_metadata = Column(JSON, default=dict)

    # Снимок анализа (если переход вызван анализом)
    confidence_score = Column(Float)
    ai_model = Column(String(200))
    processing_time_ms = Column(Integer)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    def __repr__(self):
        return (
            f"<HistoryEntryModel(article_id={self.article_id}, #{self.sequence}, "
            f"{self.from_status} -> {self.to_status})>"
        )
