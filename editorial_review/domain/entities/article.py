# -*- coding: utf-8 -*-
"""
Доменная сущность: Статья (Article)

Статусом статьи владеет движок проверки (ReviewStateMachine);
контентом (title, content, featured_image) — автор, и только пока
статья находится в DRAFT.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from editorial_review.domain.value_objects.article_status import ArticleStatus
from editorial_review.shared.exceptions.domain_exceptions import (
    DomainValidationError,
    InvalidTransitionError,
)
from editorial_review.shared.time_utils import utcnow

MAX_TITLE_LENGTH = 500
MAX_IMAGE_REF_LENGTH = 500


@dataclass
class Article:
    """
    Доменная сущность статьи.

    Инварианты:
    - Статья всегда имеет уникальный ID
    - Заголовок не может быть пустым (max 500 символов)
    - Контент не может быть пустым
    - status всегда один из ArticleStatus
    """

    # =========================================================================
    # Идентификация
    # =========================================================================
    id: UUID = field(default_factory=uuid4)

    # =========================================================================
    # Контент (владелец — автор)
    # =========================================================================
    title: str = field(default="")
    content: str = field(default="")
    featured_image: Optional[str] = None

    # =========================================================================
    # Статус проверки (владелец — движок)
    # =========================================================================
    status: ArticleStatus = ArticleStatus.DRAFT
    is_published: bool = False
    feedback: Optional[str] = None

    # =========================================================================
    # Временные метки
    # =========================================================================
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    published_at: Optional[datetime] = None
    approved_at: Optional[datetime] = None
    approved_by: Optional[str] = None
    rejected_at: Optional[datetime] = None
    rejected_by: Optional[str] = None

    def __post_init__(self):
        """Валидация инвариантов после инициализации."""
        if not isinstance(self.status, ArticleStatus):
            self.status = ArticleStatus(self.status)
        self.validate()

    def validate(self) -> None:
        """
        Проверка инвариантов сущности.

        Исключения:
            DomainValidationError: Если инварианты нарушены
        """
        if not self.title or len(self.title.strip()) == 0:
            raise DomainValidationError("Article title cannot be empty")

        if len(self.title) > MAX_TITLE_LENGTH:
            raise DomainValidationError(f"Article title too long (max {MAX_TITLE_LENGTH} chars)")

        if not self.content or len(self.content.strip()) == 0:
            raise DomainValidationError("Article content cannot be empty")

        if self.featured_image and len(self.featured_image) > MAX_IMAGE_REF_LENGTH:
            raise DomainValidationError(f"Featured image reference too long (max {MAX_IMAGE_REF_LENGTH} chars)")

    # =========================================================================
    # Авторский контент
    # =========================================================================

    def edit_content(
        self,
        title: Optional[str] = None,
        content: Optional[str] = None,
        featured_image: Optional[str] = None,
    ) -> None:
        """
        Изменить контент статьи.

        Разрешено только в DRAFT; пустые значения игнорируются.

        Исключения:
            InvalidTransitionError: Статья уже ушла на проверку
        """
        if self.status != ArticleStatus.DRAFT:
            raise InvalidTransitionError(
                self.id,
                self.status.value,
                None,
                reason="content can only be edited in DRAFT",
            )

        if title and title.strip():
            self.title = title
        if content and content.strip():
            self.content = content
        if featured_image is not None:
            self.featured_image = featured_image

        self.validate()
        self.updated_at = utcnow()

    def word_count(self) -> int:
        """Количество слов в контенте."""
        return len(self.content.split())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Article):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __repr__(self) -> str:
        return f"Article(id={self.id}, title='{self.title[:50]}', status={self.status.value})"
