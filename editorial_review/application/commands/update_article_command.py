"""
CQRS Command: UpdateArticleCommand

Правка контента черновика. None — поле не меняется.
"""

from dataclasses import dataclass
from typing import Optional
from uuid import UUID


@dataclass(frozen=True)
class UpdateArticleCommand:
    """Команда изменения контента статьи."""

    article_id: UUID
    title: Optional[str] = None
    content: Optional[str] = None
    featured_image: Optional[str] = None
