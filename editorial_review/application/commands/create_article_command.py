"""
CQRS Command: CreateArticleCommand

Команда для создания новой статьи (в DRAFT).
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class CreateArticleCommand:
    """
    Команда создания статьи.

    Иммутабельна (frozen=True) - следует принципу CQRS.
    """

    title: str
    content: str
    featured_image: Optional[str] = None
