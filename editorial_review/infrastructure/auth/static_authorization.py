"""
Авторизация ревьюеров по статическому списку из настроек.
"""

import logging
from typing import Iterable

from editorial_review.domain.services.authorization import IReviewerAuthorization

logger = logging.getLogger(__name__)


class StaticReviewerAuthorization(IReviewerAuthorization):
    """Ревьюер — любой идентификатор из сконфигурированного списка."""

    def __init__(self, reviewers: Iterable[str]):
        self.reviewers = frozenset(reviewers)
        if not self.reviewers:
            logger.warning("[Auth] Reviewer list is empty: manual decisions will be refused")

    async def can_review(self, actor: str) -> bool:
        return actor in self.reviewers
