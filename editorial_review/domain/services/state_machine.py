# -*- coding: utf-8 -*-
"""
Domain Service: ReviewStateMachine

Единственное место, где проверяются переходы статуса статьи.

Состояния:
    DRAFT → SUBMITTED_FOR_APPROVAL → UNDER_AI_REVIEW → AI_APPROVED → (APPROVED) → PUBLISHED → ARCHIVED
                                                    ↘ AI_REJECTED → REJECTED → ARCHIVED
                                                    ↘ MANUAL_REVIEW_REQUIRED → APPROVED / REJECTED

Машина не выполняет I/O: она меняет статью в памяти и накапливает записи
журнала в pending_entries. Фиксацию (статья + журнал в одной транзакции)
выполняет WorkflowService.

Использование:
    machine = ReviewStateMachine(article, next_sequence=await history.next_sequence(article.id))
    machine.submit()
    for entry in machine.pending_entries:
        await history.append(entry)
"""

import logging
from typing import Any, Dict, FrozenSet, List, Optional

from editorial_review.domain.entities.analysis_result import AnalysisResult
from editorial_review.domain.entities.article import Article
from editorial_review.domain.entities.history_entry import SYSTEM_ACTOR, HistoryEntry
from editorial_review.domain.value_objects.article_status import REANALYSIS_SOURCES, ArticleStatus
from editorial_review.domain.value_objects.review_action import ReviewAction
from editorial_review.domain.value_objects.review_decision import ReviewDecision
from editorial_review.shared.exceptions.domain_exceptions import (
    DomainValidationError,
    InvalidTransitionError,
)
from editorial_review.shared.time_utils import utcnow

logger = logging.getLogger(__name__)

MANUAL_DECISION_SOURCES: FrozenSet[ArticleStatus] = frozenset({
    ArticleStatus.AI_REJECTED,
    ArticleStatus.MANUAL_REVIEW_REQUIRED,
})

PUBLISH_SOURCES: FrozenSet[ArticleStatus] = frozenset({
    ArticleStatus.AI_APPROVED,
    ArticleStatus.APPROVED,
})

ARCHIVE_SOURCES: FrozenSet[ArticleStatus] = frozenset({
    ArticleStatus.PUBLISHED,
    ArticleStatus.REJECTED,
})

_ANALYSIS_ACTIONS = {
    ReviewDecision.APPROVED: ReviewAction.AUTO_APPROVED,
    ReviewDecision.REJECTED: ReviewAction.AUTO_REJECTED,
    ReviewDecision.MANUAL_REVIEW_REQUIRED: ReviewAction.MANUAL_REVIEW_REQUESTED,
}


class ReviewStateMachine:
    """
    Машина состояний проверки одной статьи.

    Каждая операция сначала проверяет собственный набор исходных статусов,
    затем общий перечень переходов ArticleStatus. Отклонённый переход
    не меняет ни статью, ни pending_entries.
    """

    def __init__(self, article: Article, next_sequence: int = 1):
        self.article = article
        self._sequence = next_sequence
        self.pending_entries: List[HistoryEntry] = []

    @property
    def current_status(self) -> ArticleStatus:
        return self.article.status

    # =========================================================================
    # Операции
    # =========================================================================

    def submit(self, performed_by: str = SYSTEM_ACTOR, reason: str = "") -> None:
        """DRAFT → SUBMITTED_FOR_APPROVAL → UNDER_AI_REVIEW (две записи журнала)."""
        self._require({ArticleStatus.DRAFT}, ArticleStatus.SUBMITTED_FOR_APPROVAL)
        self._transition(
            ArticleStatus.SUBMITTED_FOR_APPROVAL,
            ReviewAction.SUBMITTED,
            performed_by,
            reason or "Submitted for approval",
        )
        self._transition(
            ArticleStatus.UNDER_AI_REVIEW,
            ReviewAction.AI_ANALYSIS_STARTED,
            SYSTEM_ACTOR,
            "Automated analysis started",
        )

    def apply_analysis(self, result: AnalysisResult) -> ArticleStatus:
        """
        UNDER_AI_REVIEW → статус по result.decision.

        Повторное применение после ухода из UNDER_AI_REVIEW отклоняется:
        новый анализ требует явного reanalyze().
        """
        if result.decision is None:
            raise DomainValidationError("Analysis result has no decision")
        if result.article_id != self.article.id:
            raise DomainValidationError(
                f"Analysis result belongs to article {result.article_id}, not {self.article.id}"
            )

        target = result.decision.ai_status()
        self._require({ArticleStatus.UNDER_AI_REVIEW}, target)

        self._transition(
            target,
            _ANALYSIS_ACTIONS[result.decision],
            SYSTEM_ACTOR,
            result.analysis or f"Automated decision: {result.decision.value}",
            metadata={"analysis_id": str(result.id)},
            confidence_score=result.confidence_score,
            ai_model=result.ai_model,
            processing_time_ms=result.processing_time_ms,
        )
        self.article.feedback = result.analysis or None
        return target

    def reanalyze(self, performed_by: str, reason: str = "") -> None:
        """Явный возврат в UNDER_AI_REVIEW для повторного анализа."""
        self._require(
            REANALYSIS_SOURCES,
            ArticleStatus.UNDER_AI_REVIEW,
            reanalysis=True,
            reason="re-analysis is allowed from a decided, non-terminal status",
        )
        self._transition(
            ArticleStatus.UNDER_AI_REVIEW,
            ReviewAction.REANALYSIS_REQUESTED,
            performed_by,
            reason or "Re-analysis requested",
            reanalysis=True,
        )

    def manual_decide(
        self,
        decision: ReviewDecision,
        performed_by: str,
        reason: str,
        notes: Optional[str] = None,
    ) -> ArticleStatus:
        """AI_REJECTED / MANUAL_REVIEW_REQUIRED → APPROVED / REJECTED."""
        if decision == ReviewDecision.APPROVED:
            target, action = ArticleStatus.APPROVED, ReviewAction.MANUALLY_APPROVED
        elif decision == ReviewDecision.REJECTED:
            target, action = ArticleStatus.REJECTED, ReviewAction.MANUALLY_REJECTED
        else:
            raise DomainValidationError("Manual decision must be APPROVED or REJECTED")

        self._require(
            MANUAL_DECISION_SOURCES,
            target,
            reason="manual decision requires AI_REJECTED or MANUAL_REVIEW_REQUIRED",
        )
        self._transition(target, action, performed_by, reason, notes=notes)
        return target

    def confirm_approval(self, performed_by: str, reason: str = "") -> None:
        """AI_APPROVED → APPROVED (подтверждение человеком)."""
        self._require({ArticleStatus.AI_APPROVED}, ArticleStatus.APPROVED)
        self._transition(
            ArticleStatus.APPROVED,
            ReviewAction.HUMAN_CONFIRMED,
            performed_by,
            reason or "Automated approval confirmed",
        )

    def escalate(self, performed_by: str, reason: str) -> None:
        """AI_REJECTED → MANUAL_REVIEW_REQUIRED (человек оспаривает отклонение)."""
        self._require({ArticleStatus.AI_REJECTED}, ArticleStatus.MANUAL_REVIEW_REQUIRED)
        self._transition(
            ArticleStatus.MANUAL_REVIEW_REQUIRED,
            ReviewAction.ESCALATED,
            performed_by,
            reason,
        )

    def publish(self, performed_by: str = SYSTEM_ACTOR, reason: str = "") -> None:
        """AI_APPROVED / APPROVED → PUBLISHED."""
        self._require(PUBLISH_SOURCES, ArticleStatus.PUBLISHED)
        self._transition(
            ArticleStatus.PUBLISHED,
            ReviewAction.PUBLISHED,
            performed_by,
            reason or "Published",
        )

    def archive(self, performed_by: str = SYSTEM_ACTOR, reason: str = "") -> None:
        """PUBLISHED / REJECTED → ARCHIVED."""
        self._require(ARCHIVE_SOURCES, ArticleStatus.ARCHIVED)
        self._transition(
            ArticleStatus.ARCHIVED,
            ReviewAction.ARCHIVED,
            performed_by,
            reason or "Archived",
        )

    # =========================================================================
    # Внутреннее
    # =========================================================================

    def _require(
        self,
        sources,
        target: ArticleStatus,
        reanalysis: bool = False,
        reason: str = "",
    ) -> None:
        current = self.current_status
        if current in sources and current.can_transition_to(target, reanalysis=reanalysis):
            return
        raise InvalidTransitionError(
            self.article.id,
            current.value,
            target.value,
            allowed=[s.value for s in current.allowed_targets(reanalysis=reanalysis)],
            reason=reason,
        )

    def _transition(
        self,
        target: ArticleStatus,
        action: ReviewAction,
        performed_by: str,
        reason: str,
        notes: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        confidence_score: Optional[float] = None,
        ai_model: Optional[str] = None,
        processing_time_ms: Optional[int] = None,
        reanalysis: bool = False,
    ) -> None:
        current = self.current_status
        # Страховка: все операции уже проверены в _require
        if not current.can_transition_to(target, reanalysis=reanalysis):
            raise InvalidTransitionError(
                self.article.id,
                current.value,
                target.value,
                allowed=[s.value for s in current.allowed_targets(reanalysis=reanalysis)],
            )

        now = utcnow()
        self._on_enter(target, performed_by, now)
        self.article.status = target
        self.article.updated_at = now

        self.pending_entries.append(HistoryEntry(
            article_id=self.article.id,
            sequence=self._sequence,
            action=action,
            from_status=current,
            to_status=target,
            performed_by=performed_by,
            reason=reason,
            notes=notes,
            metadata=metadata or {},
            confidence_score=confidence_score,
            ai_model=ai_model,
            processing_time_ms=processing_time_ms,
            created_at=now,
        ))
        self._sequence += 1

        logger.debug(
            f"[StateMachine] Article {self.article.id}: {current.value} → {target.value} ({action.value})"
        )

    def _on_enter(self, target: ArticleStatus, performed_by: str, now) -> None:
        article = self.article

        if target in (ArticleStatus.AI_APPROVED, ArticleStatus.APPROVED):
            article.approved_at = now
            article.approved_by = performed_by
        elif target in (ArticleStatus.AI_REJECTED, ArticleStatus.REJECTED):
            article.rejected_at = now
            article.rejected_by = performed_by
        elif target == ArticleStatus.PUBLISHED:
            article.is_published = True
            article.published_at = now
        elif target == ArticleStatus.UNDER_AI_REVIEW:
            # Прошлое решение больше не действует
            article.approved_at = article.approved_by = None
            article.rejected_at = article.rejected_by = None
