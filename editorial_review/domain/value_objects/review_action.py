"""
Value Object: ReviewAction

Тип действия, записанного в журнал истории.
"""

from enum import Enum


class ReviewAction(str, Enum):
    """Действия над статьёй, попадающие в журнал."""

    SUBMITTED = "SUBMITTED"
    AI_ANALYSIS_STARTED = "AI_ANALYSIS_STARTED"
    AUTO_APPROVED = "AUTO_APPROVED"
    AUTO_REJECTED = "AUTO_REJECTED"
    MANUAL_REVIEW_REQUESTED = "MANUAL_REVIEW_REQUESTED"
    HUMAN_CONFIRMED = "HUMAN_CONFIRMED"
    MANUALLY_APPROVED = "MANUALLY_APPROVED"
    MANUALLY_REJECTED = "MANUALLY_REJECTED"
    ESCALATED = "ESCALATED"
    REANALYSIS_REQUESTED = "REANALYSIS_REQUESTED"
    PUBLISHED = "PUBLISHED"
    ARCHIVED = "ARCHIVED"
