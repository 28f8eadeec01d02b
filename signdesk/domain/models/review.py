"""Participant review of a completed signing package."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional

from .package import ParticipantRole

REVIEW_QUESTIONS: Dict[str, str] = {
    "easeOfUse": "How easy was the platform to use?",
    "clarity": "How clear were the instructions?",
    "speed": "How would you rate the speed of the process?",
    "overall": "What is your overall satisfaction?",
}

MIN_RATING = 1
MAX_RATING = 5
MAX_COMMENT_LENGTH = 2000


@dataclass(slots=True)
class Review:
    id: int
    package_id: int
    owner_id: int
    reviewer_id: str
    reviewer_email: str
    reviewer_name: str
    reviewer_role: ParticipantRole
    answers: Dict[str, int]
    average_rating: float
    comment: Optional[str]
    created_at: datetime
    updated_at: datetime


@dataclass(slots=True)
class ReviewEligibility:
    eligible: bool
    reason: Optional[str] = None
    questions: Dict[str, str] = field(default_factory=lambda: dict(REVIEW_QUESTIONS))
