"""Pydantic schemas for review endpoints."""

from datetime import datetime
from typing import Annotated, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from signdesk.domain.models.package import ParticipantRole
from signdesk.domain.models.review import MAX_COMMENT_LENGTH, MAX_RATING, MIN_RATING, Review

Rating = Annotated[int, Field(strict=True, ge=MIN_RATING, le=MAX_RATING)]


class ReviewAnswersRequest(BaseModel):
    """One rating per standard question, keyed by the question names."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    ease_of_use: Rating = Field(..., alias="easeOfUse")
    clarity: Rating
    speed: Rating
    overall: Rating

    def as_answers(self) -> Dict[str, int]:
        return self.model_dump(by_alias=True)


class CreateReviewRequest(BaseModel):
    answers: ReviewAnswersRequest
    comment: Optional[str] = Field(None, max_length=MAX_COMMENT_LENGTH)

    @field_validator("comment", mode="before")
    @classmethod
    def _strip_comment(cls, value):
        return value.strip() if isinstance(value, str) else value


class EligibilityResponse(BaseModel):
    eligible: bool
    reason: Optional[str]
    questions: Dict[str, str]


class ReviewResponse(BaseModel):
    id: int
    package_id: int
    reviewer_id: str
    reviewer_email: str
    reviewer_name: str
    reviewer_role: ParticipantRole
    answers: Dict[str, int]
    average_rating: float
    comment: Optional[str]
    created_at: datetime

    @classmethod
    def from_review(cls, review: Review) -> "ReviewResponse":
        return cls(
            id=review.id,
            package_id=review.package_id,
            reviewer_id=review.reviewer_id,
            reviewer_email=review.reviewer_email,
            reviewer_name=review.reviewer_name,
            reviewer_role=review.reviewer_role,
            answers=review.answers,
            average_rating=review.average_rating,
            comment=review.comment,
            created_at=review.created_at,
        )


class FeaturedReviewResponse(BaseModel):
    """Public view of a review; never exposes the reviewer's email."""

    reviewer_name: str
    reviewer_role: ParticipantRole
    average_rating: float
    comment: Optional[str]
    created_at: datetime
