"""API router for participant reviews."""

from typing import List

from fastapi import APIRouter, Depends, Path, status

from signdesk.core.dependencies import get_review_service
from signdesk.domain.models.user import User
from signdesk.presentation.api.routers.user_router import get_current_user
from signdesk.presentation.api.schemas.review_schemas import (
    CreateReviewRequest,
    EligibilityResponse,
    FeaturedReviewResponse,
    ReviewResponse,
)
from signdesk.services.review_service import ReviewService

router = APIRouter(prefix="/api/reviews", tags=["Reviews"])


@router.get("/featured", response_model=List[FeaturedReviewResponse])
async def get_featured_reviews(
    service: ReviewService = Depends(get_review_service),
) -> List[FeaturedReviewResponse]:
    """Public: recent well-rated reviews with a comment."""
    return [
        FeaturedReviewResponse(
            reviewer_name=review.reviewer_name,
            reviewer_role=review.reviewer_role,
            average_rating=review.average_rating,
            comment=review.comment,
            created_at=review.created_at,
        )
        for review in service.get_featured_reviews()
    ]


@router.get(
    "/packages/{packageId}/participant/{participantId}/review/eligibility",
    response_model=EligibilityResponse,
)
async def check_eligibility(
    package_id: int = Path(..., alias="packageId"),
    participant_id: str = Path(..., min_length=1, alias="participantId"),
    service: ReviewService = Depends(get_review_service),
) -> EligibilityResponse:
    """Public: anyone with the review link can check it."""
    result = service.check_eligibility(package_id, participant_id)
    return EligibilityResponse(eligible=result.eligible, reason=result.reason, questions=result.questions)


@router.post(
    "/packages/{packageId}/participant/{participantId}/review",
    response_model=ReviewResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_review(
    payload: CreateReviewRequest,
    package_id: int = Path(..., alias="packageId"),
    participant_id: str = Path(..., min_length=1, alias="participantId"),
    service: ReviewService = Depends(get_review_service),
) -> ReviewResponse:
    """Public: submit the participant's single review of a completed package."""
    review = service.create_review(
        package_id,
        participant_id,
        answers=payload.answers.as_answers(),
        comment=payload.comment,
    )
    return ReviewResponse.from_review(review)


@router.get("/packages/{packageId}/reviews", response_model=List[ReviewResponse])
async def get_reviews_for_package(
    package_id: int = Path(..., alias="packageId"),
    user: User = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service),
) -> List[ReviewResponse]:
    """Owner only: every review of one of the caller's packages."""
    return [ReviewResponse.from_review(review) for review in service.get_reviews_for_package(user.id, package_id)]
