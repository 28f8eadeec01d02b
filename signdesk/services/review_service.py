"""Service for package reviews submitted by signing participants."""

from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional

from signdesk.domain.errors import (
    BusinessRuleError,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ReviewValidationError,
)
from signdesk.domain.models import (
    Package,
    PackageStatus,
    Participant,
    ParticipantRole,
    Review,
    ReviewEligibility,
)
from signdesk.domain.models.review import (
    MAX_COMMENT_LENGTH,
    MAX_RATING,
    MIN_RATING,
    REVIEW_QUESTIONS,
)
from signdesk.domain.ports.persistence import PackageRepository, ReviewRepository, UserRepository
from signdesk.services.email_service import EmailService

logger = logging.getLogger(__name__)

NOT_A_PARTICIPANT = "You are not a participant in this package."
PACKAGE_NOT_COMPLETED = "Reviews can only be submitted for completed packages."
ALREADY_REVIEWED = "You have already submitted a review for this package."

FEATURED_MIN_RATING = 4
FEATURED_LIMIT = 5


class ReviewService:
    """Allows one review per package and participant email."""

    def __init__(
        self,
        review_repository: ReviewRepository,
        package_repository: PackageRepository,
        user_repository: UserRepository,
        email_service: EmailService,
    ):
        self.review_repository = review_repository
        self.package_repository = package_repository
        self.user_repository = user_repository
        self.email_service = email_service

    def check_eligibility(self, package_id: int, participant_id: str) -> ReviewEligibility:
        """
        Check whether a participant may still review a package.

        Args:
            package_id: Package ID
            participant_id: Participant ID, or the owner's user ID as a string

        Returns:
            Eligibility flag with a reason when ineligible, plus the question set

        Raises:
            NotFoundError: If the package does not exist
        """
        package = self._get_package(package_id)
        participant = self._find_participant(package, participant_id)
        return self._eligibility(package, participant)

    def create_review(
        self,
        package_id: int,
        participant_id: str,
        answers: Mapping[str, int],
        comment: Optional[str] = None,
    ) -> Review:
        """
        Store a participant's review of a completed package.

        Args:
            package_id: Package ID
            participant_id: Participant ID, or the owner's user ID as a string
            answers: Rating (1-5) for every standard question
            comment: Optional free text, at most 2000 characters

        Returns:
            The stored Review

        Raises:
            ReviewValidationError: If the ratings or comment are malformed
            NotFoundError: If the package does not exist
            PermissionDeniedError: If the caller is not a participant
            BusinessRuleError: If the package is not completed
            ConflictError: If this participant already reviewed the package
        """
        clean_answers = validate_answers(answers)
        clean_comment = validate_comment(comment)

        package = self._get_package(package_id)
        participant = self._find_participant(package, participant_id)
        eligibility = self._eligibility(package, participant)
        if not eligibility.eligible:
            if participant is None:
                raise PermissionDeniedError(NOT_A_PARTICIPANT)
            if package.status is not PackageStatus.COMPLETED:
                raise BusinessRuleError(PACKAGE_NOT_COMPLETED)
            raise ConflictError(ALREADY_REVIEWED)

        average_rating = sum(clean_answers.values()) / len(clean_answers)

        review = self.review_repository.create(
            package_id=package.id,
            owner_id=package.owner_id,
            reviewer_id=participant_id,
            reviewer_email=participant.contact_email.lower(),
            reviewer_name=participant.contact_name,
            reviewer_role=participant.role,
            answers=clean_answers,
            average_rating=average_rating,
            comment=clean_comment,
        )
        logger.info(
            "Stored review %s for package %s (average %.2f)", review.id, package.id, average_rating
        )

        if average_rating > 3:
            self.email_service.send_review_appreciation_email(
                participant.contact_email, participant.contact_name
            )
        else:
            self.email_service.send_review_improvement_email(
                participant.contact_email, participant.contact_name
            )

        return review

    def get_featured_reviews(self) -> List[Review]:
        """Recent well-rated reviews with a comment, for public display."""
        return self.review_repository.list_featured(FEATURED_MIN_RATING, FEATURED_LIMIT)

    def get_reviews_for_package(self, owner_id: int, package_id: int) -> List[Review]:
        """
        List every review of a package, newest first.

        Raises:
            NotFoundError: If the package does not exist or is not owned by the caller
        """
        package = self.package_repository.get_for_owner(package_id, owner_id)
        if not package:
            raise NotFoundError(
                "Package not found or you do not have permission to view its reviews."
            )
        return self.review_repository.list_for_package(package.id)

    def _get_package(self, package_id: int) -> Package:
        package = self.package_repository.get_by_id(package_id)
        if not package:
            raise NotFoundError("Package not found.")
        return package

    def _eligibility(
        self, package: Package, participant: Optional[Participant]
    ) -> ReviewEligibility:
        if participant is None:
            return ReviewEligibility(eligible=False, reason=NOT_A_PARTICIPANT)

        if package.status is not PackageStatus.COMPLETED:
            return ReviewEligibility(eligible=False, reason=PACKAGE_NOT_COMPLETED)

        existing = self.review_repository.get_by_package_and_email(
            package.id, participant.contact_email.lower()
        )
        if existing:
            return ReviewEligibility(eligible=False, reason=ALREADY_REVIEWED)

        return ReviewEligibility(eligible=True)

    def _find_participant(self, package: Package, participant_id: str) -> Optional[Participant]:
        # The package owner reviews with their own user ID.
        if str(package.owner_id) == participant_id:
            owner = self.user_repository.get_by_id(package.owner_id)
            if not owner:
                return None
            return Participant(
                id=str(owner.id),
                contact_name=owner.full_name,
                contact_email=owner.email,
                role=ParticipantRole.INITIATOR,
            )

        return package.find_participant(participant_id)


def validate_answers(answers: Mapping[str, int]) -> Dict[str, int]:
    """Return the answers in question order, rejecting missing, extra or out-of-range ratings."""
    if not isinstance(answers, Mapping):
        raise ReviewValidationError("The 'answers' field must be an object.")

    unknown = set(answers) - set(REVIEW_QUESTIONS)
    if unknown:
        raise ReviewValidationError(f"Unknown review questions: {', '.join(sorted(unknown))}.")

    clean: Dict[str, int] = {}
    for key in REVIEW_QUESTIONS:
        value = answers.get(key)
        if (
            isinstance(value, bool)
            or not isinstance(value, int)
            or not MIN_RATING <= value <= MAX_RATING
        ):
            raise ReviewValidationError(
                f"Answer for '{key}' must be an integer between {MIN_RATING} and {MAX_RATING}."
            )
        clean[key] = value
    return clean


def validate_comment(comment: Optional[str]) -> Optional[str]:
    if comment is None:
        return None
    if not isinstance(comment, str):
        raise ReviewValidationError("Comment must be a string.")
    comment = comment.strip()
    if len(comment) > MAX_COMMENT_LENGTH:
        raise ReviewValidationError(
            f"Comment must be a string and cannot exceed {MAX_COMMENT_LENGTH} characters."
        )
    return comment or None
