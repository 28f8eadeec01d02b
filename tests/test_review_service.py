import pytest

from signdesk.domain.errors import (
    BusinessRuleError,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ReviewValidationError,
)
from signdesk.domain.models import PackageStatus, Participant, ParticipantRole
from signdesk.domain.models.review import REVIEW_QUESTIONS
from signdesk.services.review_service import (
    ALREADY_REVIEWED,
    NOT_A_PARTICIPANT,
    PACKAGE_NOT_COMPLETED,
    ReviewService,
    validate_answers,
    validate_comment,
)

GOOD_ANSWERS = {"easeOfUse": 5, "clarity": 4, "speed": 5, "overall": 4}
POOR_ANSWERS = {"easeOfUse": 2, "clarity": 3, "speed": 3, "overall": 2}


@pytest.fixture
def service(review_repository, package_repository, user_repository, email_service) -> ReviewService:
    return ReviewService(review_repository, package_repository, user_repository, email_service)


@pytest.fixture
def owner(make_user):
    return make_user(email="owner@example.com")


@pytest.fixture
def package(package_repository, owner):
    created = package_repository.create(
        owner.id,
        "Lease agreement",
        [
            Participant("p-1", "Grace Hopper", "Grace@Example.com", ParticipantRole.SIGNER),
            Participant("p-2", "Alan Turing", "alan@example.com", ParticipantRole.APPROVER),
            Participant("p-3", "Grace (second seat)", "grace@example.com", ParticipantRole.FORM_FILLER),
        ],
    )
    return package_repository.update_status(created.id, PackageStatus.COMPLETED)


# ----------------------------------------------------------- eligibility

def test_participant_of_completed_package_is_eligible(service, package):
    eligibility = service.check_eligibility(package.id, "p-1")

    assert eligibility.eligible is True
    assert eligibility.reason is None
    assert eligibility.questions == REVIEW_QUESTIONS


def test_stranger_is_not_eligible(service, package):
    eligibility = service.check_eligibility(package.id, "nobody")

    assert eligibility.eligible is False
    assert eligibility.reason == NOT_A_PARTICIPANT


@pytest.mark.parametrize("status", [PackageStatus.DRAFT, PackageStatus.SENT, PackageStatus.REVOKED])
def test_unfinished_package_is_not_reviewable(service, package, package_repository, status):
    package_repository.update_status(package.id, status)

    eligibility = service.check_eligibility(package.id, "p-1")

    assert eligibility.eligible is False
    assert eligibility.reason == PACKAGE_NOT_COMPLETED


def test_owner_is_eligible_as_initiator(service, package, owner):
    assert service.check_eligibility(package.id, str(owner.id)).eligible is True

    review = service.create_review(package.id, str(owner.id), GOOD_ANSWERS)

    assert review.reviewer_role is ParticipantRole.INITIATOR
    assert review.reviewer_email == "owner@example.com"


def test_missing_package_raises_not_found(service):
    with pytest.raises(NotFoundError):
        service.check_eligibility(4242, "p-1")


def test_eligibility_flips_after_review(service, package):
    service.create_review(package.id, "p-1", GOOD_ANSWERS)

    eligibility = service.check_eligibility(package.id, "p-1")

    assert eligibility.eligible is False
    assert eligibility.reason == ALREADY_REVIEWED


# ---------------------------------------------------------------- create

def test_create_review_stores_average_and_lowercased_email(service, package, review_repository):
    review = service.create_review(package.id, "p-1", GOOD_ANSWERS, comment="  Smooth signing.  ")

    assert review.average_rating == 4.5
    assert review.reviewer_email == "grace@example.com"
    assert review.comment == "Smooth signing."
    assert review.reviewer_role is ParticipantRole.SIGNER

    stored = review_repository.get_by_package_and_email(package.id, "GRACE@example.com")
    assert stored.id == review.id
    assert stored.answers == GOOD_ANSWERS


def test_blank_comment_is_stored_as_none(service, package):
    review = service.create_review(package.id, "p-2", GOOD_ANSWERS, comment="   ")

    assert review.comment is None


def test_second_review_from_same_participant_conflicts(service, package, review_repository):
    service.create_review(package.id, "p-1", GOOD_ANSWERS)

    with pytest.raises(ConflictError):
        service.create_review(package.id, "p-1", POOR_ANSWERS)

    assert len(review_repository.list_for_package(package.id)) == 1


def test_same_email_in_another_seat_conflicts(service, package):
    service.create_review(package.id, "p-1", GOOD_ANSWERS)

    with pytest.raises(ConflictError):
        service.create_review(package.id, "p-3", GOOD_ANSWERS)


def test_stranger_cannot_review(service, package):
    with pytest.raises(PermissionDeniedError):
        service.create_review(package.id, "nobody", GOOD_ANSWERS)


def test_review_of_unfinished_package_is_rejected(service, package, package_repository):
    package_repository.update_status(package.id, PackageStatus.SENT)

    with pytest.raises(BusinessRuleError):
        service.create_review(package.id, "p-1", GOOD_ANSWERS)


def test_invalid_rating_stores_nothing(service, package, review_repository):
    with pytest.raises(ReviewValidationError):
        service.create_review(package.id, "p-1", {**GOOD_ANSWERS, "speed": 6})

    assert review_repository.list_for_package(package.id) == []
    assert service.check_eligibility(package.id, "p-1").eligible is True


def test_validation_runs_before_package_lookup(service):
    with pytest.raises(ReviewValidationError):
        service.create_review(4242, "p-1", {"overall": 5})


def test_high_average_sends_appreciation_email(service, package, email_service):
    service.create_review(package.id, "p-1", GOOD_ANSWERS)

    assert email_service.sent == [("appreciation", "Grace@Example.com", "Grace Hopper")]


def test_average_of_three_sends_improvement_email(service, package, email_service):
    service.create_review(package.id, "p-2", {"easeOfUse": 3, "clarity": 3, "speed": 3, "overall": 3})

    assert email_service.sent == [("improvement", "alan@example.com", "Alan Turing")]


def test_low_average_sends_improvement_email(service, package, email_service):
    service.create_review(package.id, "p-2", POOR_ANSWERS)

    assert email_service.sent[0][0] == "improvement"


# -------------------------------------------------------------- listings

def test_featured_reviews_need_comment_and_high_rating(service, package_repository, make_user):
    owner = make_user()
    participants = [
        Participant(f"p-{i}", f"Reviewer {i}", f"r{i}@example.com", ParticipantRole.SIGNER)
        for i in range(8)
    ]
    package = package_repository.create(owner.id, "Bulk", participants)
    package_repository.update_status(package.id, PackageStatus.COMPLETED)

    service.create_review(package.id, "p-0", POOR_ANSWERS, comment="Too slow")
    service.create_review(package.id, "p-1", GOOD_ANSWERS)
    for i in range(2, 8):
        service.create_review(package.id, f"p-{i}", GOOD_ANSWERS, comment=f"Great {i}")

    featured = service.get_featured_reviews()

    assert [review.comment for review in featured] == ["Great 7", "Great 6", "Great 5", "Great 4", "Great 3"]


def test_owner_lists_package_reviews_newest_first(service, package, owner):
    service.create_review(package.id, "p-1", GOOD_ANSWERS)
    service.create_review(package.id, "p-2", POOR_ANSWERS)

    reviews = service.get_reviews_for_package(owner.id, package.id)

    assert [review.reviewer_id for review in reviews] == ["p-2", "p-1"]


def test_non_owner_cannot_list_package_reviews(service, package, make_user):
    intruder = make_user()

    with pytest.raises(NotFoundError):
        service.get_reviews_for_package(intruder.id, package.id)


# ------------------------------------------------------------ validators

@pytest.mark.parametrize(
    "answers",
    [
        {**GOOD_ANSWERS, "overall": 0},
        {**GOOD_ANSWERS, "overall": 6},
        {**GOOD_ANSWERS, "overall": 4.5},
        {**GOOD_ANSWERS, "overall": "5"},
        {**GOOD_ANSWERS, "overall": True},
        {key: value for key, value in GOOD_ANSWERS.items() if key != "clarity"},
        {**GOOD_ANSWERS, "design": 5},
        [5, 5, 5, 5],
    ],
)
def test_validate_answers_rejects_malformed(answers):
    with pytest.raises(ReviewValidationError):
        validate_answers(answers)


def test_validate_answers_accepts_bounds():
    answers = {"easeOfUse": 1, "clarity": 5, "speed": 1, "overall": 5}

    assert validate_answers(answers) == answers


def test_validate_comment_limits_length():
    assert validate_comment("x" * 2000) == "x" * 2000
    with pytest.raises(ReviewValidationError):
        validate_comment("x" * 2001)


def test_validate_comment_rejects_non_string():
    with pytest.raises(ReviewValidationError):
        validate_comment(42)
