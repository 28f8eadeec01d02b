from __future__ import annotations

from typing import Dict, List, Optional, Protocol

from ..models import (
    Package,
    PackageStatus,
    Participant,
    ParticipantRole,
    Review,
    SubscriptionSnapshot,
    User,
)


class UserRepository(Protocol):
    """Persistence functions related to user accounts and billing references."""

    def create(
        self,
        email: str,
        first_name: str,
        last_name: str,
        password_hash: str,
    ) -> User:
        ...

    def get_by_id(self, user_id: int) -> Optional[User]:
        ...

    def get_by_email(self, email: str) -> Optional[User]:
        ...

    def get_by_stripe_customer_id(self, customer_id: str) -> Optional[User]:
        ...

    def get_by_subscription_id(self, subscription_id: str) -> Optional[User]:
        ...

    def set_stripe_customer_id(self, user_id: int, customer_id: str) -> None:
        ...

    def save_subscription(self, user_id: int, snapshot: Optional[SubscriptionSnapshot]) -> None:
        ...


class PackageRepository(Protocol):
    """Persistence functions related to signing package metadata."""

    def create(self, owner_id: int, name: str, participants: List[Participant]) -> Package:
        ...

    def get_by_id(self, package_id: int) -> Optional[Package]:
        ...

    def get_for_owner(self, package_id: int, owner_id: int) -> Optional[Package]:
        ...

    def list_for_owner(self, owner_id: int) -> List[Package]:
        ...

    def update_status(self, package_id: int, status: PackageStatus) -> Package:
        ...


class ReviewRepository(Protocol):
    """Persistence functions related to package reviews.

    ``create`` raises ``ConflictError`` when a review already exists for the
    same package and reviewer email.
    """

    def create(
        self,
        package_id: int,
        owner_id: int,
        reviewer_id: str,
        reviewer_email: str,
        reviewer_name: str,
        reviewer_role: ParticipantRole,
        answers: Dict[str, int],
        average_rating: float,
        comment: Optional[str],
    ) -> Review:
        ...

    def get_by_package_and_email(self, package_id: int, reviewer_email: str) -> Optional[Review]:
        ...

    def list_for_package(self, package_id: int) -> List[Review]:
        ...

    def list_featured(self, min_rating: float, limit: int) -> List[Review]:
        ...
