"""User domain model for account and billing references."""

from datetime import datetime
from typing import Optional

from .subscription import SubscriptionSnapshot


class User:
    """
    User entity for a SignDesk account.

    Attributes:
        id: Unique identifier
        email: User email address (unique, lower-cased)
        first_name: Given name, used for the Stripe customer name
        last_name: Family name
        password_hash: Hashed password
        stripe_customer_id: Stripe customer reference, created on first card
        subscription: Last known subscription snapshot, if any
        created_at: Account creation timestamp
        updated_at: Last update timestamp
    """

    def __init__(
        self,
        id: int,
        email: str,
        first_name: str,
        last_name: str,
        password_hash: str,
        stripe_customer_id: Optional[str] = None,
        subscription: Optional[SubscriptionSnapshot] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ):
        self.id = id
        self.email = email
        self.first_name = first_name
        self.last_name = last_name
        self.password_hash = password_hash
        self.stripe_customer_id = stripe_customer_id
        self.subscription = subscription
        self.created_at = created_at or datetime.utcnow()
        self.updated_at = updated_at or datetime.utcnow()

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def has_billable_subscription(self) -> bool:
        return self.subscription is not None and self.subscription.is_billable()

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email} customer={self.stripe_customer_id}>"
