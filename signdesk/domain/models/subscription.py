"""Cached subscription state stored on the user record."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class SubscriptionStatus(str, Enum):
    """Stripe subscription lifecycle states."""

    TRIALING = "trialing"
    ACTIVE = "active"
    PAST_DUE = "past_due"
    CANCELED = "canceled"
    INCOMPLETE = "incomplete"
    INCOMPLETE_EXPIRED = "incomplete_expired"
    UNPAID = "unpaid"
    PAUSED = "paused"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["SubscriptionStatus"]:
        """Return the matching status, or None for empty or unknown values."""
        if not value:
            return None
        try:
            return cls(value)
        except ValueError:
            return None

    @property
    def is_billable(self) -> bool:
        return self in BILLABLE_STATUSES


# Statuses in which the subscription, not the customer, owns the default card.
BILLABLE_STATUSES = frozenset(
    {SubscriptionStatus.ACTIVE, SubscriptionStatus.TRIALING, SubscriptionStatus.PAST_DUE}
)


@dataclass(slots=True)
class SubscriptionSnapshot:
    """
    Last known copy of the user's Stripe subscription.

    Stripe stays authoritative. The snapshot is rewritten by webhook events and
    whenever a service happens to fetch the live subscription, so it may lag
    behind; ``refreshed_at`` records when it was last written.

    Attributes:
        subscription_id: Stripe subscription ID
        status: Parsed status, None when Stripe sent something unrecognised
        plan_name: Display name of the subscribed plan
        current_period_start: Start of current billing period
        current_period_end: End of current billing period
        refreshed_at: When this copy was last written
    """

    subscription_id: Optional[str]
    status: Optional[SubscriptionStatus]
    plan_name: Optional[str] = None
    current_period_start: Optional[datetime] = None
    current_period_end: Optional[datetime] = None
    refreshed_at: datetime = field(default_factory=datetime.utcnow)

    def is_billable(self) -> bool:
        """True when the subscription exists and is active, trialing or past due."""
        return bool(self.subscription_id) and self.status is not None and self.status.is_billable

    def __repr__(self) -> str:
        status = self.status.value if self.status else None
        return f"<SubscriptionSnapshot id={self.subscription_id} status={status}>"
