"""Typed views of the Stripe objects read by the billing services."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .subscription import SubscriptionStatus


@dataclass(slots=True)
class BillingCustomer:
    id: str
    default_payment_method: Optional[str]


@dataclass(slots=True)
class BillingSubscription:
    id: str
    status: Optional[SubscriptionStatus]
    default_payment_method: Optional[str]

    def is_billable(self) -> bool:
        return self.status is not None and self.status.is_billable


@dataclass(slots=True)
class BillingCard:
    id: str
    brand: Optional[str]
    last4: Optional[str]
    exp_month: Optional[int]
    exp_year: Optional[int]


@dataclass(slots=True)
class PaymentMethodSummary:
    """A saved card as shown to the account owner."""

    id: str
    brand: Optional[str]
    last4: Optional[str]
    exp_month: Optional[int]
    exp_year: Optional[int]
    is_default: bool

    @classmethod
    def from_card(cls, card: BillingCard, default_id: Optional[str]) -> "PaymentMethodSummary":
        return cls(
            id=card.id,
            brand=card.brand,
            last4=card.last4,
            exp_month=card.exp_month,
            exp_year=card.exp_year,
            is_default=default_id is not None and card.id == default_id,
        )
