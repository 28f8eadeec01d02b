"""Domain models for the SignDesk application."""

from .billing import BillingCard, BillingCustomer, BillingSubscription, PaymentMethodSummary
from .package import Package, PackageStatus, Participant, ParticipantRole
from .review import REVIEW_QUESTIONS, Review, ReviewEligibility
from .subscription import BILLABLE_STATUSES, SubscriptionSnapshot, SubscriptionStatus
from .user import User

__all__ = [
    "BILLABLE_STATUSES",
    "BillingCard",
    "BillingCustomer",
    "BillingSubscription",
    "Package",
    "PackageStatus",
    "Participant",
    "ParticipantRole",
    "PaymentMethodSummary",
    "REVIEW_QUESTIONS",
    "Review",
    "ReviewEligibility",
    "SubscriptionSnapshot",
    "SubscriptionStatus",
    "User",
]
