from dataclasses import dataclass

from .config import Settings
from ..services.email_service import EmailService
from ..services.package_service import PackageService
from ..services.payment_method_service import PaymentMethodService
from ..services.review_service import ReviewService
from ..services.stripe_service import StripeService
from ..services.subscription_service import SubscriptionService
from ..services.user_service import UserService


@dataclass(slots=True)
class ApplicationContainer:
    """Dependency registry shared across the FastAPI application lifecycle."""

    settings: Settings
    stripe_service: StripeService
    email_service: EmailService
    user_service: UserService
    subscription_service: SubscriptionService
    payment_method_service: PaymentMethodService
    package_service: PackageService
    review_service: ReviewService
