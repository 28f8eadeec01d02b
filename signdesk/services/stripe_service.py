"""Stripe payment integration service."""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional

import stripe

from ..domain.models import BillingCard, BillingCustomer, BillingSubscription, SubscriptionStatus

logger = logging.getLogger(__name__)


class StripeService:
    """Thin typed wrapper over the Stripe SDK calls the billing services need.

    Stripe errors are not caught here; callers decide which ones are fatal.
    """

    def __init__(self, secret_key: Optional[str]) -> None:
        self._configure_stripe(secret_key)

    def _configure_stripe(self, secret_key: Optional[str]) -> None:
        """Configure Stripe SDK with the account's secret key."""
        if secret_key:
            stripe.api_key = secret_key.strip()
        else:
            stripe.api_key = None
            logger.warning("STRIPE_SECRET_KEY is not set; billing calls will fail.")

    def is_connected(self) -> bool:
        """Check if Stripe is properly configured and connected."""
        if not stripe.api_key:
            return False

        try:
            stripe.Account.retrieve()
            return True
        except stripe.StripeError as e:
            logger.debug("Stripe connection check failed: %s", str(e))
            return False

    # Payment methods --------------------------------------------------------
    def list_cards(self, customer_id: str) -> List[BillingCard]:
        payment_methods = stripe.PaymentMethod.list(customer=customer_id, type="card", limit=100)
        return [_to_card(pm) for pm in payment_methods.auto_paging_iter()]

    def attach_payment_method(self, payment_method_id: str, customer_id: str) -> None:
        stripe.PaymentMethod.attach(payment_method_id, customer=customer_id)

    def detach_payment_method(self, payment_method_id: str) -> None:
        stripe.PaymentMethod.detach(payment_method_id)

    # Customers --------------------------------------------------------------
    def retrieve_customer(self, customer_id: str) -> BillingCustomer:
        return _to_customer(stripe.Customer.retrieve(customer_id))

    def create_customer(
        self,
        email: str,
        name: str,
        payment_method_id: Optional[str] = None,
    ) -> BillingCustomer:
        """Create a customer, optionally attaching a card as its invoice default."""
        params: dict[str, Any] = {"email": email, "name": name}
        if payment_method_id:
            params["payment_method"] = payment_method_id
            params["invoice_settings"] = {"default_payment_method": payment_method_id}

        customer = stripe.Customer.create(**params)
        logger.info("Created Stripe customer %s for %s", customer["id"], email)
        return _to_customer(customer)

    def set_customer_default_payment_method(
        self, customer_id: str, payment_method_id: str
    ) -> BillingCustomer:
        customer = stripe.Customer.modify(
            customer_id,
            invoice_settings={"default_payment_method": payment_method_id},
        )
        return _to_customer(customer)

    # Subscriptions ----------------------------------------------------------
    def retrieve_subscription(self, subscription_id: str) -> BillingSubscription:
        return to_subscription(stripe.Subscription.retrieve(subscription_id))

    def set_subscription_default_payment_method(
        self, subscription_id: str, payment_method_id: str
    ) -> BillingSubscription:
        subscription = stripe.Subscription.modify(
            subscription_id,
            default_payment_method=payment_method_id,
        )
        return to_subscription(subscription)


def object_id(value: Any) -> Optional[str]:
    """Return the ID of a Stripe reference that may or may not be expanded."""
    if not value:
        return None
    if isinstance(value, str):
        return value
    return value.get("id")


def to_subscription(payload: Mapping[str, Any]) -> BillingSubscription:
    return BillingSubscription(
        id=payload["id"],
        status=SubscriptionStatus.parse(payload.get("status")),
        default_payment_method=object_id(payload.get("default_payment_method")),
    )


def _to_customer(payload: Mapping[str, Any]) -> BillingCustomer:
    invoice_settings = payload.get("invoice_settings") or {}
    return BillingCustomer(
        id=payload["id"],
        default_payment_method=object_id(invoice_settings.get("default_payment_method")),
    )


def _to_card(payload: Mapping[str, Any]) -> BillingCard:
    card = payload.get("card") or {}
    return BillingCard(
        id=payload["id"],
        brand=card.get("brand"),
        last4=card.get("last4"),
        exp_month=card.get("exp_month"),
        exp_year=card.get("exp_year"),
    )
