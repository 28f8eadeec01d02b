"""Service keeping the Stripe customer and subscription default cards in sync."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import List

import stripe

from signdesk.domain.errors import NotFoundError, PaymentMethodInUseError
from signdesk.domain.models import BillingSubscription, PaymentMethodSummary, User
from signdesk.domain.ports.billing import BillingGateway
from signdesk.domain.ports.persistence import UserRepository

logger = logging.getLogger(__name__)


class PaymentMethodService:
    """Manages a user's saved cards.

    While the user's subscription is active, trialing or past due, the
    subscription's default payment method is what Stripe charges, so it is the
    one reported as default. Otherwise the customer's invoice default is.
    """

    def __init__(self, billing: BillingGateway, user_repository: UserRepository):
        self.billing = billing
        self.user_repository = user_repository

    def list_payment_methods(self, user_id: int) -> List[PaymentMethodSummary]:
        """
        List the user's saved cards with the authoritative default flagged.

        Args:
            user_id: User ID

        Returns:
            Card summaries; empty when the user has no Stripe customer yet
        """
        user = self.user_repository.get_by_id(user_id)
        if not user or not user.stripe_customer_id:
            return []

        cards = self.billing.list_cards(user.stripe_customer_id)

        if user.has_billable_subscription():
            subscription = self.billing.retrieve_subscription(user.subscription.subscription_id)
            self._refresh_snapshot(user, subscription)
            default_id = subscription.default_payment_method
        else:
            customer = self.billing.retrieve_customer(user.stripe_customer_id)
            default_id = customer.default_payment_method

        return [PaymentMethodSummary.from_card(card, default_id) for card in cards]

    def attach_payment_method(self, user_id: int, payment_method_id: str) -> None:
        """
        Save a new card for the user, creating the Stripe customer if needed.

        The first card a customer gets becomes its default. An existing
        default is left alone.

        Raises:
            NotFoundError: If the user does not exist
            stripe.StripeError: If a Stripe API call fails
        """
        user = self.user_repository.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found.")

        if not user.stripe_customer_id:
            logger.info("Stripe customer not found for user %s. Creating a new one.", user_id)
            customer = self.billing.create_customer(
                email=user.email,
                name=user.full_name,
                payment_method_id=payment_method_id,
            )
            self.user_repository.set_stripe_customer_id(user.id, customer.id)
            return

        self.billing.attach_payment_method(payment_method_id, user.stripe_customer_id)

        customer = self.billing.retrieve_customer(user.stripe_customer_id)
        if not customer.default_payment_method:
            self.billing.set_customer_default_payment_method(customer.id, payment_method_id)

    def set_default_payment_method(self, user_id: int, payment_method_id: str) -> None:
        """
        Make a card the user's default.

        The customer is always updated so users without a subscription keep a
        preference for later. A billable subscription is updated as well; if
        that second call fails the error is logged and the call still succeeds.

        Raises:
            NotFoundError: If the user or their Stripe customer does not exist
            stripe.StripeError: If the customer update fails
        """
        user = self._get_billing_user(user_id)

        self.billing.set_customer_default_payment_method(user.stripe_customer_id, payment_method_id)

        if user.has_billable_subscription():
            subscription_id = user.subscription.subscription_id
            try:
                self.billing.set_subscription_default_payment_method(subscription_id, payment_method_id)
            except stripe.StripeError as exc:
                # The subscription may have been canceled on Stripe before the webhook reached us.
                logger.warning(
                    "Failed to update Stripe subscription %s for user %s, but customer was updated: %s",
                    subscription_id,
                    user_id,
                    exc,
                )

    def delete_payment_method(self, user_id: int, payment_method_id: str) -> None:
        """
        Detach a card from the user's customer.

        Raises:
            NotFoundError: If the user, their Stripe customer, or the card on that
                customer does not exist
            PaymentMethodInUseError: If the card is the default of a live
                active, trialing or past due subscription
            stripe.StripeError: If a Stripe API call fails
        """
        user = self._get_billing_user(user_id)

        # Detach is account-wide; only this customer's cards may be removed.
        owned = {card.id for card in self.billing.list_cards(user.stripe_customer_id)}
        if payment_method_id not in owned:
            raise NotFoundError("Payment method not found.")

        if user.subscription and user.subscription.subscription_id:
            subscription = self.billing.retrieve_subscription(user.subscription.subscription_id)
            self._refresh_snapshot(user, subscription)
            if subscription.default_payment_method == payment_method_id and subscription.is_billable():
                raise PaymentMethodInUseError()

        self.billing.detach_payment_method(payment_method_id)
        logger.info("Detached payment method %s from user %s", payment_method_id, user_id)

    def _get_billing_user(self, user_id: int) -> User:
        user = self.user_repository.get_by_id(user_id)
        if not user or not user.stripe_customer_id:
            raise NotFoundError("Stripe customer not found for this user.")
        return user

    def _refresh_snapshot(self, user: User, subscription: BillingSubscription) -> None:
        """Write a changed live status back to the cached snapshot."""
        snapshot = user.subscription
        if snapshot is None or snapshot.status == subscription.status:
            return

        logger.info(
            "Subscription %s for user %s is now %s (cached %s)",
            subscription.id,
            user.id,
            subscription.status.value if subscription.status else None,
            snapshot.status.value if snapshot.status else None,
        )
        refreshed = replace(snapshot, status=subscription.status, refreshed_at=datetime.utcnow())
        self.user_repository.save_subscription(user.id, refreshed)
        user.subscription = refreshed
