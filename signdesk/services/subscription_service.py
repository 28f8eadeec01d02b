"""Service keeping the cached subscription snapshot in step with Stripe."""

import logging
from datetime import datetime
from typing import Any, Mapping, Optional

import stripe

from signdesk.domain.models.subscription import SubscriptionSnapshot, SubscriptionStatus
from signdesk.domain.models.user import User
from signdesk.domain.ports.persistence import UserRepository
from signdesk.services.stripe_service import object_id

logger = logging.getLogger(__name__)


class SubscriptionService:
    """Service for applying Stripe subscription events to user records."""

    HANDLED_EVENTS = (
        "customer.subscription.created",
        "customer.subscription.updated",
        "customer.subscription.deleted",
        "invoice.payment_failed",
    )

    def __init__(
        self,
        user_repository: UserRepository,
        webhook_secret: Optional[str] = None,
    ):
        self.user_repository = user_repository
        self.webhook_secret = webhook_secret

    def construct_event(self, payload: bytes, signature: str) -> Mapping[str, Any]:
        """
        Verify a webhook payload and return the Stripe event.

        Raises:
            RuntimeError: If no webhook signing secret is configured
            stripe.SignatureVerificationError: If the signature does not match
        """
        if not self.webhook_secret:
            raise RuntimeError("STRIPE_WEBHOOK_SECRET is not configured.")
        return stripe.Webhook.construct_event(payload, signature, self.webhook_secret)

    def handle_event(self, event: Mapping[str, Any]) -> Optional[User]:
        """
        Dispatch a verified Stripe event.

        Args:
            event: Stripe event object

        Returns:
            The user whose snapshot changed, None if the event was ignored
        """
        event_type = event["type"]
        data = event["data"]["object"]

        if event_type in ("customer.subscription.created", "customer.subscription.updated"):
            return self.handle_subscription_updated(data)
        if event_type == "customer.subscription.deleted":
            return self.handle_subscription_deleted(data)
        if event_type == "invoice.payment_failed":
            # Payment failed - subscription may be past_due
            subscription_id = object_id(data.get("subscription"))
            if subscription_id:
                return self.handle_subscription_updated(stripe.Subscription.retrieve(subscription_id))
            return None

        logger.debug("Ignoring Stripe event %s", event_type)
        return None

    def handle_subscription_updated(self, stripe_subscription: Mapping[str, Any]) -> Optional[User]:
        """
        Handle a subscription created/updated webhook event.

        A non-billable event for a subscription other than the user's current
        billable one is a late event for a replaced subscription and is ignored.

        Args:
            stripe_subscription: Stripe subscription object
        """
        subscription_id = stripe_subscription.get("id")
        status = SubscriptionStatus.parse(stripe_subscription.get("status"))

        customer_id = object_id(stripe_subscription.get("customer"))
        user = self.user_repository.get_by_stripe_customer_id(customer_id) if customer_id else None
        if not user:
            logger.warning(
                "No user for Stripe customer %s (subscription %s)",
                customer_id,
                subscription_id,
            )
            return None

        current = user.subscription
        if (
            current is not None
            and current.is_billable()
            and current.subscription_id != subscription_id
            and not (status and status.is_billable)
        ):
            logger.info(
                "Ignoring %s update for subscription %s; user %s is on %s",
                status.value if status else None,
                subscription_id,
                user.id,
                current.subscription_id,
            )
            return None

        return self._apply(user, stripe_subscription, status)

    def handle_subscription_deleted(self, stripe_subscription: Mapping[str, Any]) -> Optional[User]:
        """
        Handle a subscription deleted webhook event.

        Only the user currently holding the subscription is touched.

        Args:
            stripe_subscription: Stripe subscription object
        """
        subscription_id = stripe_subscription.get("id")
        user = self.user_repository.get_by_subscription_id(subscription_id) if subscription_id else None
        if not user:
            logger.info("Ignoring deletion of subscription %s; no user holds it", subscription_id)
            return None
        return self._apply(user, stripe_subscription, SubscriptionStatus.CANCELED)

    def get_user_subscription(self, user_id: int) -> Optional[SubscriptionSnapshot]:
        user = self.user_repository.get_by_id(user_id)
        return user.subscription if user else None

    def _apply(
        self,
        user: User,
        stripe_subscription: Mapping[str, Any],
        status: Optional[SubscriptionStatus],
    ) -> User:
        item = _first_item(stripe_subscription)
        price = item.get("price") or {}
        snapshot = SubscriptionSnapshot(
            subscription_id=stripe_subscription["id"],
            status=status,
            plan_name=price.get("nickname") or price.get("id"),
            current_period_start=_timestamp(
                stripe_subscription.get("current_period_start") or item.get("current_period_start")
            ),
            current_period_end=_timestamp(
                stripe_subscription.get("current_period_end") or item.get("current_period_end")
            ),
            refreshed_at=datetime.utcnow(),
        )
        self.user_repository.save_subscription(user.id, snapshot)
        user.subscription = snapshot
        logger.info(
            "Subscription %s for user %s synced as %s",
            snapshot.subscription_id,
            user.id,
            status.value if status else None,
        )
        return user


def _first_item(stripe_subscription: Mapping[str, Any]) -> Mapping[str, Any]:
    items = (stripe_subscription.get("items") or {}).get("data") or []
    return items[0] if items else {}


def _timestamp(value: Optional[int]) -> Optional[datetime]:
    return datetime.utcfromtimestamp(value) if value else None
