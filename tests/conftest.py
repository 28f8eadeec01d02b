from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

import pytest
import stripe

from signdesk.domain.models import (
    BillingCard,
    BillingCustomer,
    BillingSubscription,
    SubscriptionSnapshot,
    SubscriptionStatus,
)
from signdesk.infrastructure.repositories.package_repository import PackageRepository
from signdesk.infrastructure.repositories.review_repository import ReviewRepository
from signdesk.infrastructure.repositories.user_repository import UserRepository


def make_card(payment_method_id: str) -> BillingCard:
    return BillingCard(id=payment_method_id, brand="visa", last4="4242", exp_month=12, exp_year=2030)


class FakeBillingGateway:
    """In-memory stand-in for the Stripe customer/subscription/payment method APIs."""

    def __init__(self) -> None:
        self.customers: Dict[str, BillingCustomer] = {}
        self.subscriptions: Dict[str, BillingSubscription] = {}
        self.cards: Dict[str, List[BillingCard]] = {}
        self.calls: List[tuple] = []
        self.fail_subscription_update = False
        self.fail_customer_update = False

    # Test setup helpers ---------------------------------------------------
    def add_customer(self, customer_id: str, default: Optional[str] = None, cards=()) -> None:
        self.customers[customer_id] = BillingCustomer(id=customer_id, default_payment_method=default)
        self.cards[customer_id] = [make_card(pm) for pm in cards]

    def add_subscription(self, subscription_id: str, status: str, default: Optional[str]) -> None:
        self.subscriptions[subscription_id] = BillingSubscription(
            id=subscription_id,
            status=SubscriptionStatus.parse(status),
            default_payment_method=default,
        )

    def called(self, name: str) -> List[tuple]:
        return [call for call in self.calls if call[0] == name]

    # BillingGateway API ---------------------------------------------------
    def list_cards(self, customer_id: str) -> List[BillingCard]:
        self.calls.append(("list_cards", customer_id))
        return list(self.cards.get(customer_id, []))

    def retrieve_customer(self, customer_id: str) -> BillingCustomer:
        self.calls.append(("retrieve_customer", customer_id))
        if customer_id not in self.customers:
            raise stripe.InvalidRequestError(f"No such customer: '{customer_id}'", "id", http_status=404)
        return self.customers[customer_id]

    def create_customer(self, email: str, name: str, payment_method_id: Optional[str] = None) -> BillingCustomer:
        customer_id = f"cus_{len(self.customers) + 1}"
        self.calls.append(("create_customer", email, name, payment_method_id))
        self.add_customer(customer_id, default=payment_method_id, cards=[payment_method_id] if payment_method_id else [])
        return self.customers[customer_id]

    def set_customer_default_payment_method(self, customer_id: str, payment_method_id: str) -> BillingCustomer:
        self.calls.append(("set_customer_default_payment_method", customer_id, payment_method_id))
        if self.fail_customer_update:
            raise stripe.InvalidRequestError("No such payment method", "invoice_settings", http_status=400)
        self.customers[customer_id] = BillingCustomer(id=customer_id, default_payment_method=payment_method_id)
        return self.customers[customer_id]

    def retrieve_subscription(self, subscription_id: str) -> BillingSubscription:
        self.calls.append(("retrieve_subscription", subscription_id))
        if subscription_id not in self.subscriptions:
            raise stripe.InvalidRequestError(f"No such subscription: '{subscription_id}'", "id", http_status=404)
        return self.subscriptions[subscription_id]

    def set_subscription_default_payment_method(self, subscription_id: str, payment_method_id: str) -> BillingSubscription:
        self.calls.append(("set_subscription_default_payment_method", subscription_id, payment_method_id))
        if self.fail_subscription_update:
            raise stripe.InvalidRequestError(f"No such subscription: '{subscription_id}'", "id", http_status=404)
        current = self.subscriptions[subscription_id]
        self.subscriptions[subscription_id] = BillingSubscription(
            id=subscription_id, status=current.status, default_payment_method=payment_method_id
        )
        return self.subscriptions[subscription_id]

    def attach_payment_method(self, payment_method_id: str, customer_id: str) -> None:
        self.calls.append(("attach_payment_method", payment_method_id, customer_id))
        self.cards.setdefault(customer_id, []).append(make_card(payment_method_id))

    def detach_payment_method(self, payment_method_id: str) -> None:
        self.calls.append(("detach_payment_method", payment_method_id))
        for customer_id, cards in self.cards.items():
            self.cards[customer_id] = [card for card in cards if card.id != payment_method_id]


class FakeEmailService:
    def __init__(self) -> None:
        self.sent: List[tuple] = []

    def send_review_appreciation_email(self, to_email: str, name: str) -> bool:
        self.sent.append(("appreciation", to_email, name))
        return True

    def send_review_improvement_email(self, to_email: str, name: str) -> bool:
        self.sent.append(("improvement", to_email, name))
        return True


@pytest.fixture
def db_path(tmp_path) -> str:
    return str(tmp_path / "signdesk.db")


@pytest.fixture
def user_repository(db_path) -> UserRepository:
    return UserRepository(db_path)


@pytest.fixture
def package_repository(db_path) -> PackageRepository:
    return PackageRepository(db_path)


@pytest.fixture
def review_repository(db_path) -> ReviewRepository:
    return ReviewRepository(db_path)


@pytest.fixture
def billing() -> FakeBillingGateway:
    return FakeBillingGateway()


@pytest.fixture
def email_service() -> FakeEmailService:
    return FakeEmailService()


@pytest.fixture
def make_user(user_repository):
    counter = {"n": 0}

    def _make_user(
        customer_id: Optional[str] = None,
        subscription_id: Optional[str] = None,
        status: Optional[str] = None,
        email: Optional[str] = None,
    ):
        counter["n"] += 1
        user = user_repository.create(
            email=email or f"user{counter['n']}@example.com",
            first_name="Ada",
            last_name="Lovelace",
            password_hash="not-a-real-hash",
        )
        if customer_id:
            user_repository.set_stripe_customer_id(user.id, customer_id)
        if subscription_id or status:
            user_repository.save_subscription(
                user.id,
                SubscriptionSnapshot(
                    subscription_id=subscription_id,
                    status=SubscriptionStatus.parse(status),
                    refreshed_at=datetime(2024, 1, 1),
                ),
            )
        return user_repository.get_by_id(user.id)

    return _make_user
