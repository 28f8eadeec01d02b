from datetime import datetime

import pytest
import stripe

from signdesk.domain.errors import PaymentMethodInUseError
from signdesk.domain.models import SubscriptionStatus
from signdesk.services.payment_method_service import PaymentMethodService
from signdesk.services.subscription_service import SubscriptionService


@pytest.fixture
def service(user_repository) -> SubscriptionService:
    return SubscriptionService(user_repository, webhook_secret="whsec_test")


def _subscription(status="active", customer="cus_A", **extra):
    payload = {
        "id": "sub_A",
        "customer": customer,
        "status": status,
        "items": {
            "data": [
                {
                    "price": {"id": "price_pro", "nickname": "Pro Monthly"},
                    "current_period_start": 1704067200,
                    "current_period_end": 1706745600,
                }
            ]
        },
    }
    payload.update(extra)
    return payload


def _event(event_type, payload):
    return {"type": event_type, "data": {"object": payload}}


def test_subscription_updated_writes_snapshot(service, make_user, user_repository):
    user = make_user(customer_id="cus_A")

    result = service.handle_event(_event("customer.subscription.updated", _subscription("trialing")))

    assert result.id == user.id
    snapshot = user_repository.get_by_id(user.id).subscription
    assert snapshot.subscription_id == "sub_A"
    assert snapshot.status is SubscriptionStatus.TRIALING
    assert snapshot.plan_name == "Pro Monthly"
    assert snapshot.current_period_start == datetime(2024, 1, 1)
    assert snapshot.current_period_end == datetime(2024, 2, 1)


def test_top_level_period_fields_take_precedence(service, make_user, user_repository):
    user = make_user(customer_id="cus_A")
    payload = _subscription(current_period_start=1706745600, current_period_end=1709251200)

    service.handle_subscription_updated(payload)

    snapshot = user_repository.get_by_id(user.id).subscription
    assert snapshot.current_period_start == datetime(2024, 2, 1)
    assert snapshot.current_period_end == datetime(2024, 3, 1)


def test_expanded_customer_reference_is_resolved(service, make_user, user_repository):
    user = make_user(customer_id="cus_A")

    service.handle_event(
        _event("customer.subscription.created", _subscription(customer={"id": "cus_A", "object": "customer"}))
    )

    assert user_repository.get_by_id(user.id).subscription.status is SubscriptionStatus.ACTIVE


def test_deleted_event_marks_snapshot_canceled(service, make_user, user_repository):
    user = make_user(customer_id="cus_A", subscription_id="sub_A", status="active")

    service.handle_event(_event("customer.subscription.deleted", _subscription("active")))

    snapshot = user_repository.get_by_id(user.id).subscription
    assert snapshot.status is SubscriptionStatus.CANCELED
    assert snapshot.is_billable() is False


def test_unknown_status_is_stored_as_not_billable(service, make_user, user_repository):
    user = make_user(customer_id="cus_A")

    service.handle_subscription_updated(_subscription("some_future_status"))

    snapshot = user_repository.get_by_id(user.id).subscription
    assert snapshot.subscription_id == "sub_A"
    assert snapshot.status is None
    assert snapshot.is_billable() is False


def test_event_for_unknown_customer_is_ignored(service, user_repository, caplog):
    result = service.handle_event(_event("customer.subscription.updated", _subscription(customer="cus_ghost")))

    assert result is None
    assert "cus_ghost" in caplog.text


def test_payment_failed_refetches_subscription(service, make_user, user_repository, monkeypatch):
    user = make_user(customer_id="cus_A", subscription_id="sub_A", status="active")
    requested = []

    def fake_retrieve(subscription_id, **params):
        requested.append(subscription_id)
        return _subscription("past_due")

    monkeypatch.setattr(stripe.Subscription, "retrieve", fake_retrieve)

    service.handle_event(_event("invoice.payment_failed", {"id": "in_1", "subscription": "sub_A"}))

    assert requested == ["sub_A"]
    assert user_repository.get_by_id(user.id).subscription.status is SubscriptionStatus.PAST_DUE


def test_payment_failed_without_subscription_is_ignored(service):
    assert service.handle_event(_event("invoice.payment_failed", {"id": "in_1", "subscription": None})) is None


def test_unrelated_event_is_ignored(service):
    assert service.handle_event(_event("charge.refunded", {"id": "ch_1"})) is None


def test_construct_event_requires_secret(user_repository):
    service = SubscriptionService(user_repository, webhook_secret=None)

    with pytest.raises(RuntimeError):
        service.construct_event(b"{}", "t=1,v1=abc")


def test_construct_event_rejects_bad_signature(service):
    with pytest.raises(stripe.SignatureVerificationError):
        service.construct_event(b'{"id": "evt_1"}', "t=1,v1=not-a-signature")


def test_get_user_subscription(service, make_user):
    user = make_user(customer_id="cus_A", subscription_id="sub_A", status="past_due")

    snapshot = service.get_user_subscription(user.id)

    assert snapshot.status is SubscriptionStatus.PAST_DUE
    assert service.get_user_subscription(9999) is None


# ------------------------------------------------- replaced subscriptions

def _upgrade(service, make_user):
    """User moves from sub_old to sub_new; Stripe sends created before deleted."""
    user = make_user(customer_id="cus_A", subscription_id="sub_old", status="active")
    service.handle_event(_event("customer.subscription.created", _subscription("active", id="sub_new")))
    return user


def test_deleting_replaced_subscription_keeps_new_one(service, make_user, user_repository):
    user = _upgrade(service, make_user)

    result = service.handle_event(_event("customer.subscription.deleted", _subscription("canceled", id="sub_old")))

    assert result is None
    snapshot = user_repository.get_by_id(user.id).subscription
    assert snapshot.subscription_id == "sub_new"
    assert snapshot.status is SubscriptionStatus.ACTIVE


def test_late_update_for_replaced_subscription_is_ignored(service, make_user, user_repository):
    user = _upgrade(service, make_user)

    result = service.handle_event(_event("customer.subscription.updated", _subscription("canceled", id="sub_old")))

    assert result is None
    assert user_repository.get_by_id(user.id).subscription.subscription_id == "sub_new"


def test_billable_update_for_other_subscription_replaces_snapshot(service, make_user, user_repository):
    user = make_user(customer_id="cus_A", subscription_id="sub_old", status="canceled")

    service.handle_event(_event("customer.subscription.updated", _subscription("trialing", id="sub_new")))

    snapshot = user_repository.get_by_id(user.id).subscription
    assert snapshot.subscription_id == "sub_new"
    assert snapshot.status is SubscriptionStatus.TRIALING


def test_deleting_unknown_subscription_is_ignored(service, make_user, user_repository):
    user = make_user(customer_id="cus_A")

    assert service.handle_event(_event("customer.subscription.deleted", _subscription("canceled", id="sub_x"))) is None
    assert user_repository.get_by_id(user.id).subscription is None


def test_replaced_subscription_card_stays_protected(service, make_user, user_repository, billing):
    user = _upgrade(service, make_user)
    service.handle_event(_event("customer.subscription.deleted", _subscription("canceled", id="sub_old")))
    billing.add_customer("cus_A", default="pm_2", cards=["pm_1", "pm_2"])
    billing.add_subscription("sub_new", "active", default="pm_1")
    billing.add_subscription("sub_old", "canceled", default="pm_2")
    payments = PaymentMethodService(billing, user_repository)

    with pytest.raises(PaymentMethodInUseError):
        payments.delete_payment_method(user.id, "pm_1")
