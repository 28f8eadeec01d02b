from __future__ import annotations

from typing import List, Optional, Protocol

from ..models import BillingCard, BillingCustomer, BillingSubscription


class BillingGateway(Protocol):
    """Card payments API used as the source of truth for billing state.

    Implementations let the provider's own exceptions propagate.
    """

    def list_cards(self, customer_id: str) -> List[BillingCard]:
        ...

    def retrieve_customer(self, customer_id: str) -> BillingCustomer:
        ...

    def create_customer(
        self,
        email: str,
        name: str,
        payment_method_id: Optional[str] = None,
    ) -> BillingCustomer:
        ...

    def set_customer_default_payment_method(
        self, customer_id: str, payment_method_id: str
    ) -> BillingCustomer:
        ...

    def retrieve_subscription(self, subscription_id: str) -> BillingSubscription:
        ...

    def set_subscription_default_payment_method(
        self, subscription_id: str, payment_method_id: str
    ) -> BillingSubscription:
        ...

    def attach_payment_method(self, payment_method_id: str, customer_id: str) -> None:
        ...

    def detach_payment_method(self, payment_method_id: str) -> None:
        ...
