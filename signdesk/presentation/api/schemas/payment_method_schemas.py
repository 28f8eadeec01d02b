"""Pydantic schemas for payment method endpoints."""

from typing import Optional

from pydantic import BaseModel, Field


class PaymentMethodRequest(BaseModel):
    """Request carrying a Stripe payment method ID (``pm_...``)."""

    payment_method_id: str = Field(..., min_length=1, description="Stripe payment method ID")


class PaymentMethodResponse(BaseModel):
    """A saved card."""

    id: str
    brand: Optional[str]
    last4: Optional[str]
    exp_month: Optional[int]
    exp_year: Optional[int]
    is_default: bool


class MessageResponse(BaseModel):
    message: str
