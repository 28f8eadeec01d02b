"""API router for the current user's saved cards."""

from typing import List

from fastapi import APIRouter, Depends, status

from signdesk.core.dependencies import get_payment_method_service
from signdesk.domain.models.user import User
from signdesk.presentation.api.routers.user_router import get_current_user
from signdesk.presentation.api.schemas.payment_method_schemas import (
    MessageResponse,
    PaymentMethodRequest,
    PaymentMethodResponse,
)
from signdesk.services.payment_method_service import PaymentMethodService

router = APIRouter(prefix="/api/payment-methods", tags=["Payment Methods"])


@router.get("", response_model=List[PaymentMethodResponse])
async def list_payment_methods(
    user: User = Depends(get_current_user),
    service: PaymentMethodService = Depends(get_payment_method_service),
) -> List[PaymentMethodResponse]:
    """List saved cards; the one Stripe will charge is flagged as default."""
    return [
        PaymentMethodResponse(
            id=item.id,
            brand=item.brand,
            last4=item.last4,
            exp_month=item.exp_month,
            exp_year=item.exp_year,
            is_default=item.is_default,
        )
        for item in service.list_payment_methods(user.id)
    ]


@router.post("", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def attach_payment_method(
    payload: PaymentMethodRequest,
    user: User = Depends(get_current_user),
    service: PaymentMethodService = Depends(get_payment_method_service),
) -> MessageResponse:
    """Save a card created client-side with Stripe.js."""
    service.attach_payment_method(user.id, payload.payment_method_id)
    return MessageResponse(message="Payment method added successfully.")


@router.patch("/set-default", response_model=MessageResponse)
async def set_default_payment_method(
    payload: PaymentMethodRequest,
    user: User = Depends(get_current_user),
    service: PaymentMethodService = Depends(get_payment_method_service),
) -> MessageResponse:
    service.set_default_payment_method(user.id, payload.payment_method_id)
    return MessageResponse(message="Default payment method updated successfully.")


@router.delete("/{payment_method_id}", response_model=MessageResponse)
async def delete_payment_method(
    payment_method_id: str,
    user: User = Depends(get_current_user),
    service: PaymentMethodService = Depends(get_payment_method_service),
) -> MessageResponse:
    service.delete_payment_method(user.id, payment_method_id)
    return MessageResponse(message="Payment method removed successfully.")
