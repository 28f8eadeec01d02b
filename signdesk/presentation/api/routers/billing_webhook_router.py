"""Stripe webhook endpoint."""

import logging
from typing import Dict

import stripe
from fastapi import APIRouter, Depends, HTTPException, Request, status

from signdesk.core.dependencies import get_subscription_service
from signdesk.services.subscription_service import SubscriptionService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/billing", tags=["Billing"])


@router.post("/webhook", include_in_schema=False)
async def stripe_webhook(
    request: Request,
    subscription_service: SubscriptionService = Depends(get_subscription_service),
) -> Dict[str, str]:
    """Handle Stripe webhook events."""
    payload = await request.body()
    sig_header = request.headers.get("stripe-signature", "")

    try:
        event = subscription_service.construct_event(payload, sig_header)
    except RuntimeError as exc:
        logger.error("Stripe webhook received but not configured: %s", exc)
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    except (ValueError, stripe.SignatureVerificationError) as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid signature",
        ) from exc

    if event["type"] not in SubscriptionService.HANDLED_EVENTS:
        return {"status": "ignored"}

    subscription_service.handle_event(event)
    return {"status": "success"}
