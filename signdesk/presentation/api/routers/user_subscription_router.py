"""API router for the user's cached subscription."""

from typing import Optional

from fastapi import APIRouter, Depends

from signdesk.core.dependencies import get_subscription_service
from signdesk.domain.models.user import User
from signdesk.presentation.api.routers.user_router import get_current_user
from signdesk.presentation.api.schemas.subscription_schemas import SubscriptionResponse
from signdesk.services.subscription_service import SubscriptionService

router = APIRouter(prefix="/api/users/subscription", tags=["user-subscription"])


@router.get("/current", response_model=Optional[SubscriptionResponse])
async def get_current_subscription(
    user: User = Depends(get_current_user),
    subscription_service: SubscriptionService = Depends(get_subscription_service),
) -> Optional[SubscriptionResponse]:
    """Get the last known subscription state for the current user."""
    snapshot = subscription_service.get_user_subscription(user.id)
    if not snapshot:
        return None
    return SubscriptionResponse.from_snapshot(snapshot)
