"""API router for signing packages owned by the current user."""

from typing import List, Optional

from fastapi import APIRouter, Depends, status

from signdesk.core.dependencies import get_package_service
from signdesk.domain.models.package import PackageStatus, Participant
from signdesk.domain.models.user import User
from signdesk.presentation.api.routers.user_router import get_current_user
from signdesk.presentation.api.schemas.package_schemas import (
    CreatePackageRequest,
    PackageResponse,
    UpdatePackageStatusRequest,
)
from signdesk.services.package_service import PackageService

router = APIRouter(prefix="/api/packages", tags=["Packages"])


@router.post("", response_model=PackageResponse, status_code=status.HTTP_201_CREATED)
async def create_package(
    payload: CreatePackageRequest,
    user: User = Depends(get_current_user),
    service: PackageService = Depends(get_package_service),
) -> PackageResponse:
    package = service.create_package(
        owner_id=user.id,
        name=payload.name,
        participants=[
            Participant(
                id=item.id or "",
                contact_name=item.contact_name,
                contact_email=item.contact_email,
                role=item.role,
            )
            for item in payload.participants
        ],
    )
    return PackageResponse.from_package(package)


@router.get("", response_model=List[PackageResponse])
async def list_packages(
    status_filter: Optional[PackageStatus] = None,
    user: User = Depends(get_current_user),
    service: PackageService = Depends(get_package_service),
) -> List[PackageResponse]:
    return [PackageResponse.from_package(item) for item in service.list_packages(user.id, status_filter)]


@router.get("/{package_id}", response_model=PackageResponse)
async def get_package(
    package_id: int,
    user: User = Depends(get_current_user),
    service: PackageService = Depends(get_package_service),
) -> PackageResponse:
    return PackageResponse.from_package(service.get_package(user.id, package_id))


@router.patch("/{package_id}/status", response_model=PackageResponse)
async def update_package_status(
    package_id: int,
    payload: UpdatePackageStatusRequest,
    user: User = Depends(get_current_user),
    service: PackageService = Depends(get_package_service),
) -> PackageResponse:
    """Move a package through its lifecycle (e.g. Sent -> Completed)."""
    return PackageResponse.from_package(service.update_status(user.id, package_id, payload.status))
