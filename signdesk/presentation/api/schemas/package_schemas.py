"""Pydantic schemas for signing package endpoints."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field

from signdesk.domain.models.package import Package, PackageStatus, ParticipantRole


class ParticipantRequest(BaseModel):
    id: Optional[str] = Field(None, description="Participant ID; generated when omitted")
    contact_name: str = Field(..., min_length=1)
    contact_email: EmailStr
    role: ParticipantRole


class CreatePackageRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    participants: List[ParticipantRequest] = Field(default_factory=list)


class UpdatePackageStatusRequest(BaseModel):
    status: PackageStatus


class ParticipantResponse(BaseModel):
    id: str
    contact_name: str
    contact_email: str
    role: ParticipantRole


class PackageResponse(BaseModel):
    id: int
    owner_id: int
    name: str
    status: PackageStatus
    participants: List[ParticipantResponse]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    @classmethod
    def from_package(cls, package: Package) -> "PackageResponse":
        return cls(
            id=package.id,
            owner_id=package.owner_id,
            name=package.name,
            status=package.status,
            participants=[
                ParticipantResponse(
                    id=participant.id,
                    contact_name=participant.contact_name,
                    contact_email=participant.contact_email,
                    role=participant.role,
                )
                for participant in package.participants
            ],
            created_at=package.created_at,
            updated_at=package.updated_at,
        )
