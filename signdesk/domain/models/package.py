"""Signing package metadata."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional


class PackageStatus(str, Enum):
    DRAFT = "Draft"
    SENT = "Sent"
    COMPLETED = "Completed"
    ARCHIVED = "Archived"
    REJECTED = "Rejected"
    EXPIRED = "Expired"
    REVOKED = "Revoked"


class ParticipantRole(str, Enum):
    INITIATOR = "Initiator"
    SIGNER = "Signer"
    APPROVER = "Approver"
    FORM_FILLER = "FormFiller"


@dataclass(slots=True)
class Participant:
    id: str
    contact_name: str
    contact_email: str
    role: ParticipantRole


@dataclass(slots=True)
class Package:
    id: int
    owner_id: int
    name: str
    status: PackageStatus
    participants: List[Participant] = field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def find_participant(self, participant_id: str) -> Optional[Participant]:
        for participant in self.participants:
            if participant.id == participant_id:
                return participant
        return None
