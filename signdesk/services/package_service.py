"""Service for signing package metadata owned by a user."""

import logging
import uuid
from typing import Iterable, List, Optional

from signdesk.domain.errors import BusinessRuleError, NotFoundError
from signdesk.domain.models.package import Package, PackageStatus, Participant, ParticipantRole
from signdesk.domain.ports.persistence import PackageRepository

logger = logging.getLogger(__name__)


class PackageService:
    """Creates packages and tracks their lifecycle status.

    Participants are assigned at creation; the owner is implicitly the
    package Initiator and is never stored as a participant.
    """

    def __init__(self, package_repository: PackageRepository):
        self.package_repository = package_repository

    def create_package(
        self,
        owner_id: int,
        name: str,
        participants: Iterable[Participant],
    ) -> Package:
        """
        Create a draft package.

        Raises:
            BusinessRuleError: If the name is blank, a participant is an
                Initiator, a participant reuses the owner's ID, or two
                participants share an ID
        """
        name = name.strip()
        if not name:
            raise BusinessRuleError("Package name is required.")

        assigned: List[Participant] = []
        seen = set()
        for participant in participants:
            if participant.role is ParticipantRole.INITIATOR:
                raise BusinessRuleError("The package owner is the only Initiator.")
            participant_id = participant.id or uuid.uuid4().hex
            if participant_id == str(owner_id):
                raise BusinessRuleError(f"Participant ID {participant_id} is reserved for the package owner.")
            if participant_id in seen:
                raise BusinessRuleError(f"Duplicate participant ID {participant_id}.")
            seen.add(participant_id)
            assigned.append(
                Participant(
                    id=participant_id,
                    contact_name=participant.contact_name.strip(),
                    contact_email=participant.contact_email.strip().lower(),
                    role=participant.role,
                )
            )

        package = self.package_repository.create(owner_id, name, assigned)
        logger.info("Created package %s for user %s", package.id, owner_id)
        return package

    def list_packages(self, owner_id: int, status: Optional[PackageStatus] = None) -> List[Package]:
        packages = self.package_repository.list_for_owner(owner_id)
        if status is not None:
            packages = [package for package in packages if package.status is status]
        return packages

    def get_package(self, owner_id: int, package_id: int) -> Package:
        package = self.package_repository.get_for_owner(package_id, owner_id)
        if not package:
            raise NotFoundError("Package not found.")
        return package

    def update_status(self, owner_id: int, package_id: int, status: PackageStatus) -> Package:
        package = self.get_package(owner_id, package_id)
        if package.status is status:
            return package
        updated = self.package_repository.update_status(package.id, status)
        logger.info("Package %s moved from %s to %s", package.id, package.status.value, status.value)
        return updated
