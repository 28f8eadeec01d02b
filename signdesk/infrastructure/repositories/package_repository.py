"""Repository for signing package metadata."""

import sqlite3
from datetime import datetime
from typing import List, Optional

from signdesk.domain.errors import NotFoundError
from signdesk.domain.models.package import Package, PackageStatus, Participant, ParticipantRole


class PackageRepository:
    """Repository for managing Package entities and their participants in SQLite."""

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._initialize_table()

    def _initialize_table(self) -> None:
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS packages (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    owner_id INTEGER NOT NULL,
                    name TEXT NOT NULL,
                    status TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    FOREIGN KEY (owner_id) REFERENCES users(id) ON DELETE CASCADE
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS package_participants (
                    package_id INTEGER NOT NULL,
                    participant_id TEXT NOT NULL,
                    contact_name TEXT NOT NULL,
                    contact_email TEXT NOT NULL,
                    role TEXT NOT NULL,
                    position INTEGER NOT NULL,
                    PRIMARY KEY (package_id, participant_id),
                    FOREIGN KEY (package_id) REFERENCES packages(id) ON DELETE CASCADE
                )
            """)
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_packages_owner_id ON packages(owner_id)"
            )
            conn.commit()

    def create(self, owner_id: int, name: str, participants: List[Participant]) -> Package:
        """Create a draft package with its assigned participants."""
        now = datetime.utcnow().isoformat()
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute(
                """
                INSERT INTO packages (owner_id, name, status, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (owner_id, name, PackageStatus.DRAFT.value, now, now),
            )
            package_id = cursor.lastrowid
            conn.executemany(
                """
                INSERT INTO package_participants (
                    package_id, participant_id, contact_name, contact_email, role, position
                )
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                [
                    (
                        package_id,
                        participant.id,
                        participant.contact_name,
                        participant.contact_email,
                        participant.role.value,
                        position,
                    )
                    for position, participant in enumerate(participants)
                ],
            )
            conn.commit()

        return Package(
            id=package_id,
            owner_id=owner_id,
            name=name,
            status=PackageStatus.DRAFT,
            participants=list(participants),
            created_at=datetime.fromisoformat(now),
            updated_at=datetime.fromisoformat(now),
        )

    def get_by_id(self, package_id: int) -> Optional[Package]:
        return self._fetch_one("SELECT * FROM packages WHERE id = ?", (package_id,))

    def get_for_owner(self, package_id: int, owner_id: int) -> Optional[Package]:
        return self._fetch_one(
            "SELECT * FROM packages WHERE id = ? AND owner_id = ?", (package_id, owner_id)
        )

    def list_for_owner(self, owner_id: int) -> List[Package]:
        with sqlite3.connect(self.db_path) as conn:
            conn.row_factory = sqlite3.Row
            rows = conn.execute(
                "SELECT * FROM packages WHERE owner_id = ? ORDER BY created_at DESC, id DESC",
                (owner_id,),
            ).fetchall()
            return [self._row_to_package(conn, row) for row in rows]

    def update_status(self, package_id: int, status: PackageStatus) -> Package:
        now = datetime.utcnow().isoformat()
        with sqlite3.connect(self.db_path) as conn:
            conn.execute(
                "UPDATE packages SET status = ?, updated_at = ? WHERE id = ?",
                (status.value, now, package_id),
            )
            conn.commit()

        package = self.get_by_id(package_id)
        if package is None:
            raise NotFoundError("Package not found.")
        return package

    def _fetch_one(self, query: str, params: tuple) -> Optional[Package]:
        with sqlite3.connect(self.db_path) as conn:
            conn.row_factory = sqlite3.Row
            row = conn.execute(query, params).fetchone()
            if not row:
                return None
            return self._row_to_package(conn, row)

    def _row_to_package(self, conn: sqlite3.Connection, row: sqlite3.Row) -> Package:
        participant_rows = conn.execute(
            """
            SELECT * FROM package_participants
            WHERE package_id = ?
            ORDER BY position ASC
            """,
            (row["id"],),
        ).fetchall()

        return Package(
            id=row["id"],
            owner_id=row["owner_id"],
            name=row["name"],
            status=PackageStatus(row["status"]),
            participants=[
                Participant(
                    id=item["participant_id"],
                    contact_name=item["contact_name"],
                    contact_email=item["contact_email"],
                    role=ParticipantRole(item["role"]),
                )
                for item in participant_rows
            ],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )
