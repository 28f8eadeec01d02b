"""Repository for Review persistence."""

import json
import sqlite3
from datetime import datetime
from typing import Dict, List, Optional

from signdesk.domain.errors import ConflictError
from signdesk.domain.models.package import ParticipantRole
from signdesk.domain.models.review import Review


class ReviewRepository:
    """Repository for managing Review entities in SQLite.

    A reviewer (identified by lower-cased email) can review a package once;
    the unique index enforces it even when two submissions race.
    """

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._initialize_table()

    def _initialize_table(self) -> None:
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS reviews (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    package_id INTEGER NOT NULL,
                    owner_id INTEGER NOT NULL,
                    reviewer_id TEXT NOT NULL,
                    reviewer_email TEXT NOT NULL,
                    reviewer_name TEXT NOT NULL,
                    reviewer_role TEXT NOT NULL,
                    answers TEXT NOT NULL,
                    average_rating REAL NOT NULL,
                    comment TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    UNIQUE (package_id, reviewer_email)
                )
            """)
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_reviews_package_id ON reviews(package_id)"
            )
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_reviews_featured ON reviews(average_rating, created_at)"
            )
            conn.commit()

    def create(
        self,
        package_id: int,
        owner_id: int,
        reviewer_id: str,
        reviewer_email: str,
        reviewer_name: str,
        reviewer_role: ParticipantRole,
        answers: Dict[str, int],
        average_rating: float,
        comment: Optional[str],
    ) -> Review:
        """Insert a review, raising ConflictError on a duplicate reviewer."""
        now = datetime.utcnow().isoformat()
        email = reviewer_email.strip().lower()

        try:
            with sqlite3.connect(self.db_path) as conn:
                cursor = conn.execute(
                    """
                    INSERT INTO reviews (
                        package_id, owner_id, reviewer_id, reviewer_email, reviewer_name,
                        reviewer_role, answers, average_rating, comment, created_at, updated_at
                    )
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        package_id,
                        owner_id,
                        reviewer_id,
                        email,
                        reviewer_name,
                        reviewer_role.value,
                        json.dumps(answers),
                        average_rating,
                        comment,
                        now,
                        now,
                    ),
                )
                conn.commit()
                review_id = cursor.lastrowid
        except sqlite3.IntegrityError as exc:
            raise ConflictError("You have already submitted a review for this package.") from exc

        return Review(
            id=review_id,
            package_id=package_id,
            owner_id=owner_id,
            reviewer_id=reviewer_id,
            reviewer_email=email,
            reviewer_name=reviewer_name,
            reviewer_role=reviewer_role,
            answers=dict(answers),
            average_rating=average_rating,
            comment=comment,
            created_at=datetime.fromisoformat(now),
            updated_at=datetime.fromisoformat(now),
        )

    def get_by_package_and_email(self, package_id: int, reviewer_email: str) -> Optional[Review]:
        rows = self._fetch(
            "SELECT * FROM reviews WHERE package_id = ? AND reviewer_email = ?",
            (package_id, reviewer_email.strip().lower()),
        )
        return rows[0] if rows else None

    def list_for_package(self, package_id: int) -> List[Review]:
        return self._fetch(
            "SELECT * FROM reviews WHERE package_id = ? ORDER BY created_at DESC, id DESC",
            (package_id,),
        )

    def list_featured(self, min_rating: float, limit: int) -> List[Review]:
        """Most recent reviews at or above ``min_rating`` that carry a comment."""
        return self._fetch(
            """
            SELECT * FROM reviews
            WHERE average_rating >= ? AND comment IS NOT NULL AND comment != ''
            ORDER BY created_at DESC, id DESC
            LIMIT ?
            """,
            (min_rating, limit),
        )

    def _fetch(self, query: str, params: tuple) -> List[Review]:
        with sqlite3.connect(self.db_path) as conn:
            conn.row_factory = sqlite3.Row
            rows = conn.execute(query, params).fetchall()
        return [self._row_to_review(row) for row in rows]

    def _row_to_review(self, row: sqlite3.Row) -> Review:
        return Review(
            id=row["id"],
            package_id=row["package_id"],
            owner_id=row["owner_id"],
            reviewer_id=row["reviewer_id"],
            reviewer_email=row["reviewer_email"],
            reviewer_name=row["reviewer_name"],
            reviewer_role=ParticipantRole(row["reviewer_role"]),
            answers=json.loads(row["answers"]),
            average_rating=row["average_rating"],
            comment=row["comment"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )
