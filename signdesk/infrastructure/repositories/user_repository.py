"""Repository for User persistence."""

import sqlite3
from datetime import datetime
from typing import Optional

from signdesk.domain.errors import ConflictError, NotFoundError
from signdesk.domain.models.subscription import SubscriptionSnapshot, SubscriptionStatus
from signdesk.domain.models.user import User


class UserRepository:
    """Repository for managing User entities in SQLite."""

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._initialize_table()

    def _initialize_table(self) -> None:
        """Create users table if it doesn't exist and migrate schema if needed."""
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS users (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    email TEXT UNIQUE NOT NULL,
                    first_name TEXT NOT NULL DEFAULT '',
                    last_name TEXT NOT NULL DEFAULT '',
                    password_hash TEXT NOT NULL,
                    stripe_customer_id TEXT UNIQUE,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)

            # Subscription snapshot columns were added after the first release
            cursor = conn.execute("PRAGMA table_info(users)")
            existing_columns = {row[1] for row in cursor.fetchall()}
            for column in (
                "subscription_id",
                "subscription_status",
                "subscription_plan_name",
                "subscription_period_start",
                "subscription_period_end",
                "subscription_refreshed_at",
            ):
                if column not in existing_columns:
                    conn.execute(f"ALTER TABLE users ADD COLUMN {column} TEXT")

            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_users_subscription_id ON users(subscription_id)"
            )
            conn.commit()

    def create(
        self,
        email: str,
        first_name: str,
        last_name: str,
        password_hash: str,
    ) -> User:
        """Create a new user."""
        now = datetime.utcnow().isoformat()
        normalized = email.strip().lower()

        try:
            with sqlite3.connect(self.db_path) as conn:
                cursor = conn.execute(
                    """
                    INSERT INTO users (
                        email, first_name, last_name, password_hash, created_at, updated_at
                    )
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (normalized, first_name, last_name, password_hash, now, now),
                )
                conn.commit()
                user_id = cursor.lastrowid
        except sqlite3.IntegrityError as exc:
            raise ConflictError("Email already registered") from exc

        return User(
            id=user_id,
            email=normalized,
            first_name=first_name,
            last_name=last_name,
            password_hash=password_hash,
            created_at=datetime.fromisoformat(now),
            updated_at=datetime.fromisoformat(now),
        )

    def get_by_id(self, user_id: int) -> Optional[User]:
        """Get user by ID."""
        return self._fetch_one("SELECT * FROM users WHERE id = ?", (user_id,))

    def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email."""
        return self._fetch_one(
            "SELECT * FROM users WHERE email = ?", (email.strip().lower(),)
        )

    def get_by_stripe_customer_id(self, customer_id: str) -> Optional[User]:
        """Get user by Stripe customer ID."""
        return self._fetch_one(
            "SELECT * FROM users WHERE stripe_customer_id = ?", (customer_id,)
        )

    def get_by_subscription_id(self, subscription_id: str) -> Optional[User]:
        """Get the user whose cached snapshot holds this Stripe subscription."""
        return self._fetch_one(
            "SELECT * FROM users WHERE subscription_id = ?", (subscription_id,)
        )

    def set_stripe_customer_id(self, user_id: int, customer_id: str) -> None:
        """Store the Stripe customer reference for a user."""
        now = datetime.utcnow().isoformat()
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute(
                "UPDATE users SET stripe_customer_id = ?, updated_at = ? WHERE id = ?",
                (customer_id, now, user_id),
            )
            conn.commit()
        if cursor.rowcount == 0:
            raise NotFoundError("User not found.")

    def save_subscription(self, user_id: int, snapshot: Optional[SubscriptionSnapshot]) -> None:
        """Replace the cached subscription snapshot, or clear it with None."""
        now = datetime.utcnow().isoformat()
        if snapshot is None:
            values = (None, None, None, None, None, None)
        else:
            values = (
                snapshot.subscription_id,
                snapshot.status.value if snapshot.status else None,
                snapshot.plan_name,
                snapshot.current_period_start.isoformat() if snapshot.current_period_start else None,
                snapshot.current_period_end.isoformat() if snapshot.current_period_end else None,
                snapshot.refreshed_at.isoformat(),
            )
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute(
                """
                UPDATE users
                SET subscription_id = ?, subscription_status = ?, subscription_plan_name = ?,
                    subscription_period_start = ?, subscription_period_end = ?,
                    subscription_refreshed_at = ?, updated_at = ?
                WHERE id = ?
                """,
                (*values, now, user_id),
            )
            conn.commit()
        if cursor.rowcount == 0:
            raise NotFoundError("User not found.")

    def _fetch_one(self, query: str, params: tuple) -> Optional[User]:
        with sqlite3.connect(self.db_path) as conn:
            conn.row_factory = sqlite3.Row
            row = conn.execute(query, params).fetchone()

        if not row:
            return None

        return self._row_to_user(row)

    def _row_to_user(self, row: sqlite3.Row) -> User:
        """Convert database row to User entity."""
        snapshot = None
        if row["subscription_id"] or row["subscription_status"]:
            snapshot = SubscriptionSnapshot(
                subscription_id=row["subscription_id"],
                status=SubscriptionStatus.parse(row["subscription_status"]),
                plan_name=row["subscription_plan_name"],
                current_period_start=_parse_optional(row["subscription_period_start"]),
                current_period_end=_parse_optional(row["subscription_period_end"]),
                refreshed_at=_parse_optional(row["subscription_refreshed_at"])
                or datetime.fromisoformat(row["updated_at"]),
            )

        return User(
            id=row["id"],
            email=row["email"],
            first_name=row["first_name"],
            last_name=row["last_name"],
            password_hash=row["password_hash"],
            stripe_customer_id=row["stripe_customer_id"],
            subscription=snapshot,
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )


def _parse_optional(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None
