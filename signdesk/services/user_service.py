"""Service for user authentication and management."""

from datetime import datetime, timedelta
from typing import Optional

import bcrypt
import jwt

from signdesk.domain.errors import ConflictError
from signdesk.domain.models.user import User
from signdesk.domain.ports.persistence import UserRepository


class UserService:
    """Service for managing user authentication and registration."""

    def __init__(
        self,
        user_repository: UserRepository,
        jwt_secret: str,
        jwt_algorithm: str = "HS256",
        jwt_expiration_hours: int = 24,
    ):
        self.user_repository = user_repository
        self.jwt_secret = jwt_secret
        self.jwt_algorithm = jwt_algorithm
        self.jwt_expiration_hours = jwt_expiration_hours

    def register(self, email: str, password: str, first_name: str, last_name: str) -> User:
        """
        Register a new user.

        Args:
            email: User email
            password: Plain text password
            first_name: Given name
            last_name: Family name

        Returns:
            The created User

        Raises:
            ConflictError: If email already exists
        """
        if self.user_repository.get_by_email(email):
            raise ConflictError("Email already registered")

        password_hash = bcrypt.hashpw(
            password.encode("utf-8"), bcrypt.gensalt()
        ).decode("utf-8")

        return self.user_repository.create(
            email=email,
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            password_hash=password_hash,
        )

    def authenticate(self, email: str, password: str) -> Optional[User]:
        """
        Authenticate a user with email and password.

        Returns:
            User if authenticated, None otherwise
        """
        user = self.user_repository.get_by_email(email)
        if not user:
            return None

        if not bcrypt.checkpw(
            password.encode("utf-8"), user.password_hash.encode("utf-8")
        ):
            return None

        return user

    def create_token(self, user: User) -> str:
        """Create JWT token for user."""
        payload = {
            "user_id": user.id,
            "email": user.email,
            "exp": datetime.utcnow() + timedelta(hours=self.jwt_expiration_hours),
            "iat": datetime.utcnow(),
        }

        return jwt.encode(payload, self.jwt_secret, algorithm=self.jwt_algorithm)

    def verify_token(self, token: str) -> Optional[dict]:
        """
        Verify and decode JWT token.

        Returns:
            Decoded payload if valid, None otherwise
        """
        try:
            return jwt.decode(token, self.jwt_secret, algorithms=[self.jwt_algorithm])
        except jwt.ExpiredSignatureError:
            return None
        except jwt.InvalidTokenError:
            return None

    def get_by_id(self, user_id: int) -> Optional[User]:
        """Get user by ID."""
        return self.user_repository.get_by_id(user_id)
