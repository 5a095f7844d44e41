"""User service for authentication primitives and profile management."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

import bcrypt
from jose import jwt, JWTError
from sqlalchemy.orm import Session

from snippet_manager.config import settings
from snippet_manager.models.user import User
from snippet_manager.schemas.user import TokenPayload, UserUpdate
from snippet_manager.services.exceptions import (
    AuthenticationError,
    EmailNotVerifiedError,
    InvalidInputError,
    UserNotFoundError,
)

logger = logging.getLogger(__name__)

# JWT settings
ALGORITHM = "HS256"


def normalize_email(email: str) -> str:
    """Emails are stored and looked up lower-cased."""
    return email.strip().lower()


class UserService:
    """Service for user management and authentication."""

    def __init__(self, db: Session):
        """
        Initialize the user service.

        Args:
            db: SQLAlchemy database session
        """
        self.db = db

    def get_user_by_id(self, user_id: UUID) -> User:
        """
        Get user by ID.

        Args:
            user_id: User ID

        Returns:
            User instance

        Raises:
            UserNotFoundError: If user doesn't exist
        """
        user = self.db.query(User).filter(User.id == user_id).first()

        if not user:
            raise UserNotFoundError(user_id)

        return user

    def get_user_by_email(self, email: str) -> Optional[User]:
        """
        Get user by email (case-insensitive).

        Args:
            email: User email

        Returns:
            User instance or None
        """
        return self.db.query(User).filter(User.email == normalize_email(email)).first()

    def authenticate_user(self, email: str, password: str) -> User:
        """
        Authenticate a user with email and password.

        Args:
            email: User email
            password: User password

        Returns:
            Authenticated User instance

        Raises:
            AuthenticationError: If credentials are invalid
            EmailNotVerifiedError: If the email has not been verified yet
        """
        user = self.get_user_by_email(email)

        if not user or not user.hashed_password:
            raise AuthenticationError("Invalid email or password")

        if not self.verify_password(password, user.hashed_password):
            raise AuthenticationError("Invalid email or password")

        if not user.is_active:
            raise AuthenticationError("User account is disabled")

        if not user.email_verified:
            raise EmailNotVerifiedError(user.email)

        return user

    def create_access_token(self, user_id: UUID) -> str:
        """
        Create a JWT access token for a user.

        Args:
            user_id: User ID

        Returns:
            JWT token string
        """
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

        payload = {
            "sub": str(user_id),
            "exp": expire,
        }

        return jwt.encode(payload, settings.SECRET_KEY, algorithm=ALGORITHM)

    def verify_token(self, token: str) -> TokenPayload:
        """
        Verify a JWT token and extract payload.

        Args:
            token: JWT token string

        Returns:
            TokenPayload with user ID

        Raises:
            AuthenticationError: If token is invalid
        """
        try:
            payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
            return TokenPayload(sub=payload.get("sub"), exp=payload.get("exp"))
        except JWTError as e:
            raise AuthenticationError(f"Invalid token: {str(e)}")

    def get_user_from_token(self, token: str) -> User:
        """
        Resolve a bearer token to an active user.

        Raises:
            AuthenticationError: If the token is invalid or the user is unknown or disabled
        """
        payload = self.verify_token(token)

        if not payload.sub:
            raise AuthenticationError("Invalid token payload")

        try:
            user = self.get_user_by_id(UUID(payload.sub))
        except (ValueError, UserNotFoundError):
            raise AuthenticationError("Invalid or expired token")

        if not user.is_active:
            raise AuthenticationError("User account is disabled")

        return user

    def update_profile(self, user: User, data: UserUpdate) -> User:
        """
        Update profile fields that were supplied and non-empty.

        Args:
            user: User to update
            data: Profile changes

        Returns:
            Updated User instance
        """
        if data.first_name and data.first_name.strip():
            user.first_name = data.first_name.strip()
        if data.last_name and data.last_name.strip():
            user.last_name = data.last_name.strip()
        if data.profile_image_url:
            user.profile_image_url = data.profile_image_url

        self.db.commit()
        self.db.refresh(user)

        logger.info(f"Updated profile for user {user.id}")
        return user

    def set_profile_image(self, user: User, image_url: Optional[str]) -> User:
        """Store (or clear, with None) the profile image URL."""
        user.profile_image_url = image_url

        self.db.commit()
        self.db.refresh(user)

        logger.info(f"{'Set' if image_url else 'Cleared'} profile image for user {user.id}")
        return user

    def change_password(self, user: User, old_password: str, new_password: str) -> None:
        """
        Change the password after checking the current one.

        Raises:
            InvalidInputError: If the account has no password or the old one is wrong
        """
        if not user.hashed_password:
            raise InvalidInputError("This account signs in with Google and has no password")

        if not self.verify_password(old_password, user.hashed_password):
            raise InvalidInputError("Current password is incorrect")

        user.hashed_password = self.hash_password(new_password)
        self.db.commit()

        logger.info(f"Changed password for user {user.id}")

    def hash_password(self, password: str) -> str:
        """Hash a password using bcrypt."""
        # Encode to bytes and hash
        password_bytes = password.encode("utf-8")
        salt = bcrypt.gensalt()
        hashed = bcrypt.hashpw(password_bytes, salt)
        return hashed.decode("utf-8")

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        """Verify a password against its hash."""
        password_bytes = plain_password.encode("utf-8")
        hashed_bytes = hashed_password.encode("utf-8")
        return bcrypt.checkpw(password_bytes, hashed_bytes)
