"""User account model."""

import uuid

from sqlalchemy import Column, String, DateTime, Boolean, Uuid
from sqlalchemy.sql import func

from snippet_manager.db.base import Base


class User(Base):
    """
    User model for authentication and snippet ownership.

    Accounts created through Google sign-in have no password hash and
    start out verified. The OTP and reset-token columns are transient and
    cleared once consumed.
    """

    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    # Stored lower-cased so lookups are case-insensitive
    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=True)
    first_name = Column(String(100), nullable=False, default="")
    last_name = Column(String(100), nullable=False, default="")
    profile_image_url = Column(String(2048), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    # Federated identity (Google subject id)
    google_id = Column(String(255), unique=True, nullable=True)

    # Email verification
    email_verified = Column(Boolean, nullable=False, default=False)
    otp_code = Column(String(12), nullable=True)
    otp_expires_at = Column(DateTime(timezone=True), nullable=True)

    # Password reset
    reset_token = Column(String(128), nullable=True, index=True)
    reset_token_expires_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email})>"
