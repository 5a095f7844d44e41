"""Account flows: signup with email verification, Google sign-in, password reset."""

import logging
import secrets
from datetime import datetime, timedelta, timezone

from sqlalchemy.orm import Session

from snippet_manager.config import settings
from snippet_manager.models.user import User
from snippet_manager.notifications.email_sender import EmailSender
from snippet_manager.schemas.user import UserCreate
from snippet_manager.services.google_identity import GoogleTokenVerifier
from snippet_manager.services.user_service import UserService, normalize_email
from snippet_manager.services.exceptions import (
    DeliveryError,
    InvalidInputError,
    UserAlreadyExistsError,
    UserNotFoundError,
)

logger = logging.getLogger(__name__)


def generate_otp() -> str:
    """Six-digit numeric one-time code."""
    return str(100000 + secrets.randbelow(900000))


def _now() -> datetime:
    return datetime.now(timezone.utc)


class AuthService:
    """
    Service for account lifecycle flows.

    Delivery of codes and links goes through an EmailSender; a flow whose
    email cannot be dispatched leaves no partial state behind.
    """

    def __init__(
        self,
        db: Session,
        email_sender: EmailSender,
        google_verifier: GoogleTokenVerifier,
    ):
        """
        Initialize the auth service.

        Args:
            db: SQLAlchemy database session
            email_sender: Outgoing email channel
            google_verifier: Google ID token verifier
        """
        self.db = db
        self.email_sender = email_sender
        self.google_verifier = google_verifier
        self.users = UserService(db)

    def signup(self, data: UserCreate) -> tuple[User, bool]:
        """
        Register an account and email a verification code.

        Signing up again with an unverified email replaces the pending
        details and sends a fresh code.

        Args:
            data: Signup data

        Returns:
            Tuple of the User and whether it was newly created

        Raises:
            UserAlreadyExistsError: If a verified account uses the email
            DeliveryError: If the verification email could not be sent
        """
        existing = self.users.get_user_by_email(data.email)
        if existing and existing.email_verified:
            raise UserAlreadyExistsError(existing.email)

        otp = generate_otp()
        otp_expires_at = _now() + timedelta(minutes=settings.OTP_EXPIRE_MINUTES)
        hashed_password = self.users.hash_password(data.password)

        if existing:
            existing.first_name = data.first_name.strip()
            existing.last_name = data.last_name.strip()
            existing.hashed_password = hashed_password
            existing.otp_code = otp
            existing.otp_expires_at = otp_expires_at
            self.db.commit()
            self.db.refresh(existing)

            if not self.email_sender.send_verification_code(existing.email, otp):
                raise DeliveryError("Failed to send verification email")

            logger.info(f"Re-sent verification code to pending user {existing.id}")
            return existing, False

        user = User(
            email=normalize_email(data.email),
            hashed_password=hashed_password,
            first_name=data.first_name.strip(),
            last_name=data.last_name.strip(),
            email_verified=False,
            otp_code=otp,
            otp_expires_at=otp_expires_at,
        )

        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)

        if not self.email_sender.send_verification_code(user.email, otp):
            self.db.delete(user)
            self.db.commit()
            raise DeliveryError("Failed to send verification email")

        logger.info(f"Created user {user.id} pending email verification")
        return user, True

    def verify_otp(self, email: str, otp: str) -> User:
        """
        Complete email verification.

        Raises:
            InvalidInputError: If the code is wrong or expired
        """
        user = self.db.query(User).filter(
            User.email == normalize_email(email),
            User.otp_code == otp.strip(),
            User.otp_expires_at > _now(),
        ).first()

        if not user:
            raise InvalidInputError("Invalid or expired OTP")

        user.email_verified = True
        user.otp_code = None
        user.otp_expires_at = None
        self.db.commit()
        self.db.refresh(user)

        logger.info(f"Verified email for user {user.id}")
        return user

    def resend_otp(self, email: str) -> None:
        """
        Send a fresh verification code.

        Raises:
            UserNotFoundError: If no account uses the email
            InvalidInputError: If the email is already verified
            DeliveryError: If the email could not be sent
        """
        user = self.users.get_user_by_email(email)

        if not user:
            raise UserNotFoundError(normalize_email(email))

        if user.email_verified:
            raise InvalidInputError("Email already verified")

        otp = generate_otp()
        user.otp_code = otp
        user.otp_expires_at = _now() + timedelta(minutes=settings.OTP_EXPIRE_MINUTES)
        self.db.commit()

        if not self.email_sender.send_verification_code(user.email, otp):
            raise DeliveryError("Failed to send verification email")

        logger.info(f"Re-sent verification code to user {user.id}")

    def login(self, email: str, password: str) -> User:
        """Password login; see UserService.authenticate_user for errors."""
        user = self.users.authenticate_user(email, password)
        logger.info(f"User {user.id} logged in")
        return user

    def google_login(self, id_token: str) -> User:
        """
        Sign in with a Google ID token.

        An existing account with the same email is linked to the Google
        identity; otherwise a verified account is created. Linking an
        account whose email was never verified drops its pending password,
        so only Google (or a later password reset) can sign in to it.

        Raises:
            AuthenticationError: If the token is rejected
            DeliveryError: If Google cannot be reached
        """
        identity = self.google_verifier.verify(id_token)
        user = self.users.get_user_by_email(identity.email)

        if user:
            if not user.google_id:
                user.google_id = identity.subject
                user.profile_image_url = user.profile_image_url or identity.picture
                if not user.email_verified:
                    # A password set before the address was proven may not be the owner's
                    user.hashed_password = None
                    user.otp_code = None
                    user.otp_expires_at = None
                    user.email_verified = True
                self.db.commit()
                self.db.refresh(user)
                logger.info(f"Linked Google account to user {user.id}")
            return user

        first_name, _, last_name = identity.name.strip().partition(" ")
        user = User(
            email=normalize_email(identity.email),
            first_name=first_name,
            last_name=last_name.strip(),
            google_id=identity.subject,
            profile_image_url=identity.picture,
            email_verified=True,
        )

        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)

        logger.info(f"Created user {user.id} from Google sign-in")
        return user

    def request_password_reset(self, email: str) -> None:
        """
        Store a reset token and email the reset link.

        Raises:
            UserNotFoundError: If no account uses the email
            DeliveryError: If the email could not be sent
        """
        user = self.users.get_user_by_email(email)

        if not user:
            raise UserNotFoundError(normalize_email(email))

        reset_token = secrets.token_hex(32)
        user.reset_token = reset_token
        user.reset_token_expires_at = _now() + timedelta(minutes=settings.RESET_TOKEN_EXPIRE_MINUTES)
        self.db.commit()

        if not self.email_sender.send_password_reset(user.email, reset_token):
            user.reset_token = None
            user.reset_token_expires_at = None
            self.db.commit()
            raise DeliveryError("Failed to send password reset email")

        logger.info(f"Password reset requested for user {user.id}")

    def reset_password(self, token: str, password: str) -> None:
        """
        Set a new password using a reset token.

        Raises:
            InvalidInputError: If the token is unknown or expired
        """
        user = self.db.query(User).filter(
            User.reset_token == token,
            User.reset_token_expires_at > _now(),
        ).first()

        if not user:
            raise InvalidInputError("Invalid or expired reset token")

        user.hashed_password = self.users.hash_password(password)
        user.reset_token = None
        user.reset_token_expires_at = None
        self.db.commit()

        logger.info(f"Password reset completed for user {user.id}")
