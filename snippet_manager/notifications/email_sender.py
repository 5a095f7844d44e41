"""Email notification abstraction for verification codes and reset links."""

import logging
from abc import ABC, abstractmethod

from kombu.exceptions import OperationalError

from snippet_manager.config import settings

logger = logging.getLogger(__name__)

_FOOTER = """
        <hr style="border: none; border-top: 1px solid #dee2e6; margin: 30px 0;">
        <p style="color: #6c757d; font-size: 12px;">
          This is an automated message from {app_name}. Please do not reply to this email.
        </p>
"""


def render_verification_email(otp: str) -> tuple[str, str]:
    """Return subject and HTML body for an email verification code."""
    subject = f"Email Verification - {settings.APP_NAME}"
    html = f"""
      <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
        <h2 style="color: #333; text-align: center;">Verify Your Email</h2>
        <p>Hello,</p>
        <p>Thank you for signing up for {settings.APP_NAME}! Please use the following
        verification code to complete your registration:</p>
        <div style="background-color: #f8f9fa; border: 1px solid #dee2e6; border-radius: 5px;
                    padding: 20px; text-align: center; margin: 20px 0;">
          <h1 style="color: #007bff; font-size: 32px; margin: 0; letter-spacing: 5px;">{otp}</h1>
        </div>
        <p><strong>Important:</strong> This code will expire in
        {settings.OTP_EXPIRE_MINUTES} minutes.</p>
        <p>If you didn't request this verification, please ignore this email.</p>
        {_FOOTER.format(app_name=settings.APP_NAME)}
      </div>
    """
    return subject, html


def render_password_reset_email(reset_token: str) -> tuple[str, str]:
    """Return subject and HTML body for a password reset link."""
    reset_link = f"{settings.FRONTEND_URL.rstrip('/')}/reset-password?token={reset_token}"
    subject = f"Password Reset - {settings.APP_NAME}"
    html = f"""
      <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
        <h2 style="color: #333; text-align: center;">Reset Your Password</h2>
        <p>Hello,</p>
        <p>You have requested to reset your password for {settings.APP_NAME}.
        Click the button below to choose a new one:</p>
        <div style="text-align: center; margin: 30px 0;">
          <a href="{reset_link}" style="background-color: #007bff; color: white; padding: 12px 24px;
             text-decoration: none; border-radius: 5px; display: inline-block;">Reset Password</a>
        </div>
        <p><strong>Important:</strong> This link will expire in
        {settings.RESET_TOKEN_EXPIRE_MINUTES} minutes.</p>
        <p>If you didn't request this password reset, please ignore this email.</p>
        {_FOOTER.format(app_name=settings.APP_NAME)}
      </div>
    """
    return subject, html


class EmailSender(ABC):
    """
    Abstract interface for outgoing account emails.

    Implementations report whether the message was accepted for delivery;
    they never raise for provider failures.
    """

    @abstractmethod
    def send_verification_code(self, email: str, otp: str) -> bool:
        """
        Send an email verification code.

        Args:
            email: Recipient address
            otp: One-time code

        Returns:
            True if the message was accepted for delivery
        """
        pass

    @abstractmethod
    def send_password_reset(self, email: str, reset_token: str) -> bool:
        """
        Send a password reset link.

        Args:
            email: Recipient address
            reset_token: Reset token embedded in the link

        Returns:
            True if the message was accepted for delivery
        """
        pass


class CeleryEmailSender(EmailSender):
    """Queues emails on Celery; the worker delivers them with retries."""

    def send_verification_code(self, email: str, otp: str) -> bool:
        subject, html = render_verification_email(otp)
        return self._enqueue(email, subject, html)

    def send_password_reset(self, email: str, reset_token: str) -> bool:
        subject, html = render_password_reset_email(reset_token)
        return self._enqueue(email, subject, html)

    def _enqueue(self, email: str, subject: str, html: str) -> bool:
        # Import here to avoid circular imports
        from snippet_manager.workers.tasks import send_email

        try:
            send_email.delay(email, subject, html)
        except OperationalError as e:
            logger.error(f"Could not queue email '{subject}': {e}")
            return False

        logger.info(f"Queued email '{subject}'")
        return True
