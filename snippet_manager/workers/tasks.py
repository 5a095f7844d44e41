"""Celery tasks for background email delivery."""

import logging

import httpx

from snippet_manager.config import settings
from snippet_manager.workers.celery_app import celery_app

logger = logging.getLogger(__name__)


@celery_app.task(
    bind=True,
    max_retries=3,
    default_retry_delay=60,
    autoretry_for=(httpx.TransportError,),
)
def send_email(self, to: str, subject: str, html: str) -> dict:
    """
    Deliver one email through the Resend HTTP API.

    Transport errors and 5xx answers are retried by Celery; a 4xx means
    the message itself was refused and fails at once. The request that
    queued the email never sees them.

    Args:
        to: Recipient address
        subject: Subject line
        html: HTML body

    Returns:
        Provider message metadata
    """
    if not settings.RESEND_API_KEY:
        logger.warning(f"RESEND_API_KEY not set; dropping email '{subject}'")
        return {"status": "skipped"}

    logger.info(f"Sending email '{subject}' (attempt {self.request.retries + 1})")

    response = httpx.post(
        settings.RESEND_API_URL,
        headers={"Authorization": f"Bearer {settings.RESEND_API_KEY}"},
        json={
            "from": settings.EMAIL_FROM,
            "to": [to],
            "subject": subject,
            "html": html,
        },
        timeout=settings.HTTP_TIMEOUT_SECONDS,
    )
    try:
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        if response.is_server_error:
            raise self.retry(exc=e)
        logger.error(f"Email provider rejected '{subject}' with {response.status_code}: {response.text}")
        raise

    message_id = response.json().get("id")
    logger.info(f"Email '{subject}' sent, provider id {message_id}")
    return {"status": "sent", "id": message_id}
