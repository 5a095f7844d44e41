"""Verification of Google sign-in ID tokens."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import httpx

from snippet_manager.config import settings
from snippet_manager.services.exceptions import AuthenticationError, DeliveryError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GoogleIdentity:
    """Verified identity asserted by a Google ID token."""

    subject: str
    email: str
    name: str
    picture: Optional[str] = None


class GoogleTokenVerifier(ABC):
    """Interface for turning a Google ID token into a verified identity."""

    @abstractmethod
    def verify(self, id_token: str) -> GoogleIdentity:
        """
        Verify an ID token.

        Args:
            id_token: Token obtained by the client from Google

        Returns:
            GoogleIdentity

        Raises:
            AuthenticationError: If Google rejects the token
            DeliveryError: If Google cannot be reached
        """
        pass


class TokenInfoVerifier(GoogleTokenVerifier):
    """Verifies tokens against Google's tokeninfo endpoint."""

    def __init__(
        self,
        client_id: Optional[str] = None,
        tokeninfo_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.client_id = client_id or settings.GOOGLE_CLIENT_ID
        self.tokeninfo_url = tokeninfo_url or settings.GOOGLE_TOKENINFO_URL
        self.timeout = timeout or settings.HTTP_TIMEOUT_SECONDS

    def verify(self, id_token: str) -> GoogleIdentity:
        try:
            response = httpx.get(
                self.tokeninfo_url,
                params={"id_token": id_token},
                timeout=self.timeout,
            )
        except httpx.TimeoutException as e:
            logger.error(f"Google tokeninfo timed out: {e}")
            raise DeliveryError("Google sign-in is temporarily unavailable")
        except httpx.RequestError as e:
            logger.error(f"Google tokeninfo request failed: {e}")
            raise DeliveryError("Google sign-in is temporarily unavailable")

        if response.status_code != 200:
            raise AuthenticationError("Invalid Google token")

        claims = response.json()

        if self.client_id and claims.get("aud") != self.client_id:
            logger.warning("Rejected Google token issued for another client")
            raise AuthenticationError("Invalid Google token")

        email = claims.get("email")
        if not claims.get("sub") or not email:
            raise AuthenticationError("Google token carries no email")

        if str(claims.get("email_verified", "true")).lower() != "true":
            raise AuthenticationError("Google email address is not verified")

        return GoogleIdentity(
            subject=claims["sub"],
            email=email,
            name=claims.get("name") or email.split("@")[0],
            picture=claims.get("picture"),
        )
