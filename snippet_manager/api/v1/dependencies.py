"""API dependencies for dependency injection."""

from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from snippet_manager.db.session import get_db
from snippet_manager.notifications.email_sender import CeleryEmailSender, EmailSender
from snippet_manager.storage.blob_storage import S3Storage, BlobStorage
from snippet_manager.services.auth_service import AuthService
from snippet_manager.services.google_identity import GoogleTokenVerifier, TokenInfoVerifier
from snippet_manager.services.identity import CallerIdentity, resolve_identity
from snippet_manager.services.profile_service import ProfileService
from snippet_manager.services.snippet_service import SnippetService
from snippet_manager.services.user_service import UserService
from snippet_manager.services.exceptions import AuthenticationError
from snippet_manager.models.user import User

ANONYMOUS_ID_HEADER = "X-Anonymous-ID"
# Matches the width of snippets.anonymous_id
ANONYMOUS_ID_MAX_LENGTH = 255

# Security schemes for JWT
security = HTTPBearer()
optional_security = HTTPBearer(auto_error=False)


def get_blob_storage() -> BlobStorage:
    """Get blob storage client."""
    return S3Storage()


def get_email_sender() -> EmailSender:
    """Get outgoing email channel."""
    return CeleryEmailSender()


def get_google_verifier() -> GoogleTokenVerifier:
    """Get Google ID token verifier."""
    return TokenInfoVerifier()


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    """Get user service instance."""
    return UserService(db)


def get_snippet_service(db: Session = Depends(get_db)) -> SnippetService:
    """Get snippet service instance."""
    return SnippetService(db)


def get_auth_service(
    db: Session = Depends(get_db),
    email_sender: EmailSender = Depends(get_email_sender),
    google_verifier: GoogleTokenVerifier = Depends(get_google_verifier),
) -> AuthService:
    """Get auth service instance."""
    return AuthService(db, email_sender, google_verifier)


def get_profile_service(
    db: Session = Depends(get_db),
    blob_storage: BlobStorage = Depends(get_blob_storage),
) -> ProfileService:
    """Get profile service instance."""
    return ProfileService(db, blob_storage)


def _user_from_token(token: str, user_service: UserService) -> User:
    try:
        return user_service.get_user_from_token(token)
    except AuthenticationError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e.message),
            headers={"WWW-Authenticate": "Bearer"},
        )


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    user_service: UserService = Depends(get_user_service),
) -> User:
    """
    Get the current authenticated user from JWT token.

    Args:
        credentials: HTTP Bearer credentials
        user_service: User service instance

    Returns:
        Current User instance

    Raises:
        HTTPException: If authentication fails
    """
    return _user_from_token(credentials.credentials, user_service)


def get_caller_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_security),
    anonymous_id: Optional[str] = Header(
        default=None, alias=ANONYMOUS_ID_HEADER, max_length=ANONYMOUS_ID_MAX_LENGTH
    ),
    user_service: UserService = Depends(get_user_service),
) -> CallerIdentity:
    """
    Resolve the caller once per request.

    A bearer token, when sent, must be valid; a bad token is rejected
    rather than downgraded to an anonymous or guest caller.

    Args:
        credentials: Optional HTTP Bearer credentials
        anonymous_id: Optional anonymous session header
        user_service: User service instance

    Returns:
        CallerIdentity for the request
    """
    if credentials is not None:
        user = _user_from_token(credentials.credentials, user_service)
        return resolve_identity(user_id=user.id)

    return resolve_identity(anonymous_id=anonymous_id)
