"""Pydantic schemas for request/response validation."""

from snippet_manager.schemas.snippet import (
    SnippetCreate,
    SnippetUpdate,
    SnippetOwner,
    SnippetResponse,
    SnippetCreateResponse,
    SnippetListResponse,
    SnippetSearchResponse,
    MySnippetsResponse,
)
from snippet_manager.schemas.user import (
    UserCreate,
    UserUpdate,
    UserResponse,
    LoginRequest,
    OTPVerifyRequest,
    EmailRequest,
    GoogleAuthRequest,
    PasswordChangeRequest,
    PasswordResetRequest,
    SignupResponse,
    MessageResponse,
    Token,
    AuthResponse,
    TokenPayload,
)

__all__ = [
    "SnippetCreate",
    "SnippetUpdate",
    "SnippetOwner",
    "SnippetResponse",
    "SnippetCreateResponse",
    "SnippetListResponse",
    "SnippetSearchResponse",
    "MySnippetsResponse",
    "UserCreate",
    "UserUpdate",
    "UserResponse",
    "LoginRequest",
    "OTPVerifyRequest",
    "EmailRequest",
    "GoogleAuthRequest",
    "PasswordChangeRequest",
    "PasswordResetRequest",
    "SignupResponse",
    "MessageResponse",
    "Token",
    "AuthResponse",
    "TokenPayload",
]
