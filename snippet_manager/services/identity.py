"""Caller identity passed from the request boundary into the service layer."""

from dataclasses import dataclass
from typing import Optional, Union
from uuid import UUID


@dataclass(frozen=True)
class AuthenticatedCaller:
    """Caller presenting a verified bearer token."""

    user_id: UUID


@dataclass(frozen=True)
class AnonymousCaller:
    """Caller presenting only a client-held anonymous session id."""

    session_id: str


@dataclass(frozen=True)
class GuestCaller:
    """Caller with no identity at all."""


CallerIdentity = Union[AuthenticatedCaller, AnonymousCaller, GuestCaller]


def resolve_identity(
    user_id: Optional[UUID] = None,
    anonymous_id: Optional[str] = None,
) -> CallerIdentity:
    """
    Build the caller identity for a request.

    A verified user id always wins; the anonymous id is ignored entirely
    when one is present.

    Args:
        user_id: Id taken from a verified bearer token
        anonymous_id: Raw value of the anonymous session header

    Returns:
        The resolved CallerIdentity
    """
    if user_id is not None:
        return AuthenticatedCaller(user_id=user_id)

    if anonymous_id is not None and anonymous_id.strip():
        return AnonymousCaller(session_id=anonymous_id.strip())

    return GuestCaller()
