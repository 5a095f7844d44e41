"""
Snippet access policy.

Visibility and mutation rules for the three caller regimes. Public
snippets are visible to and editable by anyone, but only their creator
may delete them.

The owner clause of the edit/delete rules comes in two flavours. The
default (``strict_owner=False``) grants the clause to any authenticated
caller on any owned snippet; ``strict_owner=True`` requires the caller to
be that owner. Which one the product wants is still open, so both are
kept behind the ``STRICT_OWNER_CHECK`` setting.
"""

from sqlalchemy import and_, false, or_, true
from sqlalchemy.sql.elements import ColumnElement

from snippet_manager.models.snippet import Snippet
from snippet_manager.services.identity import (
    AnonymousCaller,
    AuthenticatedCaller,
    CallerIdentity,
)


def visibility_clause(identity: CallerIdentity) -> ColumnElement:
    """SQL predicate selecting the snippets an identity may list or search."""
    if isinstance(identity, AuthenticatedCaller):
        return or_(
            Snippet.is_public == true(),
            Snippet.owner_id == identity.user_id,
        )

    if isinstance(identity, AnonymousCaller):
        return or_(
            Snippet.is_public == true(),
            and_(
                Snippet.anonymous_id == identity.session_id,
                Snippet.owner_id.is_(None),
            ),
        )

    return Snippet.is_public == true()


def ownership_clause(identity: CallerIdentity) -> ColumnElement:
    """SQL predicate selecting only the snippets the identity created."""
    if isinstance(identity, AuthenticatedCaller):
        return Snippet.owner_id == identity.user_id

    if isinstance(identity, AnonymousCaller):
        return and_(
            Snippet.anonymous_id == identity.session_id,
            Snippet.owner_id.is_(None),
        )

    return false()


def can_view(snippet: Snippet, identity: CallerIdentity) -> bool:
    """Single-record counterpart of ``visibility_clause``."""
    if snippet.is_public:
        return True

    if isinstance(identity, AuthenticatedCaller):
        return snippet.owner_id is not None and snippet.owner_id == identity.user_id

    if isinstance(identity, AnonymousCaller):
        return snippet.owner_id is None and snippet.anonymous_id == identity.session_id

    return False


def _owner_clause_holds(snippet: Snippet, identity: CallerIdentity, strict_owner: bool) -> bool:
    if not isinstance(identity, AuthenticatedCaller) or snippet.owner_id is None:
        return False
    if strict_owner:
        return snippet.owner_id == identity.user_id
    return True


def can_edit(snippet: Snippet, identity: CallerIdentity, strict_owner: bool = False) -> bool:
    """Whether the identity may modify the snippet."""
    if _owner_clause_holds(snippet, identity, strict_owner):
        return True

    if isinstance(identity, AnonymousCaller) and snippet.anonymous_id == identity.session_id:
        return True

    # Collaborative editing
    return bool(snippet.is_public)


def can_delete(snippet: Snippet, identity: CallerIdentity, strict_owner: bool = False) -> bool:
    """Whether the identity may remove the snippet. Never granted by visibility alone."""
    if _owner_clause_holds(snippet, identity, strict_owner):
        return True

    return (
        isinstance(identity, AnonymousCaller)
        and snippet.owner_id is None
        and snippet.anonymous_id == identity.session_id
    )

