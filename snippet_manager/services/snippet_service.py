"""Snippet service implementing creation, access control and search."""

import logging
import math
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from sqlalchemy import func, or_, update
from sqlalchemy.orm import Query, Session
from sqlalchemy.orm.exc import StaleDataError

from snippet_manager.config import settings
from snippet_manager.models.snippet import Snippet, SnippetTag
from snippet_manager.schemas.snippet import SnippetCreate, SnippetUpdate
from snippet_manager.services import access_policy
from snippet_manager.services.identity import (
    AnonymousCaller,
    AuthenticatedCaller,
    CallerIdentity,
    GuestCaller,
)
from snippet_manager.services.exceptions import (
    AuthenticationError,
    AuthorizationError,
    InvalidInputError,
    RevisionConflictError,
    SnippetNotFoundError,
)

logger = logging.getLogger(__name__)

LIKE_ESCAPE = "\\"


@dataclass
class SnippetPage:
    """One page of a listing or search."""

    items: list[Snippet]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


def _like_pattern(term: str) -> str:
    """Build a literal, escaped substring pattern for LIKE."""
    escaped = (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"


def text_match_clause(term: str):
    """Case-insensitive substring match on title, description, code or any tag."""
    pattern = _like_pattern(term)
    return or_(
        Snippet.title.ilike(pattern, escape=LIKE_ESCAPE),
        Snippet.description.ilike(pattern, escape=LIKE_ESCAPE),
        Snippet.code.ilike(pattern, escape=LIKE_ESCAPE),
        Snippet.tag_rows.any(SnippetTag.value.ilike(pattern, escape=LIKE_ESCAPE)),
    )


def exact_title_clause(term: str):
    """Case-insensitive equality on the title."""
    return func.lower(Snippet.title) == func.lower(term)


class SnippetService:
    """
    Service for managing snippets.

    Every operation receives the caller's identity explicitly. Visibility
    and mutation rules live in ``access_policy``; this class composes them
    with queries, pagination and persistence.
    """

    def __init__(self, db: Session, strict_owner: Optional[bool] = None):
        """
        Initialize the snippet service.

        Args:
            db: SQLAlchemy database session
            strict_owner: Require owner identity equality for the owner
                edit/delete clause (defaults to settings)
        """
        self.db = db
        self.strict_owner = (
            settings.STRICT_OWNER_CHECK if strict_owner is None else strict_owner
        )

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def create_snippet(
        self,
        identity: CallerIdentity,
        data: SnippetCreate,
    ) -> tuple[Snippet, Optional[str]]:
        """
        Create a snippet bound to the caller.

        Authenticated callers become the owner. Anyone else is bound by an
        anonymous session id, minted here for guests.

        Args:
            identity: Caller identity
            data: Snippet creation data

        Returns:
            Tuple of the created Snippet and the anonymous session id
            (None for authenticated callers)

        Raises:
            InvalidInputError: If title or code is blank
        """
        title = (data.title or "").strip()
        code = data.code or ""
        if not title or not code.strip():
            raise InvalidInputError("Title and code are required")

        snippet = Snippet(
            title=title,
            description=(data.description or "").strip(),
            code=code,
            language=(data.language or "").strip() or settings.DEFAULT_LANGUAGE,
            is_public=data.is_public,
        )
        snippet.tags = data.tags

        anonymous_id: Optional[str] = None
        if isinstance(identity, AuthenticatedCaller):
            snippet.owner_id = identity.user_id
        else:
            if isinstance(identity, AnonymousCaller):
                anonymous_id = identity.session_id
            else:
                anonymous_id = str(uuid.uuid4())
            snippet.anonymous_id = anonymous_id

        self.db.add(snippet)
        self.db.commit()
        self.db.refresh(snippet)

        if anonymous_id:
            logger.info(f"Created snippet {snippet.id} for anonymous session")
        else:
            logger.info(f"Created snippet {snippet.id} for user {snippet.owner_id}")
        return snippet, anonymous_id

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_snippet_by_id(self, snippet_id: UUID) -> Snippet:
        """
        Get a snippet by ID (without access check).

        Raises:
            SnippetNotFoundError: If the snippet doesn't exist
        """
        snippet = self.db.query(Snippet).filter(Snippet.id == snippet_id).first()

        if not snippet:
            raise SnippetNotFoundError(snippet_id)

        return snippet

    def get_snippet(self, identity: CallerIdentity, snippet_id: UUID) -> Snippet:
        """
        Get a snippet the caller may view and count the view.

        Args:
            identity: Caller identity
            snippet_id: Snippet ID

        Returns:
            Snippet instance with the incremented view count

        Raises:
            SnippetNotFoundError: If the snippet doesn't exist
            AuthorizationError: If the caller may not view it
        """
        snippet = self.get_snippet_by_id(snippet_id)

        if not access_policy.can_view(snippet, identity):
            raise AuthorizationError("Access denied")

        # Single UPDATE so concurrent reads never lose increments
        self.db.execute(
            update(Snippet)
            .where(Snippet.id == snippet.id)
            .values(view_count=Snippet.view_count + 1, updated_at=Snippet.updated_at)
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        self.db.refresh(snippet)

        return snippet

    def list_snippets(
        self,
        identity: CallerIdentity,
        search: Optional[str] = None,
        language: Optional[str] = None,
        tag: Optional[str] = None,
        page: int = 1,
        limit: Optional[int] = None,
    ) -> SnippetPage:
        """
        List snippets visible to the caller.

        Args:
            identity: Caller identity
            search: Optional substring matched against text fields and tags
            language: Optional exact language filter
            tag: Optional tag membership filter
            page: 1-based page number
            limit: Page size (clamped to MAX_PAGE_SIZE)

        Returns:
            SnippetPage, newest first
        """
        query = self.db.query(Snippet).filter(access_policy.visibility_clause(identity))

        if search and search.strip():
            query = query.filter(text_match_clause(search.strip()))

        query = self._apply_filters(query, language, tag)

        return self._paginate(query, page, limit or settings.DEFAULT_PAGE_SIZE)

    def search_snippets(
        self,
        identity: CallerIdentity,
        query_text: Optional[str],
        language: Optional[str] = None,
        tag: Optional[str] = None,
        include_private: bool = False,
        exact_title: bool = False,
        page: int = 1,
        limit: Optional[int] = None,
    ) -> SnippetPage:
        """
        Search snippets.

        Visibility collapses to public-only unless ``include_private`` is
        set and the caller has an identity.

        Args:
            identity: Caller identity
            query_text: Search text, at least MIN_SEARCH_LENGTH after trimming
            language: Optional exact language filter
            tag: Optional tag membership filter
            include_private: Include the caller's own private snippets
            exact_title: Match the whole title instead of substrings
            page: 1-based page number
            limit: Page size (clamped to MAX_PAGE_SIZE)

        Returns:
            SnippetPage, newest first

        Raises:
            InvalidInputError: If the query is too short
        """
        term = (query_text or "").strip()
        if len(term) < settings.MIN_SEARCH_LENGTH:
            raise InvalidInputError(
                f"Search query must be at least {settings.MIN_SEARCH_LENGTH} characters long"
            )

        if include_private and not isinstance(identity, GuestCaller):
            visibility = access_policy.visibility_clause(identity)
        else:
            visibility = access_policy.visibility_clause(GuestCaller())

        match = exact_title_clause(term) if exact_title else text_match_clause(term)

        query = self.db.query(Snippet).filter(visibility, match)
        query = self._apply_filters(query, language, tag)

        return self._paginate(query, page, limit or settings.DEFAULT_SEARCH_PAGE_SIZE)

    def list_own_snippets(self, identity: CallerIdentity) -> list[Snippet]:
        """
        List every snippet the caller created, newest first.

        Raises:
            AuthenticationError: If the caller has no identity
        """
        if isinstance(identity, GuestCaller):
            raise AuthenticationError("Authentication required")

        return (
            self.db.query(Snippet)
            .filter(access_policy.ownership_clause(identity))
            .order_by(Snippet.created_at.desc())
            .all()
        )

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def can_edit(self, snippet: Snippet, identity: CallerIdentity) -> bool:
        return access_policy.can_edit(snippet, identity, strict_owner=self.strict_owner)

    def can_delete(self, snippet: Snippet, identity: CallerIdentity) -> bool:
        return access_policy.can_delete(snippet, identity, strict_owner=self.strict_owner)

    def update_snippet(
        self,
        identity: CallerIdentity,
        snippet_id: UUID,
        data: SnippetUpdate,
    ) -> Snippet:
        """
        Update a snippet.

        Without ``expected_revision`` the last write wins.

        Args:
            identity: Caller identity
            snippet_id: Snippet ID
            data: Fields to change

        Returns:
            Updated Snippet instance

        Raises:
            SnippetNotFoundError: If the snippet doesn't exist
            AuthorizationError: If the caller may not edit it
            InvalidInputError: If title or code would become blank
            RevisionConflictError: If the snippet moved past expected_revision
        """
        snippet = self.get_snippet_by_id(snippet_id)

        if not self.can_edit(snippet, identity):
            raise AuthorizationError(
                "Access denied - only private snippet owners or public snippets can be edited"
            )

        if data.expected_revision is not None and data.expected_revision != snippet.revision:
            raise RevisionConflictError(snippet_id, data.expected_revision, snippet.revision)

        # Validate before touching the instance so a rejected update leaves it clean
        title = data.title.strip() if data.title is not None else None
        if title is not None and not title:
            raise InvalidInputError("Title cannot be empty")

        code = data.code
        if code is not None and not code.strip():
            raise InvalidInputError("Code cannot be empty")

        if title is not None:
            snippet.title = title

        if code is not None:
            snippet.code = code

        if data.description is not None:
            snippet.description = data.description.strip()

        if data.language is not None and data.language.strip():
            snippet.language = data.language.strip()

        if data.tags is not None:
            snippet.tags = data.tags

        if data.is_public is not None:
            snippet.is_public = data.is_public

        # Touch the row so tag-only edits still bump the revision
        snippet.updated_at = datetime.now(timezone.utc)

        try:
            self.db.commit()
        except StaleDataError:
            self.db.rollback()
            current = self.get_snippet_by_id(snippet_id)
            raise RevisionConflictError(
                snippet_id, data.expected_revision or snippet.revision, current.revision
            )

        self.db.refresh(snippet)

        logger.info(f"Updated snippet {snippet_id} to revision {snippet.revision}")
        return snippet

    def delete_snippet(self, identity: CallerIdentity, snippet_id: UUID) -> None:
        """
        Delete a snippet.

        Raises:
            SnippetNotFoundError: If the snippet doesn't exist
            AuthorizationError: If the caller may not delete it
        """
        snippet = self.get_snippet_by_id(snippet_id)

        if not self.can_delete(snippet, identity):
            raise AuthorizationError("Access denied")

        self.db.delete(snippet)
        try:
            self.db.commit()
        except StaleDataError:
            self.db.rollback()
            current = self.get_snippet_by_id(snippet_id)
            raise RevisionConflictError(snippet_id, snippet.revision, current.revision)

        logger.info(f"Deleted snippet {snippet_id}")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _apply_filters(
        self,
        query: Query,
        language: Optional[str],
        tag: Optional[str],
    ) -> Query:
        if language:
            query = query.filter(Snippet.language == language)

        if tag:
            query = query.filter(Snippet.tag_rows.any(SnippetTag.value == tag))

        return query

    def _paginate(self, query: Query, page: int, limit: int) -> SnippetPage:
        page = max(page, 1)
        limit = min(max(limit, 1), settings.MAX_PAGE_SIZE)

        total = query.count()
        items = (
            query.order_by(Snippet.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )

        return SnippetPage(items=items, total=total, page=page, limit=limit)
