"""Snippet endpoints."""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from snippet_manager.api.v1.dependencies import (
    ANONYMOUS_ID_HEADER,
    get_caller_identity,
    get_snippet_service,
)
from snippet_manager.models.snippet import Snippet
from snippet_manager.services.identity import CallerIdentity
from snippet_manager.services.snippet_service import SnippetService
from snippet_manager.services.exceptions import (
    AuthenticationError,
    AuthorizationError,
    InvalidInputError,
    RevisionConflictError,
    SnippetNotFoundError,
)
from snippet_manager.schemas.snippet import (
    MySnippetsResponse,
    SnippetCreate,
    SnippetCreateResponse,
    SnippetListResponse,
    SnippetResponse,
    SnippetSearchResponse,
    SnippetUpdate,
)
from snippet_manager.schemas.user import MessageResponse

router = APIRouter()


def _to_response(
    snippet: Snippet,
    identity: CallerIdentity,
    snippet_service: SnippetService,
) -> SnippetResponse:
    response = SnippetResponse.model_validate(snippet)
    response.can_edit = snippet_service.can_edit(snippet, identity)
    response.can_delete = snippet_service.can_delete(snippet, identity)
    return response


def _not_found(snippet_id: UUID) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Snippet {snippet_id} not found",
    )


@router.post(
    "",
    response_model=SnippetCreateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a snippet",
    description="""
    Create a snippet as an authenticated user or anonymously.

    Anonymous snippets are bound to the `X-Anonymous-ID` header. Callers
    without one receive a freshly minted id in the response body and
    header, which they must send on later requests to manage the snippet.
    """,
)
def create_snippet(
    data: SnippetCreate,
    response: Response,
    identity: CallerIdentity = Depends(get_caller_identity),
    snippet_service: SnippetService = Depends(get_snippet_service),
) -> SnippetCreateResponse:
    """Create a snippet."""
    try:
        snippet, anonymous_id = snippet_service.create_snippet(identity, data)
    except InvalidInputError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)

    if anonymous_id:
        response.headers[ANONYMOUS_ID_HEADER] = anonymous_id

    return SnippetCreateResponse(
        snippet=_to_response(snippet, identity, snippet_service),
        anonymous_id=anonymous_id,
    )


@router.get(
    "",
    response_model=SnippetListResponse,
    summary="List snippets",
    description="List public snippets plus the caller's own, newest first.",
)
def list_snippets(
    search: Optional[str] = Query(default=None, description="Substring to look for"),
    language: Optional[str] = Query(default=None, description="Exact language filter"),
    tag: Optional[str] = Query(default=None, description="Tag membership filter"),
    page: int = Query(default=1, ge=1, description="Page number"),
    limit: Optional[int] = Query(default=None, ge=1, description="Page size (max 50)"),
    identity: CallerIdentity = Depends(get_caller_identity),
    snippet_service: SnippetService = Depends(get_snippet_service),
) -> SnippetListResponse:
    """List snippets."""
    result = snippet_service.list_snippets(
        identity,
        search=search,
        language=language,
        tag=tag,
        page=page,
        limit=limit,
    )
    return SnippetListResponse(
        snippets=[_to_response(s, identity, snippet_service) for s in result.items],
        current_page=result.page,
        total_pages=result.total_pages,
        total_snippets=result.total,
    )


@router.get(
    "/search",
    response_model=SnippetSearchResponse,
    summary="Search snippets",
    description="""
    Search snippet titles, descriptions, code and tags.

    The query must be at least 2 characters. Only public snippets are
    searched unless `include_private` is set and the caller has an identity.
    `exact_title` matches the whole title, ignoring case.
    """,
)
def search_snippets(
    q: str = Query(..., description="Search text"),
    language: Optional[str] = Query(default=None, description="Exact language filter"),
    tag: Optional[str] = Query(default=None, description="Tag membership filter"),
    include_private: bool = Query(default=False, description="Include the caller's private snippets"),
    exact_title: bool = Query(default=False, description="Match the whole title"),
    page: int = Query(default=1, ge=1, description="Page number"),
    limit: Optional[int] = Query(default=None, ge=1, description="Page size (max 50)"),
    identity: CallerIdentity = Depends(get_caller_identity),
    snippet_service: SnippetService = Depends(get_snippet_service),
) -> SnippetSearchResponse:
    """Search snippets."""
    try:
        result = snippet_service.search_snippets(
            identity,
            q,
            language=language,
            tag=tag,
            include_private=include_private,
            exact_title=exact_title,
            page=page,
            limit=limit,
        )
    except InvalidInputError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)

    return SnippetSearchResponse(
        query=q.strip(),
        snippets=[_to_response(s, identity, snippet_service) for s in result.items],
        current_page=result.page,
        total_pages=result.total_pages,
        total_results=result.total,
        include_private=include_private,
    )


@router.get(
    "/me/snippets",
    response_model=MySnippetsResponse,
    summary="List my snippets",
    description="List every snippet the caller created, public or private.",
)
def list_my_snippets(
    identity: CallerIdentity = Depends(get_caller_identity),
    snippet_service: SnippetService = Depends(get_snippet_service),
) -> MySnippetsResponse:
    """List the caller's own snippets."""
    try:
        snippets = snippet_service.list_own_snippets(identity)
    except AuthenticationError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=e.message)

    return MySnippetsResponse(
        snippets=[_to_response(s, identity, snippet_service) for s in snippets]
    )


@router.get(
    "/{snippet_id}",
    response_model=SnippetResponse,
    summary="Get a snippet",
    description="Get a single snippet and count the view.",
)
def get_snippet(
    snippet_id: UUID,
    identity: CallerIdentity = Depends(get_caller_identity),
    snippet_service: SnippetService = Depends(get_snippet_service),
) -> SnippetResponse:
    """Get a snippet."""
    try:
        snippet = snippet_service.get_snippet(identity, snippet_id)
    except SnippetNotFoundError:
        raise _not_found(snippet_id)
    except AuthorizationError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=e.message)

    return _to_response(snippet, identity, snippet_service)


@router.put(
    "/{snippet_id}",
    response_model=SnippetResponse,
    summary="Update a snippet",
    description="""
    Update a snippet. Creators may edit their own snippets; anyone may edit
    a public snippet. Send `expected_revision` to reject the write if
    somebody else saved in the meantime; otherwise the last write wins.
    """,
)
def update_snippet(
    snippet_id: UUID,
    data: SnippetUpdate,
    identity: CallerIdentity = Depends(get_caller_identity),
    snippet_service: SnippetService = Depends(get_snippet_service),
) -> SnippetResponse:
    """Update a snippet."""
    try:
        snippet = snippet_service.update_snippet(identity, snippet_id, data)
    except SnippetNotFoundError:
        raise _not_found(snippet_id)
    except AuthorizationError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=e.message)
    except InvalidInputError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except RevisionConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)

    return _to_response(snippet, identity, snippet_service)


@router.delete(
    "/{snippet_id}",
    response_model=MessageResponse,
    summary="Delete a snippet",
    description="Delete a snippet. Only its creator may delete it, public or not.",
)
def delete_snippet(
    snippet_id: UUID,
    identity: CallerIdentity = Depends(get_caller_identity),
    snippet_service: SnippetService = Depends(get_snippet_service),
) -> MessageResponse:
    """Delete a snippet."""
    try:
        snippet_service.delete_snippet(identity, snippet_id)
    except SnippetNotFoundError:
        raise _not_found(snippet_id)
    except AuthorizationError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=e.message)
    except RevisionConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)

    return MessageResponse(message="Snippet deleted successfully")
