"""Pydantic schemas for snippet endpoints."""

from datetime import datetime
from typing import Annotated, Optional
from uuid import UUID

from pydantic import BaseModel, Field, ConfigDict, field_validator


Tag = Annotated[str, Field(max_length=64)]


def _clean_tags(tags: Optional[list[str]]) -> Optional[list[str]]:
    if tags is None:
        return None
    return [tag.strip() for tag in tags if tag and tag.strip()]


class SnippetCreate(BaseModel):
    """Schema for creating a new snippet."""

    title: str = Field(..., max_length=255, description="Snippet title")
    description: Optional[str] = Field(default=None, description="Optional description")
    code: str = Field(..., description="Code body")
    language: Optional[str] = Field(
        default=None,
        max_length=50,
        description="Language tag (free text)",
        examples=["javascript", "python", "go"]
    )
    tags: list[Tag] = Field(default_factory=list, description="Ordered tag list (64 chars each)")
    is_public: bool = Field(default=True, description="Visible to and editable by everyone")

    @field_validator("tags")
    @classmethod
    def normalize_tags(cls, v: list[str]) -> list[str]:
        """Strip tags and drop empty ones."""
        return _clean_tags(v)


class SnippetUpdate(BaseModel):
    """Schema for updating a snippet. All fields optional."""

    title: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = None
    code: Optional[str] = None
    language: Optional[str] = Field(default=None, max_length=50)
    tags: Optional[list[Tag]] = None
    is_public: Optional[bool] = None
    expected_revision: Optional[int] = Field(
        default=None,
        ge=1,
        description="Reject the update if the snippet has moved past this revision"
    )

    @field_validator("tags")
    @classmethod
    def normalize_tags(cls, v: Optional[list[str]]) -> Optional[list[str]]:
        """Strip tags and drop empty ones."""
        return _clean_tags(v)


class SnippetOwner(BaseModel):
    """Public summary of a snippet's owner."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    first_name: str
    last_name: str
    email: str


class SnippetResponse(BaseModel):
    """Schema for snippet response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(..., description="Unique snippet identifier")
    title: str
    description: str = ""
    code: str
    language: str
    tags: list[str] = Field(default_factory=list)
    is_public: bool
    is_anonymous: bool = Field(..., description="Created without an account")
    owner: Optional[SnippetOwner] = None
    view_count: int = 0
    revision: int = 1
    created_at: datetime
    updated_at: datetime
    can_edit: bool = Field(default=False, description="Caller may edit this snippet")
    can_delete: bool = Field(default=False, description="Caller may delete this snippet")


class SnippetCreateResponse(BaseModel):
    """Schema for the snippet creation response."""

    snippet: SnippetResponse
    anonymous_id: Optional[str] = Field(
        default=None,
        description="Anonymous session id the client should keep sending"
    )


class SnippetListResponse(BaseModel):
    """Schema for a page of listed snippets."""

    snippets: list[SnippetResponse]
    current_page: int
    total_pages: int
    total_snippets: int


class SnippetSearchResponse(BaseModel):
    """Schema for a page of search results."""

    query: str
    snippets: list[SnippetResponse]
    current_page: int
    total_pages: int
    total_results: int
    include_private: bool


class MySnippetsResponse(BaseModel):
    """Schema for the caller's own snippets."""

    snippets: list[SnippetResponse]
