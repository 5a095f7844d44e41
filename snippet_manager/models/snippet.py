"""Snippet model."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime, Integer, Text, Boolean, ForeignKey, Index, Uuid
from sqlalchemy.orm import relationship

from snippet_manager.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Snippet(Base):
    """
    Snippet model.

    A snippet is bound to exactly one creator at creation time: either an
    authenticated user (``owner_id``) or an anonymous session
    (``anonymous_id``). Ownership never transfers; only ``is_public`` moves a
    snippet between access regimes.
    """

    __tablename__ = "snippets"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    code = Column(Text, nullable=False)
    # Free text in practice; the client offers a known list
    language = Column(String(50), nullable=False, default="javascript", index=True)

    is_public = Column(Boolean, nullable=False, default=True)

    # Creator reference - exactly one is set by creation
    owner_id = Column(Uuid, ForeignKey("users.id"), nullable=True, index=True)
    anonymous_id = Column(String(255), nullable=True, index=True)

    view_count = Column(Integer, nullable=False, default=0)
    # Bumped by the ORM on every row update; UPDATE and DELETE are guarded by it
    revision = Column(Integer, nullable=False)

    # Client-side defaults keep sub-second ordering on every backend
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    # Relationships
    owner = relationship("User", lazy="joined", backref="snippets")
    tag_rows = relationship(
        "SnippetTag",
        order_by="SnippetTag.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __table_args__ = (
        Index("ix_snippets_public_created", "is_public", "created_at"),
    )
    __mapper_args__ = {"version_id_col": revision}

    @property
    def tags(self) -> list[str]:
        return [row.value for row in self.tag_rows]

    @tags.setter
    def tags(self, values: list[str]) -> None:
        self.tag_rows = [
            SnippetTag(position=position, value=value)
            for position, value in enumerate(values)
        ]

    @property
    def is_anonymous(self) -> bool:
        return self.owner_id is None

    def __repr__(self) -> str:
        return f"<Snippet(id={self.id}, title={self.title}, public={self.is_public})>"


class SnippetTag(Base):
    """One element of a snippet's ordered tag list."""

    __tablename__ = "snippet_tags"

    id = Column(Integer, primary_key=True, autoincrement=True)
    snippet_id = Column(
        Uuid, ForeignKey("snippets.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position = Column(Integer, nullable=False)
    value = Column(String(64), nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<SnippetTag(snippet_id={self.snippet_id}, value={self.value})>"
