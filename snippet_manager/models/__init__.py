"""Database models."""

from snippet_manager.models.user import User
from snippet_manager.models.snippet import Snippet, SnippetTag

__all__ = ["User", "Snippet", "SnippetTag"]
