"""Service layer for business logic."""

from snippet_manager.services.snippet_service import SnippetService
from snippet_manager.services.user_service import UserService
from snippet_manager.services.auth_service import AuthService
from snippet_manager.services.profile_service import ProfileService

__all__ = ["SnippetService", "UserService", "AuthService", "ProfileService"]
