"""API v1 router aggregation."""

from fastapi import APIRouter

from snippet_manager.api.v1 import auth, snippets, users

api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(snippets.router, prefix="/snippets", tags=["Snippets"])
api_router.include_router(users.router, prefix="/users", tags=["Users"])
