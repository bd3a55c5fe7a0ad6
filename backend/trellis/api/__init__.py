"""API routers for the backend service."""

from fastapi import APIRouter

from .routes import health_router
from .v1 import documents, engagements, modules

api_router = APIRouter()
api_router.include_router(health_router, prefix="/health", tags=["health"])
api_router.include_router(engagements.router, prefix="", tags=["engagements"])
api_router.include_router(modules.router, prefix="", tags=["modules"])
api_router.include_router(documents.router, prefix="", tags=["documents"])

__all__ = ["api_router"]
