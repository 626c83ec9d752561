"""API routes for the whiteboard service."""

from fastapi import APIRouter

from whiteboard.api.routes.boards import router as boards_router
from whiteboard.api.routes.health import router as health_router

# Main API router
api_router = APIRouter()

api_router.include_router(health_router, tags=["Health"])
api_router.include_router(boards_router, prefix="/boards", tags=["Boards"])

__all__ = ["api_router"]
