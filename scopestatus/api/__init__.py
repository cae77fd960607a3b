"""API router definitions."""

from fastapi import APIRouter

from .image import router as image_router
from .routes import health_router
from .snapshots import router as snapshots_router

api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(snapshots_router)
api_router.include_router(image_router)

__all__ = ["api_router"]
