"""API routes for pptxdom."""

from fastapi import APIRouter

from pptxdom.api.routes.decode import router as decode_router
from pptxdom.api.routes.health import router as health_router

# Main API router
api_router = APIRouter()

api_router.include_router(health_router, tags=["Health"])
api_router.include_router(decode_router, prefix="/decode", tags=["Decode"])

__all__ = ["api_router"]
