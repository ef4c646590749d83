"""Top-level API router."""

from fastapi import APIRouter

from allocation_report.api.routes.exports import router as exports_router
from allocation_report.api.routes.health import router as health_router

api_router = APIRouter()
api_router.include_router(health_router, tags=["health"])
api_router.include_router(exports_router)
