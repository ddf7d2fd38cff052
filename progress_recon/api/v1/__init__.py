"""
API v1 - REST endpoints for progress and earned-value analytics.

- Analytics endpoints (per project, portfolio, data quality, write-back)
"""
from fastapi import APIRouter

from .analytics import router as analytics_router

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(analytics_router, prefix="/analytics", tags=["Analytics"])
