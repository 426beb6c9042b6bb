"""
Marketing Analytics API package initialization.

Router modules:
- marketing: Activity-spine marketing overview (KPIs, comparisons, listings,
  timeseries, anomalies)
"""

from fastapi import APIRouter

from marketing_analytics.api.marketing import router as marketing_router

# Create main API router
api_router = APIRouter()
api_router.include_router(marketing_router)

__all__ = [
    "api_router",
    "marketing_router",
]
