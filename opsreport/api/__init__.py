"""
API package initialization.

This package contains the FastAPI router modules of the reporting service:
- reports: Schedule status and manual report triggers
"""

from fastapi import APIRouter

from opsreport.api.reports import router as reports_router

# Create main API router
api_router = APIRouter()

api_router.include_router(reports_router, prefix="/reports", tags=["reports"])

__all__ = [
    "api_router",
    "reports_router",
]
