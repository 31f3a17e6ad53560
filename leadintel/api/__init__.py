"""
Lead Intelligence API package.

Router modules:
- analyze: POST/GET /analyze and GET /me/quota
- admin: administrative quota management under /admin
"""

from fastapi import APIRouter

from leadintel.api.analyze import router as analyze_router
from leadintel.api.admin import router as admin_router

api_router = APIRouter()

api_router.include_router(analyze_router, tags=["analysis"])
api_router.include_router(admin_router, tags=["admin"])

__all__ = [
    "api_router",
    "analyze_router",
    "admin_router",
]
