"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from kolmarket.api.routes.discover_routes import router as discover_router
from kolmarket.api.routes.campaign_routes import router as campaign_router
from kolmarket.api.routes.application_routes import router as application_router
from kolmarket.api.routes.profile_routes import router as profile_router
from kolmarket.api.routes.withdrawal_routes import router as withdrawal_router

# Main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(discover_router)
api_router.include_router(campaign_router)
api_router.include_router(application_router)
api_router.include_router(profile_router)
api_router.include_router(withdrawal_router)
