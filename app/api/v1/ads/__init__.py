"""
Ads Manager API endpoints
Handles Google and Meta OAuth, ad account selection and Google Ads campaign data
"""

from fastapi import APIRouter
from .google_auth import router as google_auth_router
from .meta_auth import router as meta_auth_router
from .accounts import router as accounts_router
from .campaigns import router as campaigns_router

router = APIRouter()

# Include all ads sub-routers
router.include_router(google_auth_router, tags=["Ads Google Auth"])
router.include_router(meta_auth_router, tags=["Ads Meta Auth"])
router.include_router(accounts_router, tags=["Ads Accounts"])
router.include_router(campaigns_router, tags=["Ads Campaigns"])
