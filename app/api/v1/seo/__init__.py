"""
SEO API endpoints
Handles website selection, keyword rankings, Search Console data and page audits
"""

from fastapi import APIRouter
from .dashboard import router as dashboard_router
from .keywords import router as keywords_router
from .search_console import router as search_console_router
from .meta_data import router as meta_data_router
from .competitors import router as competitors_router

router = APIRouter()

# Include all SEO sub-routers
router.include_router(dashboard_router, tags=["SEO Dashboard"])
router.include_router(keywords_router, tags=["SEO Keywords"])
router.include_router(search_console_router, tags=["SEO Search Console"])
router.include_router(meta_data_router, tags=["SEO Meta Data"])
router.include_router(competitors_router, tags=["SEO Competitors"])
