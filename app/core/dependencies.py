"""
FastAPI dependencies for dependency injection
"""

from functools import lru_cache
from typing import Optional

from fastapi import Depends, HTTPException, status
from app.core.database import get_database
from app.services.aggregators.seo_session import SessionRegistry
from app.services.ai.insights_engine import InsightsEngine
from app.services.auth.google_oauth import GoogleOAuthService
from app.services.auth.meta_oauth import MetaOAuthService
from app.services.cache.redis_service import RedisService
from app.services.events.notification_bus import NotificationBus, get_notification_bus
from app.services.providers.google_ads import GoogleAdsProvider
from app.services.providers.meta_scraper import MetaDataScraper
from app.services.providers.search_console import SearchConsoleProvider
from app.services.providers.serp_api import SerpApiProvider
from app.services.storage import (
    AdAccountRepository,
    ConnectedFormRepository,
    LeadRepository,
    TokenRepository,
)
from motor.motor_asyncio import AsyncIOMotorDatabase
import logging

logger = logging.getLogger(__name__)


async def get_db() -> AsyncIOMotorDatabase:
    """
    Database dependency
    """
    db = await get_database()
    if db is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database connection not available"
        )
    return db


def get_redis() -> RedisService:
    """
    Redis service dependency
    """
    try:
        return RedisService()
    except Exception as e:
        logger.error(f"Failed to get Redis service: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Cache service not available"
        )


# Long-lived services; each owns one HTTP client for the process

@lru_cache()
def get_session_registry() -> SessionRegistry:
    return SessionRegistry()


def get_search_console(
    registry: SessionRegistry = Depends(get_session_registry)
) -> SearchConsoleProvider:
    return registry.aggregator.search_console


def get_serp_provider(
    registry: SessionRegistry = Depends(get_session_registry)
) -> SerpApiProvider:
    return registry.aggregator.serp_api


def get_meta_scraper(
    registry: SessionRegistry = Depends(get_session_registry)
) -> MetaDataScraper:
    return registry.aggregator.scraper


@lru_cache()
def get_google_ads_provider() -> GoogleAdsProvider:
    return GoogleAdsProvider()


@lru_cache()
def get_oauth_service() -> GoogleOAuthService:
    return GoogleOAuthService(cache=RedisService())


@lru_cache()
def get_meta_oauth_service() -> MetaOAuthService:
    return MetaOAuthService(cache=RedisService())


@lru_cache()
def get_insights_engine() -> InsightsEngine:
    return InsightsEngine()


def get_events() -> NotificationBus:
    return get_notification_bus()


async def close_services():
    """Close the HTTP clients of every service created so far"""
    if get_session_registry.cache_info().currsize:
        await get_session_registry().close()
    if get_google_ads_provider.cache_info().currsize:
        await get_google_ads_provider().close()
    if get_oauth_service.cache_info().currsize:
        await get_oauth_service().close()
    if get_meta_oauth_service.cache_info().currsize:
        await get_meta_oauth_service().close()
    if get_insights_engine.cache_info().currsize:
        await get_insights_engine().llm.close()

    for factory in (
        get_session_registry,
        get_google_ads_provider,
        get_oauth_service,
        get_meta_oauth_service,
        get_insights_engine,
    ):
        factory.cache_clear()


# Repositories

def get_token_repository(db: AsyncIOMotorDatabase = Depends(get_db)) -> TokenRepository:
    return TokenRepository(db)


async def get_optional_token_repository() -> Optional[TokenRepository]:
    """Token repository, or None while MongoDB is down so SEO can fall back to SERP"""
    db = await get_database()
    return TokenRepository(db) if db is not None else None


def get_ad_account_repository(db: AsyncIOMotorDatabase = Depends(get_db)) -> AdAccountRepository:
    return AdAccountRepository(db)


def get_form_repository(db: AsyncIOMotorDatabase = Depends(get_db)) -> ConnectedFormRepository:
    return ConnectedFormRepository(db)


def get_lead_repository(
    db: AsyncIOMotorDatabase = Depends(get_db),
    forms: ConnectedFormRepository = Depends(get_form_repository)
) -> LeadRepository:
    return LeadRepository(db, forms)


async def require_google_token(
    user_id: str,
    tokens: TokenRepository,
    oauth: GoogleOAuthService
) -> str:
    """
    Valid Google access token for a user, refreshed when expired

    Raises 401 when the user never connected Google or the token cannot be
    refreshed.
    """
    access_token: Optional[str] = await tokens.get_valid_access_token(user_id, oauth)
    if not access_token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Google account not connected. Please connect Google first."
        )
    return access_token
