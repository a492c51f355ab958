"""
Main FastAPI application entry point
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
from datetime import datetime, timezone
import logging
import sys
import time

from app.core.config import settings
from app.core.database import connect_to_mongo, close_mongo_connection, check_database_health
from app.core.dependencies import close_services
from app.services.cache.redis_service import RedisService
from app.utils.error_handlers import (
    CacheError,
    ConfigurationError,
    DatabaseError,
    ProviderError,
    ValidationError,
    configuration_error_handler,
    general_exception_handler,
    http_exception_handler,
    input_error_handler,
    provider_error_handler,
    storage_error_handler,
    validation_exception_handler,
)

# Import all routers
from app.api.v1.ads import router as ads_router
from app.api.v1.seo import router as seo_router
from app.api.v1.insights import router as insights_router
from app.api.v1.leads import router as leads_router
from app.api.v1.forms import router as forms_router
from app.api.v1.exports import router as exports_router

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[
        logging.StreamHandler(sys.stdout),
        logging.FileHandler(settings.LOG_FILE) if settings.LOG_FILE else logging.NullHandler()
    ]
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events
    """
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    logger.info(f"Environment: {settings.ENVIRONMENT}")

    try:
        await connect_to_mongo()
    except Exception as e:
        # SEO keywords, scraping and insights still work without the store
        logger.error(f"MongoDB unavailable, store-backed endpoints will return 503: {str(e)}")

    # Optional - OAuth state needs it, everything else runs without it
    await RedisService().connect()

    logger.info("Application startup completed")

    yield

    logger.info("Shutting down application...")

    try:
        await close_services()
        await close_mongo_connection()
        await RedisService().disconnect()
        logger.info("All services disconnected successfully")
    except Exception as e:
        logger.error(f"Error during shutdown: {str(e)}")


tags_metadata = [
    {
        "name": "System",
        "description": "System health check and information endpoints",
    },
    {
        "name": "Ads Manager",
        "description": "Google OAuth connection, ad account selection and Google Ads campaign performance.",
    },
    {
        "name": "SEO",
        "description": "Website SEO dashboard: Search Console data with SERP fallback, keyword stats, page meta audits and competitor analysis.",
    },
    {
        "name": "Insights",
        "description": "AI recommendations generated from SEO, ads and lead data.",
    },
    {
        "name": "Leads",
        "description": "Leads captured from connected website forms, with status and assignee tracking.",
    },
    {
        "name": "Forms",
        "description": "Website forms connected to the lead table and their submission webhook.",
    },
    {
        "name": "Exports",
        "description": "CSV and PDF downloads of dashboard tables.",
    },
]

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="""
    ## Marketing Insights Backend API

    Backend for a marketing analytics dashboard: SEO data from Google Search
    Console and SERP providers, Google Ads performance, AI insights and lead
    management.

    User identity is passed as `user_id`; authentication is handled upstream.
    """,
    summary="SEO, ads and lead analytics for the marketing dashboard",
    openapi_tags=tags_metadata,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan
)


# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=settings.CORS_ALLOW_METHODS,
    allow_headers=settings.CORS_ALLOW_HEADERS,
)

# GZip compression
app.add_middleware(GZipMiddleware, minimum_size=1000)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """
    Log all incoming requests
    """
    start_time = time.time()

    logger.info(f"Request: {request.method} {request.url.path}")

    try:
        response = await call_next(request)

        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = str(process_time)

        logger.info(
            f"Response: {request.method} {request.url.path} - "
            f"Status: {response.status_code} - "
            f"Time: {process_time:.3f}s"
        )

        return response

    except Exception as e:
        logger.error(f"Request failed: {request.method} {request.url.path} - Error: {str(e)}")
        raise


# Exception handlers
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(ValidationError, input_error_handler)
app.add_exception_handler(ConfigurationError, configuration_error_handler)
app.add_exception_handler(ProviderError, provider_error_handler)
app.add_exception_handler(DatabaseError, storage_error_handler)
app.add_exception_handler(CacheError, storage_error_handler)
app.add_exception_handler(Exception, general_exception_handler)


@app.get(
    "/",
    tags=["System"],
    summary="Root endpoint",
    description="Get basic information about the API",
    response_description="Application information"
)
async def root():
    """
    Root endpoint - Returns basic API information
    """
    return {
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "status": "running",
        "docs_url": "/docs",
        "redoc_url": "/redoc",
        "openapi_url": "/openapi.json"
    }


@app.get(
    "/health",
    tags=["System"],
    summary="Health check",
    description="Check the health status of the API and its dependencies",
    response_description="Health status of all services"
)
async def health_check():
    """
    Health check endpoint

    Returns the health status of:
    - Database (MongoDB) - Required for accounts, tokens, leads and forms
    - Cache (Redis) - Optional, required for Google OAuth
    """
    db_healthy = await check_database_health()
    redis_healthy = RedisService().available

    status = "healthy" if db_healthy else "degraded"

    return {
        "status": status,
        "database": "healthy" if db_healthy else "unhealthy",
        "cache": "healthy" if redis_healthy else "unavailable",
        "version": settings.APP_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


# Include API routers
app.include_router(
    ads_router,
    prefix=f"{settings.API_V1_PREFIX}/ads",
    tags=["Ads Manager"]
)

app.include_router(
    seo_router,
    prefix=f"{settings.API_V1_PREFIX}/seo",
    tags=["SEO"]
)

app.include_router(
    insights_router,
    prefix=f"{settings.API_V1_PREFIX}/insights",
    tags=["Insights"]
)

app.include_router(
    leads_router,
    prefix=f"{settings.API_V1_PREFIX}/leads",
    tags=["Leads"]
)

app.include_router(
    forms_router,
    prefix=f"{settings.API_V1_PREFIX}/forms",
    tags=["Forms"]
)

app.include_router(
    exports_router,
    prefix=f"{settings.API_V1_PREFIX}/exports",
    tags=["Exports"]
)


logger.info("FastAPI application initialized - Docs available at /docs")
