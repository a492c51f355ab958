"""
Configuration management using environment variables
"""

from pydantic_settings import BaseSettings
from typing import Optional
from functools import lru_cache


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables
    """

    # Application
    APP_NAME: str = "Marketing Insights Backend"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "production"  # development, staging, production

    # API
    API_V1_PREFIX: str = "/api/v1"

    # MongoDB Configuration
    MONGODB_URL: str = "mongodb://localhost:27017"
    MONGODB_DB_NAME: str = "marketing_insights"
    MONGODB_MIN_POOL_SIZE: int = 10
    MONGODB_MAX_POOL_SIZE: int = 100

    # Redis Configuration
    REDIS_URL: str = "redis://localhost:6379"
    REDIS_DB: int = 0
    REDIS_PASSWORD: Optional[str] = None
    REDIS_SSL: bool = False

    # CORS
    CORS_ORIGINS: list = ["http://localhost:3000", "http://localhost:5173"]
    CORS_ALLOW_CREDENTIALS: bool = True
    CORS_ALLOW_METHODS: list = ["*"]
    CORS_ALLOW_HEADERS: list = ["*"]

    # Google OAuth / Search Console / Ads
    GOOGLE_CLIENT_ID: Optional[str] = None
    GOOGLE_CLIENT_SECRET: Optional[str] = None
    GOOGLE_ADS_DEVELOPER_TOKEN: Optional[str] = None
    GOOGLE_ADS_API_VERSION: str = "v17"
    GSC_INSPECTION_LIMIT: int = 25
    OAUTH_STATE_TTL_SECONDS: int = 600

    # Meta Ads OAuth
    META_APP_ID: Optional[str] = None
    META_APP_SECRET: Optional[str] = None
    META_GRAPH_API_VERSION: str = "v19.0"

    # SERP / scraping providers
    SERP_API_KEY: Optional[str] = None
    SCRAPER_API_KEY: Optional[str] = None

    # AI/LLM Configuration
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_MODEL: str = "gpt-4.1-2025-04-14"

    # Outbound HTTP
    PROVIDER_TIMEOUT_SECONDS: float = 15.0
    SCRAPER_TIMEOUT_SECONDS: float = 15.0
    NATIVE_SCRAPE_TIMEOUT_SECONDS: float = 8.0
    SCRAPE_BATCH_SIZE: int = 5
    SCRAPE_BATCH_DELAY_SECONDS: float = 1.0
    SCRAPE_REQUEST_DELAY_SECONDS: float = 0.3

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance
    This function is cached to avoid reading .env multiple times
    """
    return Settings()


# Global settings instance
settings = get_settings()
