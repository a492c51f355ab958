"""
Redis service for OAuth state and short-lived response caching
"""

import redis.asyncio as redis  # type: ignore
from typing import Any, Optional
import json
import logging
from app.core.config import settings

logger = logging.getLogger(__name__)


class RedisService:
    """
    Redis service; every method degrades to a no-op result when Redis is down
    """

    _instance = None
    _client: Optional[redis.Redis] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(RedisService, cls).__new__(cls)
        return cls._instance

    @property
    def available(self) -> bool:
        return self._client is not None

    async def connect(self):
        """
        Connect to Redis (optional - app will continue without Redis if connection fails)
        """
        try:
            if self._client is None:
                connection_kwargs = {
                    "db": settings.REDIS_DB,
                    "encoding": "utf-8",
                    "decode_responses": True
                }

                if settings.REDIS_PASSWORD:
                    connection_kwargs["password"] = settings.REDIS_PASSWORD

                # SSL is selected by the rediss:// scheme
                if settings.REDIS_SSL and settings.REDIS_URL.startswith("redis://"):
                    logger.warning(
                        "REDIS_SSL is True but URL uses redis://. "
                        "Consider using rediss:// in REDIS_URL for SSL connections."
                    )

                self._client = redis.from_url(
                    settings.REDIS_URL,
                    **connection_kwargs
                )

                await self._client.ping()
                logger.info("Successfully connected to Redis")
        except Exception as e:
            logger.warning(f"Failed to connect to Redis: {str(e)}. Caching will be disabled.")
            self._client = None

    async def disconnect(self):
        """
        Disconnect from Redis
        """
        if self._client:
            await self._client.aclose()
            self._client = None
            logger.info("Redis connection closed")

    async def _ensure_client(self) -> bool:
        if self._client is None:
            await self.connect()
        return self._client is not None

    async def get(self, key: str) -> Optional[Any]:
        """
        Get value from cache
        """
        try:
            if not await self._ensure_client():
                return None

            value = await self._client.get(key)
            if value:
                return json.loads(value)
            return None
        except Exception as e:
            logger.debug(f"Error getting key {key} from Redis: {str(e)}")
            return None

    async def set(self, key: str, value: Any, ttl: int = 3600) -> bool:
        """
        Set value in cache with TTL (time to live) in seconds
        """
        try:
            if not await self._ensure_client():
                return False

            await self._client.setex(key, ttl, json.dumps(value))
            return True
        except Exception as e:
            logger.debug(f"Error setting key {key} in Redis: {str(e)}")
            return False

    async def pop(self, key: str) -> Optional[Any]:
        """
        Get and delete a key in one step, so a value can be consumed once
        """
        try:
            if not await self._ensure_client():
                return None

            value = await self._client.getdel(key)
            if value:
                return json.loads(value)
            return None
        except Exception as e:
            logger.debug(f"Error popping key {key} from Redis: {str(e)}")
            return None
