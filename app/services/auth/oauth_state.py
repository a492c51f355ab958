"""
OAuth State - Single-use CSRF states for OAuth consent redirects
"""

from typing import Any, Dict, Optional
import logging
import secrets

from app.core.config import settings
from app.services.cache.redis_service import RedisService
from app.utils.error_handlers import CacheError, ValidationError

logger = logging.getLogger(__name__)


class OAuthStateStore:
    """
    Random states kept in Redis until the callback consumes them

    Each provider uses its own key template so states never cross flows.
    """

    def __init__(
        self,
        cache: RedisService,
        key_template: str,
        ttl: Optional[int] = None
    ):
        self.cache = cache
        self.key_template = key_template
        self.ttl = settings.OAUTH_STATE_TTL_SECONDS if ttl is None else ttl

    async def issue(self, payload: Dict[str, Any]) -> str:
        state = secrets.token_urlsafe(24)
        stored = await self.cache.set(self.key_template.format(state=state), payload, ttl=self.ttl)
        if not stored:
            raise CacheError("OAuth state could not be stored; Redis is unavailable")
        return state

    async def consume(self, state: Optional[str]) -> Dict[str, Any]:
        """Stored payload of a state; unknown, expired or reused states are rejected"""
        if not state:
            raise ValidationError("Missing OAuth state")
        stored = await self.cache.pop(self.key_template.format(state=state))
        if stored is None:
            logger.warning("Rejected unknown or reused OAuth state")
            raise ValidationError("Invalid or expired OAuth state")
        return stored
