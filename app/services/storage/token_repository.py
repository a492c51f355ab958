"""
Token Repository - OAuth tokens per user and provider (api_tokens)
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
import logging

from app.services.storage.base import BaseRepository, serialize, utcnow

logger = logging.getLogger(__name__)

# Tokens count as expired this long before Google expires them
EXPIRY_MARGIN = timedelta(seconds=60)


def expires_at_from(expires_in: Optional[int], default_seconds: int = 3600) -> datetime:
    return utcnow() + timedelta(seconds=int(expires_in or default_seconds))


def is_expired(token: Dict[str, Any], now: Optional[datetime] = None) -> bool:
    expires_at = token.get("expires_at")
    if expires_at is None:
        return False
    if isinstance(expires_at, str):
        expires_at = datetime.fromisoformat(expires_at)
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    return expires_at - EXPIRY_MARGIN <= (now or utcnow())


class TokenRepository(BaseRepository):
    collection_name = "api_tokens"

    async def get(self, user_id: str, provider: str = "google") -> Optional[Dict[str, Any]]:
        with self._errors("read token"):
            return serialize(await self.collection.find_one({"user_id": user_id, "provider": provider}))

    async def upsert(
        self,
        user_id: str,
        token_data: Dict[str, Any],
        provider: str = "google",
        default_expires_in: int = 3600
    ) -> None:
        """
        Store the token response of an authorization-code exchange

        Google omits refresh_token on repeat consents, so an existing one is
        kept when the response has none.
        """
        update = {
            "access_token": token_data["access_token"],
            "expires_at": expires_at_from(token_data.get("expires_in"), default_expires_in),
            "scope": token_data.get("scope"),
            "updated_at": utcnow(),
        }
        if token_data.get("refresh_token"):
            update["refresh_token"] = token_data["refresh_token"]

        with self._errors("store token"):
            await self.collection.update_one(
                {"user_id": user_id, "provider": provider},
                {"$set": update, "$setOnInsert": {"created_at": utcnow()}},
                upsert=True,
            )
        logger.info(f"Stored {provider} tokens for user {user_id}")

    async def update_access_token(
        self,
        user_id: str,
        access_token: str,
        expires_in: Optional[int],
        provider: str = "google"
    ) -> None:
        with self._errors("update token"):
            await self.collection.update_one(
                {"user_id": user_id, "provider": provider},
                {"$set": {
                    "access_token": access_token,
                    "expires_at": expires_at_from(expires_in),
                    "updated_at": utcnow(),
                }},
            )

    async def delete(self, user_id: str, provider: str = "google") -> bool:
        with self._errors("delete token"):
            result = await self.collection.delete_one({"user_id": user_id, "provider": provider})
        return result.deleted_count > 0

    async def get_valid_access_token(self, user_id: str, oauth, provider: str = "google") -> Optional[str]:
        """
        Access token for a user, refreshed through `oauth` when expired

        Returns None when the user has no token, or when it expired and no
        refresh token is stored.
        """
        token = await self.get(user_id, provider)
        if not token:
            return None
        if not is_expired(token):
            return token["access_token"]

        refresh_token = token.get("refresh_token")
        if not refresh_token:
            logger.warning(f"{provider} token for user {user_id} expired without a refresh token")
            return None

        refreshed = await oauth.refresh_access_token(refresh_token)
        await self.update_access_token(
            user_id, refreshed["access_token"], refreshed.get("expires_in"), provider
        )
        logger.info(f"Refreshed {provider} access token for user {user_id}")
        return refreshed["access_token"]
