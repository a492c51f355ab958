"""
Base Provider - Shared HTTP plumbing for third-party API adapters
"""

from typing import Any, Dict, Optional
import logging

import httpx

from app.core.config import settings
from app.utils.error_handlers import ProviderError

logger = logging.getLogger(__name__)


class BaseProvider:
    """
    Owns an httpx.AsyncClient and turns failed responses into ProviderError

    Adapters accept an injected client so callers can share one or swap in a
    mock transport; an injected client is left open on close().
    """

    name = "provider"

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None
    ):
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            timeout=timeout or settings.PROVIDER_TIMEOUT_SECONDS
        )

    async def close(self):
        """Close HTTP client"""
        if self._owns_client:
            await self.client.aclose()

    def _check_response(self, response: httpx.Response, context: str = "") -> None:
        """Raise ProviderError for any non-2xx response"""
        if response.is_success:
            return

        message = self._error_message(response)
        if context:
            message = f"{context}: {message}"
        logger.error(f"{self.name} API error ({response.status_code}): {message}")
        raise ProviderError(self.name, message, response.status_code)

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text or response.reason_phrase

        if isinstance(body, dict):
            error = body.get("error")
            if isinstance(error, dict):
                return error.get("message") or str(error)
            if error:
                return str(error)
        return response.text or response.reason_phrase

    @staticmethod
    def _bearer(access_token: str) -> Dict[str, Any]:
        return {
            "Authorization": f"Bearer {access_token}",
            "Content-Type": "application/json",
        }
