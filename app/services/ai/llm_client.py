"""
LLM Client - Wrapper for the OpenAI chat completions API
"""

import json
import logging
import re
from typing import Any, Dict, Optional

import httpx

from app.core.config import settings
from app.utils.error_handlers import ConfigurationError, ProviderError

logger = logging.getLogger(__name__)


class LLMClient:
    """
    Client for OpenAI chat completions
    """

    provider = "openai"

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        api_key: Optional[str] = None,
        model: Optional[str] = None
    ):
        """
        Initialize LLM client

        Args:
            client: Shared HTTP client; a private one is created when omitted
            api_key: Overrides OPENAI_API_KEY
            model: Overrides OPENAI_MODEL
        """
        self.api_key = settings.OPENAI_API_KEY if api_key is None else api_key
        self.base_url = "https://api.openai.com/v1"
        self.model = model or settings.OPENAI_MODEL

        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=60.0)

    async def close(self):
        """Close HTTP client"""
        if self._owns_client:
            await self.client.aclose()

    async def generate_completion(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 2000
    ) -> str:
        """
        Generate text completion

        Args:
            prompt: User prompt
            system_prompt: System instructions
            temperature: Creativity (0-1)
            max_tokens: Maximum response length

        Returns:
            Generated text
        """
        if not self.api_key:
            raise ConfigurationError(
                "OpenAI API key not configured. Please check your environment variables.",
                remediation="Set OPENAI_API_KEY in the backend environment.",
            )

        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json"
        }

        json_data = {
            "model": self.model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens
        }

        response = await self.client.post(
            f"{self.base_url}/chat/completions", headers=headers, json=json_data
        )
        logger.info(f"OpenAI API response status: {response.status_code}")

        if not response.is_success:
            logger.error(f"OpenAI API error: {response.text}")
            raise ProviderError(
                self.provider,
                f"OpenAI API error: {response.status_code} {response.text}",
                response.status_code,
            )

        data = response.json()
        choices = data.get("choices") or []
        if not choices:
            raise ProviderError(self.provider, "Invalid OpenAI response", response.status_code)
        return choices[0]["message"]["content"]

    @staticmethod
    def parse_json(response: str) -> Dict[str, Any]:
        """
        Extract a JSON object from model output

        Accepts bare JSON, a fenced code block, or JSON embedded in prose.
        """
        try:
            return json.loads(response)
        except json.JSONDecodeError:
            json_match = re.search(r'```(?:json)?\s*(\{.*?\})\s*```', response, re.DOTALL)
            if json_match:
                return json.loads(json_match.group(1))

            json_match = re.search(r'\{.*\}', response, re.DOTALL)
            if json_match:
                return json.loads(json_match.group(0))

            logger.error(f"Failed to parse JSON from response: {response}")
            raise ValueError("Could not parse JSON from LLM response")
