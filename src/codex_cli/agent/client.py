"""
HTTP client for the hosted Responses API.

Thin aiohttp wrapper; request payloads are assembled by the agent loop.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

import aiohttp

from ..exceptions import AgentError

logger = logging.getLogger(__name__)

__all__ = ["ResponsesClient"]


class ResponsesClient:
    """Client for ``POST {base_url}/responses``."""

    def __init__(
        self,
        api_key: str,
        base_url: str,
        timeout_seconds: float = 600.0,
    ):
        """
        Initialize the client.

        Args:
            api_key: Bearer token; may be empty for local providers
            base_url: Provider base URL (e.g. https://api.openai.com/v1)
            timeout_seconds: Total timeout for one request
        """
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        """Async context manager entry."""
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure we have an active session."""
        if not self._session:
            headers = {"Content-Type": "application/json"}
            if self.api_key:
                headers["Authorization"] = f"Bearer {self.api_key}"
            self._session = aiohttp.ClientSession(headers=headers, timeout=self.timeout)
        return self._session

    async def close(self) -> None:
        if self._session:
            await self._session.close()
            self._session = None

    async def create_response(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Send one model turn.

        Returns:
            The decoded response body

        Raises:
            AgentError: on transport errors or a non-2xx status
        """
        try:
            session = await self._ensure_session()
            async with session.post(f"{self.base_url}/responses", json=payload) as resp:
                body = await resp.json(content_type=None)
                if resp.status >= 400:
                    message = ""
                    if isinstance(body, dict) and isinstance(body.get("error"), dict):
                        message = str(body["error"].get("message", ""))
                    logger.error("responses API returned %s: %s", resp.status, message)
                    raise AgentError(
                        f"model request failed ({resp.status}): {message or 'no details'}"
                    )
                if not isinstance(body, dict):
                    raise AgentError("model response was not a JSON object")
                return body
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.error(f"Error calling responses API: {e}")
            raise AgentError(f"model request failed: {e}") from e
