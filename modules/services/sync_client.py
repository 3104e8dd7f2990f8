"""Async HTTP transport for the code-generation API."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from config.settings import AppConfig
from modules.services.errors import TransportError
from modules.services.models import Generation

logger = logging.getLogger(__name__)

GENERATE_FALLBACK = "Failed to generate code"
HISTORY_FALLBACK = "Failed to fetch history"
STAR_FALLBACK = "Failed to update star status"


class SyncClient:
    """Performs the generate, list-history and toggle-star calls.

    Every failure (non-2xx status, connection error, timeout, malformed body)
    is raised as :class:`TransportError`.
    """

    def __init__(
        self,
        config: AppConfig,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.config = config
        self._owns_client = http_client is None
        if http_client is None:
            headers = {"Accept": "application/json"}
            user_agent = config.metadata.get("user_agent")
            if user_agent:
                headers["User-Agent"] = str(user_agent)
            http_client = httpx.AsyncClient(
                base_url=config.api_base_url,
                timeout=config.request_timeout,
                headers=headers,
            )
        self._http = http_client

    async def aclose(self) -> None:
        """Close the underlying connection pool if this client created it."""
        if self._owns_client:
            await self._http.aclose()

    async def __aenter__(self) -> "SyncClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def generate(self, prompt: str, language: str) -> Generation:
        """POST /api/generate."""
        response = await self._send(
            "generate",
            "POST",
            "/api/generate",
            fallback=GENERATE_FALLBACK,
            json={"prompt": prompt, "language": language},
        )
        if not response.is_success:
            raise TransportError(
                self._error_message(response, GENERATE_FALLBACK),
                operation="generate",
                status_code=response.status_code,
            )
        return self._parse_generation(response, "generate", GENERATE_FALLBACK)

    async def list_history(self, page: int = 1, search: str = "") -> List[Generation]:
        """GET /api/history for one page, optionally filtered by ``search``."""
        params: Dict[str, str] = {"page": str(page)}
        if search:
            params["search"] = search

        response = await self._send(
            "list_history",
            "GET",
            "/api/history",
            fallback=HISTORY_FALLBACK,
            params=params,
        )
        if not response.is_success:
            raise TransportError(
                HISTORY_FALLBACK,
                operation="list_history",
                status_code=response.status_code,
            )

        payload = self._decode(response, "list_history", HISTORY_FALLBACK)
        if not isinstance(payload, list):
            raise TransportError(HISTORY_FALLBACK, operation="list_history")
        try:
            return [Generation.from_payload(item) for item in payload]
        except ValueError as exc:
            raise TransportError(HISTORY_FALLBACK, operation="list_history") from exc

    async def toggle_star(self, generation_id: int, starred: bool) -> Generation:
        """PATCH /api/generation/<id>/star with the new value."""
        response = await self._send(
            "toggle_star",
            "PATCH",
            f"/api/generation/{generation_id}/star",
            fallback=STAR_FALLBACK,
            json={"starred": bool(starred)},
        )
        if not response.is_success:
            raise TransportError(
                STAR_FALLBACK,
                operation="toggle_star",
                status_code=response.status_code,
            )
        return self._parse_generation(response, "toggle_star", STAR_FALLBACK)

    # Internal helpers ---------------------------------------------------------
    async def _send(
        self,
        operation: str,
        method: str,
        url: str,
        *,
        fallback: str,
        **kwargs: Any,
    ) -> httpx.Response:
        try:
            response = await self._http.request(method, url, **kwargs)
        except httpx.TimeoutException as exc:
            logger.warning("%s timed out after %ss: %s", operation, self.config.request_timeout, exc)
            raise TransportError(fallback, operation=operation) from exc
        except httpx.HTTPError as exc:
            logger.warning("%s failed: %s", operation, exc)
            raise TransportError(fallback, operation=operation) from exc

        if not response.is_success:
            logger.warning("%s returned HTTP %s", operation, response.status_code)
        return response

    def _decode(self, response: httpx.Response, operation: str, fallback: str) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            logger.warning("%s returned an undecodable body", operation)
            raise TransportError(
                fallback, operation=operation, status_code=response.status_code
            ) from exc

    def _parse_generation(
        self, response: httpx.Response, operation: str, fallback: str
    ) -> Generation:
        payload = self._decode(response, operation, fallback)
        try:
            return Generation.from_payload(payload)
        except ValueError as exc:
            raise TransportError(
                fallback, operation=operation, status_code=response.status_code
            ) from exc

    @staticmethod
    def _error_message(response: httpx.Response, fallback: str) -> str:
        """Return the body's ``error`` field when present, else ``fallback``."""
        try:
            body = response.json()
        except ValueError:
            return fallback
        if isinstance(body, dict):
            message = body.get("error")
            if isinstance(message, str) and message.strip():
                return message
        return fallback
