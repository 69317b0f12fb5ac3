from __future__ import annotations

import logging
from typing import Any, Optional, Self

import httpx

from agent_bridge._exceptions import ProviderError
from agent_bridge.adapters.gemini import GeminiRequestAdapter
from agent_bridge.providers.base import BaseProvider, RequestAdapter


_DEFAULT_GEMINI_BASE_URL = "https://generativelanguage.googleapis.com"


class GeminiProvider(BaseProvider):
    """
    Gemini provider speaking the native ``generateContent`` REST API.

    The model name travels in the URL path, not in the request body.
    """

    def __init__(
        self,
        model: str,
        *,
        api_key: str,
        timeout: float = 60.0,
        max_retries: int = 2,
        logger: Optional[logging.Logger] = None,
        name: Optional[str] = None,
        base_url: str = _DEFAULT_GEMINI_BASE_URL,
    ) -> None:
        super().__init__(model=model, logger=logger, name=name)
        self.api_key = api_key
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            # connection-level retries only; HTTP errors are not retried
            transport=httpx.AsyncHTTPTransport(retries=max_retries),
        )
        self._adapter = GeminiRequestAdapter()

    # Alternate constructor
    @classmethod
    def from_client(
        cls,
        model: str,
        client: httpx.AsyncClient,
        *,
        api_key: str = "",
        logger: Optional[logging.Logger] = None,
        name: Optional[str] = None,
    ) -> Self:
        """
        Wrap an existing ``httpx.AsyncClient`` already configured with
        Gemini's base URL. Leave ``api_key`` empty when the client sets
        its own auth headers.
        """
        if not isinstance(client, httpx.AsyncClient):
            raise TypeError(
                f"{cls.__name__}.from_client expects httpx.AsyncClient; got {type(client).__name__}"
            )

        self = cls.__new__(cls)  # bypass __init__
        BaseProvider.__init__(self, model=model, logger=logger, name=name)
        self.api_key = api_key
        self._client = client
        self._adapter = GeminiRequestAdapter()
        return self

    @property
    def adapter(self) -> RequestAdapter:
        """Request adapter for Gemini provider."""
        return self._adapter

    async def _send(self, payload: dict[str, Any]) -> dict[str, Any]:
        headers = {"x-goog-api-key": self.api_key} if self.api_key else None
        response = await self._client.post(
            f"/v1beta/models/{self.model}:generateContent",
            json=payload,
            headers=headers,
        )
        if response.is_error:
            raise ProviderError(
                self._adapter.vendor,
                "unexpected status",
                status_code=response.status_code,
                body=response.text,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise ProviderError(
                self._adapter.vendor,
                f"failed to decode response: {exc}",
                status_code=response.status_code,
                body=response.text,
            ) from exc
