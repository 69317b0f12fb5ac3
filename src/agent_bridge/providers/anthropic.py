from __future__ import annotations

import logging
from typing import Any, Optional, Self

from anthropic import AsyncAnthropic

from agent_bridge.adapters.anthropic import AnthropicRequestAdapter
from agent_bridge.providers.base import BaseProvider, RequestAdapter


class AnthropicProvider(BaseProvider):
    """
    Anthropic Messages API provider, async‑only.

    Use ``AnthropicProvider.from_client`` when you already have an ``AsyncAnthropic`` instance.
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
        base_url: Optional[str] = None,
    ) -> None:
        super().__init__(model=model, logger=logger, name=name)
        self.api_key = api_key
        self._client = AsyncAnthropic(
            api_key=api_key,
            timeout=timeout,
            max_retries=max_retries,
            base_url=base_url,
        )
        self._adapter = AnthropicRequestAdapter()

    @classmethod
    def from_client(
        cls,
        model: str,
        client: AsyncAnthropic,
        *,
        logger: Optional[logging.Logger] = None,
        name: Optional[str] = None,
    ) -> Self:
        """
        Wrap an existing ``AsyncAnthropic`` client.
        """
        if not isinstance(client, AsyncAnthropic):
            raise TypeError(
                f"{cls.__name__}.from_client expects AsyncAnthropic; got {type(client).__name__}"
            )

        self = cls.__new__(cls)  # bypass __init__
        BaseProvider.__init__(self, model=model, logger=logger, name=name)
        self.api_key = client.api_key or ""
        self._client = client
        self._adapter = AnthropicRequestAdapter()
        return self

    @property
    def adapter(self) -> RequestAdapter:
        """Request adapter for Anthropic provider."""
        return self._adapter

    async def _send(self, payload: dict[str, Any]) -> dict[str, Any]:
        message = await self._client.messages.create(**payload)
        return message.model_dump()
