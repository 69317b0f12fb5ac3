from __future__ import annotations

import logging
from typing import Any, Optional, Self

from openai import AsyncOpenAI

from agent_bridge.adapters.openai import OpenAIRequestAdapter
from agent_bridge.providers.base import BaseProvider, RequestAdapter


# Base URLs for known OpenAI-compatible services. They all speak the
# chat-completions format, so the passthrough adapter works unchanged.
DEFAULT_BASE_URL = "https://api.openai.com/v1"
OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"
GROQ_BASE_URL = "https://api.groq.com/openai/v1"
CEREBRAS_BASE_URL = "https://api.cerebras.ai/v1"
FIREWORKS_BASE_URL = "https://api.fireworks.ai/inference/v1"
TOGETHER_BASE_URL = "https://api.together.xyz/v1"
DEEPSEEK_BASE_URL = "https://api.deepseek.com/v1"
MISTRAL_BASE_URL = "https://api.mistral.ai/v1"
MOONSHOT_BASE_URL = "https://api.moonshot.ai/v1"
DASHSCOPE_BASE_URL = "https://dashscope-intl.aliyuncs.com/compatible-mode/v1"
OLLAMA_BASE_URL = "http://localhost:11434/v1"


class OpenAIProvider(BaseProvider):
    """
    OpenAI (or any OpenAI-compatible endpoint) provider, async‑only.

    Use ``OpenAIProvider.from_client`` when you already have an ``AsyncOpenAI`` instance.
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
        self._client = AsyncOpenAI(
            api_key=api_key,
            timeout=timeout,
            max_retries=max_retries,
            base_url=base_url,
        )
        self._adapter = OpenAIRequestAdapter()

    # Alternate constructor
    @classmethod
    def from_client(
        cls,
        model: str,
        client: AsyncOpenAI,
        *,
        logger: Optional[logging.Logger] = None,
        name: Optional[str] = None,
    ) -> Self:
        """
        Build a provider around an already‑configured ``AsyncOpenAI`` client.
        """
        if not isinstance(client, AsyncOpenAI):
            raise TypeError(
                f"{cls.__name__}.from_client expects AsyncOpenAI; got {type(client).__name__}"
            )

        self = cls.__new__(cls)  # bypass __init__
        BaseProvider.__init__(self, model=model, logger=logger, name=name)
        self.api_key = client.api_key
        self._client = client
        self._adapter = OpenAIRequestAdapter()
        return self

    @property
    def adapter(self) -> RequestAdapter:
        """Request adapter for OpenAI provider."""
        return self._adapter

    async def _send(self, payload: dict[str, Any]) -> dict[str, Any]:
        completion = await self._client.chat.completions.create(**payload)
        return completion.model_dump()


class OpenRouterProvider(OpenAIProvider):
    """OpenRouter speaks the OpenAI format; only the endpoint differs."""

    def __init__(
        self,
        model: str,
        *,
        api_key: str,
        timeout: float = 60.0,
        max_retries: int = 2,
        logger: Optional[logging.Logger] = None,
        name: Optional[str] = None,
        base_url: str = OPENROUTER_BASE_URL,
    ) -> None:
        super().__init__(
            model,
            api_key=api_key,
            timeout=timeout,
            max_retries=max_retries,
            logger=logger,
            name=name,
            base_url=base_url,
        )
