from __future__ import annotations

import logging
from typing import Any, Type

import httpx
from anthropic import AsyncAnthropic
from openai import AsyncOpenAI

from agent_bridge.providers.anthropic import AnthropicProvider
from agent_bridge.providers.base import BaseProvider
from agent_bridge.providers.gemini import GeminiProvider
from agent_bridge.providers.openai import OpenAIProvider, OpenRouterProvider

from .providers import Provider, get_api_key

# map Provider enum to its implementation
_PROVIDER_REGISTRY: dict[Provider, Type[BaseProvider]] = {
    Provider.OPENAI: OpenAIProvider,
    Provider.ANTHROPIC: AnthropicProvider,
    Provider.GEMINI: GeminiProvider,
    Provider.OPENROUTER: OpenRouterProvider,
}


def create_provider(
    provider: Provider | str,
    model: str,
    *,
    api_key: str | None = None,
    client: AsyncOpenAI | AsyncAnthropic | httpx.AsyncClient | None = None,
    logger: logging.Logger | None = None,
    **provider_kwargs: Any,
) -> BaseProvider:
    """
    Factory for creating any supported provider.

    Args:
        provider: Which backend to use (OPENAI, ANTHROPIC, GEMINI, OPENROUTER).
        model: Model identifier (e.g. "gemini-2.5-flash").
        api_key: Overrides automatic lookup; if omitted, pulled from env.
        client: Optional pre-configured client instance to use.
            - For Provider.OPENAI / Provider.OPENROUTER: an AsyncOpenAI instance
            - For Provider.ANTHROPIC: an AsyncAnthropic instance
            - For Provider.GEMINI: an httpx.AsyncClient with the Gemini base URL
            If not provided, the relevant client with the default configuration will be used.
        logger: Optional custom logger.
        **provider_kwargs: Any extra args to pass through (timeout, max_retries, base_url, name).
    """
    try:
        provider_cls = _PROVIDER_REGISTRY[Provider(provider)]
    except (KeyError, ValueError) as exc:
        raise ValueError(f"Unsupported provider: {provider}") from exc

    if client is not None:  # use caller‑supplied client verbatim
        if provider_cls is GeminiProvider:
            provider_kwargs.setdefault("api_key", api_key or "")
        return provider_cls.from_client(model, client, logger=logger, **provider_kwargs)

    key = api_key or get_api_key(Provider(provider))
    return provider_cls(model, api_key=key, logger=logger, **provider_kwargs)
