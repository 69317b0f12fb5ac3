"""OpenAI adapter for pure request/response transformations.

The canonical model already follows the chat-completions format, so both
directions are straight serialization.
"""

from __future__ import annotations

from typing import Any

from agent_bridge.types import ChatRequest, ChatResponse


class OpenAIRequestAdapter:
    """Adapter for converting between the canonical format and OpenAI format."""

    vendor = "openai"

    def to_provider(self, request: ChatRequest) -> dict[str, Any]:
        """Convert a canonical request to an OpenAI request body."""
        return request.to_dict()

    def from_provider(self, raw: dict[str, Any]) -> ChatResponse:
        """Convert an OpenAI response body to a ChatResponse."""
        return ChatResponse.from_dict(raw)
