"""Anthropic adapter for pure request/response transformations.

Differences from the canonical (OpenAI) shape:

- system prompts are a top-level ``system`` string, never a message
- tool calls are ``tool_use`` content blocks whose input is an object
- tool results are ``tool_result`` blocks inside a ``user`` turn
- tools have no ``{"type": "function"}`` wrapper
- ``max_tokens`` is mandatory
"""

from __future__ import annotations

from typing import Any

from agent_bridge.adapters._arguments import decode_arguments, encode_arguments
from agent_bridge.types import (
    ChatRequest,
    ChatResponse,
    Choice,
    FinishReason,
    FunctionCall,
    Message,
    Role,
    ToolCall,
    Usage,
)

DEFAULT_MAX_TOKENS = 4096

_STOP_REASONS: dict[str, str] = {
    "end_turn": FinishReason.STOP,
    "tool_use": FinishReason.TOOL_CALLS,
    "max_tokens": FinishReason.LENGTH,
}


class AnthropicRequestAdapter:
    """Adapter for converting between the canonical format and Anthropic format."""

    vendor = "anthropic"

    def to_provider(self, request: ChatRequest) -> dict[str, Any]:
        """Convert a canonical request to an Anthropic Messages request body."""
        system_parts: list[str] = []
        anthropic_messages: list[dict[str, Any]] = []

        for msg in request.messages:
            if msg.role == Role.SYSTEM:
                system_parts.append(msg.content)
            elif msg.role == Role.TOOL:
                # No tool role here: results ride in a user turn
                anthropic_messages.append(
                    {
                        "role": "user",
                        "content": [
                            {
                                "type": "tool_result",
                                "tool_use_id": msg.tool_call_id,
                                "content": msg.content,
                            }
                        ],
                    }
                )
            elif msg.role == Role.ASSISTANT and msg.tool_calls:
                anthropic_messages.append(
                    {"role": "assistant", "content": self._tool_use_blocks(msg)}
                )
            else:
                anthropic_messages.append({"role": str(msg.role), "content": msg.content})

        payload: dict[str, Any] = {
            "model": request.model,
            "max_tokens": request.params.max_tokens or DEFAULT_MAX_TOKENS,
            "messages": anthropic_messages,
        }

        system_prompt = "\n".join(system_parts)
        if system_prompt:
            payload["system"] = system_prompt

        if request.tools:
            payload["tools"] = [
                {
                    "name": tool.function.name,
                    "description": tool.function.description,
                    "input_schema": tool.function.parameters,
                }
                for tool in request.tools
            ]

        params = request.params
        if params.temperature is not None:
            payload["temperature"] = params.temperature
        if params.top_p is not None:
            payload["top_p"] = params.top_p
        if params.stop:
            payload["stop_sequences"] = list(params.stop)

        return payload

    @staticmethod
    def _tool_use_blocks(msg: Message) -> list[dict[str, Any]]:
        blocks: list[dict[str, Any]] = []
        if msg.content:
            blocks.append({"type": "text", "text": msg.content})
        for call in msg.tool_calls or []:
            blocks.append(
                {
                    "type": "tool_use",
                    "id": call.id,
                    "name": call.function.name,
                    "input": decode_arguments(call.function.arguments),
                }
            )
        return blocks

    def from_provider(self, raw: dict[str, Any]) -> ChatResponse:
        """Convert an Anthropic Messages response body to a ChatResponse."""
        text_parts: list[str] = []
        tool_calls: list[ToolCall] = []

        for block in raw.get("content") or []:
            block_type = block.get("type")
            if block_type == "text":
                text_parts.append(block.get("text") or "")
            elif block_type == "tool_use":
                tool_calls.append(
                    ToolCall(
                        id=block.get("id") or "",
                        function=FunctionCall(
                            name=block.get("name") or "",
                            arguments=encode_arguments(block.get("input")),
                        ),
                    )
                )

        stop_reason = raw.get("stop_reason") or ""
        usage = raw.get("usage") or {}
        input_tokens = usage.get("input_tokens") or 0
        output_tokens = usage.get("output_tokens") or 0

        message = Message(
            role=Role.ASSISTANT,
            content="".join(text_parts),
            tool_calls=tool_calls or None,
        )
        return ChatResponse(
            id=raw.get("id") or "",
            model=raw.get("model") or "",
            choices=[
                Choice(
                    index=0,
                    message=message,
                    finish_reason=_STOP_REASONS.get(stop_reason, stop_reason),
                )
            ],
            usage=Usage(
                prompt_tokens=input_tokens,
                completion_tokens=output_tokens,
                total_tokens=input_tokens + output_tokens,
            ),
        )
