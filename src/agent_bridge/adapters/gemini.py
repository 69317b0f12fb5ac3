"""Gemini adapter for pure request/response transformations.

Targets the native ``generateContent`` format:

- system prompts go in ``systemInstruction``
- only ``user`` and ``model`` roles; tool results are ``functionResponse``
  parts inside a ``user`` turn
- function call arguments are objects, not JSON strings
- generation settings nest under ``generationConfig``
- ``finishReason`` is ``STOP`` even when the model wants to call tools, so
  tool intent is read from the parts
"""

from __future__ import annotations

import secrets
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

_FINISH_REASONS: dict[str, str] = {
    "STOP": FinishReason.STOP,
    "MAX_TOKENS": FinishReason.LENGTH,
    "SAFETY": FinishReason.CONTENT_FILTER,
    "RECITATION": FinishReason.CONTENT_FILTER,
    "BLOCKLIST": FinishReason.CONTENT_FILTER,
    "PROHIBITED_CONTENT": FinishReason.CONTENT_FILTER,
}

CALL_ID_PREFIX = "call_"


def generate_call_id() -> str:
    """Random id linking a function call to its eventual result."""
    return CALL_ID_PREFIX + secrets.token_hex(12)


class GeminiRequestAdapter:
    """Adapter for converting between the canonical format and Gemini format."""

    vendor = "gemini"

    def to_provider(self, request: ChatRequest) -> dict[str, Any]:
        """Convert a canonical request to a generateContent request body.

        The model name is not part of the body; it goes in the URL path.
        """
        system_parts: list[dict[str, Any]] = []
        contents: list[dict[str, Any]] = []

        for msg in request.messages:
            if msg.role == Role.SYSTEM:
                system_parts.append({"text": msg.content})
            elif msg.role == Role.ASSISTANT:
                contents.append({"role": "model", "parts": self._model_parts(msg)})
            elif msg.role == Role.TOOL:
                function_response: dict[str, Any] = {
                    "name": msg.name or "",
                    # Plain strings are rejected; the result must be an object
                    "response": {"return_value": msg.content},
                }
                if msg.tool_call_id:
                    function_response["id"] = msg.tool_call_id
                contents.append(
                    {"role": "user", "parts": [{"functionResponse": function_response}]}
                )
            else:
                contents.append({"role": "user", "parts": [{"text": msg.content}]})

        payload: dict[str, Any] = {"contents": contents}

        if system_parts:
            payload["systemInstruction"] = {"role": "user", "parts": system_parts}

        if request.tools:
            payload["tools"] = [
                {
                    "functionDeclarations": [
                        {
                            "name": tool.function.name,
                            "description": tool.function.description,
                            "parameters": tool.function.parameters,
                        }
                        for tool in request.tools
                    ]
                }
            ]

        generation_config = self._generation_config(request)
        if generation_config:
            payload["generationConfig"] = generation_config

        return payload

    @staticmethod
    def _model_parts(msg: Message) -> list[dict[str, Any]]:
        if not msg.tool_calls:
            return [{"text": msg.content}]

        parts: list[dict[str, Any]] = []
        if msg.content:
            parts.append({"text": msg.content})
        for call in msg.tool_calls:
            parts.append(
                {
                    "functionCall": {
                        "name": call.function.name,
                        "args": decode_arguments(call.function.arguments),
                    }
                }
            )
        return parts

    @staticmethod
    def _generation_config(request: ChatRequest) -> dict[str, Any]:
        params = request.params
        config: dict[str, Any] = {}
        if params.temperature:
            config["temperature"] = params.temperature
        if params.top_p:
            config["topP"] = params.top_p
        if params.max_tokens:
            config["maxOutputTokens"] = params.max_tokens
        if params.stop:
            config["stopSequences"] = list(params.stop)
        return config

    def from_provider(self, raw: dict[str, Any]) -> ChatResponse:
        """Convert a generateContent response body to a ChatResponse."""
        candidates = raw.get("candidates") or []
        usage = self._usage(raw.get("usageMetadata"))
        model = raw.get("modelVersion") or ""

        if not candidates:
            return ChatResponse(choices=[], usage=usage, model=model)

        candidate = candidates[0]
        text_parts: list[str] = []
        tool_calls: list[ToolCall] = []

        for part in (candidate.get("content") or {}).get("parts") or []:
            if part.get("text"):
                text_parts.append(part["text"])
            function_call = part.get("functionCall")
            if function_call is not None:
                tool_calls.append(
                    ToolCall(
                        id=generate_call_id(),
                        function=FunctionCall(
                            name=function_call.get("name") or "",
                            arguments=encode_arguments(function_call.get("args")),
                        ),
                    )
                )

        if tool_calls:
            # The vendor reports STOP here too; the parts are authoritative.
            finish_reason: str = FinishReason.TOOL_CALLS
        else:
            vendor_reason = candidate.get("finishReason") or ""
            finish_reason = _FINISH_REASONS.get(vendor_reason, vendor_reason)

        return ChatResponse(
            model=model,
            choices=[
                Choice(
                    index=candidate.get("index") or 0,
                    message=Message(
                        role=Role.ASSISTANT,
                        content="".join(text_parts),
                        tool_calls=tool_calls or None,
                    ),
                    finish_reason=finish_reason,
                )
            ],
            usage=usage,
        )

    @staticmethod
    def _usage(metadata: dict[str, Any] | None) -> Usage:
        if not metadata:
            return Usage()
        # Thinking tokens are billed as output but reported separately
        completion = (metadata.get("candidatesTokenCount") or 0) + (
            metadata.get("thoughtsTokenCount") or 0
        )
        return Usage(
            prompt_tokens=metadata.get("promptTokenCount") or 0,
            completion_tokens=completion,
            total_tokens=metadata.get("totalTokenCount") or 0,
        )
