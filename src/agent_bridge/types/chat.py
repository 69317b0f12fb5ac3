"""Canonical chat types shared by every adapter."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import StrEnum
from typing import Any, Optional, Union

from agent_bridge.types.tool import Tool, ToolCall


class Role(StrEnum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


class FinishReason(StrEnum):
    """
    Normalized finish reasons.

    Adapters map their vendor vocabulary onto these values; anything they do
    not recognize is passed through verbatim as a plain string.
    """

    STOP = "stop"
    TOOL_CALLS = "tool_calls"
    LENGTH = "length"
    CONTENT_FILTER = "content_filter"


@dataclass
class Message:
    """One turn of the conversation."""

    role: str
    content: str = ""
    name: Optional[str] = None
    tool_calls: Optional[list[ToolCall]] = None
    tool_call_id: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the OpenAI chat-completions message shape."""
        data: dict[str, Any] = {"role": str(self.role)}

        if self.tool_calls:
            data["tool_calls"] = [tc.to_dict() for tc in self.tool_calls]
            # the chat-completions API wants null content next to tool_calls
            data["content"] = self.content or None
        else:
            data["content"] = self.content

        if self.tool_call_id:
            data["tool_call_id"] = self.tool_call_id
        if self.name:
            data["name"] = self.name

        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Message":
        raw_calls = data.get("tool_calls") or []
        return cls(
            role=data.get("role") or Role.ASSISTANT,
            content=data.get("content") or "",
            name=data.get("name"),
            tool_calls=[ToolCall.from_dict(tc) for tc in raw_calls] or None,
            tool_call_id=data.get("tool_call_id"),
        )


@dataclass
class ChatParams:
    """Generation parameters. ``None`` means "leave it to the provider"."""

    # Core parameters, understood by every adapter
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    top_p: Optional[float] = None
    stop: Optional[list[str]] = None

    # OpenAI-compatible endpoints only
    frequency_penalty: Optional[float] = None
    presence_penalty: Optional[float] = None
    seed: Optional[int] = None
    user: Optional[str] = None
    tool_choice: Optional[Union[str, dict[str, Any]]] = None
    response_format: Optional[dict[str, Any]] = None

    def as_dict(self, exclude_none: bool = True) -> dict[str, Any]:
        """
        Convert to dictionary, optionally excluding None values.

        Args:
            exclude_none: If True, exclude fields with None values

        Returns:
            Dictionary representation of the params
        """
        result = asdict(self)
        if exclude_none:
            return {k: v for k, v in result.items() if v is not None}
        return result

    def copy(self, **kwargs) -> "ChatParams":
        """
        Create a copy of this ChatParams with optional overrides.

        Args:
            **kwargs: Field values to override

        Returns:
            New ChatParams instance with overrides applied
        """
        current = self.as_dict(exclude_none=False)
        current.update(kwargs)
        return ChatParams(**current)


@dataclass
class ChatRequest:
    """Everything a provider needs for one round."""

    model: str
    messages: list[Message]
    tools: list[Tool] = field(default_factory=list)
    params: ChatParams = field(default_factory=ChatParams)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to an OpenAI chat-completions request body."""
        data: dict[str, Any] = {
            "model": self.model,
            "messages": [m.to_dict() for m in self.messages],
        }
        # An empty tools array is rejected by the API; omit it instead.
        if self.tools:
            data["tools"] = [t.to_dict() for t in self.tools]
        data.update(self.params.as_dict(exclude_none=True))
        return data


@dataclass
class Usage:
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> "Usage":
        data = data or {}
        return cls(
            prompt_tokens=data.get("prompt_tokens") or 0,
            completion_tokens=data.get("completion_tokens") or 0,
            total_tokens=data.get("total_tokens") or 0,
        )


@dataclass
class Choice:
    message: Message
    finish_reason: str
    index: int = 0


@dataclass
class ChatResponse:
    """Unified response object for all providers."""

    choices: list[Choice] = field(default_factory=list)
    usage: Usage = field(default_factory=Usage)
    id: str = ""
    model: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ChatResponse":
        """Decode an OpenAI chat-completions response body."""
        choices = [
            Choice(
                index=raw.get("index") or 0,
                message=Message.from_dict(raw.get("message") or {}),
                finish_reason=raw.get("finish_reason") or "",
            )
            for raw in data.get("choices") or []
        ]
        return cls(
            id=data.get("id") or "",
            model=data.get("model") or "",
            choices=choices,
            usage=Usage.from_dict(data.get("usage")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "model": self.model,
            "choices": [
                {
                    "index": c.index,
                    "message": c.message.to_dict(),
                    "finish_reason": str(c.finish_reason),
                }
                for c in self.choices
            ],
            "usage": asdict(self.usage),
        }

    @property
    def content(self) -> str:
        """Text of the first choice, or an empty string."""
        if not self.choices:
            return ""
        return self.choices[0].message.content

    def __repr__(self) -> str:
        content = self.content
        preview = content[:75] + "..." if len(content) > 75 else content
        reason = self.choices[0].finish_reason if self.choices else None
        return (
            f"{self.__class__.__name__}(finish_reason={reason!r}, "
            f"response_preview={preview!r})"
        )
