"""
Provider‑neutral dataclasses for client‑side tool use.

They follow the OpenAI chat-completions shape; every other vendor format is
produced from these by an adapter.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

__all__ = ["FunctionCall", "ToolCall", "FunctionDescription", "Tool"]


@dataclass(slots=True)
class FunctionCall:
    """Function name plus arguments encoded as a JSON object string."""
    name: str
    arguments: str = "{}"


@dataclass(slots=True)
class ToolCall:
    """A model‑agnostic request emitted by the LLM to call a local tool."""
    id: str                     # echoed back on the matching tool result
    function: FunctionCall
    type: str = "function"

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "function": {
                "name": self.function.name,
                "arguments": self.function.arguments,
            },
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ToolCall":
        function = data.get("function") or {}
        arguments = function.get("arguments")
        # Some OpenAI-compatible servers send the arguments already decoded
        if isinstance(arguments, dict):
            arguments = json.dumps(arguments)
        return cls(
            id=data.get("id") or "",
            type=data.get("type") or "function",
            function=FunctionCall(
                name=function.get("name") or "",
                arguments=arguments if arguments else "{}",
            ),
        )


@dataclass(slots=True)
class FunctionDescription:
    """Metadata the model sees when deciding which tool to use."""
    name: str
    description: str = ""
    parameters: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class Tool:
    """A callable function advertised to the model."""
    function: FunctionDescription
    type: str = "function"

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "function": {
                "name": self.function.name,
                "description": self.function.description,
                "parameters": self.function.parameters,
            },
        }
