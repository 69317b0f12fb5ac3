"""Construction helpers for each message role."""

from __future__ import annotations

from typing import Sequence

from agent_bridge.types.chat import Message, Role
from agent_bridge.types.tool import ToolCall

__all__ = [
    "system_message",
    "user_message",
    "assistant_message",
    "tool_call_message",
    "tool_result",
    "tool_error",
]


def system_message(content: str) -> Message:
    return Message(role=Role.SYSTEM, content=content)


def user_message(content: str) -> Message:
    return Message(role=Role.USER, content=content)


def assistant_message(content: str) -> Message:
    return Message(role=Role.ASSISTANT, content=content)


def tool_call_message(calls: Sequence[ToolCall]) -> Message:
    """
    Assistant turn requesting tool calls.

    Content is always empty here; callers that want text alongside the calls
    must set it on the returned message themselves.
    """
    return Message(role=Role.ASSISTANT, content="", tool_calls=list(calls))


def tool_result(tool_call_id: str, name: str, output: str) -> Message:
    """
    Result of a tool execution, linked to the call that requested it.

    ``name`` is the function name; Gemini needs it to pair the result with
    its function call.
    """
    return Message(
        role=Role.TOOL,
        content=output,
        name=name,
        tool_call_id=tool_call_id,
    )


def tool_error(tool_call_id: str, name: str, error: BaseException | str) -> Message:
    """Tool failure routed back to the model so it can correct its arguments."""
    return Message(
        role=Role.TOOL,
        content=f"Error executing tool: {error}. Please fix your arguments.",
        name=name,
        tool_call_id=tool_call_id,
    )
