"""Observer hooks fired by the Agent during ``run``."""

from __future__ import annotations

import json
import logging
from typing import Optional, Protocol, runtime_checkable

from agent_bridge.types import ChatRequest, ChatResponse

__all__ = ["AgentCallback", "DebugCallback"]


@runtime_checkable
class AgentCallback(Protocol):
    """
    Receives events from an Agent. Callbacks only observe; they cannot change
    what the agent does next.

    - on_llm_request: right before the request goes to the provider
    - on_llm_response: right after a successful response, with latency in seconds
    - on_tool_call: before a requested tool runs, with the raw JSON arguments
    - on_tool_result: after the tool finishes; ``error`` is None on success
    """

    def on_llm_request(self, request: ChatRequest) -> None: ...

    def on_llm_response(self, response: ChatResponse, latency: float) -> None: ...

    def on_tool_call(self, name: str, arguments: str) -> None: ...

    def on_tool_result(
        self,
        name: str,
        result: str,
        error: Optional[BaseException],
        latency: float,
    ) -> None: ...


class DebugCallback:
    """
    Logs every agent event. Requests and responses are dumped as indented JSON
    so the exact canonical payload is visible.
    """

    def __init__(self, logger: Optional[logging.Logger] = None, level: int = logging.DEBUG) -> None:
        self.logger = logger or logging.getLogger(__name__)
        self.level = level

    def on_llm_request(self, request: ChatRequest) -> None:
        self.logger.log(self.level, "LLM request:\n%s", _dump(request.to_dict()))

    def on_llm_response(self, response: ChatResponse, latency: float) -> None:
        self.logger.log(
            self.level, "LLM response [%.3fs]:\n%s", latency, _dump(response.to_dict())
        )

    def on_tool_call(self, name: str, arguments: str) -> None:
        self.logger.log(self.level, "Tool call: %s args=%s", name, arguments)

    def on_tool_result(
        self,
        name: str,
        result: str,
        error: Optional[BaseException],
        latency: float,
    ) -> None:
        if error is not None:
            self.logger.log(self.level, "Tool error: %s - %s [%.3fs]", name, error, latency)
        else:
            self.logger.log(self.level, "Tool result: %s - %s [%.3fs]", name, result, latency)


def _dump(data: dict) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False, default=str)
