"""The conversation orchestrator."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Optional

from agent_bridge._exceptions import (
    AgentError,
    NoChoicesError,
    ToolError,
    UnexpectedFinishReasonError,
)
from agent_bridge.callback import AgentCallback
from agent_bridge.providers.base import ChatProvider
from agent_bridge.tools import ToolDefinition, ToolRegistry
from agent_bridge.types import (
    ChatParams,
    ChatRequest,
    FinishReason,
    Message,
    ToolCall,
    assistant_message,
    system_message,
    tool_call_message,
    tool_error,
    tool_result,
    user_message,
)

__all__ = ["Agent"]


class Agent:
    """
    Drives one conversation against a provider, running the tools the model
    asks for until it produces a final text answer.

    Example:
        >>> agent = Agent(provider, system_prompt="You are a weather bot.")
        >>> agent.register_tool("get_weather", "Get current weather", get_weather)
        >>> reply = await agent.run("What's the weather in Paris?")

    An Agent is not safe for concurrent ``run`` calls; use one per conversation.
    """

    def __init__(
        self,
        provider: ChatProvider,
        *,
        system_prompt: Optional[str] = None,
        registry: Optional[ToolRegistry] = None,
        params: Optional[ChatParams] = None,
        callback: Optional[AgentCallback] = None,
        logger: Optional[logging.Logger] = None,
        name: Optional[str] = None,
    ) -> None:
        """
        Args:
            provider: Any object satisfying ``ChatProvider``.
            system_prompt: If non-empty, becomes the first turn of the history.
            registry: Tool registry to use; may be shared between agents once
                registration is finished. A fresh one is created if omitted.
            params: Sampling parameters sent with every request. Defaults to
                all unset, leaving the vendor defaults in effect.
            callback: Optional observer.
            logger: Optional logger. Defaults to this module's logger.
            name: Name used in log lines. Defaults to the class name.
        """
        self.provider = provider
        self.system_prompt = system_prompt or ""
        self.registry = registry if registry is not None else ToolRegistry(logger=logger)
        self.params = params if params is not None else ChatParams()
        self.callback = callback
        self.logger = logger or logging.getLogger(__name__)
        self.name = name if name is not None else self.__class__.__name__

        self.history: list[Message] = []
        if self.system_prompt:
            self.history.append(system_message(self.system_prompt))

    def register_tool(
        self, name: str, description: str, function: Callable[[Any], Any]
    ) -> ToolDefinition:
        """Register a tool on this agent's registry. See ``ToolRegistry.register``."""
        return self.registry.register(name, description, function)

    async def run(self, message: str = "") -> str:
        """
        Send ``message`` (if non-empty) and keep exchanging turns with the
        model until it answers with text.

        Tool failures do not raise; they are reported back to the model as
        tool-error turns so it can correct itself.

        Raises:
            AgentError: the provider call failed.
            NoChoicesError: the response contained no choices.
            UnexpectedFinishReasonError: a finish reason other than
                ``stop`` or ``tool_calls``, or ``tool_calls`` with no calls.
        """
        if message:
            self.history.append(user_message(message))

        while True:
            request = ChatRequest(
                model=self.provider.model_name(),
                messages=list(self.history),
                tools=self.registry.get_all_tools(),
                params=self.params,
            )

            if self.callback is not None:
                self.callback.on_llm_request(request)

            start = time.perf_counter()
            try:
                response = await self.provider.create_chat(request)
            except Exception as exc:
                raise AgentError(f"LLM call failed: {exc}") from exc
            latency = time.perf_counter() - start

            if self.callback is not None:
                self.callback.on_llm_response(response, latency)

            if not response.choices:
                raise NoChoicesError()

            choice = response.choices[0]
            self._log(
                f"Round finished with {choice.finish_reason!r} in {latency:.3f}s",
                logging.DEBUG,
            )

            if choice.finish_reason == FinishReason.TOOL_CALLS:
                calls = choice.message.tool_calls or []
                if not calls:
                    raise UnexpectedFinishReasonError(
                        f"{choice.finish_reason} without any tool calls"
                    )
                turns = [tool_call_message(calls)]
                for call in calls:
                    turns.append(await self._run_tool(call))
                # a cancelled round appends nothing
                self.history.extend(turns)
                continue

            if choice.finish_reason == FinishReason.STOP:
                content = choice.message.content or ""
                self.history.append(assistant_message(content))
                return content

            raise UnexpectedFinishReasonError(choice.finish_reason)

    async def _run_tool(self, call: ToolCall) -> Message:
        name = call.function.name
        arguments = call.function.arguments

        if self.callback is not None:
            self.callback.on_tool_call(name, arguments)

        start = time.perf_counter()
        result = ""
        error: Optional[ToolError] = None
        try:
            result = await self.registry.execute(name, arguments)
        except ToolError as exc:
            error = exc
        latency = time.perf_counter() - start

        if self.callback is not None:
            self.callback.on_tool_result(name, result, error, latency)

        if error is not None:
            self._log(f"Tool {name} failed: {error}", logging.WARNING)
            return tool_error(call.id, name, error)
        return tool_result(call.id, name, result)

    def _log(self, message: str, level: int = logging.INFO) -> None:
        self.logger.log(level, f"[{self.name}] {message}")
