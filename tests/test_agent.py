"""Tests for the Agent conversation loop."""

import asyncio
import logging

import pytest
from pydantic import BaseModel

from agent_bridge import (
    Agent,
    AgentError,
    ChatParams,
    ChatResponse,
    Choice,
    DebugCallback,
    FunctionCall,
    Message,
    NoChoicesError,
    ProviderError,
    Role,
    ToolCall,
    ToolRegistry,
    UnexpectedFinishReasonError,
)
from agent_bridge.adapters import GeminiRequestAdapter


class WeatherArgs(BaseModel):
    city: str


def get_weather(args: WeatherArgs) -> str:
    if args.city == "Paris":
        return "Sunny, 22C"
    raise ValueError(f"unknown city {args.city!r}")


class ScriptedProvider:
    """Returns queued responses in order and records every request."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    async def create_chat(self, request):
        self.requests.append(request)
        item = self.responses.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    def model_name(self):
        return "test-model"


class RecordingCallback:
    def __init__(self):
        self.events = []

    def on_llm_request(self, request):
        self.events.append(("llm_request", len(request.messages)))

    def on_llm_response(self, response, latency):
        assert latency >= 0
        self.events.append(("llm_response", response.choices[0].finish_reason))

    def on_tool_call(self, name, arguments):
        self.events.append(("tool_call", name, arguments))

    def on_tool_result(self, name, result, error, latency):
        self.events.append(("tool_result", name, result, error is not None))


def text_response(text, finish_reason="stop"):
    return ChatResponse(
        choices=[
            Choice(
                message=Message(role=Role.ASSISTANT, content=text),
                finish_reason=finish_reason,
            )
        ]
    )


def tool_response(*calls):
    """calls are (id, name, arguments) triples."""
    return ChatResponse(
        choices=[
            Choice(
                message=Message(
                    role=Role.ASSISTANT,
                    tool_calls=[
                        ToolCall(id=call_id, function=FunctionCall(name=name, arguments=args))
                        for call_id, name, args in calls
                    ],
                ),
                finish_reason="tool_calls",
            )
        ]
    )


@pytest.fixture
def weather_agent():
    def build(*responses, **kwargs):
        provider = ScriptedProvider(*responses)
        agent = Agent(provider, **kwargs)
        agent.register_tool("get_weather", "Get current weather", get_weather)
        return agent, provider

    return build


class TestDirectAnswer:
    def test_returns_text_and_records_history(self):
        provider = ScriptedProvider(text_response("Hello!"))
        agent = Agent(provider, system_prompt="Be brief.")

        reply = asyncio.run(agent.run("Hi"))

        assert reply == "Hello!"
        assert [m.role for m in agent.history] == ["system", "user", "assistant"]
        assert agent.history[2].content == "Hello!"

    def test_request_shape(self):
        provider = ScriptedProvider(text_response("ok"))
        params = ChatParams(temperature=0.3)
        agent = Agent(provider, params=params)

        asyncio.run(agent.run("Hi"))

        request = provider.requests[0]
        assert request.model == "test-model"
        assert request.tools == []
        assert request.params is params
        assert [m.content for m in request.messages] == ["Hi"]

    def test_no_system_turn_without_prompt(self):
        agent = Agent(ScriptedProvider())

        assert agent.history == []

    def test_empty_message_not_appended(self):
        provider = ScriptedProvider(text_response("again"))
        agent = Agent(provider, system_prompt="sys")

        asyncio.run(agent.run(""))

        assert len(provider.requests[0].messages) == 1


class TestToolRound:
    def test_weather_conversation(self, weather_agent):
        agent, provider = weather_agent(
            tool_response(("call_1", "get_weather", '{"city": "Paris"}')),
            text_response("It's Sunny, 22C in Paris."),
        )

        reply = asyncio.run(agent.run("weather in Paris?"))

        assert reply == "It's Sunny, 22C in Paris."
        user, call_turn, result_turn, final = agent.history
        assert user.role == "user"
        assert call_turn.role == "assistant"
        assert call_turn.content == ""
        assert call_turn.tool_calls[0].function.name == "get_weather"
        assert result_turn.role == "tool"
        assert result_turn.content == "Sunny, 22C"
        assert result_turn.tool_call_id == "call_1"
        assert final.role == "assistant"
        assert "Sunny, 22C" in final.content

        # tools are sent on every round, including the one after results
        assert all(len(r.tools) == 1 for r in provider.requests)
        assert len(provider.requests[1].messages) == 3

    def test_sequential_calls_keep_order(self, weather_agent):
        order = []

        class CityArgs(BaseModel):
            city: str

        def record(args: CityArgs) -> str:
            order.append(args.city)
            return f"visited {args.city}"

        agent, _ = weather_agent(
            tool_response(
                ("call_a", "record", '{"city": "Lima"}'),
                ("call_b", "record", '{"city": "Oslo"}'),
            ),
            text_response("done"),
        )
        agent.register_tool("record", "Record a city", record)

        asyncio.run(agent.run("go"))

        assert order == ["Lima", "Oslo"]
        results = [m for m in agent.history if m.role == "tool"]
        assert [m.tool_call_id for m in results] == ["call_a", "call_b"]
        assert [m.content for m in results] == ["visited Lima", "visited Oslo"]

    def test_every_call_id_used_once(self, weather_agent):
        agent, _ = weather_agent(
            tool_response(
                ("c1", "get_weather", '{"city": "Paris"}'),
                ("c2", "get_weather", '{"city": "Atlantis"}'),
                ("c3", "missing_tool", "{}"),
            ),
            text_response("done"),
        )

        asyncio.run(agent.run("go"))

        call_turn = agent.history[1]
        call_ids = [c.id for c in call_turn.tool_calls]
        result_ids = [m.tool_call_id for m in agent.history[2:5]]
        assert sorted(result_ids) == sorted(call_ids)
        assert len(set(result_ids)) == len(result_ids)

    def test_tool_errors_fed_back(self, weather_agent):
        agent, provider = weather_agent(
            tool_response(
                ("c1", "get_weather", '{"city": "Atlantis"}'),
                ("c2", "nope", "{}"),
                ("c3", "get_weather", "[1]"),
            ),
            text_response("Sorry."),
        )

        reply = asyncio.run(agent.run("weather?"))

        assert reply == "Sorry."
        errors = agent.history[2:5]
        assert all(m.role == "tool" for m in errors)
        assert all(m.content.startswith("Error executing tool: ") for m in errors)
        assert all(m.content.endswith(". Please fix your arguments.") for m in errors)
        assert "unknown city 'Atlantis'" in errors[0].content
        assert "tool nope not found" in errors[1].content
        assert "invalid arguments" in errors[2].content

    def test_gemini_style_tool_call_with_stop_reason(self, weather_agent):
        adapter = GeminiRequestAdapter()
        gemini_tool_round = adapter.from_provider(
            {
                "candidates": [
                    {
                        "content": {
                            "role": "model",
                            "parts": [
                                {"functionCall": {"name": "get_weather", "args": {"city": "Paris"}}}
                            ],
                        },
                        "finishReason": "STOP",
                    }
                ]
            }
        )
        final = adapter.from_provider(
            {
                "candidates": [
                    {"content": {"parts": [{"text": "Sunny, 22C."}]}, "finishReason": "STOP"}
                ]
            }
        )
        agent, _ = weather_agent(gemini_tool_round, final)

        reply = asyncio.run(agent.run("weather in Paris?"))

        assert reply == "Sunny, 22C."
        assert agent.history[2].content == "Sunny, 22C"
        assert agent.history[2].tool_call_id == agent.history[1].tool_calls[0].id


class TestFailures:
    def test_zero_choices(self):
        agent = Agent(ScriptedProvider(ChatResponse(choices=[])))

        with pytest.raises(NoChoicesError, match="no choices returned"):
            asyncio.run(agent.run("Hi"))

        assert [m.role for m in agent.history] == ["user"]

    def test_unexpected_finish_reason(self):
        agent = Agent(ScriptedProvider(text_response("cut off", finish_reason="length")))

        with pytest.raises(UnexpectedFinishReasonError, match="length"):
            asyncio.run(agent.run("Hi"))

        assert [m.role for m in agent.history] == ["user"]

    def test_tool_calls_reason_without_calls(self):
        empty_round = ChatResponse(
            choices=[
                Choice(
                    message=Message(role=Role.ASSISTANT, tool_calls=None),
                    finish_reason="tool_calls",
                )
            ]
        )
        provider = ScriptedProvider(empty_round, text_response("never reached"))
        agent = Agent(provider)

        with pytest.raises(UnexpectedFinishReasonError, match="without any tool calls"):
            asyncio.run(agent.run("Hi"))

        assert len(provider.requests) == 1
        assert [m.role for m in agent.history] == ["user"]

    def test_provider_error_wrapped(self):
        cause = ProviderError("openai", "unexpected status", status_code=500, body="oops")
        agent = Agent(ScriptedProvider(cause))

        with pytest.raises(AgentError, match="LLM call failed") as exc_info:
            asyncio.run(agent.run("Hi"))

        assert exc_info.value.__cause__ is cause

    def test_cancelled_round_appends_nothing(self, weather_agent):
        class SlowArgs(BaseModel):
            pass

        async def slow(args: SlowArgs) -> str:
            await asyncio.sleep(10)
            return "late"

        agent, _ = weather_agent(
            tool_response(
                ("c1", "get_weather", '{"city": "Paris"}'),
                ("c2", "slow", "{}"),
            ),
        )
        agent.register_tool("slow", "Takes forever", slow)

        async def main():
            await asyncio.wait_for(agent.run("go"), timeout=0.05)

        with pytest.raises(asyncio.TimeoutError):
            asyncio.run(main())

        assert [m.role for m in agent.history] == ["user"]


class TestCallbacks:
    def test_event_order(self, weather_agent):
        callback = RecordingCallback()
        agent, _ = weather_agent(
            tool_response(("c1", "get_weather", '{"city": "Paris"}')),
            text_response("done"),
            callback=callback,
        )

        asyncio.run(agent.run("weather?"))

        assert callback.events == [
            ("llm_request", 1),
            ("llm_response", "tool_calls"),
            ("tool_call", "get_weather", '{"city": "Paris"}'),
            ("tool_result", "get_weather", "Sunny, 22C", False),
            ("llm_request", 3),
            ("llm_response", "stop"),
        ]

    def test_tool_error_reported(self, weather_agent):
        callback = RecordingCallback()
        agent, _ = weather_agent(
            tool_response(("c1", "missing", "{}")),
            text_response("done"),
            callback=callback,
        )

        asyncio.run(agent.run("go"))

        assert ("tool_result", "missing", "", True) in callback.events

    def test_debug_callback_logs(self, weather_agent, caplog):
        agent, _ = weather_agent(
            tool_response(("c1", "get_weather", '{"city": "Paris"}')),
            text_response("done"),
            callback=DebugCallback(),
        )

        with caplog.at_level(logging.DEBUG, logger="agent_bridge.callback"):
            asyncio.run(agent.run("weather?"))

        assert "LLM request:" in caplog.text
        assert '"model": "test-model"' in caplog.text
        assert "Tool call: get_weather" in caplog.text
        assert "Tool result: get_weather - Sunny, 22C" in caplog.text


def test_shared_registry():
    registry = ToolRegistry()
    registry.register("get_weather", "Get current weather", get_weather)

    first = Agent(ScriptedProvider(text_response("a")), registry=registry)
    second = Agent(ScriptedProvider(text_response("b")), registry=registry)

    assert first.registry is second.registry
    assert asyncio.run(first.run("x")) == "a"
    assert asyncio.run(second.run("y")) == "b"
