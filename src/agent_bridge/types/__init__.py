from .chat import (
    ChatParams,
    ChatRequest,
    ChatResponse,
    Choice,
    FinishReason,
    Message,
    Role,
    Usage,
)
from .tool import FunctionCall, FunctionDescription, Tool, ToolCall
from .messages import (
    assistant_message,
    system_message,
    tool_call_message,
    tool_error,
    tool_result,
    user_message,
)

__all__ = [
    "ChatParams",
    "ChatRequest",
    "ChatResponse",
    "Choice",
    "FinishReason",
    "Message",
    "Role",
    "Usage",
    "FunctionCall",
    "FunctionDescription",
    "Tool",
    "ToolCall",
    "assistant_message",
    "system_message",
    "tool_call_message",
    "tool_error",
    "tool_result",
    "user_message",
]
