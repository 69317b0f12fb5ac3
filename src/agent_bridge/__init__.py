"""
Agent Bridge - provider-agnostic chat agent with tool calling.
"""

import logging

from .agent import Agent
from .callback import AgentCallback, DebugCallback
from .factory import create_provider
from .providers import Provider, get_api_key
from .providers.anthropic import AnthropicProvider
from .providers.base import BaseProvider, ChatProvider
from .providers.gemini import GeminiProvider
from .providers.openai import OpenAIProvider, OpenRouterProvider
from .tools import ToolDefinition, ToolRegistry, generate_schema
from ._exceptions import (
    AgentBridgeError,
    AgentError,
    InvalidArgumentsError,
    NoChoicesError,
    ProviderError,
    RegistrationError,
    ToolError,
    ToolExecutionError,
    ToolNotFoundError,
    ToolResultError,
    UnexpectedFinishReasonError,
)
from .types import (
    ChatParams,
    ChatRequest,
    ChatResponse,
    Choice,
    FinishReason,
    FunctionCall,
    FunctionDescription,
    Message,
    Role,
    Tool,
    ToolCall,
    Usage,
)

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "Agent",
    "AgentCallback",
    "DebugCallback",
    "create_provider",
    "Provider",
    "get_api_key",
    "BaseProvider",
    "ChatProvider",
    "OpenAIProvider",
    "OpenRouterProvider",
    "AnthropicProvider",
    "GeminiProvider",
    "ToolDefinition",
    "ToolRegistry",
    "generate_schema",
    "AgentBridgeError",
    "AgentError",
    "InvalidArgumentsError",
    "NoChoicesError",
    "ProviderError",
    "RegistrationError",
    "ToolError",
    "ToolExecutionError",
    "ToolNotFoundError",
    "ToolResultError",
    "UnexpectedFinishReasonError",
    "ChatParams",
    "ChatRequest",
    "ChatResponse",
    "Choice",
    "FinishReason",
    "FunctionCall",
    "FunctionDescription",
    "Message",
    "Role",
    "Tool",
    "ToolCall",
    "Usage",
]
