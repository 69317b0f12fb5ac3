"""Pure transformation adapters for different LLM providers."""

from .openai import OpenAIRequestAdapter
from .anthropic import AnthropicRequestAdapter
from .gemini import GeminiRequestAdapter
from ._arguments import decode_arguments, encode_arguments

__all__ = [
    "OpenAIRequestAdapter",
    "AnthropicRequestAdapter",
    "GeminiRequestAdapter",
    "decode_arguments",
    "encode_arguments",
]
