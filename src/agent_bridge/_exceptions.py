"""
Translate noisy provider tracebacks into a small bridge-level hierarchy,
while preserving the original exception for full tracebacks.
"""

from __future__ import annotations

import logging
from typing import Final, Optional, Type

import anthropic
import httpx
import openai

__all__: tuple[str, ...] = (
    "AgentBridgeError",
    "ProviderError",
    "AgentError",
    "NoChoicesError",
    "UnexpectedFinishReasonError",
    "ToolError",
    "ToolNotFoundError",
    "InvalidArgumentsError",
    "ToolResultError",
    "ToolExecutionError",
    "RegistrationError",
    "classify_error",
)


class AgentBridgeError(RuntimeError):
    """Root of every error raised by agent_bridge."""


class ProviderError(AgentBridgeError):
    """Transport or translation failure talking to a vendor.

    Attributes:
        vendor: Short vendor name, e.g. ``"anthropic"``.
        status_code: HTTP status when the vendor answered, else ``None``.
        body: Raw response body for diagnosis, when there was one.
    """

    def __init__(
        self,
        vendor: str,
        message: str,
        *,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ) -> None:
        detail = f"{vendor}: {message}"
        if status_code is not None:
            detail = f"{detail} (status {status_code})"
        if body:
            detail = f"{detail}: {body}"
        super().__init__(detail)
        self.vendor = vendor
        self.status_code = status_code
        self.body = body


class AgentError(AgentBridgeError):
    """A provider call made by the agent failed."""


class NoChoicesError(AgentBridgeError):
    """The provider answered with zero choices."""

    def __init__(self) -> None:
        super().__init__("no choices returned")


class UnexpectedFinishReasonError(AgentBridgeError):
    def __init__(self, finish_reason: str) -> None:
        super().__init__(f"unexpected finish reason: {finish_reason}")
        self.finish_reason = finish_reason


class ToolError(AgentBridgeError):
    """Tool lookup or execution failed. The agent feeds these back to the model."""


class ToolNotFoundError(ToolError):
    def __init__(self, name: str) -> None:
        super().__init__(f"tool {name} not found")
        self.name = name


class InvalidArgumentsError(ToolError):
    def __init__(self, name: str, reason: str) -> None:
        super().__init__(f"invalid arguments for tool {name}: {reason}")
        self.name = name


class ToolResultError(ToolError):
    def __init__(self, name: str) -> None:
        super().__init__(f"tool {name}: function did not return a string")
        self.name = name


class ToolExecutionError(ToolError):
    def __init__(self, name: str, exc: Exception) -> None:
        super().__init__(f"tool {name} raised {exc.__class__.__name__}: {exc}")
        self.name = name
        self.__cause__ = exc


class RegistrationError(AgentBridgeError):
    """The callable handed to the registry has the wrong shape."""


RATE_LIMIT_ERRORS: Final[tuple[Type[Exception], ...]] = (
    openai.RateLimitError,
    anthropic.RateLimitError,
)

CONN_ERRORS: Final[tuple[Type[Exception], ...]] = (
    openai.APIConnectionError,
    anthropic.APIConnectionError,
    httpx.TransportError,
    TimeoutError,
    ConnectionError,
)

STATUS_ERRORS: Final[tuple[Type[Exception], ...]] = (
    openai.APIStatusError,
    anthropic.APIStatusError,
    httpx.HTTPStatusError,
)

API_ERRORS: Final[tuple[Type[Exception], ...]] = (
    openai.APIError,
    anthropic.APIError,
)


def _status_and_body(exc: Exception) -> tuple[Optional[int], Optional[str]]:
    response = getattr(exc, "response", None)
    if response is None:
        return getattr(exc, "status_code", None), None
    try:
        body = response.text
    except httpx.ResponseNotRead:
        body = None
    return response.status_code, body


def classify_error(
    exc: Exception,
    vendor: str,
    logger: Optional[logging.Logger] = None,
) -> ProviderError:
    """Wrap an SDK or transport exception in ProviderError with a concise message."""
    log = logger or logging.getLogger("agent_bridge.exceptions")
    status_code: Optional[int] = None
    body: Optional[str] = None

    if isinstance(exc, ProviderError):
        return exc
    if isinstance(exc, RATE_LIMIT_ERRORS):
        msg = "Rate‑limit exceeded – please retry later"
        status_code, body = _status_and_body(exc)
    elif isinstance(exc, CONN_ERRORS):
        msg = "Connection problem – unable to reach the LLM provider"
    elif isinstance(exc, STATUS_ERRORS):
        msg = "Provider rejected the request"
        status_code, body = _status_and_body(exc)
    elif isinstance(exc, API_ERRORS):
        msg = "Provider reported an internal error"
    else:
        msg = exc.__class__.__name__

    log.warning("Wrapping %s exception: %s", vendor, exc)
    error = ProviderError(vendor, f"{msg}: {exc}", status_code=status_code, body=body)
    error.__cause__ = exc
    return error
