"""Provider capability and the shared base class for concrete providers."""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional, Protocol, Self, runtime_checkable

from agent_bridge._exceptions import ProviderError, classify_error
from agent_bridge.types import ChatRequest, ChatResponse


__all__ = ["ChatProvider", "BaseProvider", "RequestAdapter"]


@runtime_checkable
class ChatProvider(Protocol):
    """What the agent needs from a backend. Every provider is a drop-in for any other."""

    async def create_chat(self, request: ChatRequest) -> ChatResponse:
        """Send a canonical request and return the canonical response."""
        ...

    def model_name(self) -> str:
        """Model identifier this provider was configured with."""
        ...


class RequestAdapter(Protocol):
    """Protocol for translating between the canonical format and a vendor's JSON."""

    vendor: str

    def to_provider(self, request: ChatRequest) -> dict[str, Any]:
        """Convert a canonical request to the vendor request body."""
        ...

    def from_provider(self, raw: dict[str, Any]) -> ChatResponse:
        """Convert a vendor response body to a ChatResponse."""
        ...


class BaseProvider(ABC):
    """
    Base class for all provider implementations. All implementations are async-first.
    """

    def __init__(
        self,
        model: str,
        *,
        logger: Optional[logging.Logger] = None,
        name: Optional[str] = None,
    ) -> None:
        """
        Initializes the base provider.

        Args:
            model: The identifier of the LLM model to be used.
            logger: Optional logger instance. If None, a logger named after
                    this module will be used.
            name: Optional name for this component, used in logging.
                  If None, defaults to the concrete class's name.
        """
        self.model = model
        self.logger = logger or logging.getLogger(__name__)
        self.name = name if name is not None else self.__class__.__name__

    @property
    @abstractmethod
    def adapter(self) -> RequestAdapter:
        """Request adapter for this provider."""
        ...

    @abstractmethod
    async def _send(self, payload: dict[str, Any]) -> dict[str, Any]:
        """
        Transport one vendor request body and return the decoded response body.
        This method must be implemented by subclasses.

        Args:
            payload: Vendor request body built by the adapter.

        Returns:
            The vendor response as a plain dict.
        """
        ...

    def model_name(self) -> str:
        return self.model

    async def create_chat(self, request: ChatRequest) -> ChatResponse:
        """
        Translate, send and translate back one chat request.

        Raises:
            ProviderError: on transport failure, a non-2xx answer, or a
                response that cannot be decoded.
        """
        vendor = self.adapter.vendor
        payload = self.adapter.to_provider(request)

        self._log(
            f"Sending request to {vendor} model {self.model} "
            f"({len(request.messages)} messages, {len(request.tools)} tools)",
            logging.DEBUG,
        )

        try:
            raw = await self._send(payload)
        except ProviderError:
            raise
        except Exception as exc:
            raise classify_error(exc, vendor, self.logger) from exc

        try:
            return self.adapter.from_provider(raw)
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise ProviderError(vendor, f"failed to decode response: {exc}") from exc

    def _log(self, message: str, level: int = logging.INFO) -> None:
        self.logger.log(level, f"[{self.name}] {message}")

    # --- lifecycle ---------------------------------------------------------
    async def aclose(self) -> None:
        """
        Close the underlying async client to avoid cleanup after the loop closes.
        Safe to call multiple times.
        """
        client = getattr(self, "_client", None)
        close = getattr(client, "aclose", None) or getattr(client, "close", None)
        if close:
            await close()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
