"""Conversion between canonical JSON-string arguments and structured values."""

from __future__ import annotations

import json
import logging
from typing import Any

_logger = logging.getLogger(__name__)


def decode_arguments(arguments: str | None) -> dict[str, Any]:
    """Decode a JSON-string argument payload; an empty dict on failure."""
    if not arguments or not arguments.strip():
        return {}
    try:
        value = json.loads(arguments)
    except json.JSONDecodeError as exc:
        _logger.warning("Bad JSON in tool call arguments: %s", arguments, exc_info=exc)
        return {}
    if not isinstance(value, dict):
        _logger.warning("Tool call arguments are not an object: %s", arguments)
        return {}
    return value


def encode_arguments(value: Any) -> str:
    """Encode a structured argument value back into a JSON string."""
    if value is None:
        return "{}"
    return json.dumps(value, ensure_ascii=False)
