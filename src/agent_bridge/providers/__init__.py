"""Supported vendors and API key lookup.

Keys come from the process environment; a ``.env`` file in the working
directory is loaded on import.
"""
from __future__ import annotations

import os
from enum import StrEnum
from typing import Final

from dotenv import load_dotenv

load_dotenv()


class Provider(StrEnum):
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GEMINI = "gemini"
    OPENROUTER = "openrouter"


API_KEY_ENV_VARS: Final[dict[Provider, str]] = {
    Provider.OPENAI: "OPENAI_API_KEY",
    Provider.ANTHROPIC: "ANTHROPIC_API_KEY",
    Provider.GEMINI: "GEMINI_API_KEY",
    Provider.OPENROUTER: "OPENROUTER_API_KEY",
}


def get_api_key(provider: Provider | str) -> str:
    """
    Return the API key for ``provider`` (an enum member or its name).

    Raises:
        RuntimeError: unknown provider, or its variable is unset or blank.
    """
    try:
        env_var = API_KEY_ENV_VARS[Provider(provider)]
    except (KeyError, ValueError):
        raise RuntimeError(f"No API key variable for provider {provider!s}") from None

    key = os.environ.get(env_var, "").strip()
    if not key:
        raise RuntimeError(f"{env_var} missing")
    return key


__all__ = ["Provider", "API_KEY_ENV_VARS", "get_api_key"]
