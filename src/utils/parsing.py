"""
Model output parsing.

Backends frequently wrap JSON in markdown code fences even when asked not to;
these helpers normalize the raw text before it reaches the validator.
"""

import json
import logging
import re
from typing import Any, Union

from src.models.errors import AIError, ErrorKind, ProviderName

logger = logging.getLogger(__name__)

_OPENING_FENCE = re.compile(r"^```[\w-]*[ \t]*\n?")
_CLOSING_FENCE = re.compile(r"\n?```\s*$")


def strip_code_fences(text: str) -> str:
    """
    Remove enclosing triple-backtick fences, with or without a language tag.

    Unfenced text is returned trimmed and otherwise untouched.
    """
    cleaned = text.strip()
    if not cleaned.startswith("```"):
        return cleaned

    cleaned = _OPENING_FENCE.sub("", cleaned, count=1)
    cleaned = _CLOSING_FENCE.sub("", cleaned, count=1)
    return cleaned.strip()


def parse_json_payload(text: str, provider: Union[ProviderName, str]) -> Any:
    """
    Decode the JSON body of a model response.

    Args:
        text: Raw response text (may be fenced)
        provider: Provider the text came from, for error attribution

    Returns:
        Decoded JSON value

    Raises:
        AIError: PARSE_ERROR if the text is empty or not valid JSON
    """
    cleaned = strip_code_fences(text or "")
    if not cleaned:
        raise AIError("Empty response received from provider", provider, ErrorKind.PARSE_ERROR)

    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse JSON from {provider}. Text was: {cleaned[:500]}")
        raise AIError(
            f"Failed to parse response as JSON: {e}",
            provider,
            ErrorKind.PARSE_ERROR
        ) from e
