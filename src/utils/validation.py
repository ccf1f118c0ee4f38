"""
Response validator.

Single source of truth for what counts as a usable model result. Shared by
every provider adapter; performs no I/O.
"""

import numbers
from typing import Any, Union

import config.settings as settings
from src.models.errors import AIError, ErrorKind, ProviderName
from src.models.practice import FeedbackResult


def _fail(message: str, provider: Union[ProviderName, str]) -> AIError:
    return AIError(message, provider, ErrorKind.VALIDATION_ERROR)


def _is_non_empty_string_list(value: Any) -> bool:
    return (
        isinstance(value, list)
        and len(value) > 0
        and all(isinstance(item, str) for item in value)
    )


def _is_non_blank_string(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def validate_feedback_response(data: Any, provider: Union[ProviderName, str]) -> FeedbackResult:
    """
    Check decoded model output against the feedback contract.

    Rules are applied in order and the first violation fails the call.

    Args:
        data: Decoded JSON value from the provider
        provider: Provider the data came from, for error attribution

    Returns:
        FeedbackResult built from the validated data

    Raises:
        AIError: VALIDATION_ERROR on the first violated rule
    """
    if not isinstance(data, dict):
        raise _fail("Response is not an object", provider)

    score = data.get("score")
    if (
        isinstance(score, bool)
        or not isinstance(score, numbers.Real)
        or not (settings.SCORE_MIN <= score <= settings.SCORE_MAX)
    ):
        raise _fail(
            f"Score must be a number between {settings.SCORE_MIN}-{settings.SCORE_MAX}",
            provider
        )

    if not _is_non_empty_string_list(data.get("strengths")):
        raise _fail("Strengths must be a non-empty array of strings", provider)

    if not _is_non_empty_string_list(data.get("improvements")):
        raise _fail("Improvements must be a non-empty array of strings", provider)

    improved = data.get("improvedVersions")
    if not isinstance(improved, dict):
        raise _fail("ImprovedVersions must be an object", provider)

    if not _is_non_blank_string(improved.get("topic")):
        raise _fail("ImprovedVersions.topic must be a non-empty string", provider)

    if not _is_non_empty_string_list(improved.get("mainPoints")):
        raise _fail("ImprovedVersions.mainPoints must be a non-empty array of strings", provider)

    if not _is_non_blank_string(improved.get("pitch")):
        raise _fail("ImprovedVersions.pitch must be a non-empty string", provider)

    return FeedbackResult.from_dict(data)


def validate_topic(
    text: Any,
    provider: Union[ProviderName, str],
    min_length: int = settings.TOPIC_MIN_LENGTH
) -> str:
    """Trim a generated topic and reject it when empty or too short."""
    topic = text.strip() if isinstance(text, str) else ""
    if len(topic) < min_length:
        raise _fail("Generated topic is too short or empty", provider)
    return topic
