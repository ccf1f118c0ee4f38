"""
Practice form validation.

Pure checks on user input before anything is sent to a provider.
"""

from typing import Any, Dict, List, Optional

import config.settings as settings
from src.models.errors import SubmissionValidationError
from src.models.practice import FeedbackRequest


def _check_text(
    payload: Dict[str, Any],
    field: str,
    min_length: int,
    max_length: int,
    errors: List[str],
    label: str
) -> str:
    value = payload.get(field)
    if not isinstance(value, str):
        errors.append(f"{field}: {label} is required")
        return ""
    if len(value) < min_length:
        if min_length <= 1:
            errors.append(f"{field}: {label} is required")
        else:
            errors.append(f"{field}: {label} must be at least {min_length} characters")
    elif len(value) > max_length:
        errors.append(f"{field}: {label} too long")
    return value


def validate_submission(payload: Dict[str, Any]) -> FeedbackRequest:
    """
    Validate a practice submission and build a FeedbackRequest.

    Args:
        payload: Raw form data with topic, goal, mainPoints and pitch

    Returns:
        FeedbackRequest ready for the router

    Raises:
        SubmissionValidationError: With one "field: message" entry per problem
    """
    if not isinstance(payload, dict):
        raise SubmissionValidationError(["body: Expected an object"])

    errors: List[str] = []

    topic = _check_text(payload, "topic", 1, settings.TOPIC_MAX_LENGTH, errors, "Topic")
    goal = _check_text(payload, "goal", 1, settings.GOAL_MAX_LENGTH, errors, "Goal")
    pitch = _check_text(
        payload, "pitch", settings.PITCH_MIN_LENGTH, settings.PITCH_MAX_LENGTH, errors, "Pitch"
    )

    main_points = payload.get("mainPoints")
    if not isinstance(main_points, list) or not all(isinstance(p, str) for p in main_points):
        errors.append("mainPoints: Main points must be a list of strings")
        main_points = []
    else:
        main_points = [p.strip() for p in main_points if p.strip()]
        if not main_points:
            errors.append("mainPoints: At least one main point is required")
        elif len(main_points) > settings.MAX_MAIN_POINTS:
            errors.append("mainPoints: Too many main points")

    if errors:
        raise SubmissionValidationError(errors)

    return FeedbackRequest(
        topic=topic,
        goal=goal,
        main_points=tuple(main_points),
        pitch=pitch
    )


def validate_role(role: Any) -> str:
    """Validate a role for topic generation and return it trimmed."""
    if not isinstance(role, str) or not role.strip():
        raise SubmissionValidationError(["role: Role is required"])
    role = role.strip()
    if len(role) > settings.ROLE_MAX_LENGTH:
        raise SubmissionValidationError(["role: Role too long"])
    return role


def _to_int(value: Any, field: str, errors: List[str]) -> Optional[int]:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        errors.append(f"{field}: Expected an integer")
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        errors.append(f"{field}: Expected an integer")
        return None


def validate_history_query(
    page: Any = 1,
    limit: Any = 10,
    min_score: Any = None,
    max_score: Any = None
) -> Dict[str, Optional[int]]:
    """
    Normalize history paging and score filters.

    page is raised to at least 1, limit is clamped to 1..HISTORY_MAX_LIMIT and
    score bounds are clamped to SCORE_MIN..SCORE_MAX.

    Raises:
        SubmissionValidationError: When a value is not an integer
    """
    errors: List[str] = []
    page_value = _to_int(page, "page", errors)
    limit_value = _to_int(limit, "limit", errors)
    min_value = _to_int(min_score, "minScore", errors)
    max_value = _to_int(max_score, "maxScore", errors)

    if errors:
        raise SubmissionValidationError(errors)

    def clamp(value: Optional[int]) -> Optional[int]:
        if value is None:
            return None
        return max(settings.SCORE_MIN, min(settings.SCORE_MAX, value))

    return {
        "page": max(1, page_value if page_value is not None else 1),
        "limit": min(
            settings.HISTORY_MAX_LIMIT,
            max(1, limit_value if limit_value is not None else settings.HISTORY_DEFAULT_LIMIT)
        ),
        "min_score": clamp(min_value),
        "max_score": clamp(max_value)
    }
