"""
Tests for practice form validation.
"""

import pytest

from src.models.errors import SubmissionValidationError
from src.practice.validation import validate_history_query, validate_role, validate_submission


def _payload(**changes):
    payload = {
        "topic": "Quarterly results",
        "goal": "Secure more budget",
        "mainPoints": ["Revenue up 12%", "Churn down"],
        "pitch": "This quarter we beat our revenue target by twelve percent."
    }
    payload.update(changes)
    return payload


def test_valid_submission_builds_request():
    request = validate_submission(_payload())

    assert request.topic == "Quarterly results"
    assert request.main_points == ("Revenue up 12%", "Churn down")


def test_blank_main_points_dropped():
    request = validate_submission(_payload(mainPoints=["  Revenue up  ", "", "   "]))
    assert request.main_points == ("Revenue up",)


def test_all_blank_main_points_rejected():
    with pytest.raises(SubmissionValidationError) as exc_info:
        validate_submission(_payload(mainPoints=["", "  "]))
    assert exc_info.value.details == ["mainPoints: At least one main point is required"]


def test_too_many_main_points():
    with pytest.raises(SubmissionValidationError) as exc_info:
        validate_submission(_payload(mainPoints=[f"Point {i}" for i in range(11)]))
    assert "mainPoints: Too many main points" in exc_info.value.details


def test_short_pitch_rejected():
    with pytest.raises(SubmissionValidationError) as exc_info:
        validate_submission(_payload(pitch="Hi"))
    assert exc_info.value.details == ["pitch: Pitch must be at least 10 characters"]


def test_long_topic_rejected():
    with pytest.raises(SubmissionValidationError) as exc_info:
        validate_submission(_payload(topic="x" * 501))
    assert exc_info.value.details == ["topic: Topic too long"]


def test_collects_every_problem():
    with pytest.raises(SubmissionValidationError) as exc_info:
        validate_submission({"topic": "", "mainPoints": "not a list"})

    details = exc_info.value.details
    assert str(exc_info.value) == "Invalid input data"
    assert "topic: Topic is required" in details
    assert "goal: Goal is required" in details
    assert "pitch: Pitch is required" in details
    assert "mainPoints: Main points must be a list of strings" in details


def test_non_object_payload():
    with pytest.raises(SubmissionValidationError):
        validate_submission(["topic"])


def test_validate_role_trims():
    assert validate_role("  Product Manager ") == "Product Manager"


@pytest.mark.parametrize("role", [None, "", "   ", "x" * 101, 42])
def test_validate_role_rejects(role):
    with pytest.raises(SubmissionValidationError):
        validate_role(role)


def test_history_query_defaults():
    assert validate_history_query() == {"page": 1, "limit": 10, "min_score": None, "max_score": None}


@pytest.mark.parametrize("kwargs,expected", [
    ({"page": 0}, {"page": 1}),
    ({"page": "3"}, {"page": 3}),
    ({"limit": 500}, {"limit": 50}),
    ({"limit": 0}, {"limit": 1}),
    ({"min_score": 0, "max_score": 42}, {"min_score": 1, "max_score": 10}),
    ({"min_score": "7"}, {"min_score": 7}),
])
def test_history_query_clamping(kwargs, expected):
    query = validate_history_query(**kwargs)
    for key, value in expected.items():
        assert query[key] == value


def test_history_query_collects_errors():
    with pytest.raises(SubmissionValidationError) as exc_info:
        validate_history_query(page="x", max_score="high")
    assert exc_info.value.details == ["page: Expected an integer", "maxScore: Expected an integer"]
