"""
Tests for the practice service.

The router is an AsyncMock; sessions go to an in-memory store.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.models.errors import (
    AIError,
    AuthenticationRequiredError,
    ErrorKind,
    PracticeUnavailableError,
    ProviderName,
    SubmissionValidationError,
)
from src.practice.service import LocalIdentityResolver, PracticeService, clamp_score
from src.utils.validation import validate_feedback_response


NOW = datetime(2024, 6, 15, 9, 30, tzinfo=timezone.utc)

PAYLOAD = {
    "topic": "Quarterly results",
    "goal": "Secure more budget",
    "mainPoints": ["Revenue up 12%", "  "],
    "pitch": "This quarter we beat our revenue target by twelve percent."
}


class InMemoryStore:
    def __init__(self):
        self.sessions = {}
        self.progress = {}

    def save_session(self, session):
        self.sessions[(session.user_id, session.session_id)] = session

    def load_session(self, user_id, session_id):
        return self.sessions.get((user_id, session_id))

    def list_sessions(self, user_id):
        return sorted(
            (s for (uid, _), s in self.sessions.items() if uid == user_id),
            key=lambda s: s.created_at
        )

    def save_progress(self, progress):
        self.progress[progress.user_id] = progress

    def load_progress(self, user_id):
        return self.progress.get(user_id)


class AnonymousResolver:
    def resolve(self, caller):
        return None


def _feedback(score=7):
    return validate_feedback_response(
        {
            "score": score,
            "strengths": ["Clear numbers"],
            "improvements": ["Open with the ask"],
            "improvedVersions": {
                "topic": "Q3: the case for more budget",
                "mainPoints": ["Revenue up 12%"],
                "pitch": "We beat target by 12%; here is how more budget compounds that."
            }
        },
        ProviderName.ANTHROPIC
    )


@pytest.fixture
def router():
    router = MagicMock()
    router.generate_feedback = AsyncMock(return_value=_feedback())
    router.generate_topic = AsyncMock(return_value="  Explaining churn to the board  ")
    return router


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def service(router, store):
    return PracticeService(
        router=router,
        store=store,
        identity=LocalIdentityResolver("user-1"),
        clock=lambda: NOW
    )


@pytest.mark.asyncio
async def test_submit_practice_records_session(service, router, store):
    result = await service.submit_practice("caller", dict(PAYLOAD))

    session = store.load_session("user-1", result["sessionId"])
    assert session is not None
    assert session.score == 7
    assert session.main_points == ["Revenue up 12%"]
    assert session.created_at == NOW.isoformat()

    feedback = result["feedback"]
    assert feedback["score"] == 7
    assert feedback["original"] == {
        "topic": "Quarterly results",
        "mainPoints": ["Revenue up 12%"],
        "pitch": PAYLOAD["pitch"]
    }

    request = router.generate_feedback.call_args[0][0]
    assert request.main_points == ("Revenue up 12%",)


@pytest.mark.asyncio
async def test_submit_practice_updates_progress(service, store):
    await service.submit_practice("caller", dict(PAYLOAD))

    progress = store.load_progress("user-1")
    assert progress.total_sessions == 1
    assert progress.streak == 1
    assert progress.average_score == 7.0


@pytest.mark.asyncio
async def test_fractional_score_rounded_for_storage(service, router, store):
    router.generate_feedback.return_value = _feedback(score=7.6)

    result = await service.submit_practice("caller", dict(PAYLOAD))

    assert store.load_session("user-1", result["sessionId"]).score == 8
    assert result["feedback"]["score"] == 7.6


@pytest.mark.asyncio
async def test_router_failure_surfaces_generic_error(service, router, store):
    router.generate_feedback.side_effect = AIError(
        "All 3 retry attempts failed. Last error: Anthropic API error",
        "router",
        ErrorKind.MAX_RETRIES_EXCEEDED
    )

    with pytest.raises(PracticeUnavailableError) as exc_info:
        await service.submit_practice("caller", dict(PAYLOAD))

    assert str(exc_info.value) == "Unable to generate feedback at this time. Please try again later."
    assert "All 3 retry attempts failed" in exc_info.value.details
    assert store.sessions == {}


@pytest.mark.asyncio
async def test_invalid_submission_never_reaches_router(service, router):
    with pytest.raises(SubmissionValidationError):
        await service.submit_practice("caller", dict(PAYLOAD, pitch="short"))

    router.generate_feedback.assert_not_called()


@pytest.mark.asyncio
async def test_unauthenticated_caller_rejected(router, store):
    service = PracticeService(router=router, store=store, identity=AnonymousResolver())

    with pytest.raises(AuthenticationRequiredError):
        await service.submit_practice(None, dict(PAYLOAD))

    with pytest.raises(AuthenticationRequiredError):
        service.get_progress(None)

    router.generate_feedback.assert_not_called()


@pytest.mark.asyncio
async def test_progress_failure_does_not_fail_submission(service, store):
    store.save_progress = MagicMock(side_effect=OSError("disk full"))

    result = await service.submit_practice("caller", dict(PAYLOAD))

    assert store.load_session("user-1", result["sessionId"]) is not None


@pytest.mark.asyncio
async def test_generate_topic(service, router):
    result = await service.generate_topic("caller", "  Data Analyst ")

    assert result == {
        "topic": "Explaining churn to the board",
        "role": "Data Analyst",
        "generatedAt": NOW.isoformat()
    }
    router.generate_topic.assert_awaited_once_with("Data Analyst")


@pytest.mark.asyncio
async def test_generate_topic_router_failure(service, router):
    router.generate_topic.side_effect = AIError("blocked", ProviderName.GEMINI, ErrorKind.SAFETY_FILTER)

    with pytest.raises(PracticeUnavailableError) as exc_info:
        await service.generate_topic("caller", "Nurse")

    assert exc_info.value.cause.kind == ErrorKind.SAFETY_FILTER


@pytest.mark.asyncio
async def test_get_session_and_progress(service):
    first = await service.submit_practice("caller", dict(PAYLOAD))

    assert service.get_session("caller", first["sessionId"])["score"] == 7
    assert service.get_session("caller", "missing") is None

    report = service.get_progress("caller")
    assert report["totalSessions"] == 1
    assert report["streak"] == 1
    assert report["lastPracticeDate"] == NOW.isoformat()


@pytest.mark.asyncio
async def test_streak_across_days(router, store):
    clock = {"now": NOW}
    service = PracticeService(
        router=router,
        store=store,
        identity=LocalIdentityResolver("user-1"),
        clock=lambda: clock["now"]
    )

    await service.submit_practice("caller", dict(PAYLOAD))
    clock["now"] = NOW + timedelta(days=1)
    await service.submit_practice("caller", dict(PAYLOAD))

    assert store.load_progress("user-1").streak == 2


@pytest.mark.parametrize("score,expected", [
    (0, 1),
    (11, 10),
    (-3, 1),
    (7, 7),
    (9.5, 9.5),
])
def test_clamp_score(score, expected):
    assert clamp_score(score) == expected


@pytest.mark.parametrize("score,stored", [(6.5, 7), (8.5, 9), (7.4, 7)])
@pytest.mark.asyncio
async def test_half_point_scores_round_up(service, router, store, score, stored):
    router.generate_feedback.return_value = _feedback(score=score)

    result = await service.submit_practice("caller", dict(PAYLOAD))

    assert store.load_session("user-1", result["sessionId"]).score == stored
    assert store.load_progress("user-1").average_score == float(stored)


@pytest.mark.asyncio
async def test_history_only_service_without_router(store):
    service = PracticeService(router=None, store=store, identity=LocalIdentityResolver("user-1"))

    assert service.get_progress("caller")["totalSessions"] == 0
    assert service.list_history("caller")["sessions"] == []

    with pytest.raises(PracticeUnavailableError):
        await service.generate_topic("caller", "Nurse")


@pytest.mark.asyncio
async def test_list_history_pages_newest_first(router, store):
    clock = {"now": NOW}
    service = PracticeService(
        router=router,
        store=store,
        identity=LocalIdentityResolver("user-1"),
        clock=lambda: clock["now"]
    )
    for day in range(3):
        clock["now"] = NOW + timedelta(days=day)
        await service.submit_practice("caller", dict(PAYLOAD))

    history = service.list_history("caller", page="1", limit=2)

    assert [s["date"] for s in history["sessions"]] == ["2024-06-17", "2024-06-16"]
    assert history["pagination"]["totalPages"] == 2
    assert history["pagination"]["hasNextPage"] is True


def test_list_history_rejects_non_integer_page(service):
    with pytest.raises(SubmissionValidationError) as exc_info:
        service.list_history("caller", page="first")
    assert exc_info.value.details == ["page: Expected an integer"]


def test_list_history_requires_identity(router, store):
    service = PracticeService(router=router, store=store, identity=AnonymousResolver())
    with pytest.raises(AuthenticationRequiredError):
        service.list_history(None)
