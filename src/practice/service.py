"""
Practice Service.

Caller-facing operations on top of the AI router: feedback submission,
topic generation, session lookup and progress reporting.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Protocol

import config.settings as settings
from src.models.errors import (
    AIError,
    AuthenticationRequiredError,
    PracticeUnavailableError,
)
from src.models.practice import FeedbackResult
from src.models.session import PracticeSession, UserProgress
from src.practice.progress import ProgressReporter, update_progress
from src.practice.validation import validate_history_query, validate_role, validate_submission
from src.providers.base import AIProvider
from src.utils.rounding import round_half_up

logger = logging.getLogger(__name__)


class SessionStore(Protocol):
    """Key-value persistence for sessions and progress."""

    def save_session(self, session: PracticeSession) -> None: ...

    def load_session(self, user_id: str, session_id: str) -> Optional[PracticeSession]: ...

    def list_sessions(self, user_id: str) -> List[PracticeSession]: ...

    def save_progress(self, progress: UserProgress) -> None: ...

    def load_progress(self, user_id: str) -> Optional[UserProgress]: ...


class IdentityResolver(Protocol):
    def resolve(self, caller: Any) -> Optional[str]:
        """Return the user id of an authenticated caller, or None."""
        ...


class LocalIdentityResolver:
    """Resolves every caller to a single configured local user (CLI use)."""

    def __init__(self, user_id: str = settings.PRACTICE_USER):
        self.user_id = user_id

    def resolve(self, caller: Any) -> Optional[str]:
        return self.user_id


def clamp_score(score: float) -> float:
    """Force a score into [SCORE_MIN, SCORE_MAX]."""
    if score < settings.SCORE_MIN or score > settings.SCORE_MAX:
        logger.warning(f"Invalid score received from AI: {score}")
    return max(settings.SCORE_MIN, min(settings.SCORE_MAX, score))


class PracticeService:
    """
    Coordinates a practice request end to end.

    Submission flow:
    1. Resolve identity → 2. Validate input → 3. Router feedback
    → 4. Clamp score → 5. Save session → 6. Update progress
    """

    def __init__(
        self,
        router: Optional[AIProvider],
        store: SessionStore,
        identity: IdentityResolver,
        reporter: Optional[ProgressReporter] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc)
    ):
        """
        Initialize practice service.

        Args:
            router: AIRouter (or any AIProvider); None for history-only use
            store: Session/progress persistence
            identity: Caller identity resolution
            reporter: Progress aggregation (default ProgressReporter)
            clock: Source of the current time
        """
        self.router = router
        self.store = store
        self.identity = identity
        self.reporter = reporter or ProgressReporter()
        self.clock = clock

    def _require_user(self, caller: Any) -> str:
        user_id = self.identity.resolve(caller)
        if not user_id:
            raise AuthenticationRequiredError("Authentication required")
        return user_id

    def _require_router(self) -> AIProvider:
        if self.router is None:
            raise PracticeUnavailableError("AI generation is not configured for this service")
        return self.router

    async def submit_practice(self, caller: Any, payload: Dict[str, Any]) -> Dict:
        """
        Score a practice submission and record it.

        Args:
            caller: Opaque caller handle passed to the identity resolver
            payload: Form data (topic, goal, mainPoints, pitch)

        Returns:
            {"sessionId": ..., "feedback": {...feedback, "original": {...}}}

        Raises:
            AuthenticationRequiredError: Caller could not be resolved
            SubmissionValidationError: Invalid form data
            PracticeUnavailableError: Router exhausted recovery
        """
        user_id = self._require_user(caller)
        request = validate_submission(payload)
        router = self._require_router()

        try:
            feedback: FeedbackResult = await router.generate_feedback(request)
        except AIError as e:
            logger.error(f"AI feedback generation failed: {e!r}")
            raise PracticeUnavailableError(
                "Unable to generate feedback at this time. Please try again later.",
                cause=e
            ) from e

        feedback.score = clamp_score(feedback.score)
        rounded_score = int(round_half_up(feedback.score))

        now = self.clock()
        session = PracticeSession(
            session_id=str(uuid.uuid4()),
            user_id=user_id,
            topic=request.topic,
            goal=request.goal,
            main_points=list(request.main_points),
            pitch=request.pitch,
            score=rounded_score,
            feedback=feedback.to_dict(),
            created_at=now.isoformat()
        )
        self.store.save_session(session)

        self._record_progress(user_id, rounded_score, now)

        response_feedback = feedback.to_dict()
        response_feedback["original"] = {
            "topic": request.topic,
            "mainPoints": list(request.main_points),
            "pitch": request.pitch
        }
        return {"sessionId": session.session_id, "feedback": response_feedback}

    def _record_progress(self, user_id: str, score: int, now: datetime) -> None:
        # Progress failures must not fail an already-scored submission
        try:
            current = self.store.load_progress(user_id)
            self.store.save_progress(update_progress(current, user_id, score, now))
        except Exception as e:
            logger.error(f"Error updating user progress for {user_id}: {e}")

    async def generate_topic(self, caller: Any, role: Any) -> Dict:
        """
        Generate a practice topic for a role.

        Returns:
            {"topic": ..., "role": ..., "generatedAt": ...}
        """
        self._require_user(caller)
        role = validate_role(role)
        router = self._require_router()

        try:
            topic = await router.generate_topic(role)
        except AIError as e:
            logger.error(f"AI topic generation failed: {e!r}")
            raise PracticeUnavailableError(
                "Unable to generate topic at this time. Please try again later.",
                cause=e
            ) from e

        return {
            "topic": topic.strip(),
            "role": role,
            "generatedAt": self.clock().isoformat()
        }

    def get_session(self, caller: Any, session_id: str) -> Optional[Dict]:
        user_id = self._require_user(caller)
        session = self.store.load_session(user_id, session_id)
        return session.to_dict() if session else None

    def get_progress(self, caller: Any) -> Dict:
        user_id = self._require_user(caller)
        return self.reporter.build_report(
            self.store.list_sessions(user_id),
            self.store.load_progress(user_id),
            now=self.clock()
        )

    def export_history(self, caller: Any, output_path: str) -> str:
        user_id = self._require_user(caller)
        return self.reporter.export_csv(self.store.list_sessions(user_id), output_path)

    def list_history(
        self,
        caller: Any,
        page: Any = 1,
        limit: Any = 10,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        min_score: Any = None,
        max_score: Any = None
    ) -> Dict:
        """
        List the caller's sessions newest first, filtered and paginated.

        Args:
            caller: Opaque caller handle passed to the identity resolver
            page: 1-indexed page number (raised to at least 1)
            limit: Page size (clamped to 1..50)
            date_from: Earliest session date (ISO date or timestamp)
            date_to: Latest session date, inclusive to the end of that day
            min_score: Lowest stored score to include (clamped to 1..10)
            max_score: Highest stored score to include (clamped to 1..10)

        Returns:
            {"sessions": [...], "pagination": {...}, "filters": {...}, "summary": {...}}

        Raises:
            AuthenticationRequiredError: Caller could not be resolved
            SubmissionValidationError: Non-integer paging or score values
        """
        user_id = self._require_user(caller)
        query = validate_history_query(page, limit, min_score, max_score)

        return self.reporter.build_history(
            self.store.list_sessions(user_id),
            page=query["page"],
            limit=query["limit"],
            date_from=date_from,
            date_to=date_to,
            min_score=query["min_score"],
            max_score=query["max_score"]
        )
