"""
Session and progress data models.

Represents stored practice sessions and the per-user progress record.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass
class PracticeSession:
    """
    A scored practice session as persisted by the session store.
    """
    session_id: str
    user_id: str
    topic: str
    goal: str
    main_points: List[str]
    pitch: str
    score: int  # rounded, clamped to [1, 10]
    feedback: Dict = field(default_factory=dict)  # FeedbackResult.to_dict()
    created_at: str = ""  # ISO 8601 timestamp

    def __post_init__(self):
        if not (1 <= self.score <= 10):
            raise ValueError(f"Invalid score: {self.score}. Must be 1-10")

    @classmethod
    def from_dict(cls, data: dict) -> "PracticeSession":
        """Create PracticeSession from JSON dict."""
        return cls(
            session_id=data["session_id"],
            user_id=data["user_id"],
            topic=data["topic"],
            goal=data["goal"],
            main_points=data.get("main_points", []),
            pitch=data["pitch"],
            score=data["score"],
            feedback=data.get("feedback", {}),
            created_at=data.get("created_at", "")
        )

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict."""
        return {
            "session_id": self.session_id,
            "user_id": self.user_id,
            "topic": self.topic,
            "goal": self.goal,
            "main_points": self.main_points,
            "pitch": self.pitch,
            "score": self.score,
            "feedback": self.feedback,
            "created_at": self.created_at
        }


@dataclass
class UserProgress:
    """
    Running practice statistics for one user.
    """
    user_id: str
    streak: int = 0
    total_sessions: int = 0
    average_score: float = 0.0
    last_practice_date: Optional[str] = None  # ISO 8601 timestamp

    @classmethod
    def from_dict(cls, data: dict) -> "UserProgress":
        return cls(
            user_id=data["user_id"],
            streak=data.get("streak", 0),
            total_sessions=data.get("total_sessions", 0),
            average_score=data.get("average_score", 0.0),
            last_practice_date=data.get("last_practice_date")
        )

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "streak": self.streak,
            "total_sessions": self.total_sessions,
            "average_score": self.average_score,
            "last_practice_date": self.last_practice_date
        }
