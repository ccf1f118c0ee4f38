"""
Practice data models.

Represents the input of a practice session and the structured feedback
returned for it.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Tuple


@dataclass(frozen=True)
class FeedbackRequest:
    """
    A single practice submission to be scored.
    Constructed by the caller after form validation.
    """
    topic: str
    goal: str
    main_points: Tuple[str, ...]
    pitch: str

    def __post_init__(self):
        # Lists are accepted for convenience but stored immutably
        object.__setattr__(self, "main_points", tuple(self.main_points))
        if not self.main_points:
            raise ValueError("FeedbackRequest requires at least one main point")

    def to_dict(self) -> Dict:
        return {
            "topic": self.topic,
            "goal": self.goal,
            "mainPoints": list(self.main_points),
            "pitch": self.pitch
        }


@dataclass
class ImprovedVersion:
    """Rewritten topic, main points and pitch suggested by the coach."""
    topic: str
    main_points: List[str] = field(default_factory=list)
    pitch: str = ""

    def to_dict(self) -> Dict:
        return {
            "topic": self.topic,
            "mainPoints": list(self.main_points),
            "pitch": self.pitch
        }


@dataclass
class FeedbackResult:
    """
    Validated coach feedback.

    Only built by the response validator, so every instance satisfies the
    output contract (score in [1, 10], non-empty lists, non-empty pitch).
    """
    score: float
    strengths: List[str]
    improvements: List[str]
    improved_versions: ImprovedVersion

    @classmethod
    def from_dict(cls, data: Dict) -> "FeedbackResult":
        """Create FeedbackResult from an already validated JSON dict."""
        improved = data["improvedVersions"]
        return cls(
            score=data["score"],
            strengths=list(data["strengths"]),
            improvements=list(data["improvements"]),
            improved_versions=ImprovedVersion(
                topic=improved["topic"],
                main_points=list(improved["mainPoints"]),
                pitch=improved["pitch"]
            )
        )

    def to_dict(self) -> Dict:
        """Convert to the JSON wire shape."""
        return {
            "score": self.score,
            "strengths": list(self.strengths),
            "improvements": list(self.improvements),
            "improvedVersions": self.improved_versions.to_dict()
        }
