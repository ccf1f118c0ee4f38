"""
Capability contract shared by every provider adapter and by the router.
"""

from typing import Protocol

from src.models.practice import FeedbackRequest, FeedbackResult


class AIProvider(Protocol):
    async def generate_feedback(self, request: FeedbackRequest) -> FeedbackResult:
        """Generate validated feedback for a practice session."""
        ...

    async def generate_topic(self, role: str) -> str:
        """Generate a practice topic for a specific role."""
        ...
