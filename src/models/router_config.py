"""
Router configuration model.

Built once at process start (or injected by tests) and shared read-only by
all concurrent router calls.
"""

from dataclasses import dataclass
from typing import Dict, Optional

from src.models.errors import ProviderName


@dataclass(frozen=True)
class RouterConfig:
    """
    Primary/fallback selection and recovery limits for AIRouter.

    Attributes:
        primary: Provider tried first on every call
        fallback: Provider tried once when the primary fails retryably (None disables)
        max_retries: Attempts of the primary retry loop (>= 1)
        timeout_seconds: Per-call timeout applied to every provider attempt
        backoff_base_seconds: Base delay of the exponential backoff
        retry_on_invalid_output: Whether parse/validation failures consume the retry budget
    """
    primary: ProviderName
    fallback: Optional[ProviderName] = None
    max_retries: int = 3
    timeout_seconds: float = 30.0
    backoff_base_seconds: float = 1.0
    retry_on_invalid_output: bool = True

    def __post_init__(self):
        object.__setattr__(self, "primary", ProviderName(self.primary))
        if self.fallback is not None:
            object.__setattr__(self, "fallback", ProviderName(self.fallback))

        if self.max_retries < 1:
            raise ValueError(f"Invalid max_retries: {self.max_retries}. Must be >= 1")

        if self.timeout_seconds <= 0:
            raise ValueError(f"Invalid timeout_seconds: {self.timeout_seconds}. Must be > 0")

        if self.backoff_base_seconds < 0:
            raise ValueError(
                f"Invalid backoff_base_seconds: {self.backoff_base_seconds}. Must be >= 0"
            )

        if self.fallback == self.primary:
            raise ValueError(
                f"Fallback provider must differ from primary ({self.primary.value})"
            )

    def to_dict(self) -> Dict:
        return {
            "primary": self.primary.value,
            "fallback": self.fallback.value if self.fallback else None,
            "max_retries": self.max_retries,
            "timeout_seconds": self.timeout_seconds,
            "backoff_base_seconds": self.backoff_base_seconds,
            "retry_on_invalid_output": self.retry_on_invalid_output
        }
