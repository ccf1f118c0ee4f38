"""
Error taxonomy for the provider routing layer.

Every backend failure is normalized into an AIError carrying the provider
that produced it, an ErrorKind and whether a repeated attempt may succeed.
"""

from enum import Enum
from typing import Dict, List, Optional, Union


class ProviderName(str, Enum):
    """Identity of a text-generation backend."""

    ANTHROPIC = "anthropic"
    GEMINI = "gemini"

    def __str__(self) -> str:
        return self.value

    def other(self) -> "ProviderName":
        """Return the counterpart provider (default fallback)."""
        if self is ProviderName.ANTHROPIC:
            return ProviderName.GEMINI
        return ProviderName.ANTHROPIC


ROUTER_SOURCE = "router"


class ErrorKind(str, Enum):
    PROVIDER_UNAVAILABLE = "PROVIDER_UNAVAILABLE"
    TIMEOUT = "TIMEOUT"
    RATE_LIMIT = "RATE_LIMIT"
    INVALID_REQUEST = "INVALID_REQUEST"
    PARSE_ERROR = "PARSE_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    SAFETY_FILTER = "SAFETY_FILTER"
    API_ERROR = "API_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    MAX_RETRIES_EXCEEDED = "MAX_RETRIES_EXCEEDED"

    def __str__(self) -> str:
        return self.value


RETRYABLE_KINDS = frozenset({
    ErrorKind.RATE_LIMIT,
    ErrorKind.TIMEOUT,
    ErrorKind.PARSE_ERROR,
    ErrorKind.VALIDATION_ERROR,
    ErrorKind.API_ERROR,
})

# Failures caused by the model's output rather than the transport
OUTPUT_KINDS = frozenset({ErrorKind.PARSE_ERROR, ErrorKind.VALIDATION_ERROR})


class AIError(Exception):
    """
    Normalized failure of a provider or of the router.

    Attributes:
        message: Human-readable description
        provider: ProviderName of the failing backend, or "router"
        kind: ErrorKind classification
    """

    def __init__(
        self,
        message: str,
        provider: Union[ProviderName, str],
        kind: ErrorKind
    ):
        super().__init__(message)
        self.message = message
        self.provider = provider
        self.kind = kind

    @property
    def retryable(self) -> bool:
        return self.kind in RETRYABLE_KINDS

    @property
    def source(self) -> str:
        if isinstance(self.provider, ProviderName):
            return self.provider.value
        return str(self.provider)

    def to_dict(self) -> Dict:
        """Convert to JSON-serializable dict."""
        return {
            "provider": self.source,
            "kind": self.kind.value,
            "retryable": self.retryable,
            "message": self.message
        }

    def __repr__(self) -> str:
        return f"AIError(provider={self.source!r}, kind={self.kind.value}, message={self.message!r})"


class PracticeError(Exception):
    """Base class for failures surfaced by the practice service."""


class AuthenticationRequiredError(PracticeError):
    """Caller identity could not be resolved."""


class SubmissionValidationError(PracticeError):
    """Practice form input failed validation."""

    def __init__(self, details: List[str]):
        super().__init__("Invalid input data")
        self.details = details


class PracticeUnavailableError(PracticeError):
    """Feedback or topic generation failed after all recovery attempts."""

    def __init__(self, message: str, cause: Optional[AIError] = None):
        super().__init__(message)
        self.cause = cause

    @property
    def details(self) -> str:
        return self.cause.message if self.cause else "Unknown AI error"
