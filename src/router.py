"""
AI Router.

Routes feedback and topic requests across provider adapters with a per-call
timeout, a single fallback attempt and an exponential-backoff retry loop on
the primary provider.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Generic, List, Mapping, Optional, TypeVar

import config.settings as settings
from src.models.errors import (
    OUTPUT_KINDS,
    ROUTER_SOURCE,
    AIError,
    ErrorKind,
    ProviderName,
)
from src.models.practice import FeedbackRequest, FeedbackResult
from src.models.router_config import RouterConfig
from src.providers.base import AIProvider
from src.providers.registry import build_providers
from src.utils.backoff import backoff_delay

logger = logging.getLogger(__name__)

T = TypeVar("T")

Operation = Callable[[AIProvider], Awaitable[T]]
Sleep = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class AttemptResult(Generic[T]):
    """Outcome of one provider attempt: either a value or an AIError."""
    provider: ProviderName
    value: Optional[T] = None
    error: Optional[AIError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class AIRouter:
    """
    Provider router implementing the AIProvider contract.

    Call flow per operation:
    1. Primary (timed) → success returns immediately
    2. Retryable failure → fallback once (timed)
    3. Fallback failure or no fallback → primary retry loop with backoff
    4. Exhaustion → MAX_RETRIES_EXCEEDED

    Holds no per-call state; one instance serves concurrent calls.
    """

    def __init__(
        self,
        config: RouterConfig,
        providers: Mapping[ProviderName, AIProvider],
        sleep: Sleep = asyncio.sleep
    ):
        """
        Initialize router.

        Args:
            config: Immutable routing configuration
            providers: Adapters keyed by provider name (copied, never mutated)
            sleep: Coroutine used for backoff waits
        """
        self._config = config
        self._providers: Dict[ProviderName, AIProvider] = dict(providers)
        self._sleep = sleep

        logger.info(
            f"AI Router initialized with {len(self._providers)} providers. "
            f"Primary: {config.primary.value}, "
            f"Fallback: {config.fallback.value if config.fallback else None}"
        )
        logger.debug(f"Router config: {config.to_dict()}")

    @property
    def config(self) -> RouterConfig:
        return self._config

    def available_providers(self) -> List[ProviderName]:
        return list(self._providers.keys())

    def is_provider_available(self, provider: ProviderName) -> bool:
        return provider in self._providers

    async def generate_feedback(self, request: FeedbackRequest) -> FeedbackResult:
        """
        Generate validated feedback using the recovery protocol.

        Raises:
            AIError: Non-retryable provider error, PROVIDER_UNAVAILABLE or
                MAX_RETRIES_EXCEEDED
        """
        return await self._execute(
            "generate_feedback",
            lambda provider: provider.generate_feedback(request)
        )

    async def generate_topic(self, role: str) -> str:
        """Generate a practice topic using the recovery protocol."""
        return await self._execute(
            "generate_topic",
            lambda provider: provider.generate_topic(role)
        )

    async def _execute(self, operation_name: str, operation: Operation) -> T:
        primary_name = self._config.primary
        primary = self._providers.get(primary_name)

        if primary is None:
            raise AIError(
                f"Primary provider {primary_name.value} not available",
                ROUTER_SOURCE,
                ErrorKind.PROVIDER_UNAVAILABLE
            )

        first = await self._attempt(primary_name, primary, operation)
        if first.ok:
            return first.value

        error = first.error
        logger.warning(f"Primary provider {first.provider.value} failed {operation_name}: {error!r}")

        if not error.retryable:
            raise error

        fallback_name = self._config.fallback
        fallback = self._providers.get(fallback_name) if fallback_name else None

        if fallback is not None:
            logger.info(f"Attempting fallback to {fallback_name.value}")
            second = await self._attempt(fallback_name, fallback, operation)
            if second.ok:
                return second.value

            logger.error(f"Fallback provider {second.provider.value} also failed {operation_name}: {second.error!r}")
            latest = second.error
        else:
            latest = error

        if not self._is_recoverable(error):
            # Invalid output with retry_on_invalid_output=False: fallback only
            raise latest

        return await self._retry_primary(primary_name, primary, operation, latest)

    async def _retry_primary(
        self,
        provider_name: ProviderName,
        provider: AIProvider,
        operation: Operation,
        last_error: AIError
    ) -> T:
        """
        Retry the primary provider with exponential backoff.

        Raises:
            AIError: First non-recoverable error, or MAX_RETRIES_EXCEEDED
        """
        max_retries = self._config.max_retries

        for attempt in range(1, max_retries + 1):
            result = await self._attempt(provider_name, provider, operation)
            if result.ok:
                logger.info(f"Retry attempt {attempt}/{max_retries} succeeded on {provider_name.value}")
                return result.value

            last_error = result.error
            if not self._is_recoverable(last_error):
                logger.error(f"Retry attempt {attempt}/{max_retries} hit non-recoverable error: {last_error!r}")
                raise last_error

            if attempt == max_retries:
                break

            delay = backoff_delay(attempt, self._config.backoff_base_seconds)
            logger.info(
                f"Retry attempt {attempt}/{max_retries} failed. "
                f"Waiting {delay:.2f}s before retry..."
            )
            await self._sleep(delay)

        logger.error(f"All {max_retries} retry attempts failed on {provider_name.value}")
        raise AIError(
            f"All {max_retries} retry attempts failed. Last error: {last_error.message}",
            ROUTER_SOURCE,
            ErrorKind.MAX_RETRIES_EXCEEDED
        ) from last_error

    async def _attempt(
        self,
        provider_name: ProviderName,
        provider: AIProvider,
        operation: Operation
    ) -> AttemptResult:
        """
        Run one provider call bounded by the per-call timeout.

        Never raises AIError; cancellation of the caller propagates.
        """
        timeout = self._config.timeout_seconds
        try:
            value = await asyncio.wait_for(operation(provider), timeout=timeout)
            return AttemptResult(provider=provider_name, value=value)
        except asyncio.TimeoutError:
            return AttemptResult(
                provider=provider_name,
                error=AIError(
                    f"Operation timed out after {timeout}s",
                    provider_name,
                    ErrorKind.TIMEOUT
                )
            )
        except AIError as e:
            return AttemptResult(provider=provider_name, error=e)
        except Exception as e:
            logger.exception(f"Provider {provider_name.value} raised an unclassified error")
            return AttemptResult(
                provider=provider_name,
                error=AIError(
                    f"Unknown error occurred with {provider_name.value} provider: {e}",
                    provider_name,
                    ErrorKind.UNKNOWN_ERROR
                )
            )

    def _is_recoverable(self, error: AIError) -> bool:
        if not error.retryable:
            return False
        if error.kind in OUTPUT_KINDS:
            return self._config.retry_on_invalid_output
        return True


def _resolve_fallback(primary: ProviderName, configured: str) -> Optional[ProviderName]:
    value = (configured or "").strip().lower()
    if value == "none":
        return None
    if not value:
        return primary.other()
    return ProviderName(value)


def create_router(
    providers: Optional[Mapping[ProviderName, AIProvider]] = None,
    **overrides
) -> AIRouter:
    """
    Build an AIRouter from environment configuration.

    Args:
        providers: Pre-built adapters; defaults to build_providers()
        **overrides: RouterConfig fields overriding settings

    Returns:
        Configured AIRouter
    """
    primary = ProviderName(overrides.pop("primary", settings.AI_PROVIDER))
    if "fallback" in overrides:
        fallback = overrides.pop("fallback")
    else:
        fallback = _resolve_fallback(primary, settings.AI_FALLBACK_PROVIDER)

    config = RouterConfig(
        primary=primary,
        fallback=fallback,
        max_retries=overrides.pop("max_retries", settings.AI_MAX_RETRIES),
        timeout_seconds=overrides.pop("timeout_seconds", settings.AI_TIMEOUT_SECONDS),
        backoff_base_seconds=overrides.pop("backoff_base_seconds", settings.AI_BACKOFF_BASE_SECONDS),
        retry_on_invalid_output=overrides.pop("retry_on_invalid_output", settings.AI_RETRY_ON_INVALID_OUTPUT),
    )
    if overrides:
        raise TypeError(f"Unknown router options: {sorted(overrides)}")

    if providers is None:
        providers = build_providers(timeout_seconds=config.timeout_seconds)

    if config.primary not in providers:
        logger.warning(
            f"Primary provider {config.primary.value} could not be initialized. "
            "Check API key configuration."
        )

    return AIRouter(config, providers)
