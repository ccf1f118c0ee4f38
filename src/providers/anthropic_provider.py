"""
Anthropic provider adapter.

Translates the capability contract into Claude Messages API calls and
normalizes Anthropic failures into AIError.
"""

import logging
from typing import Any, Optional

import anthropic

import config.settings as settings
from src.models.errors import AIError, ErrorKind, ProviderName
from src.models.practice import FeedbackRequest, FeedbackResult
from src.providers.prompts import SYSTEM_PROMPTS, build_feedback_prompt, build_topic_prompt
from src.utils.parsing import parse_json_payload
from src.utils.validation import validate_feedback_response, validate_topic

logger = logging.getLogger(__name__)

PROVIDER = ProviderName.ANTHROPIC


class AnthropicProvider:
    """
    Claude backend adapter.

    The SDK client is created with max_retries=0 so that exactly one HTTP
    request is issued per operation.
    """

    def __init__(
        self,
        api_key: str = "",
        model_name: str = settings.ANTHROPIC_MODEL,
        timeout_seconds: float = settings.AI_TIMEOUT_SECONDS,
        client: Optional[Any] = None
    ):
        """
        Initialize Anthropic adapter.

        Args:
            api_key: Anthropic API key
            model_name: Claude model to use
            timeout_seconds: Transport timeout for a single request
            client: Pre-built AsyncAnthropic client (tests)
        """
        if client is None and not api_key:
            raise ValueError("Anthropic API key is required (set ANTHROPIC_API_KEY)")

        self.model_name = model_name
        self.timeout_seconds = timeout_seconds
        self.client = client or anthropic.AsyncAnthropic(
            api_key=api_key,
            timeout=timeout_seconds,
            max_retries=0
        )

        logger.info(f"Initialized AnthropicProvider with model={model_name}")

    async def generate_feedback(self, request: FeedbackRequest) -> FeedbackResult:
        prompt = build_feedback_prompt(request)
        logger.debug(f"[Anthropic] Feedback prompt ({len(prompt)} chars): {prompt}")

        text = await self._create_message(
            prompt,
            max_tokens=settings.FEEDBACK_MAX_OUTPUT_TOKENS,
            temperature=settings.FEEDBACK_TEMPERATURE
        )
        logger.debug(f"[Anthropic] Raw response: {text}")

        data = parse_json_payload(text, PROVIDER)
        return validate_feedback_response(data, PROVIDER)

    async def generate_topic(self, role: str) -> str:
        text = await self._create_message(
            build_topic_prompt(role),
            max_tokens=settings.TOPIC_MAX_OUTPUT_TOKENS,
            temperature=settings.TOPIC_TEMPERATURE
        )
        return validate_topic(text, PROVIDER)

    async def _create_message(self, prompt: str, max_tokens: int, temperature: float) -> str:
        """
        Issue one Messages API request.

        Returns:
            Text of the first content block

        Raises:
            AIError: Classified transport failure, or PARSE_ERROR for a
                missing/non-text content block
        """
        try:
            response = await self.client.messages.create(
                model=self.model_name,
                max_tokens=max_tokens,
                system=SYSTEM_PROMPTS[PROVIDER],
                messages=[{"role": "user", "content": prompt}],
                temperature=temperature
            )
        except Exception as e:
            raise classify_anthropic_error(e) from e

        if getattr(response, "stop_reason", None) == "refusal":
            raise AIError("Content was declined by Anthropic safety policy", PROVIDER, ErrorKind.SAFETY_FILTER)

        content = getattr(response, "content", None) or []
        if not content or getattr(content[0], "type", None) != "text":
            raise AIError("Invalid response type from Anthropic", PROVIDER, ErrorKind.PARSE_ERROR)

        return content[0].text


def classify_anthropic_error(error: Exception) -> AIError:
    """
    Map an Anthropic SDK failure onto the shared error taxonomy.

    Args:
        error: Exception raised by the anthropic client

    Returns:
        AIError with the matching ErrorKind
    """
    message = str(error)

    if isinstance(error, anthropic.RateLimitError):
        return AIError("Anthropic rate limit exceeded", PROVIDER, ErrorKind.RATE_LIMIT)

    # APITimeoutError subclasses APIConnectionError, so check it first
    if isinstance(error, anthropic.APITimeoutError):
        return AIError(f"Anthropic request timed out: {message}", PROVIDER, ErrorKind.TIMEOUT)

    if isinstance(error, anthropic.APIConnectionError):
        return AIError(f"Anthropic API error: {message}", PROVIDER, ErrorKind.API_ERROR)

    if isinstance(error, anthropic.APIStatusError):
        if error.status_code == 429:
            return AIError("Anthropic rate limit exceeded", PROVIDER, ErrorKind.RATE_LIMIT)
        if 400 <= error.status_code < 500:
            return AIError(f"Invalid request to Anthropic: {message}", PROVIDER, ErrorKind.INVALID_REQUEST)
        return AIError(f"Anthropic API error: {message}", PROVIDER, ErrorKind.API_ERROR)

    if "rate_limit" in message:
        return AIError("Anthropic rate limit exceeded", PROVIDER, ErrorKind.RATE_LIMIT)

    if "invalid_request" in message:
        return AIError("Invalid request to Anthropic", PROVIDER, ErrorKind.INVALID_REQUEST)

    return AIError(f"Anthropic API error: {message}", PROVIDER, ErrorKind.API_ERROR)
