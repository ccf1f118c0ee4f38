"""
Gemini provider adapter.

Translates the capability contract into Gemini generate_content calls and
normalizes Gemini failures into AIError.
"""

import logging

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions
from google.generativeai.types import BlockedPromptException, StopCandidateException

import config.settings as settings
from src.models.errors import AIError, ErrorKind, ProviderName
from src.models.practice import FeedbackRequest, FeedbackResult
from src.providers.prompts import SYSTEM_PROMPTS, build_feedback_prompt, build_topic_prompt
from src.utils.parsing import parse_json_payload
from src.utils.validation import validate_feedback_response, validate_topic

logger = logging.getLogger(__name__)

PROVIDER = ProviderName.GEMINI


class GeminiProvider:
    """
    Gemini backend adapter.

    Issues exactly one generate_content call per operation; retries and
    fallback are the router's job.
    """

    def __init__(
        self,
        api_key: str,
        model_name: str = settings.GEMINI_MODEL,
        timeout_seconds: float = settings.AI_TIMEOUT_SECONDS
    ):
        """
        Initialize Gemini adapter.

        Args:
            api_key: Gemini API key
            model_name: Gemini model to use
            timeout_seconds: Transport timeout for a single request
        """
        if not api_key:
            raise ValueError("Gemini API key is required (set GEMINI_API_KEY or GOOGLE_AI_API_KEY)")

        self.model_name = model_name
        self.timeout_seconds = timeout_seconds

        # Configure Gemini
        genai.configure(api_key=api_key)
        self.model = genai.GenerativeModel(
            model_name=model_name,
            system_instruction=SYSTEM_PROMPTS[PROVIDER]
        )

        logger.info(f"Initialized GeminiProvider with model={model_name}")

    async def generate_feedback(self, request: FeedbackRequest) -> FeedbackResult:
        """
        Generate validated feedback for a practice submission.

        Raises:
            AIError: Classified Gemini, parse or validation failure
        """
        prompt = build_feedback_prompt(request)
        logger.debug(f"[Gemini] Feedback prompt ({len(prompt)} chars): {prompt}")

        text = await self._generate(
            prompt,
            {
                "temperature": settings.FEEDBACK_TEMPERATURE,
                "max_output_tokens": settings.FEEDBACK_MAX_OUTPUT_TOKENS,
                "candidate_count": 1,
                "response_mime_type": "application/json"
            }
        )
        logger.debug(f"[Gemini] Raw response: {text}")

        data = parse_json_payload(text, PROVIDER)
        return validate_feedback_response(data, PROVIDER)

    async def generate_topic(self, role: str) -> str:
        """Generate a practice topic for a role."""
        text = await self._generate(
            build_topic_prompt(role),
            {
                "temperature": settings.TOPIC_TEMPERATURE,
                "max_output_tokens": settings.TOPIC_MAX_OUTPUT_TOKENS,
                "candidate_count": 1
            }
        )
        return validate_topic(text, PROVIDER)

    async def _generate(self, prompt: str, generation_config: dict) -> str:
        """Issue one Gemini request and return its text."""
        try:
            response = await self.model.generate_content_async(
                prompt,
                generation_config=generation_config,
                request_options={"timeout": self.timeout_seconds}
            )
        except AIError:
            raise
        except Exception as e:
            raise classify_gemini_error(e) from e

        if response is None:
            raise AIError("No response received from Gemini", PROVIDER, ErrorKind.PARSE_ERROR)

        try:
            text = response.text
        except ValueError as e:
            # .text raises when the candidate has no parts (e.g. blocked output)
            error = classify_gemini_error(e)
            if error.kind is ErrorKind.API_ERROR:
                error = AIError(f"Gemini returned no text: {e}", PROVIDER, ErrorKind.PARSE_ERROR)
            raise error from e

        if not text or not text.strip():
            raise AIError("No response received from Gemini", PROVIDER, ErrorKind.PARSE_ERROR)
        return text


def classify_gemini_error(error: Exception) -> AIError:
    """
    Map a Gemini SDK failure onto the shared error taxonomy.

    Args:
        error: Exception raised by the google-generativeai client

    Returns:
        AIError with the matching ErrorKind
    """
    message = str(error)
    lowered = message.lower()

    if isinstance(error, (BlockedPromptException, StopCandidateException)):
        return AIError("Content was blocked by Gemini safety filters", PROVIDER, ErrorKind.SAFETY_FILTER)

    if isinstance(error, (google_exceptions.ResourceExhausted, google_exceptions.TooManyRequests)):
        return AIError("Gemini rate limit or quota exceeded", PROVIDER, ErrorKind.RATE_LIMIT)

    if isinstance(error, google_exceptions.DeadlineExceeded):
        return AIError(f"Gemini request timed out: {message}", PROVIDER, ErrorKind.TIMEOUT)

    if isinstance(error, (
        google_exceptions.InvalidArgument,
        google_exceptions.Unauthenticated,
        google_exceptions.PermissionDenied,
        google_exceptions.NotFound
    )):
        if "api_key" in lowered or "api key" in lowered:
            return AIError("Invalid Gemini API key", PROVIDER, ErrorKind.INVALID_REQUEST)
        return AIError(f"Invalid request to Gemini: {message}", PROVIDER, ErrorKind.INVALID_REQUEST)

    # Fall back to message inspection for errors surfaced without a typed class
    if "quota" in lowered or "rate limit" in lowered:
        return AIError("Gemini rate limit or quota exceeded", PROVIDER, ErrorKind.RATE_LIMIT)

    if "safety" in lowered or "blocked" in lowered:
        return AIError("Content was blocked by Gemini safety filters", PROVIDER, ErrorKind.SAFETY_FILTER)

    if "api_key" in lowered:
        return AIError("Invalid Gemini API key", PROVIDER, ErrorKind.INVALID_REQUEST)

    return AIError(f"Gemini API error: {message}", PROVIDER, ErrorKind.API_ERROR)
