"""
Provider registry.

Builds the provider lookup used by the router from process-wide credentials.
"""

import logging
from typing import Dict, Optional

import config.settings as settings
from src.models.errors import ProviderName
from src.providers.anthropic_provider import AnthropicProvider
from src.providers.base import AIProvider
from src.providers.gemini_provider import GeminiProvider

logger = logging.getLogger(__name__)


def build_providers(
    anthropic_api_key: Optional[str] = None,
    gemini_api_key: Optional[str] = None,
    timeout_seconds: float = settings.AI_TIMEOUT_SECONDS
) -> Dict[ProviderName, AIProvider]:
    """
    Instantiate every provider whose credential is configured.

    Args:
        anthropic_api_key: Overrides ANTHROPIC_API_KEY
        gemini_api_key: Overrides GEMINI_API_KEY / GOOGLE_AI_API_KEY
        timeout_seconds: Transport timeout passed to each adapter

    Returns:
        Mapping of provider name to adapter (possibly empty)
    """
    anthropic_key = settings.ANTHROPIC_API_KEY if anthropic_api_key is None else anthropic_api_key
    gemini_key = settings.GEMINI_API_KEY if gemini_api_key is None else gemini_api_key

    providers: Dict[ProviderName, AIProvider] = {}

    if anthropic_key:
        providers[ProviderName.ANTHROPIC] = AnthropicProvider(
            api_key=anthropic_key,
            timeout_seconds=timeout_seconds
        )

    if gemini_key:
        providers[ProviderName.GEMINI] = GeminiProvider(
            api_key=gemini_key,
            timeout_seconds=timeout_seconds
        )

    logger.info(f"Registered {len(providers)} providers: {[p.value for p in providers]}")
    return providers
