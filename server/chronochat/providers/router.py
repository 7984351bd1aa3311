from __future__ import annotations
import logging
from functools import lru_cache

from chronochat.config import get_settings
from chronochat.providers.base import ResponseProvider
from chronochat.providers.echo import EchoProvider
from chronochat.providers.gemini import GeminiProvider

logger = logging.getLogger(__name__)


@lru_cache()
def get_provider() -> ResponseProvider:
    """FastAPI dependency: the configured response provider."""
    settings = get_settings()
    api_key = settings.provider_api_key
    if not api_key:
        logger.error("No GEMINI_API_KEY configured; replies come from the offline echo provider")
        return EchoProvider()
    logger.info("Resolved provider=gemini model=%s", settings.gemini_model)
    return GeminiProvider(
        api_key=api_key,
        model=settings.gemini_model,
        base_url=settings.gemini_base_url,
        timeout=settings.provider_timeout_seconds,
    )
