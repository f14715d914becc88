"""Provider factory for creating provider instances from settings."""

from enum import Enum
from typing import Dict, Optional, Type

import httpx

from resumegate.app.core.config import Settings, settings as default_settings
from resumegate.app.core.logging import get_logger
from resumegate.app.providers.base import BaseProvider
from resumegate.app.providers.gemini import GeminiProvider
from resumegate.app.providers.mock import MockProvider
from resumegate.app.providers.openai import OpenAIProvider

logger = get_logger(__name__)


class ProviderType(str, Enum):
    """Supported provider types."""
    GEMINI = "gemini"
    OPENAI = "openai"
    MOCK = "mock"


# Provider registry mapping types to classes
_PROVIDER_REGISTRY: Dict[ProviderType, Type[BaseProvider]] = {
    ProviderType.GEMINI: GeminiProvider,
    ProviderType.OPENAI: OpenAIProvider,
    ProviderType.MOCK: MockProvider,
}

# Model used when LLM_MODEL is not set
_DEFAULT_MODELS: Dict[ProviderType, str] = {
    ProviderType.GEMINI: "gemini-pro",
    ProviderType.OPENAI: "gpt-4o-mini",
    ProviderType.MOCK: "mock-model",
}


def create_provider(
    config: Optional[Settings] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> BaseProvider:
    """Create the configured provider.

    Args:
        config: Settings to read provider configuration from
        http_client: Shared HTTP client for connection pooling

    Returns:
        A provider instance

    Raises:
        ValueError: If a real provider is selected without an API key
    """
    config = config or default_settings
    provider_type = ProviderType(config.llm_provider)
    provider_class = _PROVIDER_REGISTRY[provider_type]
    model = config.llm_model or _DEFAULT_MODELS[provider_type]

    if provider_type is ProviderType.MOCK:
        logger.warning("Using mock LLM provider; responses are canned")
        return provider_class(model=model)

    if provider_type is ProviderType.GEMINI:
        if not config.gemini_api_key:
            raise ValueError("GEMINI_API_KEY is required when LLM_PROVIDER=gemini")
        return provider_class(
            base_url=config.gemini_base_url,
            api_key=config.gemini_api_key,
            model=model,
            http_client=http_client,
            timeout=config.llm_timeout_seconds,
        )

    if not config.openai_api_key:
        raise ValueError("OPENAI_API_KEY is required when LLM_PROVIDER=openai")
    return provider_class(
        base_url=config.openai_base_url,
        api_key=config.openai_api_key,
        model=model,
        organization=config.openai_organization,
        http_client=http_client,
        timeout=config.llm_timeout_seconds,
    )
