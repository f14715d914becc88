"""Text generation providers for the analysis gateway.

This package provides:
- Base provider interface (BaseProvider, ProviderError)
- Provider implementations (GeminiProvider, OpenAIProvider, MockProvider)
- Provider factory (create_provider, ProviderType)
"""

from resumegate.app.providers.base import BaseProvider, ProviderError
from resumegate.app.providers.factory import ProviderType, create_provider
from resumegate.app.providers.gemini import GeminiProvider
from resumegate.app.providers.mock import MockProvider
from resumegate.app.providers.openai import OpenAIProvider

__all__ = [
    "BaseProvider",
    "ProviderError",
    "GeminiProvider",
    "OpenAIProvider",
    "MockProvider",
    "ProviderType",
    "create_provider",
]
