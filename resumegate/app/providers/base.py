from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Optional

import httpx


class ProviderError(Exception):
    """Raised when a provider answers but the exchange is unusable.

    Transport failures surface as ``httpx.HTTPError``; this covers the rest
    (non-JSON bodies, simulated failures) so callers can treat both as the
    upstream being unavailable.
    """


class BaseProvider(ABC):
    """Base class for text generation providers.

    Subclasses can accept an external httpx.AsyncClient for connection pooling,
    or create their own per request if not provided.
    """

    name: str = "base"

    def __init__(
        self,
        base_url: str,
        api_key: str,
        model: str,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 60.0
    ):
        """Initialize the provider.

        Args:
            base_url: The API base URL
            api_key: The API key for authentication
            model: Model identifier sent with every request
            http_client: Optional shared HTTP client for connection pooling
            timeout: Request timeout in seconds
        """
        self._http_client = http_client
        self.base_url = base_url.rstrip('/')
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.headers = self._build_headers()

    @property
    def http_client(self) -> Optional[httpx.AsyncClient]:
        """Get the HTTP client, if one was provided."""
        return self._http_client

    def _build_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json"
        }

    def _get_client(self) -> httpx.AsyncClient:
        if self._http_client is not None:
            return self._http_client
        # Fallback: create a new client (not recommended for production)
        return httpx.AsyncClient(timeout=self.timeout)

    @asynccontextmanager
    async def _client_context(self) -> AsyncIterator[httpx.AsyncClient]:
        """Yield the shared client, or a per-request client that is closed afterwards."""
        client = self._get_client()
        is_shared = self._http_client is not None
        try:
            yield client
        finally:
            if not is_shared:
                await client.aclose()

    def _get_endpoint_url(self, endpoint: str) -> str:
        return f"{self.base_url}{endpoint}"

    @staticmethod
    def _decode_json(resp: httpx.Response) -> dict:
        try:
            data = resp.json()
        except ValueError as exc:
            raise ProviderError(f"Provider returned a non-JSON body: {exc}") from exc
        if not isinstance(data, dict):
            raise ProviderError("Provider returned an unexpected body")
        return data

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        *,
        temperature: float = 0.2,
        max_output_tokens: int = 2048,
    ) -> str:
        """Send one prompt and return the raw generated text.

        Args:
            prompt: The natural-language prompt
            temperature: Sampling temperature
            max_output_tokens: Upper bound on generated tokens

        Returns:
            The untrusted text produced by the model (may be empty)

        Raises:
            httpx.HTTPError: On transport failures or non-2xx responses
            ProviderError: If the response body is unusable
        """

    @abstractmethod
    async def health_check(self, timeout: float = 2.0) -> bool:
        """Check if the provider is reachable with a lightweight request."""
