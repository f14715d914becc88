"""OpenAI API provider implementation.

Compatible with OpenAI API and other OpenAI-compatible endpoints
(e.g., Azure OpenAI, DeepSeek, local LLMs with OpenAI-compatible API).
"""

from typing import Any, Dict, Optional

import httpx

from resumegate.app.providers.base import BaseProvider, ProviderError


class OpenAIProvider(BaseProvider):
    """Chat completions provider for OpenAI-compatible endpoints."""

    name = "openai"

    def __init__(
        self,
        base_url: str,
        api_key: str,
        model: str = "gpt-4o-mini",
        organization: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 60.0
    ):
        super().__init__(base_url, api_key, model, http_client, timeout)
        self.organization = organization

        if organization:
            self.headers["OpenAI-Organization"] = organization

    def _build_payload(self, prompt: str, temperature: float, max_output_tokens: int) -> Dict[str, Any]:
        return {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": temperature,
            "max_tokens": max_output_tokens,
        }

    @staticmethod
    def _extract_text(data: Dict[str, Any]) -> str:
        choices = data.get("choices") or []
        if not isinstance(choices, list):
            raise ProviderError("Unexpected completion body: choices is not a list")
        if not choices:
            return ""
        choice = choices[0]
        if not isinstance(choice, dict):
            raise ProviderError("Unexpected completion body: choice is not an object")
        message = choice.get("message") or {}
        if not isinstance(message, dict):
            raise ProviderError("Unexpected completion body: message is not an object")
        content = message.get("content")
        if content is None:
            return ""
        if not isinstance(content, str):
            raise ProviderError("Unexpected completion body: content is not a string")
        return content

    async def generate(
        self,
        prompt: str,
        *,
        temperature: float = 0.2,
        max_output_tokens: int = 2048,
    ) -> str:
        url = self._get_endpoint_url("/chat/completions")
        payload = self._build_payload(prompt, temperature, max_output_tokens)

        async with self._client_context() as client:
            resp = await client.post(url, headers=self.headers, json=payload, timeout=self.timeout)
            resp.raise_for_status()
            data = self._decode_json(resp)

        return self._extract_text(data)

    async def health_check(self, timeout: float = 2.0) -> bool:
        """Calls the /models endpoint with a short timeout."""
        try:
            url = self._get_endpoint_url("/models")
            async with self._client_context() as client:
                resp = await client.get(url, headers=self.headers, timeout=timeout)
                return resp.status_code == 200
        except httpx.HTTPError:
            return False
