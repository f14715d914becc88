"""Google Gemini provider implementation.

Talks to the Generative Language REST API (``models/{model}:generateContent``)
directly over the shared httpx client.
"""

from typing import Any, Dict, Optional

import httpx

from resumegate.app.providers.base import BaseProvider, ProviderError


class GeminiProvider(BaseProvider):
    """Gemini ``generateContent`` provider."""

    name = "gemini"

    def __init__(
        self,
        base_url: str,
        api_key: str,
        model: str = "gemini-pro",
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 60.0
    ):
        super().__init__(base_url, api_key, model, http_client, timeout)

    def _build_headers(self) -> Dict[str, str]:
        return {
            "x-goog-api-key": self.api_key,
            "Content-Type": "application/json",
        }

    def _build_payload(self, prompt: str, temperature: float, max_output_tokens: int) -> Dict[str, Any]:
        return {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": temperature,
                "maxOutputTokens": max_output_tokens,
            },
        }

    @staticmethod
    def _extract_text(data: Dict[str, Any]) -> str:
        candidates = data.get("candidates") or []
        if not isinstance(candidates, list):
            raise ProviderError("Unexpected generateContent body: candidates is not a list")
        if not candidates:
            return ""
        candidate = candidates[0]
        if not isinstance(candidate, dict):
            raise ProviderError("Unexpected generateContent body: candidate is not an object")
        content = candidate.get("content") or {}
        if not isinstance(content, dict):
            raise ProviderError("Unexpected generateContent body: content is not an object")
        parts = content.get("parts") or []
        if not isinstance(parts, list):
            raise ProviderError("Unexpected generateContent body: parts is not a list")

        texts = []
        for part in parts:
            if not isinstance(part, dict):
                raise ProviderError("Unexpected generateContent body: part is not an object")
            text = part.get("text", "")
            if not isinstance(text, str):
                raise ProviderError("Unexpected generateContent body: text is not a string")
            texts.append(text)
        return "".join(texts)

    async def generate(
        self,
        prompt: str,
        *,
        temperature: float = 0.2,
        max_output_tokens: int = 2048,
    ) -> str:
        url = self._get_endpoint_url(f"/models/{self.model}:generateContent")
        payload = self._build_payload(prompt, temperature, max_output_tokens)

        async with self._client_context() as client:
            resp = await client.post(url, headers=self.headers, json=payload, timeout=self.timeout)
            resp.raise_for_status()
            data = self._decode_json(resp)

        return self._extract_text(data)

    async def health_check(self, timeout: float = 2.0) -> bool:
        try:
            url = self._get_endpoint_url(f"/models/{self.model}")
            async with self._client_context() as client:
                resp = await client.get(url, headers=self.headers, timeout=timeout)
                return resp.status_code == 200
        except httpx.HTTPError:
            return False
