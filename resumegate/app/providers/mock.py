"""Mock provider for development and testing.

This provider simulates model output without making external API calls.
Its canned answers deliberately look like real model output: JSON wrapped
in a fenced code block with a line of prose around it, so the full
sanitize/validate path is exercised.

Enable by setting environment variable:
    LLM_PROVIDER=mock
"""

import asyncio
import json
import random
from typing import Any, Callable, Optional, Union

from resumegate.app.providers.base import BaseProvider, ProviderError

_MATCH_RESPONSE = {
    "score": 72,
    "presentKeywords": ["Python", "REST APIs", "PostgreSQL"],
    "missingKeywords": ["Kubernetes", "Terraform"],
    "suggestions": {
        "skills": ["List container orchestration experience explicitly."],
        "experience": ["Quantify the impact of the API migration project."],
        "education": [],
        "projects": ["Add a project that uses infrastructure as code."],
    },
}

_OPTIMIZE_RESPONSE = {
    "analysis": [
        {"title": "Summary", "content": "The resume covers most core requirements."},
        {"title": "Key Skills Match", "content": ["Python", "SQL", "Cloud services"]},
        {"title": "Experience Alignment", "content": ["Lead with backend ownership."]},
        {"title": "Areas for Improvement", "content": ["Show on-call and incident work."]},
        {"title": "Additional Recommendations", "content": "Tighten the summary to three lines."},
    ]
}

ResponseSource = Union[str, Callable[[str], str]]


class MockProvider(BaseProvider):
    """Mock provider that returns simulated model output.

    Features:
    - Canned job match / optimization answers picked from the prompt
    - Optional fixed response text or response function for tests
    - Configurable delay and failure rate for exercising error handling
    - Counts calls so tests can assert cache behaviour
    """

    name = "mock"

    def __init__(
        self,
        base_url: str = "http://mock.provider",
        api_key: str = "mock-key",
        model: str = "mock-model",
        http_client: Optional[Any] = None,
        timeout: float = 60.0,
        response: Optional[ResponseSource] = None,
        min_delay: float = 0.0,
        max_delay: float = 0.0,
        failure_rate: float = 0.0,
    ):
        """Initialize the mock provider.

        Args:
            response: Fixed text, or a function of the prompt, to return
                instead of the canned answers
            min_delay: Minimum response delay in seconds
            max_delay: Maximum response delay in seconds
            failure_rate: Probability of raising ProviderError (0-1)
        """
        super().__init__(base_url, api_key, model, http_client, timeout)
        self.response = response
        self.min_delay = min_delay
        self.max_delay = max_delay
        self.failure_rate = failure_rate
        self.calls = 0
        self.prompts: list[str] = []

    def _generate_content(self, prompt: str) -> str:
        if callable(self.response):
            return self.response(prompt)
        if self.response is not None:
            return self.response

        body = _OPTIMIZE_RESPONSE if '"analysis"' in prompt else _MATCH_RESPONSE
        return f"Here is the analysis:\n```json\n{json.dumps(body, indent=2)}\n```"

    async def generate(
        self,
        prompt: str,
        *,
        temperature: float = 0.2,
        max_output_tokens: int = 2048,
    ) -> str:
        self.calls += 1
        self.prompts.append(prompt)

        if self.max_delay > 0:
            await asyncio.sleep(random.uniform(self.min_delay, self.max_delay))

        if self.failure_rate and random.random() < self.failure_rate:
            raise ProviderError("Simulated provider failure")

        return self._generate_content(prompt)

    async def health_check(self, timeout: float = 2.0) -> bool:
        return True
