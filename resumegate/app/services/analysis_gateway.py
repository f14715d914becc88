"""Analysis gateway: the pipeline between callers and the model provider.

Each call walks a fixed sequence of stages and can exit early with a typed
failure from any of them, ending in FAILED:

    START -> RATE_CHECKED -> CACHE_CHECKED -> MODEL_INVOKED -> SANITIZED
          -> VALIDATED -> CACHED -> DONE

The rate limiter and result cache are shared, long-lived instances injected
at construction. They are only touched before and after the model call,
never across it, so a slow provider never holds their locks. Nothing is
retried here; a caller that retries re-enters the pipeline and is rate
limited again. Concurrent identical misses both call the model and both
cache their result.
"""

import asyncio
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, Union

import httpx

from resumegate.app.core.cache import CacheBackend
from resumegate.app.core.config import Settings, settings as default_settings
from resumegate.app.core.logging import get_log_context, get_logger
from resumegate.app.core.utils import request_fingerprint, serialize_profile
from resumegate.app.exceptions import (
    GatewayException,
    InvalidInputError,
    RateLimitExceededError,
    UpstreamUnavailableError,
)
from resumegate.app.middleware.rate_limit import RateLimitBackend
from resumegate.app.providers.base import BaseProvider, ProviderError
from resumegate.app.services.prompts import build_job_match_prompt, build_resume_optimize_prompt
from resumegate.app.services.sanitizer import parse_payload
from resumegate.app.services.validation import (
    MatchResult,
    OptimizationReport,
    validate_match_result,
    validate_optimization_report,
)

logger = get_logger(__name__)

AnalysisResult = Union[MatchResult, OptimizationReport]


class AnalysisKind(str, Enum):
    """The request shapes served by the gateway."""
    JOB_MATCH = "job_match"
    RESUME_OPTIMIZE = "resume_optimize"


class PipelineStage(str, Enum):
    """Stages of one gateway call, in order."""
    START = "start"
    RATE_CHECKED = "rate_checked"
    CACHE_CHECKED = "cache_checked"
    MODEL_INVOKED = "model_invoked"
    SANITIZED = "sanitized"
    VALIDATED = "validated"
    CACHED = "cached"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class AnalysisPlan:
    """How one analysis kind is prompted, validated and rate limited."""
    kind: AnalysisKind
    limit: int
    build_prompt: Callable[[str, str], str]
    validate: Callable[[Any], AnalysisResult]
    result_type: type


@dataclass
class AnalysisOutcome:
    """A validated result and whether it was served from the cache."""
    result: AnalysisResult
    cache_hit: bool
    cache_key: str


class AnalysisGateway:
    """Admits, caches and validates resume analysis calls.

    Args:
        rate_limiter: Shared limiter deciding admission per identity
        cache: Shared result cache, or None to disable caching
        provider: Model provider invoked on cache misses
        config: Settings supplying limits, TTL and model call parameters
    """

    def __init__(
        self,
        rate_limiter: RateLimitBackend,
        cache: Optional[CacheBackend],
        provider: BaseProvider,
        config: Optional[Settings] = None,
    ):
        self.config = config or default_settings
        self.rate_limiter = rate_limiter
        self.cache = cache if self.config.cache_enabled else None
        self.provider = provider
        self.cache_ttl = self.config.cache_default_ttl
        self.timeout = self.config.llm_timeout_seconds
        self._plans = {
            AnalysisKind.JOB_MATCH: AnalysisPlan(
                kind=AnalysisKind.JOB_MATCH,
                limit=self.config.rate_limit_job_match,
                build_prompt=build_job_match_prompt,
                validate=validate_match_result,
                result_type=MatchResult,
            ),
            AnalysisKind.RESUME_OPTIMIZE: AnalysisPlan(
                kind=AnalysisKind.RESUME_OPTIMIZE,
                limit=self.config.rate_limit_resume_optimize,
                build_prompt=build_resume_optimize_prompt,
                validate=validate_optimization_report,
                result_type=OptimizationReport,
            ),
        }

    async def analyze_job_match(self, resume_data: Any, job_description: Any, identity: str) -> MatchResult:
        """Score a resume against a job description."""
        outcome = await self.run(AnalysisKind.JOB_MATCH, resume_data, job_description, identity)
        return outcome.result

    async def optimize_resume(self, resume_text: Any, job_description: Any, identity: str) -> OptimizationReport:
        """Produce sectioned optimization advice for a resume."""
        outcome = await self.run(AnalysisKind.RESUME_OPTIMIZE, resume_text, job_description, identity)
        return outcome.result

    @staticmethod
    def _is_empty(value: Any) -> bool:
        if value is None:
            return True
        if isinstance(value, str):
            return not value.strip()
        if isinstance(value, (dict, list)):
            return not value
        return False

    def _check_input(self, profile: Any, target: Any) -> tuple[str, str]:
        if self._is_empty(profile):
            raise InvalidInputError("profile")
        if not isinstance(target, str) or self._is_empty(target):
            raise InvalidInputError("target_description")
        try:
            return serialize_profile(profile), target
        except (TypeError, ValueError) as exc:
            raise InvalidInputError("profile", f"Profile document is not serializable: {exc}") from exc

    async def _invoke_model(self, prompt: str) -> str:
        try:
            return await asyncio.wait_for(
                self.provider.generate(
                    prompt,
                    temperature=self.config.llm_temperature,
                    max_output_tokens=self.config.llm_max_output_tokens,
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as exc:
            raise UpstreamUnavailableError(
                self.provider.name, f"Model provider timed out after {self.timeout:g}s"
            ) from exc
        except (httpx.HTTPError, ProviderError) as exc:
            raise UpstreamUnavailableError(
                self.provider.name, f"Model provider request failed: {type(exc).__name__}"
            ) from exc

    async def run(self, kind: AnalysisKind, profile: Any, target: Any, identity: str) -> AnalysisOutcome:
        """Run one call through the pipeline.

        Raises:
            InvalidInputError: A request field is missing or empty
            RateLimitExceededError: The identity is over its limit
            UpstreamUnavailableError: The provider failed or timed out
            MalformedResponseError: No JSON could be extracted
            SchemaViolationError: The JSON failed validation
        """
        plan = self._plans[kind]
        started = time.perf_counter()
        stage = PipelineStage.START

        def log_context(**extra: Any) -> dict[str, Any]:
            return get_log_context(
                identity=identity[:32],
                kind=kind.value,
                provider=self.provider.name,
                stage=stage.value,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
                **extra,
            )

        try:
            profile_text, target_text = self._check_input(profile, target)

            admission = await self.rate_limiter.check(identity, plan.limit)
            if not admission.allowed:
                raise RateLimitExceededError(limit=admission.limit, retry_after=admission.retry_after)
            stage = PipelineStage.RATE_CHECKED

            cache_key = request_fingerprint(kind.value, profile_text, target_text)
            if self.cache is not None:
                cached = await self.cache.get(cache_key)
                if cached is not None:
                    result = plan.result_type.model_validate_json(cached)
                    stage = PipelineStage.DONE
                    logger.info("Analysis served from cache", extra=log_context(cache_hit=True))
                    return AnalysisOutcome(result=result, cache_hit=True, cache_key=cache_key)
            stage = PipelineStage.CACHE_CHECKED

            raw_text = await self._invoke_model(plan.build_prompt(profile_text, target_text))
            stage = PipelineStage.MODEL_INVOKED

            payload = parse_payload(raw_text)
            stage = PipelineStage.SANITIZED

            result = plan.validate(payload)
            stage = PipelineStage.VALIDATED

            if self.cache is not None:
                await self.cache.set(
                    cache_key,
                    result.model_dump_json(by_alias=True).encode("utf-8"),
                    self.cache_ttl,
                )
                stage = PipelineStage.CACHED

            stage = PipelineStage.DONE
            logger.info("Analysis completed", extra=log_context(cache_hit=False))
            return AnalysisOutcome(result=result, cache_hit=False, cache_key=cache_key)

        except GatewayException as exc:
            failed_after = stage
            stage = PipelineStage.FAILED
            logger.warning(
                f"Analysis failed after stage {failed_after.value}: {exc.error_code}: {exc.message}",
                extra=log_context(error=exc.error_code, failed_after=failed_after.value),
            )
            raise
