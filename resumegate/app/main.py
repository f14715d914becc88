import asyncio
import contextlib
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from resumegate.app.api.analysis import router as analysis_router
from resumegate.app.core.cache import CacheBackend, InMemoryCache
from resumegate.app.core.config import Settings, settings as default_settings
from resumegate.app.core.http_client import init_http_client
from resumegate.app.core.logging import get_logger, setup_logging
from resumegate.app.exceptions import GatewayException, RateLimitExceededError
from resumegate.app.middleware.rate_limit import InMemoryRateLimiter, create_rate_limiter
from resumegate.app.middleware.request_id import RequestIdMiddleware, get_request_id
from resumegate.app.middleware.request_size import RequestSizeLimitMiddleware
from resumegate.app.providers.base import BaseProvider
from resumegate.app.providers.factory import create_provider
from resumegate.app.services.analysis_gateway import AnalysisGateway


async def _sweep_expired(
    limiter: InMemoryRateLimiter,
    cache: CacheBackend,
    interval: float,
) -> None:
    """Periodically drop idle limiter windows and expired cache entries."""
    logger = get_logger(__name__)
    while True:
        await asyncio.sleep(interval)
        windows = await limiter.cleanup()
        entries = await cache.cleanup_expired()
        if windows or entries:
            logger.debug(f"Swept {windows} idle rate limit windows and {entries} expired cache entries")


def create_app(
    config: Optional[Settings] = None,
    provider: Optional[BaseProvider] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Settings to use instead of the environment-loaded defaults
        provider: Provider to use instead of the one built from settings

    Returns:
        Configured FastAPI application instance
    """
    config = config or default_settings
    setup_logging()
    logger = get_logger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Build the shared stores, provider and gateway; tear down on shutdown."""
        async with init_http_client(config) as http_client:
            rate_limiter = create_rate_limiter(config)
            cache = InMemoryCache(max_entries=config.cache_max_entries)
            model_provider = provider or create_provider(config, http_client)

            app.state.rate_limiter = rate_limiter
            app.state.result_cache = cache
            app.state.analysis_gateway = AnalysisGateway(
                rate_limiter=rate_limiter,
                cache=cache,
                provider=model_provider,
                config=config,
            )

            sweeper = asyncio.create_task(
                _sweep_expired(rate_limiter, cache, config.rate_limit_window_seconds)
            )
            logger.info(
                "Application startup complete",
                extra={
                    "provider": model_provider.name,
                    "cache_enabled": config.cache_enabled,
                    "identity_mode": config.rate_limit_identity_mode,
                },
            )
            try:
                yield
            finally:
                sweeper.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await sweeper
                logger.info("Application shutdown complete")

    app = FastAPI(
        title="Resume Analysis Gateway",
        description="Rate limited, cached and validated resume analysis backed by a generative model",
        version="1.0.0",
        lifespan=lifespan,
    )

    # Middleware order: last added = first executed
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Cache", "Retry-After"],
        max_age=600,
    )
    app.add_middleware(RequestSizeLimitMiddleware, max_body_size=config.max_request_body_bytes)
    app.add_middleware(RequestIdMiddleware)

    app.include_router(analysis_router)

    @app.get("/health")
    async def health(request: Request) -> dict[str, Any]:
        """Health check with store sizes and the configured provider."""
        state = request.app.state
        gateway: AnalysisGateway = state.analysis_gateway
        return {
            "status": "ok",
            "components": {
                "provider": {"name": gateway.provider.name, "model": gateway.provider.model},
                "cache": {
                    "enabled": gateway.cache is not None,
                    "entries": len(state.result_cache),
                    "max_entries": state.result_cache.max_entries,
                },
                "rate_limiter": {
                    "tracked_identities": len(state.rate_limiter),
                    "max_tracked_identities": state.rate_limiter.max_tracked_identities,
                },
            },
        }

    @app.exception_handler(GatewayException)
    async def gateway_exception_handler(request: Request, exc: GatewayException) -> JSONResponse:
        """Render pipeline failures with their kind and status code."""
        headers = {}
        if isinstance(exc, RateLimitExceededError) and exc.retry_after:
            headers["Retry-After"] = str(exc.retry_after)
        return JSONResponse(status_code=exc.status_code, content=exc.to_response(), headers=headers)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """Malformed request bodies are invalid input, not server errors."""
        return JSONResponse(
            status_code=400,
            content={"error": "invalid_input", "message": "Invalid request body"},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Global handler for unhandled exceptions.

        Never returns a traceback to the client; details go to the server log.
        """
        request_id = get_request_id(request)
        logger.exception(
            f"Unhandled exception [request_id={request_id}]",
            extra={"request_id": request_id, "exception_type": type(exc).__name__},
        )

        content = {
            "error": "internal_error",
            "message": str(exc) if config.debug else "Internal server error",
            "request_id": request_id,
        }
        return JSONResponse(status_code=500, content=content)

    return app


# Create the application instance
app = create_app()
