"""Shared HTTP client for the model provider.

One pooled ``httpx.AsyncClient`` is opened in the application lifespan and
handed to the provider, so every model call reuses warm connections.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import httpx

from resumegate.app.core.config import Settings, settings as default_settings


def _build_timeout(config: Settings) -> httpx.Timeout:
    # read covers the whole model round trip; the gateway applies its own
    # overall bound on top of this
    return httpx.Timeout(
        connect=config.httpx_connect_timeout,
        read=config.httpx_read_timeout,
        write=config.httpx_write_timeout,
        pool=config.httpx_pool_timeout,
    )


def _build_limits(config: Settings) -> httpx.Limits:
    return httpx.Limits(
        max_connections=config.httpx_max_connections,
        max_keepalive_connections=config.httpx_max_keepalive_connections,
        keepalive_expiry=config.httpx_keepalive_expiry,
    )


@asynccontextmanager
async def init_http_client(
    config: Optional[Settings] = None,
) -> AsyncGenerator[httpx.AsyncClient, None]:
    """Open the shared client for the duration of the block.

    Args:
        config: Settings supplying pool limits and timeouts
    """
    config = config or default_settings
    client = httpx.AsyncClient(
        timeout=_build_timeout(config),
        limits=_build_limits(config),
    )

    try:
        yield client
    finally:
        await client.aclose()
