"""
Keep-alive pinger for hosting platforms that put idle apps to sleep.

Pings ``APP_URL`` every interval; failures are logged and the loop carries on.
"""

import asyncio

import httpx
import structlog

logger = structlog.get_logger(__name__)


async def ping_once(client: httpx.AsyncClient, url: str) -> int | None:
    """GET ``url`` once. Returns the status code, or None when the request failed."""
    try:
        response = await client.get(url)
    except httpx.HTTPError as e:
        logger.warning("keepalive_ping_failed", url=url, error=str(e))
        return None

    logger.info("keepalive_ping", url=url, status_code=response.status_code)
    return response.status_code


async def run_keepalive(
    url: str, interval_seconds: float, client: httpx.AsyncClient | None = None
) -> None:
    """Ping forever; cancel the task to stop."""
    logger.info("keepalive_started", url=url, interval_seconds=interval_seconds)
    async with client or httpx.AsyncClient(timeout=10.0) as session:
        while True:
            await asyncio.sleep(interval_seconds)
            await ping_once(session, url)
