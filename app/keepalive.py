"""Keep-alive pinger for hosts that idle the backend after inactivity

Run with `python -m app.keepalive`. Pings the health endpoint on an interval
and falls back to the warm-up endpoint when the health check fails.
"""

import asyncio
from typing import Optional

from dotenv import load_dotenv
import httpx
import structlog

from app.config import settings

logger = structlog.get_logger()


async def ping_backend(client: httpx.AsyncClient, base_url: str) -> bool:
    """
    Ping the backend once.

    Returns:
        True if either the health or the warm-up endpoint answered
    """
    base_url = base_url.rstrip("/")
    try:
        response = await client.get(f"{base_url}/api/health")
        response.raise_for_status()
        data = response.json()
        logger.info("keepalive_ping_ok", uptime=data.get("uptime"), status=data.get("status"))
        return True
    except (httpx.HTTPError, ValueError) as e:
        logger.warning("keepalive_ping_failed", url=base_url, error=str(e))

    try:
        response = await client.get(f"{base_url}/api/warmup")
        response.raise_for_status()
        logger.info("keepalive_warmup_ok")
        return True
    except httpx.HTTPError as e:
        logger.error("keepalive_warmup_failed", url=base_url, error=str(e))
        return False


async def run_keepalive(
    base_url: str,
    interval: float,
    iterations: Optional[int] = None,
    client: Optional[httpx.AsyncClient] = None
) -> int:
    """Ping forever, or `iterations` times, and return the number of successful pings"""
    owns_client = client is None
    client = client or httpx.AsyncClient(timeout=30.0)
    successes = 0
    count = 0
    try:
        while iterations is None or count < iterations:
            if await ping_backend(client, base_url):
                successes += 1
            count += 1
            if iterations is None or count < iterations:
                await asyncio.sleep(interval)
    finally:
        if owns_client:
            await client.aclose()
    return successes


def main():
    load_dotenv()
    logger.info(
        "keepalive_starting",
        backend_url=settings.backend_url,
        interval_seconds=settings.keepalive_interval_seconds
    )
    asyncio.run(run_keepalive(settings.backend_url, settings.keepalive_interval_seconds))


if __name__ == "__main__":
    main()
