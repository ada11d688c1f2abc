"""Tests for the keep-alive pinger"""

import httpx
import pytest

from app.keepalive import ping_backend, run_keepalive


def mock_client(health_status, warmup_status=200):
    calls = []

    def handler(request):
        calls.append(request.url.path)
        if request.url.path == "/api/health":
            return httpx.Response(health_status, json={"status": "OK", "uptime": "1m 2s"})
        return httpx.Response(warmup_status, json={"status": "warm"})

    return httpx.AsyncClient(transport=httpx.MockTransport(handler)), calls


@pytest.mark.asyncio
async def test_healthy_backend():
    client, calls = mock_client(200)
    async with client:
        assert await ping_backend(client, "http://backend/") is True
    assert calls == ["/api/health"]


@pytest.mark.asyncio
async def test_falls_back_to_warmup():
    client, calls = mock_client(503)
    async with client:
        assert await ping_backend(client, "http://backend") is True
    assert calls == ["/api/health", "/api/warmup"]


@pytest.mark.asyncio
async def test_unreachable_backend():
    client, _ = mock_client(503, warmup_status=502)
    async with client:
        assert await ping_backend(client, "http://backend") is False


@pytest.mark.asyncio
async def test_run_keepalive_counts_successes():
    client, calls = mock_client(200)
    async with client:
        successes = await run_keepalive("http://backend", interval=0, iterations=3, client=client)
    assert successes == 3
    assert len(calls) == 3
