"""
Tests for per-actor rate limiting (100 writes per 10 minutes by default)
"""

import pytest

from app.core.config import settings
from app.core.exceptions import RateLimited
from app.core.rate_limit import check_rate_limit


@pytest.mark.rate_limit
class TestRateLimiting:

    def test_rate_limit_config(self):
        assert settings.RATE_LIMIT == 100
        assert settings.RATE_LIMIT_WINDOW == 600  # 10 minutes

    @pytest.mark.asyncio
    async def test_counter_starts_with_window(self, fake_redis):
        await check_rate_limit(1)

        assert await fake_redis.get("rl:1") == b"1"
        assert 0 < await fake_redis.ttl("rl:1") <= settings.RATE_LIMIT_WINDOW

    @pytest.mark.asyncio
    async def test_threshold_raises(self, monkeypatch):
        monkeypatch.setattr(settings, "RATE_LIMIT", 2)

        await check_rate_limit(1)
        await check_rate_limit(1)
        with pytest.raises(RateLimited):
            await check_rate_limit(1)

    @pytest.mark.asyncio
    async def test_rate_limit_per_user(self, monkeypatch):
        monkeypatch.setattr(settings, "RATE_LIMIT", 1)

        await check_rate_limit(1)
        await check_rate_limit(2)
        with pytest.raises(RateLimited):
            await check_rate_limit(1)

    @pytest.mark.asyncio
    async def test_rate_limit_reset_after_window(self, fake_redis, monkeypatch):
        monkeypatch.setattr(settings, "RATE_LIMIT", 1)

        await check_rate_limit(1)
        await fake_redis.delete("rl:1")  # window elapsed
        await check_rate_limit(1)


@pytest.mark.rate_limit
@pytest.mark.integration
class TestRateLimitInteraction:

    @pytest.mark.asyncio
    async def test_write_endpoints_return_429(self, client, user, agent, auth_headers, monkeypatch):
        monkeypatch.setattr(settings, "RATE_LIMIT", 2)
        headers = auth_headers(user)

        for _ in range(2):
            response = await client.post(f"/direct-messages/{agent.id}", json={"content": "hi"}, headers=headers)
            assert response.status_code == 200

        response = await client.post(f"/direct-messages/{agent.id}", json={"content": "hi"}, headers=headers)
        assert response.status_code == 429

    @pytest.mark.asyncio
    async def test_reads_are_not_limited(self, client, user, agent, auth_headers, monkeypatch):
        monkeypatch.setattr(settings, "RATE_LIMIT", 1)
        headers = auth_headers(user)

        for _ in range(3):
            response = await client.get(f"/direct-messages/{agent.id}", headers=headers)
            assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_monitoring_endpoints_never_fail(self, client):
        for endpoint in ["/health", "/readiness", "/metrics", "/"]:
            response = await client.get(endpoint)
            assert response.status_code != 500


class TestRateLimitConfiguration:

    def test_rate_limit_sensible_defaults(self):

        assert settings.RATE_LIMIT >= 50
        assert settings.RATE_LIMIT <= 1000

        assert settings.RATE_LIMIT_WINDOW >= 60  # at least 1 minute
        assert settings.RATE_LIMIT_WINDOW <= 3600  # at most 1 hour
