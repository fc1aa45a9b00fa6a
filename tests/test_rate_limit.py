from __future__ import annotations

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from starlette.responses import Response

from src.core import rate_limit
from src.core.context import TenantContext, TenantSnapshot
from src.core.errors import RateLimitExceededError
from src.core.rate_limit import TierRateLimiter, compute_limit


class _FakeRedis:
    def __init__(self, *, fail: bool = False) -> None:
        self.counts: dict[str, int] = {}
        self.expirations: list[tuple[str, int]] = []
        self.closed = False
        self.fail = fail

    async def incr(self, key: str) -> int:
        if self.fail:
            raise RedisConnectionError("connection refused")
        self.counts[key] = self.counts.get(key, 0) + 1
        return self.counts[key]

    async def expire(self, key: str, seconds: int) -> bool:
        self.expirations.append((key, seconds))
        return True

    async def aclose(self) -> None:
        self.closed = True


def _ctx(tier: str = "basic", tenant_id: int = 1) -> TenantContext:
    tenant = TenantSnapshot(
        id=tenant_id,
        name="Acme",
        slug="acme",
        subscription_tier=tier,
        max_hubs=5,
        max_cameras=50,
        status="active",
    )
    return TenantContext(tenant_id=tenant_id, tenant=tenant)


@pytest.fixture
def fake_redis(monkeypatch: pytest.MonkeyPatch) -> _FakeRedis:
    client = _FakeRedis()
    monkeypatch.setattr(rate_limit.redis, "from_url", lambda *args, **kwargs: client)
    monkeypatch.setattr(rate_limit.time, "time", lambda: 1_800_000_010.0)
    return client


def test_compute_limit_per_tier() -> None:
    assert compute_limit("basic") == 100
    assert compute_limit("pro") == 500
    assert compute_limit("Enterprise") == 2000
    assert compute_limit("unknown") == 100


@pytest.mark.asyncio
async def test_enforce_mode_counts_per_window(fake_redis: _FakeRedis) -> None:
    limiter = TierRateLimiter(mode="enforce", window_seconds=60)

    decisions = [await limiter.check(1, "basic") for _ in range(101)]

    assert all(decision.allowed for decision in decisions[:100])
    assert decisions[99].remaining == 0
    assert decisions[100].allowed is False
    assert len(fake_redis.expirations) == 1
    assert fake_redis.expirations[0][1] == 60
    assert fake_redis.expirations[0][0].startswith("ratelimit:1:")
    assert fake_redis.closed is True


@pytest.mark.asyncio
async def test_enforce_mode_keeps_tenants_apart(fake_redis: _FakeRedis) -> None:
    limiter = TierRateLimiter(mode="enforce", window_seconds=60)

    await limiter.check(1, "basic")
    decision = await limiter.check(2, "basic")

    assert decision.remaining == 99
    assert len(fake_redis.counts) == 2


@pytest.mark.asyncio
async def test_apply_sets_headers_when_allowed(fake_redis: _FakeRedis) -> None:
    response = Response()

    await TierRateLimiter(mode="enforce", window_seconds=60).apply(_ctx("pro"), response)

    assert response.headers["X-RateLimit-Limit"] == "500"
    assert response.headers["X-RateLimit-Tier"] == "pro"
    assert response.headers["X-RateLimit-Remaining"] == "499"
    assert response.headers["X-RateLimit-Reset"] == "50"


@pytest.mark.asyncio
async def test_apply_rejects_over_limit(fake_redis: _FakeRedis) -> None:
    limiter = TierRateLimiter(mode="enforce", window_seconds=60)
    context = _ctx("basic")
    for _ in range(100):
        await limiter.apply(context, Response())

    with pytest.raises(RateLimitExceededError) as exc:
        await limiter.apply(context, Response())

    assert exc.value.status_code == 429
    assert exc.value.headers["X-RateLimit-Remaining"] == "0"
    assert "Retry-After" in exc.value.headers
    assert exc.value.to_payload()["error"] == "Rate limit exceeded"


@pytest.mark.asyncio
async def test_advisory_mode_never_touches_redis(monkeypatch: pytest.MonkeyPatch) -> None:
    def _unexpected(*args, **kwargs):  # noqa: ANN002, ANN003, ANN202
        raise AssertionError("redis should not be used in advisory mode")

    monkeypatch.setattr(rate_limit.redis, "from_url", _unexpected)
    response = Response()

    decision = await TierRateLimiter(mode="advisory").apply(_ctx("enterprise"), response)

    assert decision.allowed is True
    assert response.headers["X-RateLimit-Limit"] == "2000"
    assert response.headers["X-RateLimit-Tier"] == "enterprise"
    assert "X-RateLimit-Remaining" not in response.headers


@pytest.mark.asyncio
async def test_redis_failure_fails_open(monkeypatch: pytest.MonkeyPatch) -> None:
    client = _FakeRedis(fail=True)
    monkeypatch.setattr(rate_limit.redis, "from_url", lambda *args, **kwargs: client)

    decision = await TierRateLimiter(mode="enforce").check(1, "basic")

    assert decision.allowed is True
    assert decision.remaining is None
    assert client.closed is True


def test_mode_defaults_to_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(rate_limit.settings, "rate_limit_mode", "advisory")
    monkeypatch.setattr(rate_limit.settings, "rate_limit_window_seconds", 30)

    limiter = TierRateLimiter()

    assert limiter.mode == "advisory"
    assert limiter.window_seconds == 30
