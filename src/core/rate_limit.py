from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Final

import redis.asyncio as redis
from starlette.responses import Response

from src.core.config import settings
from src.core.context import TenantContext
from src.core.errors import RateLimitExceededError

logger = logging.getLogger(__name__)

RATE_LIMITS_PER_MINUTE: Final[dict[str, int]] = {
    "basic": 100,
    "pro": 500,
    "enterprise": 2000,
}
DEFAULT_RATE_LIMIT: Final[int] = 100


def compute_limit(tier: str) -> int:
    return RATE_LIMITS_PER_MINUTE.get((tier or "").strip().lower(), DEFAULT_RATE_LIMIT)


@dataclass(slots=True)
class RateLimitDecision:
    tier: str
    limit: int
    allowed: bool = True
    remaining: int | None = None
    reset_seconds: int | None = None

    def headers(self) -> dict[str, str]:
        headers = {"X-RateLimit-Limit": str(self.limit), "X-RateLimit-Tier": self.tier}
        if self.remaining is not None:
            headers["X-RateLimit-Remaining"] = str(self.remaining)
        if self.reset_seconds is not None:
            headers["X-RateLimit-Reset"] = str(self.reset_seconds)
        return headers


class TierRateLimiter:
    def __init__(self, mode: str | None = None, window_seconds: int | None = None) -> None:
        self._mode = mode
        self._window_seconds = window_seconds

    @property
    def mode(self) -> str:
        return self._mode or settings.rate_limit_mode

    @property
    def window_seconds(self) -> int:
        return self._window_seconds or settings.rate_limit_window_seconds

    async def check(self, tenant_id: int, tier: str) -> RateLimitDecision:
        decision = RateLimitDecision(tier=tier, limit=compute_limit(tier))
        if self.mode != "enforce":
            return decision

        now = time.time()
        window = int(now // self.window_seconds)
        redis_key = f"ratelimit:{tenant_id}:{window}"
        redis_client = redis.from_url(settings.redis_url, decode_responses=True)
        try:
            count = await redis_client.incr(redis_key)
            if count == 1:
                await redis_client.expire(redis_key, self.window_seconds)
        except (redis.RedisError, OSError):
            logger.warning("Rate limit backend unavailable for tenant=%s", tenant_id, exc_info=True)
            return decision
        finally:
            await redis_client.aclose()

        decision.remaining = max(decision.limit - count, 0)
        decision.reset_seconds = max(int((window + 1) * self.window_seconds - now), 1)
        decision.allowed = count <= decision.limit
        return decision

    async def apply(self, context: TenantContext, response: Response) -> RateLimitDecision:
        decision = await self.check(context.tenant_id, context.tenant.subscription_tier)
        headers = decision.headers()
        if not decision.allowed:
            logger.info("Rate limit exceeded for tenant=%s", context.tenant_id)
            headers["Retry-After"] = str(decision.reset_seconds)
            raise RateLimitExceededError(decision.limit, headers=headers)

        response.headers.update(headers)
        return decision


rate_limiter = TierRateLimiter()


def get_rate_limiter() -> TierRateLimiter:
    return rate_limiter
