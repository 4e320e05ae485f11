"""Fixed-window rate limiter over the key-value store.

One counter per (action, caller) stored at ``ratelimit:{action}:{caller}``
as ``{"count", "resetAt"}`` (epoch millis) with the window as TTL.

The limiter is advisory: two concurrent calls can read the same count and
both be admitted. It is a deterrent for low-volume write endpoints, not a
security boundary.
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timezone

from src.common.errors import RateLimited
from src.observability.metrics import get_metrics
from src.ratelimit.config import RatePolicy
from src.storage.kv import KeyValueStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of one limiter check.

    Attributes:
        allowed: Whether the call is admitted.
        count: Calls counted in the current window, including this one.
        retry_after_seconds: Seconds until the window resets (0 when allowed).
    """

    allowed: bool
    count: int
    retry_after_seconds: int = 0


def _epoch_ms(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


class RateLimiter:
    """Per-(action, caller) fixed-window counter."""

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    async def check(
        self,
        action_key: str,
        caller_id: str,
        max_requests: int,
        window_seconds: int,
        now: datetime | None = None,
    ) -> RateLimitDecision:
        """Count one call and decide whether it is admitted.

        The record is written on every call, so denied attempts also count
        toward the window.

        Args:
            action_key: Action being limited (e.g. ``signals``).
            caller_id: Caller identity (client IP).
            max_requests: Calls allowed per window.
            window_seconds: Window length.
            now: Current time (defaults to UTC now).

        Returns:
            RateLimitDecision for this call.
        """
        now_ms = _epoch_ms(now or datetime.now(timezone.utc))
        key = f"ratelimit:{action_key}:{caller_id}"
        record = (await self._store.get(key)) or {"count": 0, "resetAt": 0}

        if now_ms > record["resetAt"]:
            record = {"count": 1, "resetAt": now_ms + window_seconds * 1000}
        else:
            record["count"] += 1

        await self._store.put(key, record, ttl_seconds=window_seconds)

        if record["count"] > max_requests:
            retry_after = max(1, math.ceil((record["resetAt"] - now_ms) / 1000))
            return RateLimitDecision(
                allowed=False,
                count=record["count"],
                retry_after_seconds=retry_after,
            )
        return RateLimitDecision(allowed=True, count=record["count"])

    async def enforce(
        self,
        action_key: str,
        caller_id: str,
        policy: RatePolicy,
        now: datetime | None = None,
    ) -> RateLimitDecision:
        """Like ``check`` but raises RateLimited when the call is denied."""
        decision = await self.check(
            action_key,
            caller_id,
            policy.max_requests,
            policy.window_seconds,
            now=now,
        )
        if not decision.allowed:
            logger.info(
                "Rate limit hit for %s by %s (count=%d)",
                action_key,
                caller_id,
                decision.count,
            )
            get_metrics().record_rate_limited(action_key)
            raise RateLimited(
                f"Rate limited. Try again in {decision.retry_after_seconds}s",
                retry_after_seconds=decision.retry_after_seconds,
            )
        return decision
