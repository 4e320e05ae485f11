"""
API rate limiting.

Two layers:
- A shared slowapi Limiter for a coarse global allowance per client IP.
  Enable via RATE_LIMIT_ENABLED=true.
- Per-action fixed windows on write endpoints (claim, file, compile,
  inscribe, post bounty), enforced through ``limit_action`` with the
  store-backed RateLimiter. These are always on.
"""

from fastapi import Depends, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from src.api.dependencies import get_rate_limit_config, get_rate_limiter
from src.config.settings import get_settings
from src.ratelimit.limiter import RateLimiter


def get_client_ip(request: Request) -> str:
    """Client IP, preferring proxy headers over the socket peer."""
    forwarded = request.headers.get("CF-Connecting-IP") or request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return get_remote_address(request) or "unknown"


def create_limiter() -> Limiter:
    """Create a configured Limiter instance."""
    settings = get_settings()
    storage_uri = "memory://" if settings.store_backend == "memory" else str(settings.redis_url)
    return Limiter(
        key_func=get_client_ip,
        default_limits=[settings.rate_limit_default],
        storage_uri=storage_uri,
    )


def limit_action(action: str):
    """
    Build a dependency that counts one call to ``action`` for the client IP.

    Args:
        action: RateLimitConfig field naming the policy (e.g. ``signals``)

    Raises:
        RateLimited: From the dependency, when the window is exhausted
    """

    async def dependency(
        request: Request,
        limiter: RateLimiter = Depends(get_rate_limiter),
    ) -> None:
        policy = getattr(get_rate_limit_config(), action)
        await limiter.enforce(action, get_client_ip(request), policy)

    return dependency
