"""Per-action fixed-window rate limiting.

Components:
- RateLimiter: Counter per (action, caller) over the key-value store
- RateLimitDecision: Outcome of a single check
- RateLimitConfig / RatePolicy: Configurable per-action allowances
"""

from src.ratelimit.config import RateLimitConfig, RatePolicy
from src.ratelimit.limiter import RateLimitDecision, RateLimiter

__all__ = [
    "RateLimitConfig",
    "RateLimitDecision",
    "RateLimiter",
    "RatePolicy",
]
