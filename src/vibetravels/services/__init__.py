from .rate_limiter import (
    GenerationRateLimiter,
    RateLimitExceeded,
    RateLimitResult,
    format_retry_message,
)

__all__ = [
    "GenerationRateLimiter",
    "RateLimitExceeded",
    "RateLimitResult",
    "format_retry_message",
]
