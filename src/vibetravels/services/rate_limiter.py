"""Per-user fixed-window limiter for plan generation requests.

In-memory only: counts are lost on restart and are not shared between
processes.
"""

import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

logger = logging.getLogger(__name__)


@dataclass
class RateLimitResult:
    allowed: bool
    remaining: int
    reset_at: float


@dataclass
class _Window:
    count: int
    reset_at: float


class RateLimitExceeded(Exception):
    """Raised by :meth:`GenerationRateLimiter.enforce` when over the limit."""

    def __init__(self, user_id: str, retry_after: float):
        self.user_id = user_id
        self.retry_after = retry_after
        super().__init__(format_retry_message(retry_after))


def format_retry_message(seconds: float) -> str:
    """Human-readable "try again" message for a wait of ``seconds``."""
    minutes = max(1, math.ceil(seconds / 60))
    if minutes > 60:
        count, unit = math.ceil(minutes / 60), "hour"
    else:
        count, unit = minutes, "minute"
    wait = f"{count} {unit}" + ("s" if count != 1 else "")
    return f"Too many requests. You can create another plan in {wait}."


class GenerationRateLimiter:
    """Allow at most ``limit`` generations per user within ``window`` seconds."""

    def __init__(
        self,
        limit: int = 10,
        window: float = 3600.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize rate limiter.

        Args:
            limit: Requests allowed per window
            window: Window length in seconds
            clock: Monotonic time source (swappable in tests)
        """
        if limit < 1:
            raise ValueError(f"limit must be >= 1, got {limit}")
        if window <= 0:
            raise ValueError(f"window must be > 0, got {window}")

        self.limit = limit
        self.window = window
        self._clock = clock
        self._windows: Dict[str, _Window] = {}
        self._lock = threading.Lock()
        self._next_sweep = clock() + window

    def _sweep(self, now: float) -> int:
        """Drop expired windows. Caller holds the lock."""
        expired = [key for key, entry in self._windows.items() if entry.reset_at <= now]
        for key in expired:
            del self._windows[key]
        self._next_sweep = now + self.window
        return len(expired)

    def check(self, user_id: str) -> RateLimitResult:
        """Count one request for ``user_id`` and report whether it is allowed.

        Expired windows of all users are swept at most once per ``window``.
        """
        with self._lock:
            now = self._clock()
            if now >= self._next_sweep:
                swept = self._sweep(now)
                if swept:
                    logger.debug(f"Rate limiter: swept {swept} expired entries")

            entry = self._windows.get(user_id)

            if entry is None or entry.reset_at <= now:
                entry = _Window(count=1, reset_at=now + self.window)
                self._windows[user_id] = entry
                return RateLimitResult(True, self.limit - 1, entry.reset_at)

            if entry.count >= self.limit:
                return RateLimitResult(False, 0, entry.reset_at)

            entry.count += 1
            return RateLimitResult(True, self.limit - entry.count, entry.reset_at)

    def enforce(self, user_id: str) -> RateLimitResult:
        """Like :meth:`check`, but raise when the request is not allowed.

        Raises:
            RateLimitExceeded: With the seconds left in the current window
        """
        result = self.check(user_id)
        if not result.allowed:
            retry_after = max(0.0, result.reset_at - self._clock())
            logger.info(
                f"Rate limit exceeded for user {user_id}. "
                f"Reset in {math.ceil(retry_after / 60)} minutes."
            )
            raise RateLimitExceeded(user_id, retry_after)
        return result

    def status(self, user_id: str) -> Optional[RateLimitResult]:
        """Current state for ``user_id`` without counting a request."""
        with self._lock:
            entry = self._windows.get(user_id)
            if entry is None or entry.reset_at <= self._clock():
                return None
            remaining = max(0, self.limit - entry.count)
            return RateLimitResult(remaining > 0, remaining, entry.reset_at)

    def reset(self, user_id: str) -> None:
        with self._lock:
            self._windows.pop(user_id, None)
        logger.debug(f"Rate limit reset for user: {user_id}")

    def clear(self) -> None:
        with self._lock:
            size = len(self._windows)
            self._windows.clear()
        logger.debug(f"Cleared {size} rate limit entries")

    def cleanup(self) -> int:
        """Drop expired windows. Returns the number removed."""
        with self._lock:
            removed = self._sweep(self._clock())
        if removed:
            logger.debug(f"Rate limiter: cleaned up {removed} expired entries")
        return removed

    def stats(self) -> Dict[str, int]:
        with self._lock:
            now = self._clock()
            active = sum(1 for entry in self._windows.values() if entry.reset_at > now)
            total = len(self._windows)
        return {
            "total_entries": total,
            "active_entries": active,
            "expired_entries": total - active,
        }
