"""Fixed-window rate limiter for the generation endpoint.

One RateLimiter is built at process start and handed to the request handler.
Buckets live in a plain mapping keyed by an opaque client key:

    {"gen:203.0.113.7": Bucket(count=3, window_reset_at=1760841600000)}

Known limitations, acceptable for a low-traffic demo endpoint:
  - Buckets are never swept; the mapping grows until the process restarts.
  - Clients without a forwarded address all share the "anonymous" bucket.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Mapping, MutableMapping
from dataclasses import dataclass

logger = logging.getLogger(__name__)

ANONYMOUS = "anonymous"

Clock = Callable[[], int]


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


@dataclass
class Bucket:
    count: int
    window_reset_at: int  # epoch milliseconds


@dataclass(frozen=True)
class RateDecision:
    allowed: bool
    remaining: int
    reset_at: int  # epoch milliseconds


class RateLimiter:
    """Fixed-window counter per client key.

    Args:
        clock:   Returns the current time in epoch milliseconds. Tests pass a
                 fake clock to step through windows deterministically.
        buckets: Backing store for the counters. Defaults to a new dict.
    """

    def __init__(
        self,
        clock: Clock = _now_ms,
        buckets: MutableMapping[str, Bucket] | None = None,
    ) -> None:
        self._clock = clock
        self._buckets: MutableMapping[str, Bucket] = {} if buckets is None else buckets
        # check() is a read-modify-write on the shared mapping
        self._lock = threading.Lock()

    def now(self) -> int:
        return self._clock()

    def check(self, key: str, limit: int, window_ms: int) -> RateDecision:
        """Count one request against key and report whether it is allowed."""
        with self._lock:
            now = self._clock()
            bucket = self._buckets.get(key)

            if bucket is None or bucket.window_reset_at < now:
                bucket = Bucket(count=1, window_reset_at=now + window_ms)
                self._buckets[key] = bucket
                return RateDecision(True, limit - 1, bucket.window_reset_at)

            if bucket.count >= limit:
                logger.warning("rate limit hit key=%s reset_at=%d", key, bucket.window_reset_at)
                return RateDecision(False, 0, bucket.window_reset_at)

            bucket.count += 1
            return RateDecision(True, limit - bucket.count, bucket.window_reset_at)


def client_key(headers: Mapping[str, str]) -> str:
    """Derive the client identifier from proxy headers.

    First X-Forwarded-For hop, then X-Real-IP, then the shared "anonymous"
    bucket. Header lookup must be case-insensitive (Starlette Headers is).
    """
    forwarded = headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    real_ip = headers.get("x-real-ip")
    if real_ip and real_ip.strip():
        return real_ip.strip()
    return ANONYMOUS
