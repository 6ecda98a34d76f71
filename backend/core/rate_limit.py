# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261017v1
# ---------------------------------------------------------------------------
"""
Fixed-window rate limiting.

Each identity key (client IP for logins, normalised email for comments) owns
a ``{count, reset_at}`` window.  On every attempt:

* no window, or the window has ended  -> start a new one at count = 1
* count already at the limit           -> reject, count is NOT incremented
* otherwise                            -> increment and allow

Two backends share that contract:

* :class:`FixedWindowRateLimiter` – process-local dict.  FastAPI runs sync
  handlers on a thread pool, so the read-modify-write is done under a lock.
  State is lost on restart and not shared between workers.
* :class:`DatabaseRateLimiter` – the same counters in the
  ``rate_limit_buckets`` table, so every server process sees them.

Routers obtain their limiter through the ``get_login_limiter`` /
``get_comment_limiter`` dependencies, which tests may override.
"""

import math
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from sqlalchemy.exc import IntegrityError

from core.config import settings


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    remaining: int
    retry_after: int  # seconds until the window resets; 0 when allowed


class RateLimiter:
    """Interface: ``check(key)`` consumes one attempt for *key*."""

    limit: int
    window_seconds: float

    def check(self, key: str) -> RateLimitDecision:
        raise NotImplementedError

    def reset(self) -> None:
        raise NotImplementedError


@dataclass
class _Window:
    count: int
    reset_at: float


class FixedWindowRateLimiter(RateLimiter):
    def __init__(self, limit: int, window_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: dict[str, _Window] = {}
        self._lock = threading.Lock()
        self._next_sweep = 0.0

    def tracked_keys(self) -> int:
        """Number of windows currently held in memory."""
        with self._lock:
            return len(self._windows)

    def _sweep(self, now: float) -> None:
        # At most once per window length; caller holds the lock
        if now < self._next_sweep:
            return
        expired = [k for k, w in self._windows.items() if now >= w.reset_at]
        for k in expired:
            del self._windows[k]
        self._next_sweep = now + self.window_seconds

    def check(self, key: str) -> RateLimitDecision:
        now = self._clock()
        with self._lock:
            self._sweep(now)
            window = self._windows.get(key)
            if window is None or now >= window.reset_at:
                self._windows[key] = _Window(count=1, reset_at=now + self.window_seconds)
                return RateLimitDecision(True, self.limit - 1, 0)

            if window.count >= self.limit:
                return RateLimitDecision(False, 0, max(1, math.ceil(window.reset_at - now)))

            window.count += 1
            return RateLimitDecision(True, self.limit - window.count, 0)

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()
            self._next_sweep = 0.0


def _utc_naive() -> datetime:
    # reset_at is stored without a zone
    return datetime.now(timezone.utc).replace(tzinfo=None)


class DatabaseRateLimiter(RateLimiter):
    """
    Counters persisted in ``rate_limit_buckets``.  The row is read with
    ``SELECT ... FOR UPDATE`` so concurrent workers serialise on the key
    (SQLite ignores the lock hint and serialises on the file instead).
    """

    def __init__(
        self,
        limit: int,
        window_seconds: float,
        session_factory=None,
        scope: str = "",
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.limit = limit
        self.window_seconds = window_seconds
        self.scope = scope
        self._session_factory = session_factory
        self._clock = clock or _utc_naive

    def _session(self):
        if self._session_factory is None:
            from database import SessionLocal

            self._session_factory = SessionLocal
        return self._session_factory()

    def check(self, key: str) -> RateLimitDecision:
        from models.rate_limit import RateLimitBucket

        bucket_key = f"{self.scope}:{key}" if self.scope else key
        now = self._clock()
        db = self._session()
        try:
            bucket = (
                db.query(RateLimitBucket)
                .filter(RateLimitBucket.key == bucket_key)
                .with_for_update()
                .first()
            )
            new_reset = now + timedelta(seconds=self.window_seconds)

            if bucket is None:
                db.add(RateLimitBucket(key=bucket_key, count=1, reset_at=new_reset))
                try:
                    db.commit()
                except IntegrityError:
                    # Another worker created the row first; count against it.
                    db.rollback()
                    return self.check(key)
                return RateLimitDecision(True, self.limit - 1, 0)

            if now >= bucket.reset_at:
                bucket.count = 1
                bucket.reset_at = new_reset
                db.commit()
                return RateLimitDecision(True, self.limit - 1, 0)

            if bucket.count >= self.limit:
                retry_after = max(1, math.ceil((bucket.reset_at - now).total_seconds()))
                db.rollback()
                return RateLimitDecision(False, 0, retry_after)

            bucket.count += 1
            remaining = self.limit - bucket.count
            db.commit()
            return RateLimitDecision(True, remaining, 0)
        finally:
            db.close()

    def reset(self) -> None:
        from models.rate_limit import RateLimitBucket

        db = self._session()
        try:
            q = db.query(RateLimitBucket)
            if self.scope:
                q = q.filter(RateLimitBucket.key.like(f"{self.scope}:%"))
            q.delete(synchronize_session=False)
            db.commit()
        finally:
            db.close()


def build_limiter(limit: int, window_seconds: float, scope: str, backend: Optional[str] = None) -> RateLimiter:
    backend = backend or settings.rate_limit_backend
    if backend == "database":
        return DatabaseRateLimiter(limit, window_seconds, scope=scope)
    if backend != "memory":
        raise ValueError(f"Unknown rate limit backend: {backend!r}")
    return FixedWindowRateLimiter(limit, window_seconds)


login_limiter = build_limiter(settings.login_rate_limit, settings.login_rate_window_seconds, scope="login")
comment_limiter = build_limiter(settings.comment_rate_limit, settings.comment_rate_window_seconds, scope="comment")


def get_login_limiter() -> RateLimiter:
    return login_limiter


def get_comment_limiter() -> RateLimiter:
    return comment_limiter
