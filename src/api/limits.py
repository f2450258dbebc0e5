"""Per-client request limits for the generation endpoints."""

import hashlib
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from fastapi import HTTPException, Request, status
from loguru import logger as log

from common import global_config

DEFAULT_LIMIT_NAME = "generation"


@dataclass
class LimitStatus:
    """Represents the state of a quota check."""

    limit_name: str
    limit_value: int
    used: int
    remaining: int
    reset_at: datetime

    @property
    def is_within_limit(self) -> bool:
        return self.used <= self.limit_value

    def to_error_detail(self) -> dict[str, str | int]:
        """Standardized error payload for limit breaches."""
        return {
            "code": "rate_limit_exceeded",
            "limit": self.limit_value,
            "used": self.used,
            "remaining": self.remaining,
            "limit_name": self.limit_name,
            "reset_at": self.reset_at.isoformat(),
            "message": "Rate limit exceeded. Wait until reset and try again.",
        }

    def to_headers(self) -> dict[str, str]:
        return {
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": self.reset_at.isoformat(),
        }


@dataclass
class _Window:
    started_at: datetime
    count: int = 0


def hash_client_ip(ip: str) -> str:
    """Hash a client address so raw IPs are never kept in memory or logs."""
    return hashlib.sha256(ip.encode("utf-8")).hexdigest()[:16]


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip
    return request.client.host if request.client else "unknown"


class RateLimiter:
    """Fixed-window counter per client key, kept in process memory."""

    def __init__(
        self,
        max_requests: int,
        window_seconds: int,
        limit_name: str = DEFAULT_LIMIT_NAME,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.max_requests = max_requests
        self.window = timedelta(seconds=window_seconds)
        self.limit_name = limit_name
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._windows: dict[str, _Window] = {}
        self._lock = threading.Lock()
        self._next_prune_at = self._clock() + self.window

    def consume(self, key: str) -> LimitStatus:
        """Count one request for ``key`` and report whether it is allowed."""
        now = self._clock()
        with self._lock:
            if now >= self._next_prune_at:
                self._prune_expired(now)
            window = self._windows.get(key)
            if window is None or now >= window.started_at + self.window:
                window = _Window(started_at=now)
                self._windows[key] = window
            window.count += 1
            used = window.count
            reset_at = window.started_at + self.window

        return LimitStatus(
            limit_name=self.limit_name,
            limit_value=self.max_requests,
            used=used,
            remaining=max(self.max_requests - used, 0),
            reset_at=reset_at,
        )

    def _prune_expired(self, now: datetime) -> None:
        """Drop finished windows; runs at most once per window length. Caller holds the lock."""
        expired = [
            key
            for key, window in self._windows.items()
            if now >= window.started_at + self.window
        ]
        for key in expired:
            del self._windows[key]
        self._next_prune_at = now + self.window
        if expired:
            log.debug(f"Dropped {len(expired)} expired {self.limit_name} windows")

    def tracked_clients(self) -> int:
        with self._lock:
            return len(self._windows)

    def peek(self, key: str) -> LimitStatus:
        """Current state for ``key`` without counting a request."""
        now = self._clock()
        with self._lock:
            window = self._windows.get(key)
            if window is None or now >= window.started_at + self.window:
                used, reset_at = 0, now + self.window
            else:
                used, reset_at = window.count, window.started_at + self.window

        return LimitStatus(
            limit_name=self.limit_name,
            limit_value=self.max_requests,
            used=used,
            remaining=max(self.max_requests - used, 0),
            reset_at=reset_at,
        )

    def reset(self, key: Optional[str] = None) -> None:
        with self._lock:
            if key is None:
                self._windows.clear()
            else:
                self._windows.pop(key, None)


rate_limiter = RateLimiter(
    max_requests=global_config.rate_limit.max_requests,
    window_seconds=global_config.rate_limit.window_seconds,
)


def enforce_rate_limit(request: Request) -> LimitStatus:
    """
    FastAPI dependency counting the request against the caller's limit.

    Raises:
        HTTPException: 429 Too Many Requests when the caller is over the limit.
    """
    client_key = hash_client_ip(client_ip(request))
    if not global_config.rate_limit.enabled:
        return rate_limiter.peek(client_key)

    status_snapshot = rate_limiter.consume(client_key)

    if not status_snapshot.is_within_limit:
        log.warning(
            f"Client {client_key} exceeded {status_snapshot.limit_name} limit: "
            f"{status_snapshot.used} of {status_snapshot.limit_value}"
        )
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=status_snapshot.to_error_detail(),
            headers=status_snapshot.to_headers(),
        )

    log.debug(
        f"Client {client_key} within {status_snapshot.limit_name} limit: "
        f"{status_snapshot.used}/{status_snapshot.limit_value}"
    )
    return status_snapshot


__all__ = [
    "enforce_rate_limit",
    "hash_client_ip",
    "LimitStatus",
    "RateLimiter",
    "rate_limiter",
    "DEFAULT_LIMIT_NAME",
]
