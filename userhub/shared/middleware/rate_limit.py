# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import time
from collections import deque
from collections.abc import Callable
from functools import wraps
from threading import Lock

from flask import Flask, current_app, request

from userhub.shared.errors import RateLimitedError
from userhub.shared.logging import logger

DEFAULT_LIMIT = 10
DEFAULT_WINDOW_SECONDS = 60.0
EXTENSION_KEY = "userhub.rate_limiters"


class InMemoryRateLimiter:
    """Sliding-window limiter. Buckets that fall idle are evicted."""

    def __init__(self, limit: int, window_seconds: float) -> None:
        self._limit = max(1, int(limit))
        self._window = max(0.1, float(window_seconds))
        self._buckets: dict[str, deque[float]] = {}
        self._lock = Lock()
        self._last_sweep = 0.0

    def __len__(self) -> int:
        return len(self._buckets)

    def _prune(self, bucket: deque[float], now: float) -> None:
        while bucket and (now - bucket[0]) > self._window:
            bucket.popleft()

    def _sweep(self, now: float) -> None:
        for key in list(self._buckets):
            bucket = self._buckets[key]
            self._prune(bucket, now)
            if not bucket:
                del self._buckets[key]
        self._last_sweep = now

    def allow(self, key: str, now: float | None = None) -> bool:
        now = time.monotonic() if now is None else now
        with self._lock:
            if now - self._last_sweep > self._window:
                self._sweep(now)
            bucket = self._buckets.get(key)
            if bucket is None:
                bucket = self._buckets[key] = deque(maxlen=self._limit)
            self._prune(bucket, now)
            if len(bucket) >= self._limit:
                return False
            bucket.append(now)
            return True


class RateLimiterRegistry:
    """Per-application limiters, one per decorated endpoint."""

    def __init__(self) -> None:
        self._limiters: dict[str, InMemoryRateLimiter] = {}
        self._lock = Lock()

    def get(self, name: str, limit: int, window_seconds: float) -> InMemoryRateLimiter:
        with self._lock:
            limiter = self._limiters.get(name)
            if limiter is None:
                limiter = self._limiters[name] = InMemoryRateLimiter(limit, window_seconds)
            return limiter


def init_rate_limiting(app: Flask) -> RateLimiterRegistry:
    return app.extensions.setdefault(EXTENSION_KEY, RateLimiterRegistry())


def rate_limit(limit: int | None = None, window_seconds: float | None = None):
    limit = limit or DEFAULT_LIMIT
    window_seconds = window_seconds or DEFAULT_WINDOW_SECONDS

    def decorator(f: Callable):
        name = f"{f.__module__}.{f.__qualname__}"

        @wraps(f)
        def wrapper(*args, **kwargs):
            if not current_app.config.get("RATE_LIMIT_ENABLED", True):
                return f(*args, **kwargs)
            limiter = init_rate_limiting(current_app).get(name, limit, window_seconds)
            # Forwarded headers are honoured only through ProxyFix.
            key = request.remote_addr or "unknown"
            if not limiter.allow(key):
                logger.warning(f"rate_limit: rejected {request.method} {request.path}")
                raise RateLimitedError()
            return f(*args, **kwargs)

        return wrapper

    return decorator


__all__ = ["InMemoryRateLimiter", "RateLimiterRegistry", "init_rate_limiting", "rate_limit"]
