"""Per-user sliding-window rate limiting for AI plan generation.

The in-memory limiter keeps one timestamp window per user in process memory.
Counters reset when the process restarts and are not shared between
instances; use the Redis backend when running more than one instance.
"""

from __future__ import annotations

import math
import threading
import time
import uuid
from collections import deque
from collections.abc import Callable
from typing import Protocol

import redis
from loguru import logger

from gym_planner.config.settings import settings
from gym_planner.core.errors import RateLimitExceededError


class RateLimiter(Protocol):
    def check_and_record(self, user_id: str) -> None: ...


class SlidingWindowRateLimiter:
    """In-process sliding window limiter.

    Old entries are pruned lazily on each check. The full
    prune/count/append sequence runs under one lock. Windows of users with
    no request in the last window length are dropped once per window, so
    memory is bounded by recently active users.
    """

    def __init__(
        self,
        max_requests: int = 10,
        window_seconds: int = 3600,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if max_requests <= 0 or window_seconds <= 0:
            raise ValueError("max_requests and window_seconds must be positive")
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: dict[str, deque[float]] = {}
        self._last_sweep = clock()
        self._lock = threading.Lock()

    @property
    def tracked_users(self) -> int:
        """Number of users that currently hold a window."""
        with self._lock:
            return len(self._windows)

    def _sweep_idle_users(self, now: float, cutoff: float) -> None:
        # Called with the lock held; runs at most once per window length
        if now - self._last_sweep < self.window_seconds:
            return
        idle = [user_id for user_id, window in self._windows.items() if window[-1] <= cutoff]
        for user_id in idle:
            del self._windows[user_id]
        self._last_sweep = now
        if idle:
            logger.debug("Dropped idle rate limit windows", dropped=len(idle), remaining=len(self._windows))

    def check_and_record(self, user_id: str) -> None:
        """Admit the request and record it, or raise without recording.

        Raises:
            RateLimitExceededError: If the user already has max_requests in the window
        """
        with self._lock:
            now = self._clock()
            cutoff = now - self.window_seconds
            self._sweep_idle_users(now, cutoff)
            window = self._windows.get(user_id)

            if window is not None:
                while window and window[0] <= cutoff:
                    window.popleft()

                if len(window) >= self.max_requests:
                    retry_after = max(1, math.ceil(window[0] - cutoff))
                    logger.warning(
                        "Generation rate limit exceeded",
                        user_id=user_id,
                        requests_in_window=len(window),
                        retry_after_seconds=retry_after,
                    )
                    raise RateLimitExceededError(user_id, self.max_requests, self.window_seconds, retry_after)
            else:
                window = self._windows[user_id] = deque()

            window.append(now)
            logger.debug("Generation request admitted", user_id=user_id, requests_in_window=len(window))

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()
            self._last_sweep = self._clock()


class RedisSlidingWindowRateLimiter:
    """Redis-backed sliding window shared across all instances.

    One sorted set per user, scored by request time. Prune, add and count run
    in one MULTI/EXEC pipeline; a request that pushes the count over the
    limit removes its own entry again. Concurrent requests can briefly see
    that entry, so the backend may over-reject but never over-admits.
    """

    KEY_PREFIX = "gym_planner:ratelimit:generate:"

    def __init__(
        self,
        client: redis.Redis,
        max_requests: int = 10,
        window_seconds: int = 3600,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.redis = client
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock

    def check_and_record(self, user_id: str) -> None:
        now = self._clock()
        cutoff = now - self.window_seconds
        key = f"{self.KEY_PREFIX}{user_id}"
        member = f"{now}:{uuid.uuid4().hex}"

        pipe = self.redis.pipeline()
        pipe.zremrangebyscore(key, "-inf", cutoff)
        pipe.zadd(key, {member: now})
        pipe.zcard(key)
        pipe.zrange(key, 0, 0, withscores=True)
        pipe.expire(key, int(self.window_seconds))
        _, _, count, oldest, _ = pipe.execute()

        if count <= self.max_requests:
            logger.debug("Generation request admitted", user_id=user_id, requests_in_window=count)
            return

        self.redis.zrem(key, member)
        oldest_score = float(oldest[0][1]) if oldest else now
        retry_after = max(1, math.ceil(oldest_score - cutoff))
        logger.warning("Generation rate limit exceeded", user_id=user_id, retry_after_seconds=retry_after)
        raise RateLimitExceededError(user_id, self.max_requests, self.window_seconds, retry_after)


def build_rate_limiter() -> RateLimiter:
    """Create the limiter selected by RATE_LIMIT_BACKEND."""
    if settings.rate_limit_backend == "redis":
        logger.info("Using Redis rate limiter", redis_url=settings.redis_url)
        return RedisSlidingWindowRateLimiter(
            redis.from_url(settings.redis_url, decode_responses=True),
            max_requests=settings.rate_limit_max_requests,
            window_seconds=settings.rate_limit_window_seconds,
        )
    return SlidingWindowRateLimiter(
        max_requests=settings.rate_limit_max_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )
