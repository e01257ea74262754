# Fixed-window request counter per client key (usually the source address).
# In-process only: state is lost on restart and not shared between instances.

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Dict, Tuple
import asyncio
import time


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    remaining: int
    retry_after: float  # seconds until the current window resets


class RateLimiter:
    def __init__(
        self,
        *,
        limit: int = 10,
        window_seconds: float = 60.0,
        max_clients: int = 10_000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        self._windows: client key -> (window start, requests counted in that window)
        max_clients bounds the table; expired windows are dropped first when it fills up.
        """
        self._windows: Dict[str, Tuple[float, int]] = {}
        self._lock = asyncio.Lock()
        self._limit = max(1, limit)
        self._window = max(0.001, window_seconds)
        self._max_clients = max(1, max_clients)
        self._clock = clock

    async def hit(self, key: str) -> RateLimitDecision:
        # increment-and-compare under one lock so concurrent bursts are not undercounted
        async with self._lock:
            now = self._clock()
            start, count = self._windows.get(key, (now, 0))
            if now - start >= self._window:
                start, count = now, 0
            count += 1
            if key not in self._windows and len(self._windows) >= self._max_clients:
                self._prune(now)
            self._windows[key] = (start, count)
            retry_after = max(0.0, start + self._window - now)
            return RateLimitDecision(
                allowed=count <= self._limit,
                remaining=max(0, self._limit - count),
                retry_after=retry_after,
            )

    def _prune(self, now: float) -> None:
        expired = [k for k, (start, _) in self._windows.items() if now - start >= self._window]
        for k in expired:
            del self._windows[k]
        if len(self._windows) >= self._max_clients:
            # still full: drop the oldest window
            oldest = min(self._windows.items(), key=lambda kv: kv[1][0])[0]
            del self._windows[oldest]
