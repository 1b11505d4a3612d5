"""In-memory sliding window rate limiter, keyed by vault owner."""

from __future__ import annotations

import time
from collections import defaultdict, deque

from fastapi import Depends, HTTPException, Request, status

from vault_search.api.auth import verify_token
from vault_search.observability.logger import get_logger

logger = get_logger("rate_limiter")


class SlidingWindowRateLimiter:
    """Tracks request timestamps per key within a rolling window."""

    def __init__(self, window_seconds: float = 60.0) -> None:
        self._window_seconds = window_seconds
        self._requests: dict[str, deque[float]] = defaultdict(deque)

    def check(self, key: str, max_requests: int) -> bool:
        """Return True if request is allowed, False if rate-limited."""
        now = time.monotonic()
        cutoff = now - self._window_seconds

        timestamps = self._requests[key]
        while timestamps and timestamps[0] <= cutoff:
            timestamps.popleft()

        if len(timestamps) >= max_requests:
            return False

        timestamps.append(now)
        return True

    def retry_after(self, key: str) -> int:
        """Seconds until the oldest request in the window expires."""
        timestamps = self._requests.get(key)
        if not timestamps:
            return 0
        remaining = self._window_seconds - (time.monotonic() - timestamps[0])
        return max(1, int(remaining + 0.999))


async def rate_limit(
    request: Request,
    token_payload: dict = Depends(verify_token),
) -> dict:
    """FastAPI dependency: enforce the per-owner request budget.

    Chains verify_token internally. Returns the token payload for downstream use.
    """
    settings = request.app.state.settings
    limiter: SlidingWindowRateLimiter = request.app.state.rate_limiter
    owner_id = token_payload["sub"]

    if not limiter.check(owner_id, settings.rate_limit_requests_per_minute):
        logger.warning("rate_limited", owner_id=owner_id)
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Rate limit exceeded. Try again later.",
            headers={"Retry-After": str(limiter.retry_after(owner_id))},
        )

    return token_payload
