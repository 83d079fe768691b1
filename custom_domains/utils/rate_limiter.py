"""In-process sliding window rate limiting."""

import logging
import time
from collections import defaultdict, deque

logger = logging.getLogger(__name__)


class SlidingWindowRateLimiter:
    """
    Count requests per key over a sliding time window.

    State lives in this process only; each worker enforces its own limit.
    """

    def __init__(self) -> None:
        # Format: {key: deque of request timestamps}
        self._requests: dict[str, deque[float]] = defaultdict(deque)

    def hit(
        self,
        key: str,
        max_requests: int,
        window_seconds: int,
        now: float | None = None,
    ) -> tuple[bool, int]:
        """
        Record a request for ``key`` if it fits in the window.

        Returns:
            Tuple of (allowed, seconds until the oldest request leaves the window).
            Rejected requests are not recorded.
        """
        now = time.monotonic() if now is None else now
        requests = self._requests[key]

        cutoff = now - window_seconds
        while requests and requests[0] <= cutoff:
            requests.popleft()

        if len(requests) >= max_requests:
            retry_after = max(1, int(requests[0] + window_seconds - now + 0.999))
            logger.warning(f"Rate limit exceeded for {key}: {len(requests)} requests in window")
            return False, retry_after

        requests.append(now)
        return True, 0

    def reset(self) -> None:
        """Forget all recorded requests."""
        self._requests.clear()


domain_rate_limiter = SlidingWindowRateLimiter()
