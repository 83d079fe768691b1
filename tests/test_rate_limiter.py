"""Tests for the sliding window rate limiter."""

from custom_domains.utils.rate_limiter import SlidingWindowRateLimiter


class TestSlidingWindowRateLimiter:
    def test_allows_up_to_limit(self):
        limiter = SlidingWindowRateLimiter()

        results = [limiter.hit("1.2.3.4:/check", 3, 60, now=100.0) for _ in range(3)]

        assert results == [(True, 0)] * 3

    def test_rejects_over_limit_with_retry_after(self):
        limiter = SlidingWindowRateLimiter()
        limiter.hit("ip", 2, 60, now=100.0)
        limiter.hit("ip", 2, 60, now=110.0)

        allowed, retry_after = limiter.hit("ip", 2, 60, now=130.0)

        assert allowed is False
        assert retry_after == 30

    def test_window_slides(self):
        limiter = SlidingWindowRateLimiter()
        limiter.hit("ip", 2, 60, now=100.0)
        limiter.hit("ip", 2, 60, now=110.0)

        assert limiter.hit("ip", 2, 60, now=160.0) == (True, 0)
        assert limiter.hit("ip", 2, 60, now=165.0)[0] is False

    def test_rejected_requests_do_not_extend_window(self):
        limiter = SlidingWindowRateLimiter()
        limiter.hit("ip", 1, 60, now=100.0)
        for t in (110.0, 120.0, 150.0):
            assert limiter.hit("ip", 1, 60, now=t)[0] is False

        assert limiter.hit("ip", 1, 60, now=160.0) == (True, 0)

    def test_keys_are_independent(self):
        limiter = SlidingWindowRateLimiter()
        limiter.hit("a", 1, 60, now=100.0)

        assert limiter.hit("b", 1, 60, now=100.0) == (True, 0)
        assert limiter.hit("a", 1, 60, now=100.0)[0] is False

    def test_reset(self):
        limiter = SlidingWindowRateLimiter()
        limiter.hit("ip", 1, 60, now=100.0)

        limiter.reset()

        assert limiter.hit("ip", 1, 60, now=101.0) == (True, 0)
