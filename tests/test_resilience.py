"""
Tests for the circuit breaker and the per-account rate limiter.
"""
from socialcal.posting.circuit_breaker import CLOSED, HALF_OPEN, OPEN, CircuitBreaker
from socialcal.posting.rate_limiter import PlatformRateLimiter, Quota


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class TestCircuitBreaker:
    def test_opens_after_threshold(self):
        """Test the circuit opens after the failure threshold."""
        breaker = CircuitBreaker(clock=FakeClock())
        for _ in range(4):
            breaker.record_failure("twitter")
        assert breaker.can_call("twitter")

        breaker.record_failure("twitter")
        assert breaker.status("twitter")["state"] == OPEN
        assert not breaker.can_call("twitter")

    def test_tiktok_opens_sooner_and_recovers_slower(self):
        """Test TikTok uses its own thresholds."""
        clock = FakeClock()
        breaker = CircuitBreaker(clock=clock)
        for _ in range(3):
            breaker.record_failure("tiktok")
        assert not breaker.can_call("tiktok")

        clock.advance(61)
        assert not breaker.can_call("tiktok")
        clock.advance(60)
        assert breaker.can_call("tiktok")

    def test_half_open_closes_after_successes(self):
        """Test a half-open circuit closes after enough successes."""
        clock = FakeClock()
        breaker = CircuitBreaker(clock=clock)
        for _ in range(5):
            breaker.record_failure("bluesky")

        clock.advance(60)
        assert breaker.can_call("bluesky")
        assert breaker.status("bluesky")["state"] == HALF_OPEN

        breaker.record_success("bluesky")
        assert breaker.status("bluesky")["state"] == HALF_OPEN
        breaker.record_success("bluesky")
        assert breaker.status("bluesky")["state"] == CLOSED

    def test_half_open_failure_reopens(self):
        """Test a failure while half-open reopens the circuit."""
        clock = FakeClock()
        breaker = CircuitBreaker(clock=clock)
        for _ in range(5):
            breaker.record_failure("bluesky")
        clock.advance(60)
        breaker.can_call("bluesky")

        breaker.record_failure("bluesky")
        assert breaker.status("bluesky")["state"] == OPEN
        assert breaker.retry_in("bluesky") == 60

    def test_success_resets_failure_count(self):
        """Test a success resets the failure count."""
        breaker = CircuitBreaker(clock=FakeClock())
        for _ in range(4):
            breaker.record_failure("twitter")
        breaker.record_success("twitter")
        breaker.record_failure("twitter")
        assert breaker.status("twitter")["failures"] == 1

    def test_platforms_are_independent(self):
        """Test circuits are tracked per platform."""
        breaker = CircuitBreaker(clock=FakeClock())
        for _ in range(5):
            breaker.record_failure("twitter")
        assert breaker.can_call("facebook")
        breaker.reset("twitter")
        assert breaker.can_call("twitter")


class TestPlatformRateLimiter:
    def test_blocks_when_quota_used(self):
        """Test requests are refused once the quota is used."""
        limiter = PlatformRateLimiter({"tiktok": Quota(2, 60)}, clock=FakeClock())
        limiter.record("tiktok", "acct")
        assert limiter.can_request("tiktok", "acct")
        limiter.record("tiktok", "acct")
        assert not limiter.can_request("tiktok", "acct")
        assert limiter.remaining("tiktok", "acct") == 0

    def test_window_resets(self):
        """Test the quota frees up after the window."""
        clock = FakeClock()
        limiter = PlatformRateLimiter({"tiktok": Quota(1, 60)}, clock=clock)
        limiter.record("tiktok", "acct")
        assert limiter.reset_in("tiktok", "acct") == 60

        clock.advance(60)
        assert limiter.can_request("tiktok", "acct")

    def test_accounts_are_independent(self):
        """Test quotas are tracked per account."""
        limiter = PlatformRateLimiter({"tiktok": Quota(1, 60)}, clock=FakeClock())
        limiter.record("tiktok", "a")
        assert limiter.can_request("tiktok", "b")

    def test_unknown_platform_is_unlimited(self):
        """Test platforms without a quota are never limited."""
        limiter = PlatformRateLimiter({}, clock=FakeClock())
        limiter.record("mastodon", "acct")
        assert limiter.can_request("mastodon", "acct")
