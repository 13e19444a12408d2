"""Tests for rpg_weaver.ratelimit — fixed-window counter and client keys."""

from rpg_weaver.ratelimit import ANONYMOUS, Bucket, RateLimiter, client_key


class TestRateLimiter:
    def test_allows_up_to_limit_then_blocks(self, fake_clock) -> None:
        limiter = RateLimiter(clock=fake_clock)
        results = [limiter.check("gen:a", 3, 60_000).allowed for _ in range(4)]
        assert results == [True, True, True, False]

    def test_remaining_counts_down(self, fake_clock) -> None:
        limiter = RateLimiter(clock=fake_clock)
        remaining = [limiter.check("gen:a", 3, 60_000).remaining for _ in range(4)]
        assert remaining == [2, 1, 0, 0]

    def test_reset_at_is_window_end(self, fake_clock) -> None:
        limiter = RateLimiter(clock=fake_clock)
        first = limiter.check("gen:a", 3, 60_000)
        fake_clock.advance(10_000)
        second = limiter.check("gen:a", 3, 60_000)
        assert first.reset_at == fake_clock.now - 10_000 + 60_000
        assert second.reset_at == first.reset_at

    def test_blocked_reports_existing_reset_at(self, fake_clock) -> None:
        limiter = RateLimiter(clock=fake_clock)
        first = limiter.check("gen:a", 1, 60_000)
        fake_clock.advance(5_000)
        blocked = limiter.check("gen:a", 1, 60_000)
        assert not blocked.allowed
        assert blocked.remaining == 0
        assert blocked.reset_at == first.reset_at

    def test_fresh_window_after_reset(self, fake_clock) -> None:
        limiter = RateLimiter(clock=fake_clock)
        for _ in range(4):
            last = limiter.check("gen:a", 3, 60_000)
        assert not last.allowed

        fake_clock.now = last.reset_at + 1
        fresh = limiter.check("gen:a", 3, 60_000)
        assert fresh.allowed
        assert fresh.remaining == 2
        assert fresh.reset_at == fake_clock.now + 60_000

    def test_window_still_open_exactly_at_reset(self, fake_clock) -> None:
        limiter = RateLimiter(clock=fake_clock)
        first = limiter.check("gen:a", 1, 60_000)
        fake_clock.now = first.reset_at
        assert not limiter.check("gen:a", 1, 60_000).allowed

    def test_keys_are_independent(self, fake_clock) -> None:
        limiter = RateLimiter(clock=fake_clock)
        assert limiter.check("gen:a", 1, 60_000).allowed
        assert not limiter.check("gen:a", 1, 60_000).allowed
        assert limiter.check("gen:b", 1, 60_000).allowed

    def test_uses_injected_storage(self, fake_clock) -> None:
        buckets: dict[str, Bucket] = {}
        limiter = RateLimiter(clock=fake_clock, buckets=buckets)
        limiter.check("gen:a", 5, 1_000)
        limiter.check("gen:a", 5, 1_000)
        assert buckets["gen:a"] == Bucket(count=2, window_reset_at=fake_clock.now + 1_000)

    def test_now_reads_clock(self, fake_clock) -> None:
        assert RateLimiter(clock=fake_clock).now() == fake_clock.now


class TestClientKey:
    def test_first_forwarded_hop(self) -> None:
        headers = {"x-forwarded-for": "203.0.113.7, 10.0.0.1"}
        assert client_key(headers) == "203.0.113.7"

    def test_real_ip_fallback(self) -> None:
        assert client_key({"x-real-ip": "198.51.100.2"}) == "198.51.100.2"

    def test_forwarded_wins_over_real_ip(self) -> None:
        headers = {"x-forwarded-for": "203.0.113.7", "x-real-ip": "198.51.100.2"}
        assert client_key(headers) == "203.0.113.7"

    def test_anonymous_when_no_headers(self) -> None:
        assert client_key({}) == ANONYMOUS

    def test_blank_forwarded_falls_through(self) -> None:
        assert client_key({"x-forwarded-for": " , 10.0.0.1"}) == ANONYMOUS
