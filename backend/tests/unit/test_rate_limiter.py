"""
Unit Tests for Rate Limiter Service

Tests fixed-window admission, window expiry and the proxy-aware client
address lookup.
"""

from unittest.mock import MagicMock, patch

import pytest

from app.config import settings
from app.services.rate_limiter import (
    FixedWindowRateLimiter,
    InMemoryCounterStore,
    get_client_ip,
)


class FakeClock:
    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def limiter(clock):
    return FixedWindowRateLimiter(max_requests=5, window_seconds=3600, clock=clock)


class TestFixedWindowRateLimiter:
    def test_admits_up_to_limit_then_rejects(self, limiter):
        decisions = [limiter.check("203.0.113.7") for _ in range(6)]

        assert [d.allowed for d in decisions] == [True] * 5 + [False]
        assert [d.remaining for d in decisions[:5]] == [4, 3, 2, 1, 0]
        assert decisions[5].remaining == 0

    def test_rejection_reports_retry_after(self, limiter, clock):
        for _ in range(5):
            limiter.check("203.0.113.7")
        clock.advance(600)

        decision = limiter.check("203.0.113.7")

        assert not decision.allowed
        assert decision.retry_after == 3000
        assert decision.reset_at == 1_000_000.0 + 3600

    def test_retry_after_is_at_least_one_second(self, limiter, clock):
        for _ in range(5):
            limiter.check("203.0.113.7")
        clock.advance(3599.9)

        assert limiter.check("203.0.113.7").retry_after == 1

    def test_rejected_requests_do_not_extend_window(self, limiter, clock):
        for _ in range(5):
            limiter.check("203.0.113.7")
        for _ in range(3):
            limiter.check("203.0.113.7")

        clock.advance(3600)

        decision = limiter.check("203.0.113.7")
        assert decision.allowed
        assert decision.remaining == 4

    def test_window_expires_exactly_at_reset(self, limiter, clock):
        limiter.check("203.0.113.7")
        clock.advance(3600)

        decision = limiter.check("203.0.113.7")

        assert decision.allowed
        assert decision.reset_at == clock.now + 3600

    def test_keys_are_independent(self, limiter):
        for _ in range(5):
            limiter.check("203.0.113.7")

        assert not limiter.check("203.0.113.7").allowed
        assert limiter.check("198.51.100.2").allowed

    def test_peek_does_not_count(self, limiter):
        limiter.check("203.0.113.7")

        first = limiter.peek("203.0.113.7")
        second = limiter.peek("203.0.113.7")

        assert first.remaining == second.remaining == 4
        assert limiter.check("203.0.113.7").remaining == 3

    def test_peek_unknown_key_reports_full_allowance(self, limiter):
        decision = limiter.peek("203.0.113.7")

        assert decision.allowed
        assert decision.remaining == 5
        assert decision.reset_at == 0

    def test_expired_window_is_dropped_from_store(self, clock):
        store = InMemoryCounterStore()
        limiter = FixedWindowRateLimiter(5, 60, store=store, clock=clock)
        limiter.check("203.0.113.7")
        clock.advance(61)

        limiter.peek("203.0.113.7")

        assert "203.0.113.7" not in store.windows


class TestGetClientIp:
    @pytest.fixture(autouse=True)
    def trust_proxy_headers(self):
        with patch.object(settings, "TRUST_PROXY_HEADERS", True):
            yield

    @staticmethod
    def _request(headers=None, host="10.0.0.1"):
        request = MagicMock()
        request.headers = headers or {}
        request.client = MagicMock(host=host) if host else None
        return request

    def test_uses_first_forwarded_for_entry(self):
        request = self._request({"x-forwarded-for": "203.0.113.7, 10.0.0.2"})
        assert get_client_ip(request) == "203.0.113.7"

    def test_falls_back_to_real_ip(self):
        request = self._request({"x-real-ip": "198.51.100.2"})
        assert get_client_ip(request) == "198.51.100.2"

    def test_falls_back_to_peer_address(self):
        assert get_client_ip(self._request()) == "10.0.0.1"

    def test_unknown_without_any_source(self):
        assert get_client_ip(self._request(host=None)) == "unknown"


class TestGetClientIpUntrusted:
    def test_ignores_proxy_headers_by_default(self):
        request = TestGetClientIp._request(
            {"x-forwarded-for": "203.0.113.7", "x-real-ip": "198.51.100.2"}
        )

        assert get_client_ip(request) == "10.0.0.1"
