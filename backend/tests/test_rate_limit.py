"""Unit tests for the fixed-window rate limiter."""
import pytest

from portal.rate_limit import FixedWindowRateLimiter


class ManualClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_limit_is_enforced_per_key() -> None:
    clock = ManualClock()
    limiter = FixedWindowRateLimiter(5, 900, clock=clock)

    for _ in range(5):
        assert limiter.hit("10.0.0.1") == (True, 0.0)

    allowed, retry_after = limiter.hit("10.0.0.1")
    assert not allowed
    assert retry_after == pytest.approx(900)
    assert limiter.hit("10.0.0.2")[0]


def test_counter_resets_at_window_boundary() -> None:
    clock = ManualClock()
    limiter = FixedWindowRateLimiter(3, 3600, clock=clock)

    for _ in range(3):
        limiter.hit("ip")
    assert limiter.remaining("ip") == 0

    clock.now += 3599
    assert not limiter.hit("ip")[0]

    clock.now += 1
    assert limiter.remaining("ip") == 3
    assert limiter.hit("ip")[0]
    assert limiter.remaining("ip") == 2


def test_invalid_configuration() -> None:
    with pytest.raises(ValueError):
        FixedWindowRateLimiter(0, 60)
    with pytest.raises(ValueError):
        FixedWindowRateLimiter(5, 0)


def test_expired_windows_are_evicted() -> None:
    clock = ManualClock()
    limiter = FixedWindowRateLimiter(5, 900, clock=clock)

    for i in range(50):
        limiter.hit(f"203.0.113.{i}")
    assert len(limiter) == 50

    clock.now += 899
    limiter.hit("198.51.100.1")
    assert len(limiter) == 51

    clock.now += 1
    limiter.hit("198.51.100.2")
    assert len(limiter) == 2
    assert limiter.remaining("198.51.100.1") == 4
    assert limiter.remaining("203.0.113.0") == 5
