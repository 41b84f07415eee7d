"""
Rate limiter tests with a controllable clock
"""
import pytest

from bloodlink.core.rate_limit import RateLimiter


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


def test_allows_up_to_max_attempts(clock):
    limiter = RateLimiter(max_attempts=3, window_seconds=60, clock=clock)

    assert [limiter.is_rate_limited("k") for _ in range(4)] == [False, False, False, True]


def test_keys_are_independent(clock):
    limiter = RateLimiter(max_attempts=1, window_seconds=60, clock=clock)

    assert limiter.is_rate_limited("a") is False
    assert limiter.is_rate_limited("a") is True
    assert limiter.is_rate_limited("b") is False


def test_window_expiry_resets_count(clock):
    limiter = RateLimiter(max_attempts=2, window_seconds=60, clock=clock)
    limiter.is_rate_limited("k")
    limiter.is_rate_limited("k")
    assert limiter.is_rate_limited("k") is True

    clock.advance(61)

    assert limiter.is_rate_limited("k") is False
    assert limiter.remaining_attempts("k") == 1


def test_window_is_not_extended_by_attempts(clock):
    limiter = RateLimiter(max_attempts=1, window_seconds=60, clock=clock)
    limiter.is_rate_limited("k")
    clock.advance(30)
    assert limiter.is_rate_limited("k") is True

    clock.advance(31)

    assert limiter.is_rate_limited("k") is False


def test_remaining_attempts(clock):
    limiter = RateLimiter(max_attempts=3, window_seconds=60, clock=clock)
    assert limiter.remaining_attempts("k") == 3

    limiter.is_rate_limited("k")
    assert limiter.remaining_attempts("k") == 2

    for _ in range(5):
        limiter.is_rate_limited("k")
    assert limiter.remaining_attempts("k") == 0


def test_reset_and_clear(clock):
    limiter = RateLimiter(max_attempts=1, window_seconds=60, clock=clock)
    limiter.is_rate_limited("a")
    limiter.is_rate_limited("b")

    limiter.reset("a")
    assert limiter.is_rate_limited("a") is False
    assert limiter.is_rate_limited("b") is True

    limiter.clear()
    assert limiter.is_rate_limited("b") is False


def test_rejects_zero_attempts():
    with pytest.raises(ValueError):
        RateLimiter(max_attempts=0)


def test_expired_keys_are_dropped(clock):
    limiter = RateLimiter(max_attempts=2, window_seconds=60, clock=clock)
    for user in range(100):
        limiter.is_rate_limited(f"user-{user}")
    assert len(limiter._attempts) == 100

    clock.advance(61)
    limiter.is_rate_limited("late")

    assert list(limiter._attempts) == ["late"]
