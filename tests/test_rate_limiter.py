import pytest

from services.rate_limiter import FixedWindowRateLimiter


class _Clock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_rejects_request_over_cap_within_window():
    clock = _Clock()
    limiter = FixedWindowRateLimiter(max_requests=3, window_seconds=60, clock=clock)

    assert [limiter.check("alice") for _ in range(3)] == [True, True, True]
    assert limiter.check("alice") is False
    clock.now += 59
    assert limiter.check("alice") is False


def test_window_resets_after_expiry():
    clock = _Clock()
    limiter = FixedWindowRateLimiter(max_requests=2, window_seconds=60, clock=clock)
    limiter.check("alice")
    limiter.check("alice")
    assert limiter.check("alice") is False

    clock.now += 60.5
    assert limiter.check("alice") is True
    assert limiter.remaining("alice") == 1


def test_window_boundary_is_still_the_same_window():
    clock = _Clock()
    limiter = FixedWindowRateLimiter(max_requests=1, window_seconds=60, clock=clock)
    assert limiter.check("alice") is True
    clock.now += 60
    assert limiter.check("alice") is False


def test_identities_are_counted_separately():
    limiter = FixedWindowRateLimiter(max_requests=1, window_seconds=60, clock=_Clock())
    assert limiter.check("alice") is True
    assert limiter.check("bob") is True
    assert limiter.check("alice") is False


def test_instances_do_not_share_state():
    clock = _Clock()
    first = FixedWindowRateLimiter(max_requests=1, clock=clock)
    second = FixedWindowRateLimiter(max_requests=1, clock=clock)
    assert first.check("alice") is True
    assert second.check("alice") is True


def test_defaults_match_documented_limits():
    limiter = FixedWindowRateLimiter(clock=_Clock())
    assert limiter.max_requests == 50
    assert limiter.window_seconds == 60
    assert sum(limiter.check("alice") for _ in range(51)) == 50


def test_invalid_configuration_is_rejected():
    with pytest.raises(ValueError):
        FixedWindowRateLimiter(max_requests=0)
    with pytest.raises(ValueError):
        FixedWindowRateLimiter(window_seconds=0)
