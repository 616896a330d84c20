"""Tests for RequestThrottle, driven by a fake clock (no real sleeping)."""
from manavault.utils.throttle import RequestThrottle


class FakeClock:
    def __init__(self):
        self.now = 100.0
        self.sleeps = []

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


def _throttle(interval=0.1):
    clock = FakeClock()
    return RequestThrottle(interval, clock=clock, sleep=clock.sleep), clock


def test_first_call_does_not_wait():
    throttle, clock = _throttle()
    assert throttle.wait() == 0.0
    assert clock.sleeps == []


def test_back_to_back_calls_are_spaced():
    throttle, clock = _throttle(0.1)
    throttle.wait()
    clock.now += 0.03
    slept = throttle.wait()
    assert round(slept, 6) == 0.07
    assert len(clock.sleeps) == 1


def test_no_wait_after_interval_elapsed():
    throttle, clock = _throttle(0.1)
    throttle.wait()
    clock.now += 0.5
    assert throttle.wait() == 0.0


def test_reset_forgets_previous_call():
    throttle, clock = _throttle(0.1)
    throttle.wait()
    throttle.reset()
    assert throttle.wait() == 0.0
    assert clock.sleeps == []


def test_zero_interval_never_sleeps():
    throttle, clock = _throttle(0)
    for _ in range(5):
        throttle.wait()
    assert clock.sleeps == []


def test_negative_interval_is_clamped():
    throttle, _ = _throttle(-1)
    assert throttle.min_interval == 0.0
