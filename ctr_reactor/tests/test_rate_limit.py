from __future__ import annotations

from ctr_reactor.shared.middleware.rate_limit import InMemoryRateLimiter


class _Clock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_limit_applies_per_key_within_window() -> None:
    clock = _Clock()
    limiter = InMemoryRateLimiter(2, 60.0, clock=clock)

    assert limiter.allow("a")
    assert limiter.allow("a")
    assert not limiter.allow("a")
    assert limiter.allow("b")

    clock.now += 61
    assert limiter.allow("a")


def test_idle_buckets_are_swept_after_a_window() -> None:
    clock = _Clock()
    limiter = InMemoryRateLimiter(3, 10.0, clock=clock)

    for i in range(50):
        limiter.allow(f"10.0.0.{i}")
    assert len(limiter) == 50

    clock.now += 11
    limiter.allow("fresh")

    assert len(limiter) == 1
