from __future__ import annotations

from conftest import FakeClock

from rpa.polling import poll_until, wait_while


def test_poll_returns_first_truthy_value(clock: FakeClock) -> None:
    values = iter([0, None, 5, 7])
    got = poll_until(lambda: next(values), timeout=10, interval=0.5, clock=clock, sleep=clock.sleep)
    assert got == 5
    assert clock.sleeps == [0.5, 0.5]


def test_poll_gives_up_at_deadline(clock: FakeClock) -> None:
    calls = []

    def probe():
        calls.append(clock())
        return False

    got = poll_until(probe, timeout=2, interval=0.5, clock=clock, sleep=clock.sleep)
    assert not got
    assert clock() == 2.0
    assert len(calls) == 5


def test_probe_exception_counts_as_not_yet(clock: FakeClock) -> None:
    state = {"n": 0}

    def probe():
        state["n"] += 1
        if state["n"] == 1:
            raise RuntimeError("not ready")
        return "ok"

    assert poll_until(probe, timeout=5, interval=1, clock=clock, sleep=clock.sleep) == "ok"
    assert clock.sleeps == [1]


def test_unbounded_wait_while_clears(clock: FakeClock) -> None:
    remaining = {"n": 3}

    def busy() -> bool:
        remaining["n"] -= 1
        return remaining["n"] >= 0

    assert wait_while(busy, timeout=None, interval=1, clock=clock, sleep=clock.sleep) is True
    assert clock.sleeps == [1, 1, 1]


def test_wait_while_times_out(clock: FakeClock) -> None:
    assert wait_while(lambda: True, timeout=3, interval=1, clock=clock, sleep=clock.sleep) is False
    assert clock() == 3
