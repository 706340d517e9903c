# rpa/polling.py
"""
Bounded polling used by every wait in the purchase flow.

The page never tells us when it is "ready", so each wait is a loop of
probe -> sleep until a deadline. Timing is injected (clock / sleep) so the
flows can be driven with a fake clock in tests.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional, TypeVar

T = TypeVar("T")

log = logging.getLogger("rpa.polling")


def poll_until(
    probe: Callable[[], T],
    *,
    timeout: Optional[float],
    interval: float,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
    label: str = "",
) -> Optional[T]:
    """
    Call ``probe`` until it returns something truthy.

    - timeout=None waits forever (used only for the waiting-room banner)
    - exceptions raised by the probe count as "not yet"
    - returns the last probe value (falsy on timeout)
    """
    deadline = None if timeout is None else clock() + timeout
    last: Optional[T] = None
    tries = 0
    while True:
        tries += 1
        try:
            last = probe()
        except Exception as e:
            log.debug("poll %s: probe raised %s", label or "?", e)
            last = None
        if last:
            return last
        if deadline is not None and clock() >= deadline:
            log.debug("poll %s: gave up after %d tries", label or "?", tries)
            return last
        sleep(interval)


def wait_while(
    condition: Callable[[], bool],
    *,
    timeout: Optional[float],
    interval: float,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
    label: str = "",
) -> bool:
    """Block while ``condition()`` holds. True when it cleared before the deadline."""
    cleared = poll_until(
        lambda: not condition(),
        timeout=timeout,
        interval=interval,
        clock=clock,
        sleep=sleep,
        label=label,
    )
    return bool(cleared)
