# automation/lotto/probes.py
"""
Ordered tri-state probes.

Login verification and result classification both ask "is there ANY evidence
of X?" against markup we do not control. Each probe votes POSITIVE, NEGATIVE
or INCONCLUSIVE; the first POSITIVE wins.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

log = logging.getLogger("lotto.probes")

MAX_VISIBLE_SCAN = 300


class Verdict(enum.Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    INCONCLUSIVE = "inconclusive"


@dataclass(frozen=True)
class Probe:
    name: str
    check: Callable[[], Verdict]

    def run(self) -> Verdict:
        try:
            v = self.check()
        except Exception as e:
            log.debug("probe %s raised %s", self.name, e)
            return Verdict.INCONCLUSIVE
        return v if isinstance(v, Verdict) else Verdict.INCONCLUSIVE


def first_positive(probes: Iterable[Probe], what: str = "") -> Optional[str]:
    """Name of the first probe that votes POSITIVE, or None."""
    for p in probes:
        v = p.run()
        log.debug("%s probe %s -> %s", what or "?", p.name, v.value)
        if v is Verdict.POSITIVE:
            log.info("%s confirmed by %s", what or "check", p.name)
            return p.name
    return None


# ── locator helpers shared by the probes ─────────────────────────────────────
# strict=True lets locator errors reach the caller (Probe.run turns them into
# INCONCLUSIVE); otherwise an error reads as "nothing visible".
def visible_count(locator, limit: int = MAX_VISIBLE_SCAN, strict: bool = False) -> int:
    try:
        n = locator.count()
    except Exception:
        if strict:
            raise
        return 0
    seen = 0
    for i in range(min(n, limit)):
        try:
            if locator.nth(i).is_visible():
                seen += 1
        except Exception:
            if strict:
                raise
            continue
    return seen


def first_visible(locator, limit: int = MAX_VISIBLE_SCAN, strict: bool = False):
    try:
        n = locator.count()
    except Exception:
        if strict:
            raise
        return None
    for i in range(min(n, limit)):
        try:
            el = locator.nth(i)
            if el.is_visible():
                return el
        except Exception:
            if strict:
                raise
            continue
    return None


def any_visible(locator, strict: bool = False) -> bool:
    return first_visible(locator, strict=strict) is not None
