# automation/lotto/balance.py
"""
Deposit balance reader.

The my-page fills the amount asynchronously and the markup moves around
between site revisions, so the reader escalates:

  1. poll the balance display until it shows a non-zero number
  2. ask the page runtime (cmmUtil.getUserMndp) directly
  3. scan visible text for "<n>원" tokens and take the largest

Anything above the plausibility ceiling is treated as a false match (0):
overstating the balance is worse than failing the check.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, Optional

from rpa.polling import poll_until

from . import selectors as S
from .popups import dismiss_popups

log = logging.getLogger("lotto.balance")

DISPLAY_TIMEOUT = 5.0
DISPLAY_INTERVAL = 0.5
RUNTIME_TIMEOUT_MS = 5000
DEFAULT_CEILING = 10_000_000
MAX_DIGITS = 9

_AMOUNT_TOKEN = re.compile(r"(\d[\d,]*)\s*" + re.escape(S.CURRENCY_SUFFIX))


def digits(text) -> str:
    return re.sub(r"[^0-9]", "", str(text or ""))


def parse_amount(text) -> int:
    d = digits(text)
    return int(d) if d else 0


def clamp_balance(value: int, ceiling: int = DEFAULT_CEILING) -> int:
    if value < 0:
        return 0
    if value > ceiling:
        log.warning("implausible balance %s (ceiling %s), treating as 0", f"{value:,}", f"{ceiling:,}")
        return 0
    return value


def max_currency_amount(texts: Iterable[str], ceiling: int = DEFAULT_CEILING) -> int:
    """Largest plausible "<n>원" amount across the given text blobs (0 if none)."""
    best = 0
    for t in texts or []:
        for tok in _AMOUNT_TOKEN.findall(str(t)):
            d = digits(tok)
            if not d or len(d) > MAX_DIGITS:
                continue
            v = int(d)
            if v < ceiling and v > best:
                best = v
    return best


# ── strategies ───────────────────────────────────────────────────────────────
def _from_display(session) -> int:
    page = session.page

    def probe() -> int:
        return parse_amount(page.evaluate(S.BALANCE_DISPLAY_SCRIPT, S.BALANCE_DISPLAY))

    val = poll_until(
        probe,
        timeout=DISPLAY_TIMEOUT,
        interval=DISPLAY_INTERVAL,
        clock=session.clock,
        sleep=session.sleep,
        label="balance-display",
    )
    return int(val or 0)


def _from_runtime(session) -> int:
    try:
        return parse_amount(session.page.evaluate(S.USER_MNDP_SCRIPT, RUNTIME_TIMEOUT_MS))
    except Exception as e:
        log.warning("getUserMndp call failed: %s", e)
        return 0


def _from_text_scan(session, ceiling: int) -> int:
    try:
        texts = session.page.evaluate(S.CURRENCY_TEXT_SCRIPT, S.CURRENCY_SUFFIX) or []
    except Exception as e:
        log.warning("balance text scan failed: %s", e)
        return 0
    return max_currency_amount(texts, ceiling)


STRATEGIES = (
    ("display", lambda session, ceiling: _from_display(session)),
    ("runtime", lambda session, ceiling: _from_runtime(session)),
    ("text-scan", _from_text_scan),
)


def read_balance(session, ceiling: int = DEFAULT_CEILING) -> int:
    """Balance in KRW from the page currently open (the my-page)."""
    try:
        flag = session.page.evaluate(S.LOGGED_IN_FLAG_SCRIPT)
        log.info("reading balance at %s (isLoggedIn=%s)", session.page.url, flag)
    except Exception:
        pass

    for name, strategy in STRATEGIES:
        try:
            raw = int(strategy(session, ceiling) or 0)
        except Exception as e:
            log.warning("balance strategy %s failed: %s", name, e)
            continue
        value = clamp_balance(raw, ceiling)
        if value > 0:
            log.info("balance %s원 (via %s)", f"{value:,}", name)
            return value
        log.info("balance strategy %s found nothing", name)

    log.warning("balance could not be read, assuming 0")
    return 0


def check_balance(session, mypage_url: str, ceiling: int = DEFAULT_CEILING) -> int:
    session.goto(mypage_url, label="MyPage")
    dismiss_popups(session)
    return read_balance(session, ceiling)


def read_remaining_balance(session, mypage_url: str, ceiling: int = DEFAULT_CEILING) -> int:
    """Balance after the purchase: purchase page display first, my-page second."""
    value: Optional[int] = None
    try:
        page = session.page
        loc = page.locator(S.REMAINING_BALANCE_DISPLAY)
        if loc.count() > 0:
            value = clamp_balance(parse_amount(loc.first.inner_text()), ceiling)
    except Exception as e:
        log.debug("remaining balance display unreadable: %s", e)
    if value:
        log.info("remaining balance %s원 (purchase page)", f"{value:,}")
        return value
    try:
        return check_balance(session, mypage_url, ceiling)
    except Exception as e:
        log.warning("remaining balance unavailable: %s", e)
        return 0
