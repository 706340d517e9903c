# automation/lotto/popups.py
from __future__ import annotations

import logging

from . import selectors as S

log = logging.getLogger("lotto.popups")

MAX_ROUNDS = 5
CLICK_PAUSE = 0.5
ESCAPE_PAUSE = 0.3


def _click(el, selector: str) -> bool:
    try:
        el.click(timeout=1500)
        log.debug("popup control clicked: %s", selector)
        return True
    except Exception:
        pass
    try:
        el.evaluate("el => el.click()")
        log.debug("popup control clicked via script: %s", selector)
        return True
    except Exception as e:
        log.debug("popup control not clickable: %s (%s)", selector, e)
        return False


def _click_visible(session, selector: str, script_fallback: bool = True) -> int:
    page = session.page
    closed = 0
    try:
        loc = page.locator(selector)
        n = loc.count()
    except Exception:
        return 0
    for i in range(n):
        try:
            el = loc.nth(i)
            if not el.is_visible():
                continue
        except Exception:
            continue
        if script_fallback:
            ok = _click(el, selector)
        else:
            try:
                el.click(timeout=1500)
                ok = True
            except Exception:
                ok = False
        if ok:
            closed += 1
            session.pause(CLICK_PAUSE)
    return closed


def _press_escape(session):
    try:
        session.page.keyboard.press("Escape")
        session.pause(ESCAPE_PAUSE)
    except Exception:
        pass


def dismiss_popups(session, rounds: int = MAX_ROUNDS) -> int:
    """
    Close layer popups, "don't show today" notices and modal overlays.

    Never raises: an undismissed popup is at worst an obstruction the next step
    works around. Returns how many controls were clicked.
    """
    total = 0
    try:
        for rnd in range(1, rounds + 1):
            closed = 0
            for sel in S.POPUP_CLOSE_SELECTORS:
                closed += _click_visible(session, sel)

            _press_escape(session)

            # last resort: the dimmed backdrop
            for sel in S.OVERLAY_SELECTORS:
                closed += _click_visible(session, sel, script_fallback=False)

            total += closed
            if closed == 0:
                break
            log.debug("popup round %d closed %d", rnd, closed)
    except Exception as e:
        log.warning("popup dismissal error (ignored): %s", e)
    if total:
        log.info("closed %d popup control(s)", total)
    return total
