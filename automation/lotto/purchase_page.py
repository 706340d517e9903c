# automation/lotto/purchase_page.py
"""
Find the Lotto 6/45 purchase surface.

Depending on the day it is on the page itself, one or two iframes deep
(ifrm_tab > ifrm_answer), or in a separate window. The auto-pick button
(#num2) is the marker that we are on the right document.
"""

from __future__ import annotations

import logging
from typing import Optional

from rpa.frames import NavigableContext, find_in_frames
from rpa.polling import wait_while

from . import selectors as S
from .errors import PurchaseLimitReached, PurchaseSurfaceNotFound
from .popups import dismiss_popups
from .selectors import text_xpath

log = logging.getLogger("lotto.purchase_page")

SEARCH_ROUNDS = 3
ROUND_BACKOFF = 2.0
PAGE_SETTLE = 3.0
QUEUE_POLL = 1.0
SEARCH_DEPTH = 2


# ── banners ──────────────────────────────────────────────────────────────────
def banner_visible(session, phrase: str) -> bool:
    sel = text_xpath(phrase)
    try:
        frames = list(session.page.frames)
    except Exception:
        frames = [session.page.main_frame]
    for fr in frames:
        try:
            loc = fr.locator(sel)
            if loc.count() > 0 and loc.first.is_visible():
                return True
        except Exception:
            continue
    return False


def wait_out_queue(session) -> None:
    """Block while the waiting-room banner is up. No upper bound: the queue has none."""
    if not banner_visible(session, S.QUEUE_BANNER):
        return
    log.info("waiting room detected, waiting for it to clear...")
    wait_while(
        lambda: banner_visible(session, S.QUEUE_BANNER),
        timeout=None,
        interval=QUEUE_POLL,
        clock=session.clock,
        sleep=session.sleep,
        label="queue",
    )
    log.info("waiting room cleared")
    session.pause(1.0)


def check_purchase_limit(session) -> None:
    if banner_visible(session, S.LIMIT_BANNER):
        log.warning("weekly purchase limit already reached")
        raise PurchaseLimitReached("weekly purchase limit (5,000원) already used")


# ── surface search ───────────────────────────────────────────────────────────
def _switch_window(session) -> bool:
    pages = session.pages()
    if len(pages) <= 1:
        return False
    log.info("%d windows open, looking for the purchase window", len(pages))
    for p in pages:
        try:
            if S.PURCHASE_URL_PATTERN in (p.url or "") or NavigableContext(p.main_frame).has(S.PURCHASE_MARKER):
                session.switch_to_page(p)
                return True
        except Exception:
            continue
    return False


def _probe_current(session) -> Optional[NavigableContext]:
    ctx = session.active or session.root()
    return ctx if ctx.has(S.PURCHASE_MARKER) else None


def _probe_known_frames(session) -> Optional[NavigableContext]:
    ctx = session.root()
    for name in S.PURCHASE_FRAME_PATH:
        ctx = ctx.child(name)
        if ctx is None:
            return None
        log.debug("entered %s", name)
        if ctx.has(S.PURCHASE_MARKER):
            return ctx
    return None


def _probe_all_frames(session) -> Optional[NavigableContext]:
    root = session.root()
    log.debug("exhaustive frame search (%d top-level frames)", len(root.children()))
    return find_in_frames(root, S.PURCHASE_MARKER, max_depth=SEARCH_DEPTH)


def _probe_script(session) -> Optional[NavigableContext]:
    root = session.root()
    try:
        if root.evaluate(S.MARKER_SCRIPT):
            return root
    except Exception:
        pass
    return None


def locate_purchase_surface(session, rounds: int = SEARCH_ROUNDS, backoff: float = ROUND_BACKOFF) -> NavigableContext:
    for attempt in range(1, rounds + 1):
        log.info("purchase surface search %d/%d", attempt, rounds)
        _switch_window(session)
        for probe in (_probe_current, _probe_known_frames, _probe_all_frames):
            ctx = probe(session)
            if ctx is not None:
                log.info("purchase surface found: %s", ctx.label)
                return ctx
        if attempt < rounds:
            session.pause(backoff)

    ctx = _probe_script(session)
    if ctx is not None:
        log.info("purchase surface confirmed by script check")
        return ctx
    raise PurchaseSurfaceNotFound("auto-pick control (#num2) not found in any window or frame")


def open_purchase_page(session, main_url: str, purchase_url: str) -> NavigableContext:
    session.goto(main_url, label="Main")
    dismiss_popups(session)
    session.goto(purchase_url, label="Lotto 6/45")
    dismiss_popups(session)
    session.pause(PAGE_SETTLE)

    wait_out_queue(session)
    check_purchase_limit(session)

    surface = locate_purchase_surface(session)
    session.use(surface)
    return surface
