# automation/lotto/games.py
"""
Board selection (5 auto-picked games) and the buy step.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from . import selectors as S
from .config import FIXED_GAME_COUNT
from .errors import BoardSelectionIncomplete, PurchaseFailed
from .probes import first_visible, visible_count

log = logging.getLogger("lotto.games")

PICK_PAUSE = 0.5
BETWEEN_GAMES = 0.8
BUY_PAUSE = 1.5
SETTLE_AFTER_BUY = 3.0


def click_control(scope, selector: str) -> bool:
    """Real click first, DOM click() second."""
    try:
        loc = scope.locator(selector)
        if loc.count() > 0:
            try:
                loc.first.click(timeout=3000)
                return True
            except Exception:
                loc.first.evaluate("el => el.click()")
                return True
    except Exception as e:
        log.debug("click %s failed: %s", selector, e)
    try:
        return bool(scope.evaluate(S.SCRIPT_CLICK, selector))
    except Exception as e:
        log.debug("script click %s failed: %s", selector, e)
        return False


def select_single_game(session, scope) -> bool:
    picked = click_control(scope, S.AUTO_PICK)
    session.pause(PICK_PAUSE)
    confirmed = click_control(scope, S.CONFIRM_PICK)
    if not (picked and confirmed):
        log.warning("single game cycle incomplete (auto-pick=%s, confirm=%s)", picked, confirmed)
    return picked and confirmed


# ── verification ─────────────────────────────────────────────────────────────
def _count_list_items(scope) -> Optional[int]:
    n = visible_count(scope.locator(S.SELECTED_GAME_ITEMS))
    return n or None


def _count_by_script(scope) -> Optional[int]:
    n = scope.evaluate(S.SELECTED_GAME_COUNT_SCRIPT, S.SELECTED_GAME_ITEMS)
    return int(n) if n else None


def _count_number_tokens(scope) -> Optional[int]:
    n = visible_count(scope.locator(S.NUMBER_TOKENS))
    if n > 0 and n % S.NUMBERS_PER_GAME == 0:
        return n // S.NUMBERS_PER_GAME
    return None


def _count_from_text(scope) -> Optional[int]:
    text = scope.locator("body").inner_text()
    m = re.search(S.GAME_COUNT_PATTERN, text or "")
    return int(m.group(1)) if m else None


COUNT_STRATEGIES = (
    ("list-items", _count_list_items),
    ("script", _count_by_script),
    ("number-tokens", _count_number_tokens),
    ("page-text", _count_from_text),
)


def count_selected_games(scope) -> Optional[int]:
    """Number of boards in the selection list, or None if nothing could tell."""
    for name, strategy in COUNT_STRATEGIES:
        try:
            n = strategy(scope)
        except Exception as e:
            log.debug("game count via %s failed: %s", name, e)
            continue
        if n:
            log.info("selected games: %d (via %s)", n, name)
            return n
    return None


def select_games(session, scope, expected: int = FIXED_GAME_COUNT) -> int:
    """
    Auto-pick + confirm ``expected`` times, verify, top up the shortfall once.
    Raises BoardSelectionIncomplete unless exactly ``expected`` boards are in.
    """
    done = 0
    for i in range(1, expected + 1):
        if select_single_game(session, scope):
            done += 1
        log.info("game %d/%d selected", i, expected)
        session.pause(BETWEEN_GAMES)

    count = count_selected_games(scope)
    if count is None:
        log.warning("selected game count not verifiable, trusting %d completed cycles", done)
        count = done

    if count < expected:
        missing = expected - count
        log.warning("only %d/%d games confirmed, adding %d", count, expected, missing)
        added = 0
        for _ in range(missing):
            if select_single_game(session, scope):
                added += 1
            session.pause(BETWEEN_GAMES)
        recount = count_selected_games(scope)
        count = recount if recount is not None else count + added

    if count != expected:
        raise BoardSelectionIncomplete(expected, count)
    log.info("%d games confirmed", count)
    return count


# ── purchase ─────────────────────────────────────────────────────────────────
def _acknowledge_layer(scope) -> bool:
    try:
        if scope.evaluate(S.CONFIRM_LAYER_SCRIPT):
            log.info("purchase confirmed via closepopupLayerConfirm")
            return True
    except Exception as e:
        log.debug("closepopupLayerConfirm failed: %s", e)
    try:
        btn = first_visible(scope.locator(S.CONFIRM_LAYER_BUTTON))
        if btn is not None:
            btn.click(timeout=3000)
            log.info("purchase confirmed via layer button")
            return True
    except Exception as e:
        log.debug("confirm layer button failed: %s", e)
    return False


def execute_purchase(session, scope) -> None:
    # native confirm(): the session accepts dialogs, and the override covers
    # pages that call window.confirm synchronously from the click handler
    try:
        scope.evaluate(S.CONFIRM_OVERRIDE_SCRIPT)
    except Exception as e:
        log.debug("confirm override failed: %s", e)

    if not click_control(scope, S.BUY_BUTTON):
        raise PurchaseFailed("buy button (#btnBuy) could not be clicked")
    log.info("buy clicked")
    session.pause(BUY_PAUSE)

    if not _acknowledge_layer(scope):
        log.info("no in-page confirmation layer (native dialog assumed)")
    session.pause(SETTLE_AFTER_BUY)
