# automation/lotto_bot.py
"""
Unattended Lotto 6/45 purchase run on dhlottery.co.kr.

login -> balance gate -> purchase page -> 5 auto-picked games -> buy ->
classify -> notify. One browser session per run, released on every exit
path. Exit code 0 on success or when this week's limit is already used,
1 on anything else.

    python -m automation.lotto_bot            # full run
    python -m automation.lotto_bot check-config
    python -m automation.lotto_bot --headed balance
"""

from __future__ import annotations

import enum
import logging
import sys
from typing import Callable, List, Optional

from rpa.browser import BrowserError, BrowserSession

from automation.lotto.balance import check_balance, read_remaining_balance
from automation.lotto.config import FIXED_GAME_COUNT, LottoConfig
from automation.lotto.errors import (
    AuthenticationFailed,
    BalanceInsufficient,
    BoardSelectionIncomplete,
    ConfigurationInvalid,
    LottoError,
    PurchaseFailed,
    PurchaseLimitReached,
    PurchaseOutcomeUnclassified,
)
from automation.lotto.games import execute_purchase, select_games
from automation.lotto.login import login
from automation.lotto.purchase_page import open_purchase_page
from automation.lotto.result import PurchaseOutcome, classify_result
from notifications import TelegramNotifier

log = logging.getLogger("lotto.bot")

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


# ──────────────────────────────────────────────────────────────────────────────
class Stage(enum.Enum):
    INIT = "init"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"
    BALANCE_CHECKING = "balance_checking"
    BALANCE_INSUFFICIENT = "balance_insufficient"
    BALANCE_SUFFICIENT = "balance_sufficient"
    NAVIGATING = "navigating"
    PURCHASE_SURFACE_READY = "purchase_surface_ready"
    SELECTING_GAMES = "selecting_games"
    GAMES_CONFIRMED = "games_confirmed"
    PURCHASING = "purchasing"
    RESULT_CLASSIFIED = "result_classified"
    TERMINAL_SUCCESS = "terminal_success"
    TERMINAL_FAILURE = "terminal_failure"
    TERMINAL_LIMIT_REACHED = "terminal_limit_reached"


TERMINAL = frozenset({Stage.TERMINAL_SUCCESS, Stage.TERMINAL_FAILURE, Stage.TERMINAL_LIMIT_REACHED})

# every non-terminal stage may also fail
TRANSITIONS = {
    Stage.INIT: {Stage.AUTHENTICATING},
    Stage.AUTHENTICATING: {Stage.AUTHENTICATED},
    Stage.AUTHENTICATED: {Stage.BALANCE_CHECKING},
    Stage.BALANCE_CHECKING: {Stage.BALANCE_INSUFFICIENT, Stage.BALANCE_SUFFICIENT},
    Stage.BALANCE_INSUFFICIENT: set(),
    Stage.BALANCE_SUFFICIENT: {Stage.NAVIGATING},
    Stage.NAVIGATING: {Stage.PURCHASE_SURFACE_READY, Stage.TERMINAL_LIMIT_REACHED},
    Stage.PURCHASE_SURFACE_READY: {Stage.SELECTING_GAMES},
    Stage.SELECTING_GAMES: {Stage.GAMES_CONFIRMED},
    Stage.GAMES_CONFIRMED: {Stage.PURCHASING},
    Stage.PURCHASING: {Stage.RESULT_CLASSIFIED},
    Stage.RESULT_CLASSIFIED: {Stage.TERMINAL_SUCCESS},
}


class PipelineStateError(RuntimeError):
    pass


def _default_session(cfg: LottoConfig) -> BrowserSession:
    return BrowserSession(
        headless=cfg.headless,
        slowmo_ms=cfg.slowmo_ms,
        timeout_sec=cfg.timeout_sec,
        block_images=cfg.block_images,
        debug_dir=cfg.debug_dir,
    )


# ──────────────────────────────────────────────────────────────────────────────
class LottoPurchaseBot:
    def __init__(
        self,
        cfg: Optional[LottoConfig] = None,
        notifier: Optional[TelegramNotifier] = None,
        session_factory: Optional[Callable[[LottoConfig], BrowserSession]] = None,
    ):
        self.cfg = cfg or LottoConfig()
        self.notifier = notifier or TelegramNotifier(self.cfg.telegram_token, self.cfg.telegram_chat_id)
        self.session_factory = session_factory or _default_session
        self.stage = Stage.INIT
        self.history: List[Stage] = [Stage.INIT]
        self.balance: Optional[int] = None
        self.outcome: Optional[PurchaseOutcome] = None

    # ── state machine ────────────────────────────────────────────────────────
    def _advance(self, nxt: Stage):
        cur = self.stage
        allowed = set(TRANSITIONS.get(cur, set()))
        if cur not in TERMINAL:
            allowed.add(Stage.TERMINAL_FAILURE)
        if nxt not in allowed:
            raise PipelineStateError(f"illegal transition {cur.name} -> {nxt.name}")
        log.debug("stage %s -> %s", cur.name, nxt.name)
        self.stage = nxt
        self.history.append(nxt)

    def _fail(self, session, failed_at: Stage) -> int:
        if session is not None:
            try:
                session.screenshot(f"failure_{failed_at.value}")
            except Exception as e:
                log.debug("failure screenshot skipped: %s", e)
        if self.stage not in TERMINAL:
            self._advance(Stage.TERMINAL_FAILURE)
        return 1

    # ── run ──────────────────────────────────────────────────────────────────
    def run(self) -> int:
        if self.cfg.notify_start:
            self.notifier.notify_start()

        session = None
        try:
            session = self.session_factory(self.cfg)
            session.start()
            self._pipeline(session)
            return 0

        except PurchaseLimitReached as e:
            log.warning("nothing to buy: %s", e)
            self._advance(Stage.TERMINAL_LIMIT_REACHED)
            self.notifier.notify_limit_reached()
            return 0

        except BalanceInsufficient as e:
            log.error("balance gate: %s", e)
            self.notifier.notify_insufficient_balance(e.required, e.current)
            return self._fail(session, self.stage)

        except AuthenticationFailed as e:
            log.error("login failed: %s", e)
            failed_at = self.stage
            code = self._fail(session, failed_at)
            self.notifier.notify_login_failure(str(e))
            return code

        except BoardSelectionIncomplete as e:
            log.error("game selection failed: %s", e)
            code = self._fail(session, self.stage)
            self.notifier.notify_board_selection(e.expected, e.confirmed)
            return code

        except PurchaseOutcomeUnclassified as e:
            log.error("purchase not confirmed: %s", e.reason)
            code = self._fail(session, self.stage)
            self.notifier.notify_purchase_failure(e.reason)
            return code

        except PurchaseFailed as e:
            log.error("purchase failed: %s", e)
            code = self._fail(session, self.stage)
            self.notifier.notify_purchase_failure(str(e))
            return code

        except Exception as e:
            failed_at = self.stage
            log.exception("run aborted during %s", failed_at.value)
            code = self._fail(session, failed_at)
            self.notifier.notify_error(failed_at.value, e)
            return code

        finally:
            if session is not None:
                try:
                    session.stop()
                except Exception as e:
                    log.warning("session stop failed: %s", e)

    def _pipeline(self, session):
        cfg = self.cfg

        self._advance(Stage.AUTHENTICATING)
        login(session, cfg.credentials, cfg.login_url, cfg.main_url)
        self._advance(Stage.AUTHENTICATED)

        self._advance(Stage.BALANCE_CHECKING)
        self.balance = check_balance(session, cfg.mypage_url, cfg.balance_ceiling)
        if self.balance < cfg.min_balance:
            self._advance(Stage.BALANCE_INSUFFICIENT)
            raise BalanceInsufficient(cfg.min_balance, self.balance)
        self._advance(Stage.BALANCE_SUFFICIENT)
        log.info("balance %s원 >= %s원, proceeding", f"{self.balance:,}", f"{cfg.min_balance:,}")

        self._advance(Stage.NAVIGATING)
        surface = open_purchase_page(session, cfg.main_url, cfg.purchase_url)
        self._advance(Stage.PURCHASE_SURFACE_READY)

        self._advance(Stage.SELECTING_GAMES)
        select_games(session, surface, FIXED_GAME_COUNT)
        self._advance(Stage.GAMES_CONFIRMED)

        self._advance(Stage.PURCHASING)
        offset = len(session.dialog_messages)
        execute_purchase(session, surface)
        outcome = classify_result(session, surface, dialog_offset=offset)
        self._advance(Stage.RESULT_CLASSIFIED)
        if not outcome.ok:
            raise PurchaseOutcomeUnclassified(outcome.reason)

        remaining = read_remaining_balance(session, cfg.mypage_url, cfg.balance_ceiling)
        self.outcome = outcome.with_balance(remaining)
        self._advance(Stage.TERMINAL_SUCCESS)
        log.info("purchase complete, remaining balance %s원", f"{remaining:,}")
        self.notifier.notify_success(remaining)

    # ── balance only ─────────────────────────────────────────────────────────
    def read_balance_only(self) -> int:
        """Log in and read the deposit balance; nothing is bought or notified."""
        with self.session_factory(self.cfg).session() as session:
            login(session, self.cfg.credentials, self.cfg.login_url, self.cfg.main_url)
            return check_balance(session, self.cfg.mypage_url, self.cfg.balance_ceiling)


# ──────────────────────────────────────────────────────────────────────────────
def setup_logging(level: str = "INFO"):
    logging.basicConfig(
        level=getattr(logging, (level or "INFO").upper(), logging.INFO),
        format=LOG_FORMAT,
    )


def main(argv: Optional[List[str]] = None) -> int:
    import argparse

    ap = argparse.ArgumentParser("DH Lottery Lotto 6/45 auto-buy")
    ap.add_argument("--headed", action="store_true", help="show the browser window")
    sub = ap.add_subparsers(dest="cmd")
    sub.add_parser("run", help="full purchase run (default)")
    sub.add_parser("check-config", help="validate required environment variables only")
    sub.add_parser("balance", help="log in and print the deposit balance")
    args = ap.parse_args(argv)
    cmd = args.cmd or "run"

    cfg = LottoConfig()
    setup_logging(cfg.log_level)
    if args.headed:
        cfg.headless = False

    try:
        cfg.validate()
    except ConfigurationInvalid as e:
        log.error("configuration invalid: %s", e)
        return 1

    if cmd == "check-config":
        log.info("configuration OK (%r)", cfg.credentials)
        return 0

    bot = LottoPurchaseBot(cfg)
    if cmd == "balance":
        try:
            bal = bot.read_balance_only()
        except (LottoError, BrowserError) as e:
            log.error("balance check failed: %s", e)
            return 1
        print(f"💰 balance: {bal:,}원")
        return 0

    return bot.run()


if __name__ == "__main__":
    sys.exit(main())
