# notifications.py
"""
Telegram notifications for the lotto bot.

One message per terminal outcome of a run. Sending is best effort: a failed
send is logged and reported as False, never raised into the purchase flow.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from telegram import Bot
from telegram.error import TelegramError

log = logging.getLogger("lotto.notify")


def _won(amount: int) -> str:
    return f"{int(amount or 0):,}원"


def _run_maybe_async(func, *args, **kwargs):
    if asyncio.iscoroutinefunction(func):
        return asyncio.run(func(*args, **kwargs))
    res = func(*args, **kwargs)
    if asyncio.iscoroutine(res):
        return asyncio.run(res)
    return res


class TelegramNotifier:
    def __init__(self, token: str, chat_id: str):
        self.token = (token or "").strip()
        self.chat_id = (chat_id or "").strip()

    @property
    def configured(self) -> bool:
        return bool(self.token and self.chat_id)

    async def _send(self, text: str):
        async with Bot(self.token) as bot:
            return await bot.send_message(chat_id=self.chat_id, text=text)

    def send_message(self, text: str) -> bool:
        if not self.configured:
            log.warning("Telegram not configured, message dropped")
            return False
        try:
            _run_maybe_async(self._send, text)
            log.info("Telegram message sent")
            return True
        except TelegramError as e:
            log.error("Telegram send failed: %s", e)
        except Exception as e:
            log.error("Telegram send failed (%s): %s", type(e).__name__, e)
        return False

    # ── terminal branches ────────────────────────────────────────────────────
    def notify_start(self) -> bool:
        return self.send_message(start_message())

    def notify_success(self, remaining_balance: int) -> bool:
        return self.send_message(success_message(remaining_balance))

    def notify_insufficient_balance(self, required: int, current: int) -> bool:
        return self.send_message(insufficient_balance_message(required, current))

    def notify_login_failure(self, cause: Optional[str] = None) -> bool:
        return self.send_message(login_failure_message(cause))

    def notify_board_selection(self, expected: int, confirmed: int) -> bool:
        return self.send_message(board_selection_message(expected, confirmed))

    def notify_limit_reached(self) -> bool:
        return self.send_message(limit_reached_message())

    def notify_purchase_failure(self, reason: str) -> bool:
        return self.send_message(purchase_failure_message(reason))

    def notify_error(self, stage: str, exc: Optional[BaseException] = None) -> bool:
        return self.send_message(error_message(stage, exc))


# ── message builders ─────────────────────────────────────────────────────────
def start_message() -> str:
    return "🚀 로또 자동 구매 시스템 시작\n\n구매 프로세스를 시작합니다..."


def success_message(remaining_balance: int) -> str:
    return f"✅ 로또 5,000원 구매 완료! (잔액: {_won(remaining_balance)})"


def insufficient_balance_message(required: int, current: int) -> str:
    deficit = max(int(required) - int(current), 0)
    return (
        "⚠️ 잔액 부족 알림\n\n"
        f"필요 금액: {_won(required)}\n"
        f"현재 잔액: {_won(current)}\n"
        f"부족 금액: {_won(deficit)}\n\n"
        "잔액을 충전해주세요."
    )


def login_failure_message(cause: Optional[str] = None) -> str:
    msg = "🔐 로그인 실패\n\n아이디 또는 비밀번호를 확인해주세요."
    if cause:
        msg += f"\n원인: {cause}"
    return msg


def board_selection_message(expected: int, confirmed: int) -> str:
    return f"🚨 구매 실패: 게임 선택 미완료 ({confirmed}/{expected}게임 확인됨)"


def limit_reached_message() -> str:
    return "ℹ️ 이번 주 로또 구매 한도(5,000원)를 이미 사용했습니다. 이번 회차는 구매하지 않습니다."


def purchase_failure_message(reason: str) -> str:
    return f"🚨 구매 실패: {reason or 'unknown'}"


def error_message(stage: str, exc: Optional[BaseException] = None) -> str:
    msg = f"❌ 로또 자동 구매 오류 발생\n\n오류 내용: {stage}"
    if exc is not None:
        msg += f"\n예외 정보: {type(exc).__name__}: {exc}"
    return msg
