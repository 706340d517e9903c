from __future__ import annotations

import pytest
from telegram.error import TelegramError

import notifications
from notifications import (
    TelegramNotifier,
    error_message,
    insufficient_balance_message,
    limit_reached_message,
    login_failure_message,
    success_message,
)


class FakeBot:
    sent = []
    fail_with = None

    def __init__(self, token: str) -> None:
        self.token = token

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    async def send_message(self, chat_id, text):
        if FakeBot.fail_with is not None:
            raise FakeBot.fail_with
        FakeBot.sent.append((self.token, chat_id, text))
        return True


@pytest.fixture(autouse=True)
def fake_bot(monkeypatch):
    FakeBot.sent = []
    FakeBot.fail_with = None
    monkeypatch.setattr(notifications, "Bot", FakeBot)
    return FakeBot


def test_send_message() -> None:
    assert TelegramNotifier("123:abc", "42").send_message("hello") is True
    assert FakeBot.sent == [("123:abc", "42", "hello")]


def test_send_failure_is_reported_not_raised() -> None:
    FakeBot.fail_with = TelegramError("Chat not found")
    assert TelegramNotifier("123:abc", "42").send_message("hello") is False


def test_network_failure_is_reported_not_raised() -> None:
    FakeBot.fail_with = OSError("network down")
    assert TelegramNotifier("123:abc", "42").send_message("hello") is False


def test_unconfigured_notifier_sends_nothing() -> None:
    assert TelegramNotifier("", "42").send_message("hello") is False
    assert FakeBot.sent == []


def test_success_notification_text() -> None:
    TelegramNotifier("t", "c").notify_success(7000)
    assert FakeBot.sent[0][2] == "✅ 로또 5,000원 구매 완료! (잔액: 7,000원)"
    assert success_message(1234567) == "✅ 로또 5,000원 구매 완료! (잔액: 1,234,567원)"


def test_insufficient_balance_text() -> None:
    msg = insufficient_balance_message(5000, 3000)
    assert "필요 금액: 5,000원" in msg
    assert "현재 잔액: 3,000원" in msg
    assert "부족 금액: 2,000원" in msg


def test_error_text_carries_exception_summary() -> None:
    msg = error_message("balance_checking", ValueError("boom"))
    assert "오류 내용: balance_checking" in msg
    assert msg.endswith("예외 정보: ValueError: boom")


def test_login_failure_text() -> None:
    assert login_failure_message().startswith("🔐 로그인 실패")
    assert "원인: timeout" in login_failure_message("timeout")


def test_limit_reached_is_not_reported_as_failure() -> None:
    msg = limit_reached_message()
    assert msg.startswith("ℹ️")
    assert "실패" not in msg
    assert "5,000원" in msg
