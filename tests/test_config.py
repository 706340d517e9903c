from __future__ import annotations

import pytest

from automation.lotto.config import MIN_BALANCE, Credentials, LottoConfig
from automation.lotto.errors import ConfigurationInvalid

ENV_NAMES = [
    "LOTTO_ID", "LOTTERY_USERNAME", "LOTTO_PW", "LOTTERY_PASSWORD",
    "TELEGRAM_TOKEN", "TELEGRAM_BOT_TOKEN", "TELEGRAM_CHAT_ID",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_NAMES + ["LOTTO_HEADLESS", "LOTTO_BALANCE_CEILING"]:
        monkeypatch.delenv(name, raising=False)


def test_all_secrets_missing() -> None:
    with pytest.raises(ConfigurationInvalid) as ei:
        LottoConfig().validate()
    assert ei.value.missing == ["LOTTO_ID", "LOTTO_PW", "TELEGRAM_TOKEN", "TELEGRAM_CHAT_ID"]


def test_aliases(monkeypatch) -> None:
    monkeypatch.setenv("LOTTERY_USERNAME", "tester")
    monkeypatch.setenv("LOTTERY_PASSWORD", "s3cret")
    monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "123:abc")
    monkeypatch.setenv("TELEGRAM_CHAT_ID", "42")
    cfg = LottoConfig().validate()
    assert cfg.credentials == Credentials("tester", "s3cret")
    assert cfg.telegram_token == "123:abc"


def test_blank_value_counts_as_missing(monkeypatch) -> None:
    monkeypatch.setenv("LOTTO_ID", "tester")
    monkeypatch.setenv("LOTTO_PW", "   ")
    monkeypatch.setenv("TELEGRAM_TOKEN", "t")
    monkeypatch.setenv("TELEGRAM_CHAT_ID", "42")
    assert LottoConfig().missing() == ["LOTTO_PW"]


def test_defaults_and_urls(monkeypatch) -> None:
    monkeypatch.setenv("LOTTO_HEADLESS", "0")
    cfg = LottoConfig()
    assert cfg.headless is False
    assert cfg.min_balance == MIN_BALANCE == 5000
    assert cfg.balance_ceiling == 10_000_000
    assert cfg.login_url == "https://www.dhlottery.co.kr/login"
    assert cfg.mypage_url == "https://www.dhlottery.co.kr/mypage/home"
    assert cfg.purchase_url == "https://ol.dhlottery.co.kr/olotto/game/game645.do"


def test_password_never_in_repr() -> None:
    assert "s3cret" not in repr(Credentials("tester", "s3cret"))
