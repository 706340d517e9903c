# automation/lotto/config.py
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .errors import ConfigurationInvalid

# ──────────────────────────────────────────────────────────────────────────────
PROJECT_ROOT = Path(__file__).resolve().parents[2]
load_dotenv(PROJECT_ROOT / ".env", override=False)

# one 5-game ticket (5,000 KRW) per run
GAME_PRICE = 1000
FIXED_GAME_COUNT = 5
MIN_BALANCE = GAME_PRICE * FIXED_GAME_COUNT


def _env(*names: str, default: str = "") -> str:
    """First non-empty value among several env var aliases."""
    for n in names:
        v = (os.getenv(n) or "").strip()
        if v:
            return v
    return default


def _env_flag(name: str, default: str) -> bool:
    return (os.getenv(name, default) or default).strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, "") or default)
    except ValueError:
        return default


@dataclass(frozen=True)
class Credentials:
    user_id: str
    password: str

    def __repr__(self) -> str:
        return f"Credentials(user_id={self.user_id!r}, password='***')"


# ──────────────────────────────────────────────────────────────────────────────
@dataclass
class LottoConfig:
    base: str = field(default_factory=lambda: _env("LOTTO_BASE_URL", default="https://www.dhlottery.co.kr").rstrip("/"))
    game_base: str = field(default_factory=lambda: _env("LOTTO_GAME_BASE_URL", default="https://ol.dhlottery.co.kr").rstrip("/"))

    # secrets (GitHub Actions style names first, long aliases second)
    username: str = field(default_factory=lambda: _env("LOTTO_ID", "LOTTERY_USERNAME"))
    password: str = field(default_factory=lambda: _env("LOTTO_PW", "LOTTERY_PASSWORD"))
    telegram_token: str = field(default_factory=lambda: _env("TELEGRAM_TOKEN", "TELEGRAM_BOT_TOKEN"))
    telegram_chat_id: str = field(default_factory=lambda: _env("TELEGRAM_CHAT_ID"))

    # Playwright behaviour
    headless: bool = field(default_factory=lambda: _env_flag("LOTTO_HEADLESS", "1"))
    slowmo_ms: int = field(default_factory=lambda: _env_int("LOTTO_SLOWMO_MS", 0))
    timeout_sec: int = field(default_factory=lambda: _env_int("LOTTO_TIMEOUT_SEC", 30))
    block_images: bool = field(default_factory=lambda: _env_flag("LOTTO_BLOCK_IMAGES", "1"))
    debug_dir: Optional[str] = field(default_factory=lambda: _env("LOTTO_DEBUG_DIR") or None)

    # balance rules
    min_balance: int = MIN_BALANCE
    balance_ceiling: int = field(default_factory=lambda: _env_int("LOTTO_BALANCE_CEILING", 10_000_000))

    notify_start: bool = field(default_factory=lambda: _env_flag("LOTTO_NOTIFY_START", "0"))
    log_level: str = field(default_factory=lambda: _env("LOTTO_LOG_LEVEL", default="INFO").upper())

    @property
    def login_url(self) -> str:
        return f"{self.base}/login"

    @property
    def main_url(self) -> str:
        return f"{self.base}/main"

    @property
    def mypage_url(self) -> str:
        return f"{self.base}/mypage/home"

    @property
    def purchase_url(self) -> str:
        return f"{self.game_base}/olotto/game/game645.do"

    @property
    def credentials(self) -> Credentials:
        return Credentials(self.username, self.password)

    def missing(self) -> list:
        required = {
            "LOTTO_ID": self.username,
            "LOTTO_PW": self.password,
            "TELEGRAM_TOKEN": self.telegram_token,
            "TELEGRAM_CHAT_ID": self.telegram_chat_id,
        }
        return [k for k, v in required.items() if not (v or "").strip()]

    def validate(self) -> "LottoConfig":
        missing = self.missing()
        if missing:
            raise ConfigurationInvalid(missing)
        return self
