# automation/lotto/__init__.py
from .config import FIXED_GAME_COUNT, GAME_PRICE, MIN_BALANCE, Credentials, LottoConfig
from .errors import (
    AuthenticationFailed,
    BalanceInsufficient,
    BoardSelectionIncomplete,
    ConfigurationInvalid,
    EncryptionUnavailable,
    LottoError,
    PurchaseFailed,
    PurchaseLimitReached,
    PurchaseOutcomeUnclassified,
    PurchaseSurfaceNotFound,
)
from .result import PurchaseOutcome

__all__ = [
    "FIXED_GAME_COUNT",
    "GAME_PRICE",
    "MIN_BALANCE",
    "Credentials",
    "LottoConfig",
    "AuthenticationFailed",
    "BalanceInsufficient",
    "BoardSelectionIncomplete",
    "ConfigurationInvalid",
    "EncryptionUnavailable",
    "LottoError",
    "PurchaseFailed",
    "PurchaseLimitReached",
    "PurchaseOutcomeUnclassified",
    "PurchaseSurfaceNotFound",
    "PurchaseOutcome",
]
