# automation/lotto/errors.py
from __future__ import annotations


class LottoError(RuntimeError):
    pass


class ConfigurationInvalid(LottoError):
    """Required secrets are missing; raised before any browser work."""

    def __init__(self, missing):
        self.missing = list(missing)
        super().__init__("missing environment variables: " + ", ".join(self.missing))


class AuthenticationFailed(LottoError):
    pass


class EncryptionUnavailable(AuthenticationFailed):
    """The portal never exposed its RSA routine, or it returned nothing."""


class BalanceInsufficient(LottoError):
    def __init__(self, required: int, current: int):
        self.required = required
        self.current = current
        self.deficit = max(required - current, 0)
        super().__init__(f"balance {current:,} below required {required:,} (short {self.deficit:,})")


class PurchaseSurfaceNotFound(LottoError):
    pass


class PurchaseLimitReached(LottoError):
    """Weekly purchase limit already used up. Benign: nothing to buy this week."""


class BoardSelectionIncomplete(LottoError):
    def __init__(self, expected: int, confirmed: int):
        self.expected = expected
        self.confirmed = confirmed
        super().__init__(f"{confirmed}/{expected} games confirmed")


class PurchaseFailed(LottoError):
    """The buy step itself could not be driven (buy control missing, etc.)."""


class PurchaseOutcomeUnclassified(LottoError):
    def __init__(self, reason: str = "unknown"):
        self.reason = reason or "unknown"
        super().__init__(self.reason)
