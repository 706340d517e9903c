# automation/lotto/result.py
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Iterable, List, Optional

from . import selectors as S
from .probes import Probe, Verdict, any_visible, first_positive, first_visible
from .selectors import text_xpath

log = logging.getLogger("lotto.result")

UNKNOWN_REASON = "unknown"


@dataclass(frozen=True)
class PurchaseOutcome:
    ok: bool
    reason: str = ""
    remaining_balance: Optional[int] = None
    evidence: str = ""

    @classmethod
    def success(cls, evidence: str = "", remaining_balance: Optional[int] = None) -> "PurchaseOutcome":
        return cls(ok=True, evidence=evidence, remaining_balance=remaining_balance)

    @classmethod
    def failure(cls, reason: str = UNKNOWN_REASON) -> "PurchaseOutcome":
        return cls(ok=False, reason=reason or UNKNOWN_REASON)

    def with_balance(self, balance: int) -> "PurchaseOutcome":
        return replace(self, remaining_balance=balance)


def _contains_any(text: str, phrases: Iterable[str]) -> bool:
    return any(p in (text or "") for p in phrases)


def _body_text(scope) -> str:
    return scope.evaluate(S.BODY_TEXT_SCRIPT) or ""


def success_probes(scopes: List) -> List[Probe]:
    probes: List[Probe] = []
    visible_sel = text_xpath(*S.SUCCESS_PHRASES)

    for i, sc in enumerate(scopes):
        probes.append(Probe(
            f"visible-message[{i}]",
            lambda sc=sc: Verdict.POSITIVE if any_visible(sc.locator(visible_sel)) else Verdict.INCONCLUSIVE,
        ))
    for i, sc in enumerate(scopes):
        probes.append(Probe(
            f"rendered-text[{i}]",
            lambda sc=sc: Verdict.POSITIVE if _contains_any(_body_text(sc), S.TEXT_SUCCESS_PHRASES) else Verdict.NEGATIVE,
        ))
    for i, sc in enumerate(scopes):
        probes.append(Probe(
            f"markup[{i}]",
            lambda sc=sc: Verdict.POSITIVE if _contains_any(sc.content(), S.MARKUP_SUCCESS_PHRASES) else Verdict.NEGATIVE,
        ))
    return probes


def failure_reason(scopes: List, dialog_messages: Iterable[str] = ()) -> Optional[str]:
    for msg in dialog_messages:
        if _contains_any(msg, S.FAILURE_KEYWORDS):
            return msg.strip()

    fail_sel = text_xpath(*S.FAILURE_PHRASES)
    for sc in scopes:
        for sel in [fail_sel] + S.FAILURE_SELECTORS:
            try:
                el = first_visible(sc.locator(sel))
                if el is None:
                    continue
                text = (el.inner_text() or "").strip()
                if text:
                    return text
            except Exception:
                continue

    for sc in scopes:
        try:
            for line in _body_text(sc).splitlines():
                if _contains_any(line, S.FAILURE_KEYWORDS):
                    return line.strip()
        except Exception as e:
            log.debug("failure text scan failed: %s", e)
    return None


def classify_result(session, surface=None, dialog_offset: int = 0) -> PurchaseOutcome:
    """
    Success if any success probe fires (surface first, then the top page);
    otherwise a failure with whatever reason the page shows.
    """
    scopes = []
    if surface is not None:
        scopes.append(surface)
    root = session.root()
    if surface is None or getattr(surface, "frame", None) is not root.frame:
        scopes.append(root)

    hit = first_positive(success_probes(scopes), what="purchase")
    if hit:
        return PurchaseOutcome.success(evidence=hit)

    reason = failure_reason(scopes, session.dialog_messages[dialog_offset:]) or UNKNOWN_REASON
    log.error("purchase not confirmed: %s", reason)
    return PurchaseOutcome.failure(reason)
