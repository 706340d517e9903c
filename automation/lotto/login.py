# automation/lotto/login.py
"""
Portal login: RSA-encrypt the credentials with the page's own routine, submit,
then prove we are logged in with several independent signals.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from rpa.polling import poll_until

from . import selectors as S
from .config import Credentials
from .errors import AuthenticationFailed, EncryptionUnavailable
from .popups import dismiss_popups
from .probes import Probe, Verdict, any_visible, first_positive

log = logging.getLogger("lotto.login")

ENCRYPT_TIMEOUT = 10.0
ENCRYPT_INTERVAL = 0.5
SCRIPT_SETTLE = 2.0
SUBMIT_SETTLE = 2.0


# ── encryption adapter ───────────────────────────────────────────────────────
def _try_encrypt(scope, creds: Credentials) -> Optional[Tuple[str, str]]:
    res = scope.evaluate(S.ENCRYPT_SCRIPT, [creds.user_id, creds.password])
    if not res or len(res) != 2:
        return None
    enc_id, enc_pw = res
    if not enc_id or not enc_pw:
        return None
    return str(enc_id), str(enc_pw)


def encrypt_credentials(session, creds: Credentials, timeout: float = ENCRYPT_TIMEOUT) -> Tuple[str, str]:
    """
    Wait for the page's RSA routine (loaded asynchronously) and encrypt both
    fields with it. Raises EncryptionUnavailable when it never shows up.
    """
    scope = session.page
    pair = poll_until(
        lambda: _try_encrypt(scope, creds),
        timeout=timeout,
        interval=ENCRYPT_INTERVAL,
        clock=session.clock,
        sleep=session.sleep,
        label="rsa-encrypt",
    )
    if not pair:
        raise EncryptionUnavailable(f"RSA encryption routine unavailable after {timeout:.0f}s")
    log.info("credentials encrypted")
    return pair


def write_encrypted(session, encrypted: Tuple[str, str]) -> None:
    enc_id, enc_pw = encrypted
    ok = session.page.evaluate(
        S.WRITE_ENCRYPTED_SCRIPT,
        [enc_id, enc_pw, S.LOGIN_ID_HIDDEN, S.LOGIN_PW_HIDDEN],
    )
    if not ok:
        raise EncryptionUnavailable("hidden credential fields not found on login form")


def submit_login(session) -> str:
    page = session.page
    for sel in S.LOGIN_SUBMIT:
        try:
            loc = page.locator(sel)
            if loc.count() == 0:
                continue
            try:
                loc.first.click(timeout=3000)
            except Exception:
                loc.first.evaluate("el => el.click()")
            log.info("login submitted via %s", sel)
            return sel
        except Exception as e:
            log.debug("login control %s failed: %s", sel, e)
    page.evaluate(S.CLEAR_FIELDS_SCRIPT, [S.LOGIN_ID_INPUT, S.LOGIN_PW_INPUT])
    if page.evaluate(S.SUBMIT_FORM_SCRIPT, S.LOGIN_FORM):
        log.info("login submitted via form.submit()")
        return S.LOGIN_FORM
    raise AuthenticationFailed("no login control or form on the login page")


# ── verifier ─────────────────────────────────────────────────────────────────
def login_probes(page) -> List[Probe]:
    def logout_visible() -> Verdict:
        return Verdict.POSITIVE if any_visible(page.locator(S.LOGOUT_CONTROL), strict=True) else Verdict.INCONCLUSIVE

    def login_hidden() -> Verdict:
        return Verdict.NEGATIVE if any_visible(page.locator(S.LOGIN_CONTROL), strict=True) else Verdict.POSITIVE

    def mypage_visible() -> Verdict:
        return Verdict.POSITIVE if any_visible(page.locator(S.MYPAGE_LINK), strict=True) else Verdict.INCONCLUSIVE

    def runtime_flag() -> Verdict:
        flag = page.evaluate(S.LOGGED_IN_FLAG_SCRIPT)
        if flag is True:
            return Verdict.POSITIVE
        if flag is False:
            return Verdict.NEGATIVE
        return Verdict.INCONCLUSIVE

    return [
        Probe("logout-control", logout_visible),
        Probe("login-control-absent", login_hidden),
        Probe("mypage-link", mypage_visible),
        Probe("isLoggedIn", runtime_flag),
    ]


def verify_login(session, main_url: str) -> bool:
    try:
        session.goto(main_url, label="Main")
    except Exception as e:
        log.error("main page unreachable after login: %s", e)
        return False
    dismiss_popups(session)
    return first_positive(login_probes(session.page), what="login") is not None


# ── flow ─────────────────────────────────────────────────────────────────────
def login(session, creds: Credentials, login_url: str, main_url: str) -> None:
    session.goto(login_url, label="Login")
    session.pause(SCRIPT_SETTLE)
    dismiss_popups(session)

    encrypted = encrypt_credentials(session, creds)
    write_encrypted(session, encrypted)
    submit_login(session)
    session.pause(SUBMIT_SETTLE)

    if not verify_login(session, main_url):
        raise AuthenticationFailed("login could not be verified")
    log.info("logged in as %s", creds.user_id)
