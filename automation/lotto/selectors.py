# automation/lotto/selectors.py
"""
Every selector, script and text phrase the lotto flow depends on.

The portal has no stable contract, so most entries are lists tried in order.
Keep them here so a site revision is a one-file change.
"""

from __future__ import annotations


def text_xpath(*phrases: str, tags: str = "*") -> str:
    parts = [f"//{tags}[contains(text(), '{p}')]" for p in phrases]
    return "xpath=" + " | ".join(parts)


# ── popups ──────────────────────────────────────────────────────────────────
POPUP_CLOSE_SELECTORS = [
    # "don't show again today"
    ".btn-today-close",
    ".today-close",
    "[data-close='today']",
    # layer containers
    ".layer-popup",
    ".popup-layer",
    ".modal-popup",
    ".popup-modal",
    ".layer",
    ".popup",
    ".modal",
    # close buttons
    ".btn-close",
    ".popup-close",
    ".layer-close",
    ".modal-close",
    "[class*='close']",
    "[class*='Close']",
    "button[aria-label*='닫기']",
    "button[aria-label*='close']",
    ".icon-close",
    ".btn-x",
]

OVERLAY_SELECTORS = [
    ".popup-bg",
    ".overlay",
    ".modal-backdrop",
    ".layer-backdrop",
    "[class*='overlay']",
    "[class*='backdrop']",
]

# ── login ───────────────────────────────────────────────────────────────────
LOGIN_ID_INPUT = "#inpUserId"
LOGIN_PW_INPUT = "#inpUserPswdEncn"
LOGIN_ID_HIDDEN = "#userId"
LOGIN_PW_HIDDEN = "#userPswdEncn"
LOGIN_FORM = "#loginForm"
LOGIN_SUBMIT = ["#btnLogin", ".btn_login", "a.btn_common.lrg.blu"]

LOGOUT_CONTROL = (
    "xpath=//a[contains(text(), '로그아웃')] | //button[contains(text(), '로그아웃')]"
    " | //*[@id='btnLogout'] | //*[contains(@class, 'logout')] | //*[contains(@class, 'btn-logout')]"
)
LOGIN_CONTROL = (
    "xpath=//a[contains(@href, '/login') and contains(text(), '로그인')]"
    " | //*[@id='loginBtn'] | //*[contains(@class, 'btn-login')]"
)
MYPAGE_LINK = (
    "xpath=//a[contains(@href, '/mypage')] | //*[@id='mypageBtn'] | //*[contains(@class, 'mypage')]"
)

# returns [encId, encPw] or null while the RSA runtime is not ready
ENCRYPT_SCRIPT = """
(values) => {
  if (typeof rsaModulus !== 'undefined' && !rsaModulus) return null;
  let enc = null;
  if (typeof fnRSAencrypt === 'function') enc = (v) => fnRSAencrypt(v);
  else if (typeof rsa !== 'undefined' && rsa && typeof rsa.encrypt === 'function') enc = (v) => rsa.encrypt(v);
  if (!enc) return null;
  return values.map((v) => enc(v) || null);
}
"""

WRITE_ENCRYPTED_SCRIPT = """
([encId, encPw, idSel, pwSel]) => {
  const hid = document.querySelector(idSel);
  const hpw = document.querySelector(pwSel);
  if (!hid || !hpw) return false;
  hid.value = encId;
  hpw.value = encPw;
  return true;
}
"""

# visible inputs are emptied before a bare form.submit()
CLEAR_FIELDS_SCRIPT = """
(sels) => { for (const sel of sels) { const el = document.querySelector(sel); if (el) el.value = ''; } return true; }
"""

SUBMIT_FORM_SCRIPT = """
(sel) => { const f = document.querySelector(sel); if (f) { f.submit(); return true; } return false; }
"""

LOGGED_IN_FLAG_SCRIPT = "() => (typeof isLoggedIn !== 'undefined' ? isLoggedIn : null)"

# ── balance ─────────────────────────────────────────────────────────────────
BALANCE_DISPLAY = ["#totalAmt", "#divCrntEntrsAmt"]
REMAINING_BALANCE_DISPLAY = "#crntEntrsAmt"

BALANCE_DISPLAY_SCRIPT = """
(ids) => {
  for (const id of ids) {
    const el = document.querySelector(id);
    if (el) return (el.textContent || el.innerText || '').replace(/[^0-9]/g, '');
  }
  return '0';
}
"""

# cmmUtil.getUserMndp is async and callback based; bounded on the page side
USER_MNDP_SCRIPT = """
(timeoutMs) => new Promise((resolve) => {
  const timer = setTimeout(() => resolve('0'), timeoutMs);
  const done = (v) => { clearTimeout(timer); resolve(String(v || '0')); };
  try {
    if (typeof cmmUtil !== 'undefined' && typeof cmmUtil.getUserMndp === 'function') {
      cmmUtil.getUserMndp((d) => done(d ? (d.totalAmt || d.crntEntrsAmt || 0) : 0));
    } else {
      done(0);
    }
  } catch (e) {
    done(0);
  }
})
"""

CURRENCY_TEXT_SCRIPT = """
(suffix) => {
  const out = [];
  for (const el of document.querySelectorAll('span, div, p, strong, b, em')) {
    const t = el.textContent || '';
    if (t.includes(suffix) && /[0-9]/.test(t) && t.length < 200) out.push(t);
  }
  return out;
}
"""

CURRENCY_SUFFIX = "원"

# ── purchase page ───────────────────────────────────────────────────────────
PURCHASE_MARKER = "#num2"
PURCHASE_URL_PATTERN = "game645.do"
PURCHASE_FRAME_PATH = ["ifrm_tab", "ifrm_answer"]
MARKER_SCRIPT = "() => document.getElementById('num2') !== null"

QUEUE_BANNER = "서비스연결 대기중"
LIMIT_BANNER = "구매한도 5천원을 모두 채우셨습니다"

# ── games ───────────────────────────────────────────────────────────────────
AUTO_PICK = "#num2"
CONFIRM_PICK = "#btnSelectNum"
BUY_BUTTON = "#btnBuy"

SCRIPT_CLICK = """
(sel) => { const el = document.querySelector(sel); if (el) { el.click(); return true; } return false; }
"""

SELECTED_GAME_ITEMS = ".selected-list li, .game-list li, [class*='selected'] li, [class*='game-item']"
SELECTED_GAME_COUNT_SCRIPT = """
(sel) => { try { return document.querySelectorAll(sel).length; } catch (e) { return 0; } }
"""
NUMBER_TOKENS = "[class*='number'], [class*='ball'], [class*='lotto']"
NUMBERS_PER_GAME = 6
GAME_COUNT_PATTERN = r"(\d+)\s*게임"

CONFIRM_OVERRIDE_SCRIPT = "() => { window.confirm = function () { return true; }; return true; }"
CONFIRM_LAYER_SCRIPT = """
() => {
  if (typeof closepopupLayerConfirm === 'function') { closepopupLayerConfirm(true); return true; }
  return false;
}
"""
CONFIRM_LAYER_BUTTON = "#popupLayerConfirm input[value='확인']"

# ── result ──────────────────────────────────────────────────────────────────
SUCCESS_PHRASES = ["구매가 완료되었습니다", "구매 완료", "구매되었습니다", "완료되었습니다"]
TEXT_SUCCESS_PHRASES = ["구매가 완료되었습니다", "구매 완료", "구매되었습니다"]
MARKUP_SUCCESS_PHRASES = ["구매가 완료", "구매 완료"]
FAILURE_PHRASES = ["실패", "오류", "에러", "불가"]
FAILURE_KEYWORDS = ["실패", "오류", "에러", "불가", "부족", "한도"]
FAILURE_SELECTORS = [".error", ".fail", ".alert", "[class*='error']", "[class*='fail']", "[class*='alert']"]

BODY_TEXT_SCRIPT = "() => document.body ? (document.body.innerText || document.body.textContent || '') : ''"
