from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Callable, Dict, List, Optional

import pytest

from rpa.frames import NavigableContext


# ── timing ───────────────────────────────────────────────────────────────────
class FakeClock:
    def __init__(self, start: float = 0.0) -> None:
        self.t = start
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.t

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.t += seconds


# ── DOM ──────────────────────────────────────────────────────────────────────
class FakeElement:
    def __init__(
        self,
        text: str = "",
        visible: bool = True,
        on_click: Optional[Callable[["FakeElement"], None]] = None,
        click_raises: bool = False,
        hide_on_click: bool = False,
    ) -> None:
        self.text = text
        self.visible = visible
        self.on_click = on_click
        self.click_raises = click_raises
        self.hide_on_click = hide_on_click
        self.clicks = 0

    def _do_click(self) -> None:
        self.clicks += 1
        if self.hide_on_click:
            self.visible = False
        if self.on_click:
            self.on_click(self)

    def is_visible(self) -> bool:
        return self.visible

    def click(self, timeout: Optional[float] = None) -> None:
        if self.click_raises:
            raise RuntimeError("element not clickable")
        self._do_click()

    def evaluate(self, script: str, arg: Any = None) -> Any:
        if "click" in script:
            self._do_click()
            return True
        return None

    def inner_text(self) -> str:
        return self.text


class _MissingElement:
    def _fail(self, *a, **kw):
        raise RuntimeError("no element")

    is_visible = click = evaluate = inner_text = _fail


class FakeLocator:
    def __init__(self, elements: List[FakeElement]) -> None:
        self.elements = elements

    def count(self) -> int:
        return len(self.elements)

    def nth(self, i: int):
        return self.elements[i]

    @property
    def first(self):
        return self.elements[0] if self.elements else _MissingElement()

    def is_visible(self) -> bool:
        return bool(self.elements) and self.elements[0].is_visible()

    def inner_text(self) -> str:
        return self.first.inner_text()


class FakeFrame:
    """
    A document. ``elements`` maps an exact selector string to its matches;
    ``scripts`` maps an exact script string to a value or a callable(arg).
    """

    def __init__(self, name: str = "", url: str = "about:blank", html: str = "") -> None:
        self.name = name
        self.url = url
        self.html = html
        self.child_frames: List["FakeFrame"] = []
        self.parent_frame: Optional["FakeFrame"] = None
        self.elements: Dict[str, List[FakeElement]] = {}
        self.scripts: Dict[str, Any] = {}
        self.evaluated: List[Any] = []

    def add_child(self, child: "FakeFrame") -> "FakeFrame":
        child.parent_frame = self
        self.child_frames.append(child)
        return child

    def put(self, selector: str, *elements: FakeElement) -> "FakeFrame":
        self.elements.setdefault(selector, []).extend(elements)
        return self

    def locator(self, selector: str) -> FakeLocator:
        return FakeLocator(self.elements.get(selector, []))

    def evaluate(self, script: str, arg: Any = None) -> Any:
        self.evaluated.append((script, arg))
        if script not in self.scripts:
            return None
        val = self.scripts[script]
        if callable(val):
            return val(arg)
        return val

    def content(self) -> str:
        return self.html


class FakeKeyboard:
    def __init__(self) -> None:
        self.pressed: List[str] = []

    def press(self, key: str) -> None:
        self.pressed.append(key)


class FakeBrowserContext:
    def __init__(self) -> None:
        self.pages: List["FakePage"] = []


class FakePage:
    def __init__(self, url: str = "about:blank", context: Optional[FakeBrowserContext] = None) -> None:
        self.main_frame = FakeFrame(url=url)
        self.keyboard = FakeKeyboard()
        self.context = context or FakeBrowserContext()
        self.context.pages.append(self)
        self.fronted = False

    @property
    def url(self) -> str:
        return self.main_frame.url

    @property
    def frames(self) -> List[FakeFrame]:
        out: List[FakeFrame] = []

        def walk(f: FakeFrame) -> None:
            out.append(f)
            for c in f.child_frames:
                walk(c)

        walk(self.main_frame)
        return out

    def locator(self, selector: str) -> FakeLocator:
        return self.main_frame.locator(selector)

    def evaluate(self, script: str, arg: Any = None) -> Any:
        return self.main_frame.evaluate(script, arg)

    def content(self) -> str:
        return self.main_frame.content()

    def bring_to_front(self) -> None:
        self.fronted = True


# ── session ──────────────────────────────────────────────────────────────────
class FakeSession:
    """Stands in for rpa.browser.BrowserSession; no browser involved."""

    def __init__(self, page: Optional[FakePage] = None, clock: Optional[FakeClock] = None) -> None:
        self.page = page or FakePage()
        self.fake_clock = clock or FakeClock()
        self.clock = self.fake_clock
        self.sleep = self.fake_clock.sleep
        self.active: Optional[NavigableContext] = None
        self.dialog_messages: List[str] = []
        self.visited: List[str] = []
        self.screenshots: List[str] = []
        self.started = False
        self.stopped = False

    def start(self) -> None:
        self.started = True

    def stop(self) -> None:
        self.stopped = True

    @contextmanager
    def session(self):
        self.start()
        try:
            yield self
        finally:
            self.stop()

    def pause(self, seconds: float) -> None:
        if seconds > 0:
            self.sleep(seconds)

    def goto(self, url: str, label: str = "") -> None:
        self.visited.append(url)
        self.active = self.root()

    def root(self) -> NavigableContext:
        return NavigableContext(self.page.main_frame, "main")

    def use(self, ctx) -> None:
        self.active = ctx

    def pages(self) -> List[FakePage]:
        return list(self.page.context.pages)

    def switch_to_page(self, page: FakePage) -> None:
        self.page = page
        self.active = self.root()

    def screenshot(self, name: str) -> Optional[str]:
        self.screenshots.append(name)
        return None


class FakeNotifier:
    def __init__(self) -> None:
        self.calls: List[tuple] = []

    def notify_start(self) -> bool:
        self.calls.append(("start",))
        return True

    def notify_success(self, remaining_balance: int) -> bool:
        self.calls.append(("success", remaining_balance))
        return True

    def notify_insufficient_balance(self, required: int, current: int) -> bool:
        self.calls.append(("insufficient", required, current))
        return True

    def notify_login_failure(self, cause: Optional[str] = None) -> bool:
        self.calls.append(("login_failure", cause))
        return True

    def notify_board_selection(self, expected: int, confirmed: int) -> bool:
        self.calls.append(("board", expected, confirmed))
        return True

    def notify_limit_reached(self) -> bool:
        self.calls.append(("limit",))
        return True

    def notify_purchase_failure(self, reason: str) -> bool:
        self.calls.append(("purchase_failure", reason))
        return True

    def notify_error(self, stage: str, exc: Optional[BaseException] = None) -> bool:
        self.calls.append(("error", stage, exc))
        return True


# ── fixtures ─────────────────────────────────────────────────────────────────
@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def page() -> FakePage:
    return FakePage(url="https://www.dhlottery.co.kr/main")


@pytest.fixture
def session(page: FakePage, clock: FakeClock) -> FakeSession:
    return FakeSession(page, clock)


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()
