# rpa/browser.py
"""
Playwright session for one unattended run.

One browser, one context, one "current" page. The session also remembers the
active document (page or iframe) that later steps should act on, and accepts
every native dialog (confirm/alert) while keeping its text for diagnostics.
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, List, Optional, Union

from playwright.sync_api import sync_playwright, Browser, BrowserContext, Dialog, Frame, Page

from rpa.frames import NavigableContext

log = logging.getLogger("rpa.browser")

DESKTOP_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


class BrowserError(RuntimeError):
    pass


class BrowserSession:
    def __init__(
        self,
        headless: bool = True,
        slowmo_ms: int = 0,
        timeout_sec: int = 30,
        block_images: bool = False,
        debug_dir: Optional[str] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.headless = headless
        self.slowmo_ms = slowmo_ms
        self.timeout_sec = timeout_sec
        self.block_images = block_images
        self.debug_dir = debug_dir
        self.clock = clock
        self.sleep = sleep

        self._pw = None
        self._browser: Optional[Browser] = None
        self._ctx: Optional[BrowserContext] = None
        self.page: Optional[Page] = None
        self.active: Optional[NavigableContext] = None
        self.dialog_messages: List[str] = []

    # ── lifecycle ────────────────────────────────────────────────────────────
    def start(self):
        self._pw = sync_playwright().start()
        self._browser = self._pw.chromium.launch(
            headless=self.headless,
            slow_mo=self.slowmo_ms if self.slowmo_ms > 0 else 0,
            args=[
                "--no-sandbox",
                "--disable-dev-shm-usage",
                "--disable-gpu",
                "--disable-blink-features=AutomationControlled",
            ],
        )
        self._ctx = self._browser.new_context(
            viewport={"width": 1920, "height": 1080},
            user_agent=DESKTOP_UA,
            locale="ko-KR",
        )
        if self.block_images:
            self._ctx.route("**/*", self._drop_images)
        self._ctx.on("page", self._watch_page)

        page = self._ctx.new_page()
        self._adopt(page)
        log.info("Chromium started (headless=%s)", self.headless)

    def stop(self):
        try:
            if self._ctx:
                self._ctx.close()
        except Exception as e:
            log.debug("context close: %s", e)
        finally:
            try:
                if self._browser:
                    self._browser.close()
            except Exception as e:
                log.debug("browser close: %s", e)
            finally:
                if self._pw:
                    self._pw.stop()
                self._pw = None
                self._browser = None
                self._ctx = None
                self.page = None
                self.active = None
                log.info("Browser closed")

    @contextmanager
    def session(self):
        self.start()
        try:
            yield self
        finally:
            self.stop()

    # ── page bookkeeping ─────────────────────────────────────────────────────
    def _adopt(self, page: Page):
        page.set_default_timeout(self.timeout_sec * 1000)
        page.set_default_navigation_timeout(self.timeout_sec * 1000)
        self.page = page
        self.active = self.root()

    def _watch_page(self, page: Page):
        # popup windows need the same dialog policy as the main page
        page.on("dialog", self._on_dialog)

    def _on_dialog(self, dialog: Dialog):
        msg = ""
        try:
            msg = dialog.message or ""
        except Exception:
            pass
        self.dialog_messages.append(msg)
        log.info("native dialog (%s) accepted: %s", getattr(dialog, "type", "?"), msg)
        try:
            dialog.accept()
        except Exception as e:
            log.debug("dialog accept failed: %s", e)

    @staticmethod
    def _drop_images(route):
        if route.request.resource_type == "image":
            route.abort()
        else:
            route.continue_()

    def root(self) -> NavigableContext:
        if self.page is None:
            raise BrowserError("Browser session is not started.")
        return NavigableContext(self.page.main_frame, "main")

    def pages(self) -> List[Page]:
        if self.page is None:
            return []
        try:
            return list(self.page.context.pages)
        except Exception:
            return [self.page]

    def switch_to_page(self, page: Page):
        if page is self.page:
            return
        try:
            page.bring_to_front()
        except Exception:
            pass
        self._adopt(page)
        log.info("switched to window %s", page.url)

    def use(self, ctx: Union[NavigableContext, Frame]):
        if not isinstance(ctx, NavigableContext):
            ctx = NavigableContext(ctx, "frame")
        self.active = ctx

    # ── navigation ───────────────────────────────────────────────────────────
    def wait_for_idle(self, where: Optional[Union[Page, Frame]] = None, timeout_ms: int = 8000):
        where = where or self.page
        try:
            where.wait_for_load_state("networkidle", timeout=timeout_ms)  # type: ignore[union-attr]
        except Exception:
            pass

    def goto(self, url: str, label: str = ""):
        p = self.page
        if p is None:
            raise BrowserError("Browser session is not started.")
        last_err = None
        for attempt in range(1, 4):
            try:
                p.goto(url, wait_until="domcontentloaded", timeout=self.timeout_sec * 1000)
                self.wait_for_idle(p, 5000)
                self.active = self.root()
                log.info("opened %s (%s)", label or url, p.url)
                return
            except Exception as e:
                last_err = e
                log.warning("goto %s failed (attempt %d/3): %s", label or url, attempt, e)
                self.pause(0.8)
        raise BrowserError(f"Failed to navigate to {label or url}: {last_err}")

    def pause(self, seconds: float):
        if seconds > 0:
            self.sleep(seconds)

    # ── diagnostics ──────────────────────────────────────────────────────────
    def screenshot(self, name: str) -> Optional[str]:
        if not self.debug_dir or self.page is None:
            return None
        try:
            Path(self.debug_dir).mkdir(parents=True, exist_ok=True)
            path = str(Path(self.debug_dir) / f"{name}.png")
            self.page.screenshot(path=path, full_page=True)
            log.info("screenshot saved: %s", path)
            return path
        except Exception as e:
            log.warning("screenshot failed: %s", e)
            return None
