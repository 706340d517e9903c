# rpa/frames.py
"""
Navigable contexts: a thin wrapper over a Playwright Frame so that frame and
window search can be written as a bounded-depth walk instead of literal
switchTo() bookkeeping.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from playwright.sync_api import Frame

log = logging.getLogger("rpa.frames")


class NavigableContext:
    """One document (top page or iframe) that can be queried and descended into."""

    def __init__(self, frame: Frame, label: str = "main"):
        self.frame = frame
        self.label = label

    def __repr__(self) -> str:
        return f"<NavigableContext {self.label} {self.url!r}>"

    @property
    def url(self) -> str:
        try:
            return self.frame.url or ""
        except Exception:
            return ""

    # ── queries ──────────────────────────────────────────────────────────
    def locator(self, selector: str):
        return self.frame.locator(selector)

    def evaluate(self, script: str, arg: Any = None) -> Any:
        if arg is None:
            return self.frame.evaluate(script)
        return self.frame.evaluate(script, arg)

    def content(self) -> str:
        return self.frame.content()

    def has(self, selector: str) -> bool:
        try:
            return self.frame.locator(selector).count() > 0
        except Exception as e:
            log.debug("%s: probe %s failed: %s", self.label, selector, e)
            return False

    # ── structure ────────────────────────────────────────────────────────
    def children(self) -> List["NavigableContext"]:
        try:
            kids = list(self.frame.child_frames)
        except Exception:
            return []
        out = []
        for i, f in enumerate(kids):
            name = ""
            try:
                name = f.name or ""
            except Exception:
                pass
            out.append(NavigableContext(f, f"{self.label}/{name or i}"))
        return out

    def child(self, name: str) -> Optional["NavigableContext"]:
        # Playwright reports the id attribute as the name when name= is absent
        for c in self.children():
            try:
                if c.frame.name == name:
                    return c
            except Exception:
                continue
        return None

    def parent(self) -> Optional["NavigableContext"]:
        try:
            p = self.frame.parent_frame
        except Exception:
            return None
        if p is None:
            return None
        return NavigableContext(p, self.label.rsplit("/", 1)[0] or "main")


def find_in_frames(root: NavigableContext, selector: str, max_depth: int = 2) -> Optional[NavigableContext]:
    """
    Depth-first over the frames below ``root``: each child is probed, then its
    own children, down to ``max_depth`` levels. ``root`` itself is not probed.
    """
    if max_depth <= 0:
        return None
    for child in root.children():
        if child.has(selector):
            return child
        nested = find_in_frames(child, selector, max_depth - 1)
        if nested is not None:
            return nested
    return None
