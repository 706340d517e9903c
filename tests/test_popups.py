from __future__ import annotations

from conftest import FakeElement, FakeSession

from automation.lotto.popups import MAX_ROUNDS, dismiss_popups


def test_closes_visible_popup_and_stops_when_nothing_left(session: FakeSession) -> None:
    btn = FakeElement(hide_on_click=True)
    session.page.main_frame.put(".btn-today-close", btn)

    assert dismiss_popups(session) == 1
    assert btn.clicks == 1
    # second round found nothing and ended the loop
    assert session.page.keyboard.pressed == ["Escape", "Escape"]


def test_rounds_are_bounded(session: FakeSession) -> None:
    stubborn = FakeElement()
    session.page.main_frame.put(".popup-close", stubborn)

    assert dismiss_popups(session) == MAX_ROUNDS
    assert stubborn.clicks == MAX_ROUNDS


def test_script_click_fallback(session: FakeSession) -> None:
    btn = FakeElement(click_raises=True, hide_on_click=True)
    session.page.main_frame.put(".btn-close", btn)

    assert dismiss_popups(session) == 1
    assert btn.clicks == 1


def test_hidden_controls_are_ignored(session: FakeSession) -> None:
    session.page.main_frame.put(".modal", FakeElement(visible=False))
    assert dismiss_popups(session) == 0


def test_never_raises(session: FakeSession) -> None:
    def broken(selector):
        raise RuntimeError("page crashed")

    session.page.locator = broken
    session.page.keyboard = None
    assert dismiss_popups(session) == 0
