from __future__ import annotations

import faulthandler
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

faulthandler.enable()  # Ensure crashes emit tracebacks.

from shopflow.core.errors import NavigationError, NoWindowError, StepTimeoutError
from shopflow.flow.locators import Locator


@pytest.fixture(autouse=True)
def _isolated_logger(tmp_path, monkeypatch):
    """Keep log files out of the project workspace."""

    import shopflow.core.logger as core_logger

    monkeypatch.setattr(core_logger, "_work_dir", lambda: tmp_path / "work")
    monkeypatch.setattr(core_logger, "_LOGGER", None, raising=False)
    yield
    logger = core_logger._LOGGER
    if logger is not None:
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()


class FakeClock:
    """Monotonic clock that only advances when something sleeps."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@dataclass
class FakeElement:
    label: str
    clickable: bool = True
    value: str = ""


@dataclass
class FakeSession:
    """In-memory stand-in for a browser session.

    ``elements`` maps locators to what ``locate`` returns, ``on_click`` runs
    side effects (for example opening a window) and ``events`` records every
    interaction in order. Clicking a label listed in ``click_failures`` times
    out the way a covered or detached element does in a real browser.
    """

    elements: dict[Locator, list[FakeElement]] = field(default_factory=dict)
    on_click: dict[str, Callable[["FakeSession"], None]] = field(default_factory=dict)
    windows: list[str] = field(default_factory=lambda: ["window-1"])
    failing_urls: set[str] = field(default_factory=set)
    click_failures: set[str] = field(default_factory=set)
    events: list[tuple[str, ...]] = field(default_factory=list)
    click_timeouts: list[float | None] = field(default_factory=list)
    active_window: str = "window-1"
    closed_count: int = 0

    def add(self, locator: Locator, *elements: FakeElement) -> None:
        self.elements.setdefault(locator, []).extend(elements)

    def navigate(self, url: str) -> None:
        if url in self.failing_urls:
            raise NavigationError(f"page load failed: {url}")
        self.events.append(("navigate", url))

    def locate(self, locator: Locator) -> list[FakeElement]:
        return list(self.elements.get(locator, []))

    def is_clickable(self, element: FakeElement) -> bool:
        return element.clickable

    def click(self, element: FakeElement, timeout_sec: float | None = None) -> None:
        self.click_timeouts.append(timeout_sec)
        if element.label in self.click_failures:
            raise StepTimeoutError(f"click did not complete: {element.label}")
        self.events.append(("click", element.label))
        hook = self.on_click.get(element.label)
        if hook is not None:
            hook(self)

    def send_keys(self, element: FakeElement, text: str) -> None:
        element.value += text
        self.events.append(("send_keys", element.label, text))

    def clear(self, element: FakeElement) -> None:
        element.value = ""
        self.events.append(("clear", element.label))

    def value_of(self, element: FakeElement) -> str:
        return element.value

    def list_windows(self) -> list[str]:
        return list(self.windows)

    def switch_window(self, handle: str) -> None:
        if handle not in self.windows:
            raise NoWindowError(handle)
        self.active_window = handle
        self.events.append(("switch_window", handle))

    def pause(self, seconds: float) -> None:
        self.events.append(("pause", str(seconds)))

    def close(self) -> None:
        self.closed_count += 1

    def open_window(self) -> str:
        handle = f"window-{len(self.windows) + 1}"
        self.windows.append(handle)
        return handle


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def make_element() -> Callable[..., FakeElement]:
    return FakeElement
