"""Browser capabilities consumed by :class:`~shopflow.flow.runner.FlowRunner`."""

from __future__ import annotations

from typing import Any, Protocol, Sequence

from .locators import Locator


class BrowserSession(Protocol):
    """Minimal element-query and interaction surface of a live browser.

    Every method is a single, non-blocking query or action. Waiting is the
    runner's job, so ``locate`` returns whatever matches right now (possibly
    nothing) and ``is_clickable`` answers for the current instant only.
    """

    def navigate(self, url: str) -> None:
        """Load ``url`` in the active window, raising ``NavigationError`` on failure."""

    def locate(self, locator: Locator) -> Sequence[Any]:
        """Return the elements currently matching ``locator`` in document order."""

    def is_clickable(self, element: Any) -> bool:
        ...

    def click(self, element: Any, timeout_sec: float | None = None) -> None:
        """Click ``element``, raising ``StepTimeoutError`` if it does not land in time."""

    def send_keys(self, element: Any, text: str) -> None:
        ...

    def clear(self, element: Any) -> None:
        ...

    def value_of(self, element: Any) -> str:
        """Return the current input value of ``element``."""

    def list_windows(self) -> Sequence[str]:
        """Return window handles ordered from oldest to most recently opened."""

    def switch_window(self, handle: str) -> None:
        ...

    def pause(self, seconds: float) -> None:
        """Idle between two readiness checks while letting the driver process events."""

    def close(self) -> None:
        """Release the browser; calling it again must be a no-op."""
