"""Sequential shopping-flow steps driven through a :class:`BrowserSession`.

Every wait in this module is an explicit wait: a readiness check repeated
until it succeeds or a deadline derived from the shared timeout passes.
There are no fixed delays, so a step finishes as soon as the page is ready
and fails with a typed error once the bound is exceeded.
"""

from __future__ import annotations

import random
import time
from dataclasses import dataclass
from typing import Any, Callable, Literal, TypeVar

from shopflow.core.errors import ElementNotFoundError, NavigationError, NoWindowError, StepTimeoutError
from shopflow.core.logger import get_logger
from shopflow.core.settings import DEFAULT_POLL_INTERVAL_SEC, DEFAULT_TIMEOUT_SEC, RunSettings

from .contact import ContactDetails, generate_contact
from .locators import Locator
from .session import BrowserSession

T = TypeVar("T")

CheckoutTimeoutPolicy = Literal["strict", "best_effort"]
CHECKOUT_TIMEOUT_POLICIES: tuple[str, ...] = ("strict", "best_effort")

# Playwright reads a zero timeout as "wait forever"
MIN_ACTION_TIMEOUT_SEC = 0.001


@dataclass(frozen=True, slots=True)
class CheckoutLocators:
    """Controls touched by :meth:`FlowRunner.run_checkout`."""

    checkout: Locator
    place_order: Locator
    contact_field: Locator


class FlowRunner:
    """Run flow steps against one explicitly owned browser session."""

    def __init__(
        self,
        session: BrowserSession,
        *,
        timeout_sec: float = DEFAULT_TIMEOUT_SEC,
        poll_interval_sec: float = DEFAULT_POLL_INTERVAL_SEC,
        checkout_timeout_policy: CheckoutTimeoutPolicy = "strict",
        rng: random.Random | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] | None = None,
        logger=None,
    ) -> None:
        if timeout_sec <= 0:
            raise ValueError(f"timeout_sec must be positive, got {timeout_sec}")
        if poll_interval_sec <= 0:
            raise ValueError(f"poll_interval_sec must be positive, got {poll_interval_sec}")
        if checkout_timeout_policy not in CHECKOUT_TIMEOUT_POLICIES:
            raise ValueError(f"unknown checkout timeout policy: {checkout_timeout_policy}")
        self.session = session
        self.timeout_sec = timeout_sec
        self.poll_interval_sec = poll_interval_sec
        self.checkout_timeout_policy = checkout_timeout_policy
        self.logger = logger or get_logger()
        self._rng = rng or random.Random()
        self._clock = clock
        self._sleep = sleep or session.pause

    @classmethod
    def from_settings(cls, session: BrowserSession, settings: RunSettings, **kwargs: Any) -> "FlowRunner":
        return cls(
            session,
            timeout_sec=settings.timeout_sec,
            poll_interval_sec=settings.poll_interval_sec,
            **kwargs,
        )

    # ------------------------------------------------------------------
    # Primitives
    def open(self, url: str) -> None:
        if not url:
            raise NavigationError("no URL given")
        self.logger.info("flow.open url=%s", url)
        self.session.navigate(url)

    def type_into(self, locator: Locator, text: str) -> Any:
        """Send ``text`` to the first element matching ``locator``.

        Raises:
            ElementNotFoundError: Nothing matched before the timeout.
        """

        element = self._require(locator)
        self.logger.info("flow.type locator=%s", locator)
        self.session.send_keys(element, text)
        return element

    def wait_and_click(self, locator: Locator) -> Any:
        """Poll until the first match of ``locator`` is clickable, then click it.

        The click itself only gets what is left of the same deadline.

        Raises:
            StepTimeoutError: The element was absent or not clickable when the
                timeout expired, or the click did not land before it.
        """

        deadline = self._clock() + self.timeout_sec
        element = self._wait_for(lambda: self._first_clickable(locator), deadline=deadline)
        if element is None:
            raise StepTimeoutError(f"element not clickable within {self.timeout_sec:.1f}s: {locator}")
        self.logger.info("flow.click locator=%s", locator)
        remaining = max(deadline - self._clock(), MIN_ACTION_TIMEOUT_SEC)
        self.session.click(element, timeout_sec=remaining)
        return element

    def switch_to_newest_window(self) -> str:
        """Activate the most recently opened window and return its handle.

        Raises:
            NoWindowError: Only one window stayed open for the whole timeout.
        """

        handles = self._wait_for(self._windows_if_several)
        if handles is None:
            raise NoWindowError("no new window was opened")
        newest = handles[-1]
        self.logger.info("flow.switch_window handle=%s total=%d", newest, len(handles))
        self.session.switch_window(newest)
        return newest

    # ------------------------------------------------------------------
    # Flow steps
    def search(self, locator: Locator, term: str) -> Any:
        self.logger.info("flow.search term=%s", term)
        return self.type_into(locator, term)

    def pick_suggestion(self, suggestions: Locator, target: Locator | None = None) -> Any:
        """Click ``target`` once the suggestion list shows an entry.

        Without ``target`` the first suggestion itself is clicked.
        """

        self._require(suggestions)
        return self.wait_and_click(target or suggestions)

    def apply_filter(self, name: str, locator: Locator) -> Any:
        self.logger.info("flow.filter name=%s", name)
        return self.wait_and_click(locator)

    def select_result(self, locator: Locator) -> str:
        self.wait_and_click(locator)
        return self.switch_to_newest_window()

    def run_checkout(self, locators: CheckoutLocators, contact: ContactDetails | None = None) -> ContactDetails:
        """Proceed to checkout, place the order and fill the contact field.

        The contact field first receives the email, which is cleared once
        the page reflects it, then the phone number.
        """

        try:
            self.wait_and_click(locators.checkout)
            self.wait_and_click(locators.place_order)
        except StepTimeoutError as exc:
            if self.checkout_timeout_policy == "strict":
                raise
            self.logger.warning("flow.checkout controls timed out, continuing best-effort: %s", exc)

        contact = contact or generate_contact(self._rng)
        field = self._require(locators.contact_field)
        self.session.click(field)

        self.logger.info("flow.contact email=%s", contact.email)
        self.session.send_keys(field, contact.email)
        self._wait_for_value(field, contact.email)
        self.session.clear(field)
        self._wait_for_value(field, "")

        self.logger.info("flow.contact phone=%s", contact.phone)
        self.session.send_keys(field, contact.phone)
        return contact

    # ------------------------------------------------------------------
    # Internal helpers
    def _wait_for(self, condition: Callable[[], T | None], *, deadline: float | None = None) -> T | None:
        if deadline is None:
            deadline = self._clock() + self.timeout_sec
        while True:
            result = condition()
            if result is not None:
                return result
            remaining = deadline - self._clock()
            if remaining <= 0:
                return None
            self._sleep(min(self.poll_interval_sec, remaining))

    def _require(self, locator: Locator) -> Any:
        element = self._wait_for(lambda: self._first(locator))
        if element is None:
            raise ElementNotFoundError(f"no element within {self.timeout_sec:.1f}s: {locator}")
        return element

    def _first(self, locator: Locator) -> Any | None:
        elements = self.session.locate(locator)
        return elements[0] if elements else None

    def _first_clickable(self, locator: Locator) -> Any | None:
        element = self._first(locator)
        if element is not None and self.session.is_clickable(element):
            return element
        return None

    def _windows_if_several(self) -> list[str] | None:
        handles = list(self.session.list_windows())
        return handles if len(handles) > 1 else None

    def _wait_for_value(self, element: Any, expected: str) -> None:
        matched = self._wait_for(lambda: True if self.session.value_of(element) == expected else None)
        if matched is None:
            raise StepTimeoutError(f"field value did not become {expected!r} within {self.timeout_sec:.1f}s")
