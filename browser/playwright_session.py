"""Playwright-backed browser session for ShopFlow runs.

This module owns the Playwright lifecycle (driver, browser, context, pages)
for exactly one flow run and exposes the non-blocking checks consumed by
:class:`shopflow.flow.runner.FlowRunner`. Pages opened by the site (for
example a product page in a new tab) are tracked as window handles in
opening order. A failure inside ``with PlaywrightSession(...)`` leaves a
full-page screenshot behind before the browser is released.
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import Sequence

from playwright.sync_api import (
    Browser,
    BrowserContext,
    Locator as PlaywrightLocator,
    Page,
    Playwright,
    TimeoutError as PlaywrightTimeoutError,
    Error as PlaywrightError,
    sync_playwright,
)

from shopflow.core.errors import (
    BrowserError,
    NavigationError,
    NoWindowError,
    SessionClosedError,
    StepTimeoutError,
)
from shopflow.core.logger import get_logger
from shopflow.core.settings import RunSettings, ensure_work_dirs
from shopflow.flow.locators import Locator


def selector_for(locator: Locator) -> str:
    """Translate a :class:`Locator` into a Playwright selector string."""

    if locator.by == "name":
        return f'[name="{locator.value}"]'
    if locator.by == "class_name":
        return "." + ".".join(locator.value.split())
    if locator.by == "xpath":
        return f"xpath={locator.value}"
    return locator.value


class PlaywrightSession:
    """Single-use browser session with guaranteed release.

    The session is acquired by entering the context manager and released
    exactly once when the block exits, whatever the outcome. A released
    session refuses to start again.
    """

    _LAUNCH_CHANNELS: tuple[str | None, ...] = (None, "msedge", "chrome")

    def __init__(
        self,
        settings: RunSettings | None = None,
        *,
        screenshots_dir: Path | None = None,
        logger=None,
    ) -> None:
        self.settings = settings or RunSettings()
        self.logger = logger or get_logger()
        self.screenshots_dir = screenshots_dir or ensure_work_dirs()["shot"]
        self.screenshots_dir.mkdir(parents=True, exist_ok=True)

        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None
        self._page: Page | None = None
        self._windows: dict[str, Page] = {}
        self._window_seq = 0
        self._closed = False
        self.browser_channel: str | None = None

    # ------------------------------------------------------------------
    # Lifecycle helpers
    def __enter__(self) -> "PlaywrightSession":
        self.ensure_ready()
        return self

    def __exit__(self, exc_type, exc, _tb) -> bool:
        if exc is not None:
            self.logger.error("browser session failed: %s", exc)
            self.screenshot("failure")
        self.close()
        # Do not suppress exceptions
        return False

    @property
    def closed(self) -> bool:
        return self._closed

    def ensure_ready(self) -> Page:
        """Start Playwright and open the first window if not done yet."""

        if self._closed:
            raise SessionClosedError("browser session already released")
        if self._page is not None:
            return self._page

        try:
            self._playwright = sync_playwright().start()
        except Exception as exc:  # noqa: BLE001
            raise BrowserError("Playwright failed to start, run: python -m playwright install chromium") from exc

        try:
            self._browser = self._launch_browser(self._playwright)
            self._context = self._new_context(self._browser)
            self._context.on("page", self._register_page)
            page = self._context.new_page()
        except Exception:
            self.close()
            raise
        if page not in self._windows.values():
            self._register_page(page)
        self._page = page
        return page

    def close(self) -> None:
        """Release Playwright resources; later calls are no-ops."""

        if self._closed:
            return
        self._closed = True
        if self._context is not None:
            try:
                self._context.close()
            except PlaywrightError:
                self.logger.warning("closing BrowserContext failed", exc_info=True)
        if self._browser is not None:
            try:
                self._browser.close()
            except PlaywrightError:
                self.logger.warning("closing Browser failed", exc_info=True)
        if self._playwright is not None:
            try:
                self._playwright.stop()
            except PlaywrightError:
                self.logger.warning("stopping Playwright failed", exc_info=True)

        self._context = None
        self._browser = None
        self._playwright = None
        self._page = None
        self._windows.clear()
        self.logger.info("browser session released")

    # ------------------------------------------------------------------
    # Navigation
    def navigate(self, url: str) -> None:
        page = self._active_page()
        try:
            response = page.goto(url, wait_until="domcontentloaded", timeout=self.settings.timeout_ms)
        except PlaywrightTimeoutError as exc:
            raise NavigationError(f"page load timed out: {url}") from exc
        except PlaywrightError as exc:
            raise NavigationError(f"page load failed: {url}") from exc
        if response is not None and response.status >= 400:
            raise NavigationError(f"page load failed with HTTP {response.status}: {url}")

    # ------------------------------------------------------------------
    # Element queries
    def locate(self, locator: Locator) -> Sequence[PlaywrightLocator]:
        page = self._active_page()
        try:
            return page.locator(selector_for(locator)).all()
        except PlaywrightError:
            self.logger.debug("locate failed for %s", locator, exc_info=True)
            return []

    def is_clickable(self, element: PlaywrightLocator) -> bool:
        try:
            return element.is_visible() and element.is_enabled()
        except PlaywrightError:
            return False

    def click(self, element: PlaywrightLocator, timeout_sec: float | None = None) -> None:
        timeout_ms = self.settings.timeout_ms if timeout_sec is None else max(1, int(timeout_sec * 1000))
        try:
            element.click(timeout=timeout_ms)
        except PlaywrightTimeoutError as exc:
            raise StepTimeoutError(f"click did not complete within {timeout_ms} ms: {exc}") from exc
        except PlaywrightError as exc:
            raise BrowserError(f"click failed: {exc}") from exc

    def send_keys(self, element: PlaywrightLocator, text: str) -> None:
        try:
            element.press_sequentially(text, timeout=self.settings.timeout_ms)
        except PlaywrightTimeoutError as exc:
            raise StepTimeoutError(f"typing timed out: {exc}") from exc
        except PlaywrightError as exc:
            raise BrowserError(f"typing failed: {exc}") from exc

    def clear(self, element: PlaywrightLocator) -> None:
        try:
            element.clear(timeout=self.settings.timeout_ms)
        except PlaywrightTimeoutError as exc:
            raise StepTimeoutError(f"clearing input timed out: {exc}") from exc
        except PlaywrightError as exc:
            raise BrowserError(f"clearing input failed: {exc}") from exc

    def value_of(self, element: PlaywrightLocator) -> str:
        try:
            return element.input_value(timeout=self.settings.timeout_ms)
        except PlaywrightTimeoutError as exc:
            raise StepTimeoutError(f"reading input value timed out: {exc}") from exc
        except PlaywrightError as exc:
            raise BrowserError(f"reading input value failed: {exc}") from exc

    # ------------------------------------------------------------------
    # Windows
    def list_windows(self) -> list[str]:
        for handle, page in list(self._windows.items()):
            if page.is_closed():
                del self._windows[handle]
        return list(self._windows)

    def switch_window(self, handle: str) -> None:
        page = self._windows.get(handle)
        if page is None or page.is_closed():
            raise NoWindowError(f"unknown window handle: {handle}")
        page.bring_to_front()
        self._page = page

    def pause(self, seconds: float) -> None:
        # wait_for_timeout keeps Playwright dispatching events (new pages)
        if self._page is not None and not self._page.is_closed():
            self._page.wait_for_timeout(seconds * 1000)
        else:
            time.sleep(seconds)

    # ------------------------------------------------------------------
    # Diagnostics
    def screenshot(self, label: str) -> Path | None:
        page = self._page
        if page is None:
            return None
        timestamp = time.strftime("%Y%m%d-%H%M%S")
        path = self.screenshots_dir / f"{label}_{timestamp}.png"
        try:
            page.screenshot(path=str(path), full_page=True)
        except PlaywrightError:
            self.logger.warning("screenshot failed", exc_info=True)
            return None
        self.logger.info("screenshot saved: %s", path)
        return path

    # ------------------------------------------------------------------
    # Internal helpers
    def _active_page(self) -> Page:
        return self.ensure_ready()

    def _register_page(self, page: Page) -> None:
        self._window_seq += 1
        handle = f"window-{self._window_seq}"
        self._windows[handle] = page
        self.logger.debug("window opened: %s", handle)

    def _launch_browser(self, playwright: Playwright) -> Browser:
        channels: list[str | None] = list(self._LAUNCH_CHANNELS)
        preferred = self.settings.browser_channel
        if preferred:
            channels = [preferred] + [c for c in channels if c != preferred]
        args = [] if self.settings.viewport else ["--start-maximized"]
        last_exc: PlaywrightError | None = None
        for channel in channels:
            try:
                if channel is None:
                    browser = playwright.chromium.launch(headless=self.settings.headless, args=args)
                else:
                    browser = playwright.chromium.launch(headless=self.settings.headless, channel=channel, args=args)
            except PlaywrightError as exc:
                last_exc = exc
                continue
            self.browser_channel = channel or "chromium"
            return browser
        raise BrowserError(
            "cannot launch Chromium, run: python -m playwright install chromium, or install Edge/Chrome"
        ) from last_exc

    def _new_context(self, browser: Browser) -> BrowserContext:
        viewport = self.settings.viewport
        if viewport:
            context = browser.new_context(viewport={"width": viewport[0], "height": viewport[1]})
        else:
            context = browser.new_context(no_viewport=True)
        context.set_default_timeout(self.settings.timeout_ms)
        return context
