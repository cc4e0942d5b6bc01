"""Browser automation helpers built on Playwright."""

from .playwright_session import PlaywrightSession, selector_for

__all__ = ["PlaywrightSession", "selector_for"]
