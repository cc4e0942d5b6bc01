"""Custom exceptions used across ShopFlow."""


class ShopFlowError(Exception):
    """Base error for the application."""


class ConfigError(ShopFlowError):
    """Configuration related error."""


class BrowserError(ShopFlowError):
    """Raised when browser automation fails."""


class NavigationError(BrowserError):
    """Raised when a page cannot be loaded."""


class ElementNotFoundError(BrowserError):
    """Raised when no element matches a locator before the wait bound."""


class StepTimeoutError(BrowserError, TimeoutError):
    """Raised when an explicit wait exceeds its deadline."""


class NoWindowError(BrowserError):
    """Raised when no newer window exists to switch to."""


class SessionClosedError(BrowserError):
    """Raised when a released browser session is used again."""
