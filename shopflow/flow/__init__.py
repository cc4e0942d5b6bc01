"""Sequential browser flow steps."""

from .contact import ContactDetails, generate_contact, generate_email, generate_phone
from .locators import Locator
from .runner import CheckoutLocators, FlowRunner
from .session import BrowserSession

__all__ = [
    "BrowserSession",
    "CheckoutLocators",
    "ContactDetails",
    "FlowRunner",
    "Locator",
    "generate_contact",
    "generate_email",
    "generate_phone",
]
