"""ShopFlow: scripted e-commerce UI flows on Playwright."""

__version__ = "0.1.0"
