"""Immutable element locators shared by the flow steps."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

Strategy = Literal["name", "class_name", "xpath", "css"]

STRATEGIES: tuple[str, ...] = ("name", "class_name", "xpath", "css")


@dataclass(frozen=True, slots=True)
class Locator:
    """A selection strategy plus its target string."""

    by: Strategy
    value: str

    def __post_init__(self) -> None:
        if self.by not in STRATEGIES:
            raise ValueError(f"unknown locator strategy: {self.by}")
        if not self.value:
            raise ValueError("locator value must not be empty")

    @classmethod
    def by_name(cls, value: str) -> "Locator":
        return cls("name", value)

    @classmethod
    def by_class(cls, value: str) -> "Locator":
        return cls("class_name", value)

    @classmethod
    def by_xpath(cls, value: str) -> "Locator":
        return cls("xpath", value)

    @classmethod
    def by_css(cls, value: str) -> "Locator":
        return cls("css", value)

    def __str__(self) -> str:
        return f"{self.by}={self.value}"
