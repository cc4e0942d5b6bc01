from __future__ import annotations

import dataclasses

import pytest

from browser.playwright_session import selector_for
from shopflow.flow.locators import Locator


def test_factories_set_strategy():
    assert Locator.by_name("q") == Locator("name", "q")
    assert Locator.by_class("_4rR01T") == Locator("class_name", "_4rR01T")
    assert Locator.by_xpath("//li") == Locator("xpath", "//li")
    assert Locator.by_css("li > a") == Locator("css", "li > a")


def test_locator_is_immutable_and_hashable():
    locator = Locator.by_name("q")

    with pytest.raises(dataclasses.FrozenInstanceError):
        locator.value = "other"  # type: ignore[misc]
    assert {locator: 1}[Locator.by_name("q")] == 1


@pytest.mark.parametrize("by,value", [("id", "x"), ("name", "")])
def test_invalid_locator_rejected(by, value):
    with pytest.raises(ValueError):
        Locator(by, value)  # type: ignore[arg-type]


@pytest.mark.parametrize(
    "locator,expected",
    [
        (Locator.by_name("q"), '[name="q"]'),
        (Locator.by_class("_4rR01T"), "._4rR01T"),
        (Locator.by_class("YGcVZO _2VHNef"), ".YGcVZO._2VHNef"),
        (Locator.by_xpath("//li[@class='_3D0G9a']"), "xpath=//li[@class='_3D0G9a']"),
        (Locator.by_css("button.buy"), "button.buy"),
    ],
)
def test_selector_for_playwright(locator, expected):
    assert selector_for(locator) == expected


def test_str_is_log_friendly():
    assert str(Locator.by_name("q")) == "name=q"
