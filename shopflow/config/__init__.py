"""Configuration helpers for ShopFlow flow definitions.

Flow files are YAML documents naming the start page, the search input and
every locator the order flow touches. They are validated with pydantic so
that a typo in a selector file fails before a browser is launched.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Literal, Optional, Tuple

import yaml
from pydantic import BaseModel, ConfigDict, Field, PositiveFloat, PositiveInt, ValidationError

from shopflow.core.errors import ConfigError
from shopflow.core.settings import (
    DEFAULT_POLL_INTERVAL_SEC,
    DEFAULT_TIMEOUT_SEC,
    RunSettings,
    resolve_config_path,
)
from shopflow.flow.locators import Locator
from shopflow.flow.runner import CheckoutLocators


CONFIG_DIR = Path(__file__).resolve().parent
DEFAULT_FLOW_PATH = CONFIG_DIR / "flows" / "flipkart_order.yaml"


class FlowConfigError(ConfigError):
    """Raised when a flow definition fails validation."""


class LocatorEntry(BaseModel):
    """One ``{by, value}`` locator entry."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    by: Literal["name", "class_name", "xpath", "css"]
    value: str = Field(min_length=1)

    def to_locator(self) -> Locator:
        return Locator(self.by, self.value)


class FlowLocators(BaseModel):
    """Locators for every step of the order flow."""

    model_config = ConfigDict(extra="forbid")

    search_box: LocatorEntry
    suggestions: LocatorEntry
    suggestion_target: Optional[LocatorEntry] = None
    filter: LocatorEntry
    result: LocatorEntry
    checkout: LocatorEntry
    place_order: LocatorEntry
    contact_field: LocatorEntry

    def checkout_locators(self) -> CheckoutLocators:
        return CheckoutLocators(
            checkout=self.checkout.to_locator(),
            place_order=self.place_order.to_locator(),
            contact_field=self.contact_field.to_locator(),
        )


class RunSettingsEntry(BaseModel):
    """The optional ``settings`` block of a flow file."""

    model_config = ConfigDict(extra="forbid")

    timeout_sec: PositiveFloat = DEFAULT_TIMEOUT_SEC
    poll_interval_sec: PositiveFloat = DEFAULT_POLL_INTERVAL_SEC
    headless: bool = True
    browser_channel: Optional[str] = None
    viewport: Optional[Tuple[PositiveInt, PositiveInt]] = None

    def to_run_settings(self) -> RunSettings:
        return RunSettings(
            timeout_sec=self.timeout_sec,
            poll_interval_sec=self.poll_interval_sec,
            headless=self.headless,
            browser_channel=self.browser_channel,
            viewport=self.viewport,
        )


class OrderFlowDefinition(BaseModel):
    """Complete order flow file model."""

    model_config = ConfigDict(extra="forbid")

    name: str = "order"
    url: str = Field(min_length=1)
    search_term: str = Field(min_length=1)
    filter_name: str = ""
    checkout_timeout_policy: Literal["strict", "best_effort"] = "strict"
    settings: RunSettingsEntry = Field(default_factory=RunSettingsEntry)
    locators: FlowLocators

    def run_settings(self) -> RunSettings:
        """Settings from the file with ``SHOPFLOW_*`` env overrides applied."""

        return RunSettings.from_env(self.settings.to_run_settings())


def load_flow(path: str | Path | None = None) -> OrderFlowDefinition:
    """Load and validate an order flow definition."""

    flow_path = resolve_config_path(path) if path else DEFAULT_FLOW_PATH
    raw = _load_yaml(flow_path)
    try:
        return OrderFlowDefinition.model_validate(raw)
    except ValidationError as exc:
        raise FlowConfigError(f"invalid flow file {flow_path}: {exc}") from exc


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise ConfigError(f"flow file not found: {path}")
    with path.open("r", encoding="utf-8") as handle:
        try:
            data = yaml.safe_load(handle) or {}
        except yaml.YAMLError as exc:
            raise FlowConfigError(f"flow file is not valid YAML: {path}") from exc
    if not isinstance(data, dict):
        raise FlowConfigError("flow file must contain a mapping")
    return data


__all__ = [
    "DEFAULT_FLOW_PATH",
    "FlowConfigError",
    "FlowLocators",
    "LocatorEntry",
    "OrderFlowDefinition",
    "RunSettingsEntry",
    "load_flow",
]
