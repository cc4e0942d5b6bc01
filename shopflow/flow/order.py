"""Six-step order flow (open, search, suggestion, filter, result, checkout) built on FlowRunner."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from shopflow.config import OrderFlowDefinition

from .contact import ContactDetails
from .runner import FlowRunner


ProgressCB = Callable[[str, str], None]


@dataclass
class OrderFlowResult:
    flow: str
    product_window: str
    contact: ContactDetails


def run_order_flow(
    runner: FlowRunner,
    definition: OrderFlowDefinition,
    progress_cb: ProgressCB | None = None,
) -> OrderFlowResult:
    """Run open -> search -> suggestion -> filter -> result -> checkout in order.

    The first failing step aborts the run; nothing is retried.
    """

    def progress(stage: str, detail: str = "") -> None:
        if progress_cb:
            progress_cb(stage, detail)
        runner.logger.info("%s - %s", stage, detail)

    locators = definition.locators

    progress("1/6 open", definition.url)
    runner.open(definition.url)

    progress("2/6 search", definition.search_term)
    runner.search(locators.search_box.to_locator(), definition.search_term)

    progress("3/6 suggestion", "pick first suggestion")
    target = locators.suggestion_target.to_locator() if locators.suggestion_target else None
    runner.pick_suggestion(locators.suggestions.to_locator(), target)

    progress("4/6 filter", definition.filter_name)
    runner.apply_filter(definition.filter_name, locators.filter.to_locator())

    progress("5/6 result", "open first result")
    window = runner.select_result(locators.result.to_locator())

    progress("6/6 checkout", "place order and fill contact")
    contact = runner.run_checkout(locators.checkout_locators())

    progress("done", definition.name)
    return OrderFlowResult(flow=definition.name, product_window=window, contact=contact)
