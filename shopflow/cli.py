"""Typer based command line entry points for ShopFlow."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Optional

import typer

from browser.playwright_session import PlaywrightSession
from shopflow.config import load_flow
from shopflow.core.errors import ShopFlowError
from shopflow.core.logger import get_logger
from shopflow.flow.order import run_order_flow
from shopflow.flow.runner import FlowRunner

app = typer.Typer(name="shopflow", help="Run scripted e-commerce UI flows in a real browser.")


@app.callback()
def main() -> None:
    """ShopFlow command group."""


@app.command("run")
def cmd_run(
    flow: Optional[Path] = typer.Option(None, "--flow", help="Flow YAML file (defaults to the bundled Flipkart flow)"),
    timeout: Optional[float] = typer.Option(None, "--timeout", min=0.1, help="Explicit wait bound per step (seconds)"),
    headed: Optional[bool] = typer.Option(None, "--headed/--headless", help="Show or hide the browser window"),
) -> None:
    """Run an order flow end to end; exit code 1 on the first failing step."""

    logger = get_logger()
    try:
        definition = load_flow(flow)
        settings = definition.run_settings()
        if timeout is not None:
            settings = replace(settings, timeout_sec=timeout)
        if headed is not None:
            settings = replace(settings, headless=not headed)

        with PlaywrightSession(settings, logger=logger) as session:
            runner = FlowRunner.from_settings(
                session,
                settings,
                checkout_timeout_policy=definition.checkout_timeout_policy,
                logger=logger,
            )
            result = run_order_flow(runner, definition)
    except ShopFlowError as exc:
        logger.error("flow failed: %s", exc, exc_info=True)
        typer.secho(f"Error: {exc}", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    typer.secho(f"Flow {result.flow} completed", fg=typer.colors.GREEN)
    typer.echo(f"contact email={result.contact.email} phone={result.contact.phone}")


@app.command("show-flow")
def cmd_show_flow(
    flow: Optional[Path] = typer.Option(None, "--flow", help="Flow YAML file"),
) -> None:
    """Validate a flow file and print its steps."""

    try:
        definition = load_flow(flow)
    except ShopFlowError as exc:
        typer.secho(f"Error: {exc}", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    locators = definition.locators
    typer.echo(f"flow: {definition.name}")
    typer.echo(f"url: {definition.url}")
    typer.echo(f"search: {definition.search_term} via {locators.search_box.to_locator()}")
    typer.echo(f"suggestion: {locators.suggestions.to_locator()}")
    typer.echo(f"filter: {definition.filter_name} via {locators.filter.to_locator()}")
    typer.echo(f"result: {locators.result.to_locator()}")
    typer.echo(f"checkout policy: {definition.checkout_timeout_policy}")


if __name__ == "__main__":  # pragma: no cover
    app()
