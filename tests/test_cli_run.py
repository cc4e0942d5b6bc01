"""CLI integration tests for the order flow command."""

from __future__ import annotations

import time

import pytest
import yaml
from typer.testing import CliRunner

from shopflow import cli
from shopflow.config import load_flow


@pytest.fixture
def cli_runner() -> CliRunner:
    return CliRunner()


class SessionFactory:
    """Replaces PlaywrightSession; hands out the fake session once."""

    def __init__(self, session):
        self.session = session
        self.settings = None
        self.exits = 0

    def __call__(self, settings, logger=None):
        self.settings = settings
        return self

    def __enter__(self):
        return self.session

    def __exit__(self, exc_type, exc, tb):
        self.exits += 1
        self.session.close()
        return False


def _stock_page(session, make_element):
    locators = load_flow().locators
    for key in ("search_box", "suggestions", "suggestion_target", "filter", "result", "checkout", "place_order"):
        session.add(getattr(locators, key).to_locator(), make_element(key))
    session.add(locators.contact_field.to_locator(), make_element("contact"))
    session.on_click["result"] = lambda s: s.open_window()


def test_run_succeeds_with_exit_code_zero(cli_runner, monkeypatch, fake_session, make_element):
    _stock_page(fake_session, make_element)
    factory = SessionFactory(fake_session)
    monkeypatch.setattr(cli, "PlaywrightSession", factory)

    result = cli_runner.invoke(cli.app, ["run", "--headless", "--timeout", "3"])

    assert result.exit_code == 0, result.output
    assert "completed" in result.output
    assert factory.settings.headless is True
    assert factory.settings.timeout_sec == 3
    assert fake_session.closed_count == 1


def test_run_fails_with_exit_code_one(cli_runner, monkeypatch, fake_session, make_element):
    _stock_page(fake_session, make_element)
    fake_session.elements.pop(load_flow().locators.filter.to_locator())
    fake_session.pause = time.sleep
    factory = SessionFactory(fake_session)
    monkeypatch.setattr(cli, "PlaywrightSession", factory)

    result = cli_runner.invoke(cli.app, ["run", "--timeout", "0.2"])

    assert result.exit_code == 1
    assert "Error" in result.output
    assert factory.exits == 1
    assert fake_session.closed_count == 1


def test_run_rejects_invalid_flow_file(cli_runner, monkeypatch, tmp_path):
    bad = tmp_path / "bad.yaml"
    bad.write_text("url: https://x.example\n", encoding="utf-8")
    monkeypatch.setattr(cli, "PlaywrightSession", lambda *a, **k: pytest.fail("session must not start"))

    result = cli_runner.invoke(cli.app, ["run", "--flow", str(bad)])

    assert result.exit_code == 1


def test_run_reports_invalid_settings_without_traceback(cli_runner, monkeypatch, tmp_path):
    flow = load_flow().model_dump(mode="json")
    flow["settings"]["timeout_sec"] = "soon"
    bad = tmp_path / "bad_settings.yaml"
    bad.write_text(yaml.safe_dump(flow), encoding="utf-8")
    monkeypatch.setattr(cli, "PlaywrightSession", lambda *a, **k: pytest.fail("session must not start"))

    result = cli_runner.invoke(cli.app, ["run", "--flow", str(bad)])

    assert result.exit_code == 1
    assert "Error" in result.output
    assert result.exception is None or isinstance(result.exception, SystemExit)


def test_show_flow_prints_steps(cli_runner):
    result = cli_runner.invoke(cli.app, ["show-flow"])

    assert result.exit_code == 0
    assert "https://www.flipkart.com" in result.output
    assert "name=q" in result.output
    assert "best_effort" in result.output
