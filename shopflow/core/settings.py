from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path

from dotenv import load_dotenv

from .errors import ConfigError


load_dotenv(override=False)

DEFAULT_TIMEOUT_SEC = 20.0
DEFAULT_POLL_INTERVAL_SEC = 0.25

ROOT_ENV = "SHOPFLOW_ROOT"
TIMEOUT_ENV = "SHOPFLOW_TIMEOUT_SEC"
POLL_INTERVAL_ENV = "SHOPFLOW_POLL_INTERVAL_SEC"
HEADLESS_ENV = "SHOPFLOW_HEADLESS"
BROWSER_CHANNEL_ENV = "SHOPFLOW_BROWSER_CHANNEL"

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class RunSettings:
    """Runtime knobs shared by every step of a flow run.

    Attributes:
        timeout_sec: Upper bound for each explicit wait.
        poll_interval_sec: Pause between two readiness checks.
        headless: Launch the browser without a visible window.
        browser_channel: Preferred Chromium channel (``chrome``/``msedge``);
            ``None`` uses the bundled Chromium first.
        viewport: Fixed viewport size; ``None`` keeps a maximised window.
    """

    timeout_sec: float = DEFAULT_TIMEOUT_SEC
    poll_interval_sec: float = DEFAULT_POLL_INTERVAL_SEC
    headless: bool = True
    browser_channel: str | None = None
    viewport: tuple[int, int] | None = None

    def __post_init__(self) -> None:
        if self.timeout_sec <= 0:
            raise ConfigError(f"timeout_sec must be positive, got {self.timeout_sec}")
        if self.poll_interval_sec <= 0:
            raise ConfigError(f"poll_interval_sec must be positive, got {self.poll_interval_sec}")

    @property
    def timeout_ms(self) -> int:
        return int(self.timeout_sec * 1000)

    @classmethod
    def from_env(cls, base: "RunSettings | None" = None) -> "RunSettings":
        """Apply ``SHOPFLOW_*`` environment overrides on top of ``base``."""

        base = base or cls()
        timeout = _read_env_float(TIMEOUT_ENV)
        interval = _read_env_float(POLL_INTERVAL_ENV)
        headless = _read_env_bool(HEADLESS_ENV)
        channel = _read_env(BROWSER_CHANNEL_ENV)
        return replace(
            base,
            timeout_sec=timeout if timeout is not None else base.timeout_sec,
            poll_interval_sec=interval if interval is not None else base.poll_interval_sec,
            headless=headless if headless is not None else base.headless,
            browser_channel=channel or base.browser_channel,
        )


def _read_env(key: str) -> str | None:
    value = os.getenv(key)
    if value is None:
        return None
    return value.strip()


def _read_env_float(key: str) -> float | None:
    value = _read_env(key)
    if value is None or value == "":
        return None
    try:
        return float(value)
    except ValueError as exc:
        raise ConfigError(f"Environment variable {key} must be a number") from exc


def _read_env_bool(key: str) -> bool | None:
    value = _read_env(key)
    if value is None or value == "":
        return None
    lowered = value.lower()
    if lowered in _TRUTHY:
        return True
    if lowered in _FALSY:
        return False
    raise ConfigError(f"Environment variable {key} must be a boolean, got {value!r}")


def _project_root() -> Path:
    env = os.getenv(ROOT_ENV)
    if env:
        return Path(env)
    # In source layout, this file is under <root>/shopflow/core
    return Path(__file__).resolve().parents[2]


def _config_dir() -> Path:
    return _project_root() / "shopflow" / "config"


def _work_dir() -> Path:
    return _project_root() / "shopflow" / "work"


def ensure_work_dirs() -> dict[str, Path]:
    base = _work_dir()
    logs = base / "logs"
    shot = logs / "shot"
    for p in (logs, shot):
        p.mkdir(parents=True, exist_ok=True)
    return {"logs": logs, "shot": shot}


def resolve_config_path(path: str | Path) -> Path:
    p = Path(path)
    if p.is_absolute() or p.exists():
        return p
    # Support paths with or without leading 'shopflow/'
    parts = p.parts
    if parts and parts[0] == "shopflow":
        return _project_root() / p
    return _config_dir() / p
