"""Process-wide ``shopflow`` logger shared by the CLI, runner and browser session."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
import sys
from .settings import _work_dir


_LOGGER: logging.Logger | None = None

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def get_logger(log_dir: Path | None = None) -> logging.Logger:
    """Return the ``shopflow`` logger, building its handlers on first use.

    Step records (``flow.open``, ``flow.click`` ...), best-effort checkout
    warnings and session failures go both to stdout and to ``app.log`` under
    ``log_dir`` (the work ``logs`` directory by default), next to the failure
    screenshots. Later calls return the same logger and ignore ``log_dir``.
    """
    global _LOGGER
    if _LOGGER is not None:
        return _LOGGER

    logs = Path(log_dir) if log_dir is not None else _work_dir() / "logs"
    logs.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger("shopflow")
    logger.setLevel(logging.INFO)
    logger.propagate = False
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    run_log = RotatingFileHandler(logs / "app.log", maxBytes=2 * 1024 * 1024, backupCount=3, encoding="utf-8")
    run_log.setFormatter(formatter)
    logger.addHandler(run_log)

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(formatter)
    logger.addHandler(console)

    _LOGGER = logger
    return logger
