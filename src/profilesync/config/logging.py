"""Shared logging helpers for profilesync."""

from __future__ import annotations

import logging

from .errors import ConfigurationError

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def parse_log_level(name: str) -> int:
    """Translate a level name such as ``debug`` into its ``logging`` constant."""

    level = logging.getLevelNamesMapping().get(name.strip().upper())
    if level is None:
        raise ConfigurationError(f"Unknown log level: {name}")
    return level


def configure_logging(*, level: int = logging.INFO, force: bool = False) -> None:
    """Initialise the root logger once.

    Mirrors ``logging.basicConfig`` with a terse format suitable for CLI output.
    Pass ``force=True`` to reconfigure during tests or from the CLI ``--log-level``
    flag. Chatty third-party loggers are held at WARNING unless DEBUG is requested.
    """

    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt="%H:%M:%S", force=force)
    if level > logging.DEBUG:
        for noisy in ("httpx", "httpcore", "sqlalchemy.engine"):
            logging.getLogger(noisy).setLevel(logging.WARNING)
