"""Logging helpers.

Library modules only ever call ``get_logger(__name__)``. Handlers are attached
by applications (the CLI does it through :func:`configure_logging`), and only
to the ``ciplot`` logger, never to root.
"""
from __future__ import annotations

import logging
import os
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "ciplot"
LEVEL_ENV_VAR = "CIPLOT_LOG_LEVEL"


def configure_logging(level: Optional[Union[str, int]] = None, *, force: bool = False) -> None:
    """Attach a rich console handler to the ``ciplot`` logger.

    Parameters
    ----------
    level:
        Logging level (e.g. "DEBUG", "INFO"). Defaults to the CIPLOT_LOG_LEVEL
        environment variable, or "WARNING" if unset.
    force:
        If True, drop existing handlers first. Otherwise an existing
        RichHandler is kept and only the level is updated.
    """

    if level is None:
        level = os.environ.get(LEVEL_ENV_VAR, "WARNING")
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.WARNING)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    if force:
        for h in logger.handlers[:]:
            h.close()
            logger.removeHandler(h)
    else:
        for h in logger.handlers:
            if isinstance(h, RichHandler):
                h.setLevel(level)
                return

    handler = RichHandler(console=Console(stderr=True), show_path=False)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logger.addHandler(handler)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return ``logging.getLogger(name)``, defaulting to the package logger."""
    return logging.getLogger(name or LOGGER_NAME)
