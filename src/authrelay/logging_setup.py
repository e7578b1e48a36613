"""Console logging for the broker, rendered with Rich."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

# Libraries that log every request at INFO.
_NOISY_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


def setup_logging(level: str = "INFO") -> None:
    """Install a single RichHandler on the root logger.

    Safe to call more than once; later calls only change the level.
    """
    root = logging.getLogger()
    root.setLevel(level.upper())

    if not any(isinstance(h, RichHandler) for h in root.handlers):
        handler = RichHandler(
            console=Console(stderr=True),
            rich_tracebacks=True,
            show_path=False,
            markup=False,
        )
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s", datefmt="[%X]"))
        root.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
