"""Console logging setup using rich."""

import logging

from rich.logging import RichHandler

AUDIT_LOGGER_NAME = "curaflow.audit"


def configure_logging(level: str = "INFO") -> None:
    """Install a single RichHandler on the root logger.

    Safe to call more than once; later calls only adjust the level.
    """
    root = logging.getLogger()
    root.setLevel(level.upper())

    if any(isinstance(h, RichHandler) for h in root.handlers):
        return

    handler = RichHandler(rich_tracebacks=True, show_path=False)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    root.addHandler(handler)
