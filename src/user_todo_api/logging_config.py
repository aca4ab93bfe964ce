"""
Logging configuration for the User/Todo service.

Routes the package logger through a rich handler so request-side events
(creates, deletes, lookups that miss) read well in a terminal.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "user_todo_api"


def setup_logging(level: str = "INFO") -> logging.Logger:
    """
    Configure the package logger with a rich handler.

    Args:
        level: Log level name (e.g. "INFO", "DEBUG")

    Returns:
        Configured logger instance for user_todo_api
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Idempotent: app factories may run several times in one process (tests)
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(
            console=Console(stderr=True),
            rich_tracebacks=True,
            markup=False,
            show_time=True,
            show_path=False,
        )
        handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
        logger.addHandler(handler)

    logger.propagate = False
    return logger
