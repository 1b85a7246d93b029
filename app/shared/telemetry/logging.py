"""Logging configuration for the audit service."""

import logging
import sys

from app.core.config import get_settings

# Third-party loggers that are chatty at INFO; kept at WARNING unless debugging.
_QUIET_LOGGERS = ("sqlalchemy.engine", "httpx", "opentelemetry")


def setup_logging() -> None:
    """Configure application-wide logging.

    Level is DEBUG when settings.debug is True, otherwise INFO.
    Output goes to stdout. SQL statement logging stays off unless
    settings.database_echo is set.
    """
    settings = get_settings()
    log_level = logging.DEBUG if settings.debug else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    for name in _QUIET_LOGGERS:
        if name == "sqlalchemy.engine" and settings.database_echo:
            continue
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Return a logger for the given module name.

    Args:
        name: Usually __name__ of the calling module.

    Returns:
        Logger instance.
    """
    return logging.getLogger(name)
