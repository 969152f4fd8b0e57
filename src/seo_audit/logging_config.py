"""Logging configuration for the SEO audit tool."""

import logging
import sys
from pathlib import Path
from typing import Optional

PACKAGE_LOGGER = "seo_audit"

# Every relay attempt is logged by these at INFO otherwise
NOISY_LOGGERS = ("httpx", "httpcore")


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    format_string: Optional[str] = None
) -> logging.Logger:
    """Attach console and optional file handlers to the ``seo_audit`` logger.

    Only this package's loggers are configured, so embedding applications
    keep control of the root logger. Calling it again replaces the handlers.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file path
        format_string: Optional custom format string

    Returns:
        The configured package logger
    """
    formatter = logging.Formatter(
        format_string or '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    # stderr keeps JSON output on stdout clean
    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(formatter)
    package_logger.addHandler(console)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        file_handler.setFormatter(formatter)
        package_logger.addHandler(file_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return package_logger
