"""Common logging configuration for Competition Manager"""

import logging
import sys

from competition_manager.config import config

# Third-party loggers that are chatty at INFO while rendering PDFs/images
# or talking to Mailgun.
NOISY_LOGGERS = ("PIL", "reportlab", "urllib3", "mailgun")


class BelowWarningFilter(logging.Filter):
    """Pass only records below WARNING, so stdout never duplicates stderr"""

    def filter(self, record):
        return record.levelno < logging.WARNING


def setup_logging(level_name: str | None = None):
    """
    Route INFO/DEBUG to stdout and WARNING/ERROR to stderr.

    Args:
        level_name: Optional override; defaults to config["log_level"]
    """
    level_name = level_name or config.get("log_level", "INFO")
    level = getattr(logging, level_name.upper(), logging.INFO)

    formatter = logging.Formatter(
        "%(asctime)s %(levelname)s:%(name)s:%(message)s", "%Y-%m-%d %H:%M:%S"
    )

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setLevel(logging.DEBUG)
    stdout_handler.addFilter(BelowWarningFilter())
    stdout_handler.setFormatter(formatter)

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(logging.WARNING)
    stderr_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(stdout_handler)
    root_logger.addHandler(stderr_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def get_logger(name: str) -> logging.Logger:
    """Get a logger for the calling module (pass __name__)"""
    return logging.getLogger(name)
