"""Logging configuration for the application."""

import logging
import sys


def setup_logging(level: str = "INFO") -> None:
    """Configure the root logger once; repeated calls are no-ops."""
    root_logger = logging.getLogger()
    if any(getattr(h, "_devevent", False) for h in root_logger.handlers):
        return

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler._devevent = True

    root_logger.setLevel(level)
    root_logger.addHandler(console_handler)

    # Driver chatter is rarely useful at INFO
    logging.getLogger("pymongo").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
