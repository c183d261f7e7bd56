"""Logging setup shared by the report engine and its collaborators."""

import logging
from typing import Optional

from supplier_reports.config import get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: Optional[str] = None) -> None:
    """Configure the root logger with a single console handler."""

    settings = get_settings()
    resolved = (level or ("DEBUG" if settings.debug else settings.log_level)).upper()

    root_logger = logging.getLogger()
    root_logger.setLevel(resolved)

    # Avoid duplicated lines when called more than once
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(resolved)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    root_logger.addHandler(console_handler)

    # HTTP transport is noisy at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
