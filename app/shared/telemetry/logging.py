"""Logging configuration for the application.

Every record carries request_id and workspace_id (or "-") so workflow logs
from concurrent requests can be told apart.
"""

import logging
import sys

from app.core.config import get_settings
from app.shared.context import get_current_request_id, get_current_workspace_id

LOG_FORMAT = (
    "%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s %(workspace_id)s] %(message)s"
)


class RequestContextFilter(logging.Filter):
    """Attach the current request id and workspace id to each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_current_request_id() or "-"
        record.workspace_id = get_current_workspace_id() or "-"
        return True


def setup_logging() -> None:
    """Configure application-wide logging.

    Level is DEBUG when settings.debug is True, otherwise INFO.
    Output goes to stdout.
    """
    settings = get_settings()
    log_level = logging.DEBUG if settings.debug else logging.INFO
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestContextFilter())
    logging.basicConfig(level=log_level, format=LOG_FORMAT, handlers=[handler], force=True)


def get_logger(name: str) -> logging.Logger:
    """Return a logger for the given module name.

    Args:
        name: Usually __name__ of the calling module.

    Returns:
        Logger instance.
    """
    return logging.getLogger(name)
