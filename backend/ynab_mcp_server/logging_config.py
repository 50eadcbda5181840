"""Centralized logging configuration for the MCP server.

Logs go to stderr (stdout belongs to the stdio transport) and, optionally,
to a rotating file.

Usage:
    logger = logging.getLogger(__name__)
    logger.info("Admitted machine caller", extra={"auth_mode": "machine"})
"""

import logging
import sys
from logging.handlers import RotatingFileHandler

LOG_FORMAT = (
    "%(asctime)s - %(name)s - %(levelname)s - "
    "[auth:%(auth_mode)s path:%(request_path)s] %(message)s"
)


class StructuredFormatter(logging.Formatter):
    """Custom formatter that adds context fields to log records.

    Supports the following context fields via extra={} parameter:
    - auth_mode: machine, delegated or anonymous
    - request_path: HTTP path being dispatched
    """

    def format(self, record):
        """Format log record with context fields."""
        record.auth_mode = getattr(record, "auth_mode", "-")
        record.request_path = getattr(record, "request_path", "-")

        return super().format(record)


def configure_logging(config) -> None:
    """Configure root logging from server config.

    Creates:
    - Console handler on stderr
    - Rotating file handler when LOG_FILE is set (10MB x 5)

    Args:
        config: MCPServerConfig instance
    """
    formatter = StructuredFormatter(LOG_FORMAT)

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(formatter)
    handlers: list[logging.Handler] = [console]

    if config.LOG_FILE:
        file_handler = RotatingFileHandler(
            config.LOG_FILE,
            maxBytes=10 * 1024 * 1024,  # 10MB per file
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL, logging.INFO),
        handlers=handlers,
        force=True,
    )


def mask_secret(value: str | None, visible: int = 4) -> str:
    """Mask a credential for log output.

    Example:
        >>> mask_secret("secret-123")
        'secr***'
    """
    if not value:
        return "<none>"
    return f"{value[:visible]}***"
