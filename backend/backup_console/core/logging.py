"""Central logging configuration for the backend.

This module configures Python logging with sane defaults and is invoked from
`backup_console.main` during startup.
"""

from __future__ import annotations

import logging
import os
from typing import Optional


_PROBE_PATHS = ("/health", "/ready")
_QUIET_LOGGERS = ("botocore", "boto3", "urllib3", "s3transfer", "httpx", "httpcore")


class HealthCheckFilter(logging.Filter):
    """Drop access-log lines for the liveness/readiness probes."""

    def filter(self, record: logging.LogRecord) -> bool:
        args = record.args
        # uvicorn.access passes (client, method, path, http_version, status)
        if isinstance(args, tuple) and len(args) >= 3 and isinstance(args[2], str):
            path = args[2].split("?", 1)[0]
            return path not in _PROBE_PATHS
        message = record.getMessage()
        return not any(f"{path} " in message for path in _PROBE_PATHS)


def setup_logging(level: Optional[str] = None) -> None:
    """Initialize application logging.

    - Level is taken from the `LOG_LEVEL` environment variable if not provided.
    - Uses a concise, structured-ish format with timestamps.
    """

    log_level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()

    root_logger = logging.getLogger()

    # Configure handlers once to avoid duplicates in reloads
    if not root_logger.handlers:
        logging.basicConfig(
            level=log_level,
            format=(
                "%(asctime)s | %(levelname)s | %(name)s | "
                "%(message)s"
            ),
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    # Always align root level (uvicorn may install handlers before we run)
    root_logger.setLevel(log_level)

    logging.getLogger("uvicorn").setLevel(log_level)
    logging.getLogger("uvicorn.error").setLevel(log_level)

    access_logger = logging.getLogger("uvicorn.access")
    if not any(isinstance(f, HealthCheckFilter) for f in access_logger.filters):
        access_logger.addFilter(HealthCheckFilter())

    # AWS SDK and HTTP client internals only at DEBUG; they log credentials lookups and raw requests
    third_party_level = logging.DEBUG if root_logger.level == logging.DEBUG else logging.WARNING
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(third_party_level)
