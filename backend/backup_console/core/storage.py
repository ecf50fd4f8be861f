"""Shared boto3 S3 client.

The client is created lazily, once per process, and reused by every request.
botocore clients are thread-safe, so routes running in the threadpool share it.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Dict

import boto3
from botocore.client import BaseClient
from botocore.config import Config as BotoConfig

from backup_console.core.config import Settings, get_settings


logger = logging.getLogger(__name__)

_client: BaseClient | None = None
_client_lock = threading.Lock()


def build_s3_client(settings: Settings) -> BaseClient:
    """Create an S3 client from settings.

    Automatic retries are disabled; the dashboard's refresh button is the
    retry mechanism. Timeouts are explicit.
    """
    client_kwargs: Dict[str, Any] = {
        "region_name": settings.aws_region,
        "config": BotoConfig(
            connect_timeout=settings.s3_timeout_seconds,
            read_timeout=settings.s3_timeout_seconds,
            retries={"total_max_attempts": 1, "mode": "standard"},
        ),
    }
    if settings.s3_endpoint_url:
        client_kwargs["endpoint_url"] = settings.s3_endpoint_url
    if settings.aws_access_key_id and settings.aws_secret_access_key:
        client_kwargs["aws_access_key_id"] = settings.aws_access_key_id
        client_kwargs["aws_secret_access_key"] = settings.aws_secret_access_key

    logger.info(
        "s3_client_init | region=%s endpoint=%s static_credentials=%s timeout=%s",
        settings.aws_region,
        settings.s3_endpoint_url or "default",
        "aws_access_key_id" in client_kwargs,
        settings.s3_timeout_seconds,
    )
    return boto3.client("s3", **client_kwargs)


def get_s3_client() -> BaseClient:
    """Return the process-wide S3 client, creating it on first use."""
    global _client
    if _client is not None:
        return _client
    with _client_lock:
        if _client is None:
            _client = build_s3_client(get_settings())
        return _client


def reset_s3_client() -> None:
    global _client
    with _client_lock:
        _client = None
