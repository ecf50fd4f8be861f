"""Boundary checks for user-supplied keys, outbound URLs and store errors.

All functions here are pure: no I/O and no logging. Callers decide what to log.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Tuple
from urllib.parse import urlsplit

from backup_console.core.config import DEFAULT_PREFIX
from backup_console.domain.enums import KeyRejection


ALLOWED_BACKUP_HOSTS = frozenset({"localhost", "127.0.0.1", "[::1]", "0.0.0.0"})

NOT_FOUND_ERROR_NAMES = frozenset({"NoSuchKey", "NotFound"})
NOT_FOUND_MESSAGE_FRAGMENTS = (
    "NoSuchKey",
    "does not exist",
    "The specified key does not exist",
    "not found",
)

_TRAVERSAL_PATTERNS = ("..", "//", "\\\\")


@dataclass(frozen=True)
class KeyValidation:
    """Outcome of `validate_key`. Either fully valid or rejected with a reason."""

    valid: bool
    key: Optional[str] = None
    reason: Optional[KeyRejection] = None
    error: Optional[str] = None


def validate_key(key: str, prefix: str = DEFAULT_PREFIX) -> KeyValidation:
    """Allow or block an object-store key. Never rewrites it.

    The key must start with `prefix` (exact, case-sensitive) and must not
    contain `..`, `//` or a doubled backslash.
    """
    if not key.startswith(prefix):
        return KeyValidation(
            valid=False,
            reason=KeyRejection.INVALID_PREFIX,
            error="Invalid key: must start with configured prefix.",
        )

    if any(pattern in key for pattern in _TRAVERSAL_PATTERNS):
        return KeyValidation(
            valid=False,
            reason=KeyRejection.PATH_TRAVERSAL,
            error="Invalid key: path traversal detected.",
        )

    return KeyValidation(valid=True, key=key)


def is_valid_backup_url(url: str) -> bool:
    """Return True for same-origin relative paths and loopback absolute URLs."""
    if url.startswith("/"):
        return True

    try:
        parts = urlsplit(url)
        hostname = parts.hostname
        # raises for a non-numeric or out-of-range port
        parts.port
    except ValueError:
        return False

    if not parts.scheme or not hostname:
        return False

    hostname = hostname.lower()
    if ":" in hostname:
        # urlsplit strips the brackets from IPv6 literals
        hostname = f"[{hostname}]"
    return hostname in ALLOWED_BACKUP_HOSTS


def _lookup(value: Any, name: str) -> Any:
    if isinstance(value, dict):
        return value.get(name)
    return getattr(value, name, None)


def _as_status(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.isdigit():
        return int(value)
    return None


def describe_store_error(err: Any) -> Tuple[Optional[str], Optional[int], str]:
    """Extract `(name, status_code, message)` from an object-store error.

    Understands botocore `ClientError` (`err.response["Error"]["Code"]`,
    `err.response["ResponseMetadata"]["HTTPStatusCode"]`), SDK-style dicts
    (`name`, `$metadata.httpStatusCode`, `message`) and plain objects exposing
    `name`/`code` and `status_code`/`status` attributes.
    """
    name: Optional[str] = None
    status: Optional[int] = None

    response = _lookup(err, "response")
    if isinstance(response, dict):
        error_block = response.get("Error") or {}
        if isinstance(error_block, dict):
            code = error_block.get("Code")
            if isinstance(code, str):
                name = code
        metadata = response.get("ResponseMetadata") or {}
        if isinstance(metadata, dict):
            status = _as_status(metadata.get("HTTPStatusCode"))

    if name is None:
        for attr in ("name", "code", "Code"):
            candidate = _lookup(err, attr)
            if isinstance(candidate, str):
                name = candidate
                break
    if name is None and isinstance(err, BaseException):
        name = type(err).__name__

    if status is None:
        metadata = _lookup(err, "$metadata")
        if metadata is not None:
            status = _as_status(_lookup(metadata, "httpStatusCode"))
    if status is None:
        for attr in ("status_code", "status", "httpStatusCode"):
            status = _as_status(_lookup(err, attr))
            if status is not None:
                break

    message = _lookup(err, "message") if isinstance(err, dict) else None
    if not isinstance(message, str):
        message = str(err)

    return name, status, message


def is_not_found_error(err: Any) -> bool:
    """Decide whether an object-store error means "the object is not there".

    Any 4xx status counts, so permission failures are reported as not found
    as well. Unrecognized shapes are not a not-found.
    """
    if err is None or isinstance(err, (str, bytes, int, float, bool)):
        return False

    name, status, message = describe_store_error(err)

    if name in NOT_FOUND_ERROR_NAMES:
        return True
    if status == 404:
        return True
    if any(fragment in message for fragment in NOT_FOUND_MESSAGE_FRAGMENTS):
        return True
    return status is not None and 400 <= status < 500
