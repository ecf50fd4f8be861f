"""Gateway to the object store holding backup archives."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, List, Optional

from backup_console.core.errors import BackupNotFoundError
from backup_console.core.validation import describe_store_error, is_not_found_error


@dataclass
class BackupRecord:
    """One archive found under the backup prefix."""

    key: str
    last_modified: Optional[datetime] = None
    size: Optional[int] = None


def _as_aware(value: Any) -> Optional[datetime]:
    if not isinstance(value, datetime):
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def sort_newest_first(records: List[BackupRecord]) -> List[BackupRecord]:
    """Order records by `last_modified`, newest first.

    Records without a timestamp keep their original positions; the dated
    records are sorted into the remaining slots.
    """
    dated_slots = [i for i, r in enumerate(records) if r.last_modified is not None]
    dated = sorted(
        (records[i] for i in dated_slots),
        key=lambda r: r.last_modified,  # type: ignore[arg-type,return-value]
        reverse=True,
    )
    ordered = list(records)
    for slot, record in zip(dated_slots, dated):
        ordered[slot] = record
    return ordered


class ObjectStoreGateway:
    """The only component that talks to the object store.

    Wraps a boto3 S3 client (or anything exposing the same methods). Errors
    are not retried. Not-found conditions are reported as
    `BackupNotFoundError`; everything else propagates unchanged.
    """

    def __init__(self, client: Any) -> None:
        self.client = client
        self._logger = logging.getLogger(__name__)

    def _not_found(self, key: str, err: Any, *, operation: str) -> BackupNotFoundError:
        name, status, message = describe_store_error(err)
        # Any 4xx becomes a 404; keep the raw inputs so access-denied can be told apart.
        self._logger.info(
            "s3_not_found | op=%s key=%s error_name=%s status=%s message=%s",
            operation,
            key,
            name,
            status,
            message,
        )
        return BackupNotFoundError(key)

    def classify(self, key: str, err: Exception, *, operation: str) -> Optional[BackupNotFoundError]:
        """Return a not-found error if `err` means the object is missing."""
        if is_not_found_error(err):
            return self._not_found(key, err, operation=operation)
        return None

    def check_exists(self, bucket: str, key: str) -> Optional[BackupNotFoundError]:
        """Probe the object with HEAD.

        Returns None when the object exists, a `BackupNotFoundError` when the
        probe says it is missing, and re-raises any other failure.
        """
        try:
            self.client.head_object(Bucket=bucket, Key=key)
        except Exception as exc:
            not_found = self.classify(key, exc, operation="head_object")
            if not_found is not None:
                return not_found
            self._logger.error("s3_head_unexpected_error | key=%s error=%s", key, exc)
            raise
        return None

    def list_backups(self, bucket: str, prefix: str, max_results: int = 200) -> List[BackupRecord]:
        """List archives under `prefix`, newest first, skipping entries without a key."""
        result = self.client.list_objects_v2(Bucket=bucket, Prefix=prefix, MaxKeys=max_results)

        records: List[BackupRecord] = []
        for obj in result.get("Contents") or []:
            key = obj.get("Key")
            if not key:
                continue
            size = obj.get("Size")
            records.append(
                BackupRecord(
                    key=key,
                    last_modified=_as_aware(obj.get("LastModified")),
                    size=int(size) if size is not None else None,
                )
            )

        self._logger.debug("s3_list | bucket=%s prefix=%s count=%s", bucket, prefix, len(records))
        return sort_newest_first(records)

    def generate_fetch_handle(self, bucket: str, key: str, ttl_seconds: int = 300) -> str:
        """Return a pre-signed GET URL valid for `ttl_seconds`."""
        return self.client.generate_presigned_url(
            "get_object",
            Params={"Bucket": bucket, "Key": key},
            ExpiresIn=ttl_seconds,
        )

    def delete(self, bucket: str, key: str) -> None:
        """Delete an existing object.

        Raises `BackupNotFoundError` if the object is absent before or during
        deletion; any other failure propagates.
        """
        not_found = self.check_exists(bucket, key)
        if not_found is not None:
            raise not_found

        try:
            self.client.delete_object(Bucket=bucket, Key=key)
        except Exception as exc:
            not_found = self.classify(key, exc, operation="delete_object")
            if not_found is not None:
                raise not_found from exc
            raise

        self._logger.info("s3_deleted | bucket=%s key=%s", bucket, key)
