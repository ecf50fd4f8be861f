"""Error taxonomy shared by the gates, routes and services.

Each error knows the HTTP status it maps to; the application renders all of
them as `{"error": message}` JSON.
"""

from __future__ import annotations

from typing import Dict, Optional


class DashboardError(Exception):
    """Base class for errors that carry their own HTTP status."""

    status_code: int = 500

    def __init__(self, message: str, *, headers: Optional[Dict[str, str]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.headers = headers

    def to_body(self) -> Dict[str, str]:
        return {"error": self.message}


class ConfigError(DashboardError):
    """Server is missing required configuration. Fatal until redeployed."""

    status_code = 500


class ValidationError(DashboardError):
    """Caller supplied a missing or invalid parameter."""

    status_code = 400


class NotFoundError(DashboardError):
    status_code = 404


class BackupNotFoundError(NotFoundError):
    def __init__(self, key: str) -> None:
        super().__init__(f"Backup file not found: {key}")
        self.key = key


class UpstreamError(DashboardError):
    """The object store or the backup service failed for a non-404 reason."""

    status_code = 500


class AuthError(DashboardError):
    status_code = 401

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message)


class AccessDeniedError(DashboardError):
    status_code = 403

    def __init__(self, message: str = "AccessDenied") -> None:
        super().__init__(message)


class SupervisorUnavailableError(DashboardError):
    status_code = 503


class MethodNotAllowedError(DashboardError):
    status_code = 405

    def __init__(self, allowed_methods: list[str]) -> None:
        allowed = ", ".join(allowed_methods)
        super().__init__(
            f"Method Not Allowed. Use {allowed} to perform this action.",
            headers={"Allow": allowed},
        )
        self.allowed_methods = list(allowed_methods)
