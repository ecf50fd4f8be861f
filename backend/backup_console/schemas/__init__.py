"""Pydantic schemas package.

Public re-exports keep import paths short.
"""

from .backups import (
    ErrorResponse,
    BackupFile,
    BackupListResponse,
    CreateBackupResponse,
    DeleteBackupResponse,
)  # noqa: F401
from .bot import (
    BotProcessStatus,
    BotStatusResponse,
)  # noqa: F401
from .auth import (
    SessionUser,
    SessionResponse,
)  # noqa: F401
