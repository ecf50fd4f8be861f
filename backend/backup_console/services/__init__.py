"""Service layer.

Exposes:
- ObjectStoreGateway
- BackupTriggerService
- BotStatusService
- DiscordAuthService
"""

from .object_store import ObjectStoreGateway, BackupRecord
from .backup_trigger import BackupTriggerService, BackupTriggerResult
from .bot_status import BotStatusService, BotProcess
from .discord_auth import DiscordAuthService, DiscordProfile

__all__ = [
    "ObjectStoreGateway",
    "BackupRecord",
    "BackupTriggerService",
    "BackupTriggerResult",
    "BotStatusService",
    "BotProcess",
    "DiscordAuthService",
    "DiscordProfile",
]
