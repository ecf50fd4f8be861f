from __future__ import annotations

from enum import Enum


class KeyRejection(str, Enum):
    INVALID_PREFIX = "invalid_prefix"
    PATH_TRAVERSAL = "path_traversal"


class ProcessStatus(str, Enum):
    ONLINE = "online"
    STOPPED = "stopped"
