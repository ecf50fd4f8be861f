"""API routers package."""

from . import health, backups, bot, auth  # noqa: F401
