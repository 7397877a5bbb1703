"""Database models."""

from authgate.models.accounts import accounts
from authgate.models.applications import applications
from authgate.models.base import metadata
from authgate.models.devices import device_accounts, devices
from authgate.models.tasks import tasks
from authgate.models.users import users

__all__ = [
    "accounts",
    "applications",
    "device_accounts",
    "devices",
    "metadata",
    "tasks",
    "users",
]
