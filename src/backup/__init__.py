"""Backup and restore for files touched by reorganization."""

from src.backup.errors import (
    BackupError,
    BackupNotFoundError,
    ManifestCorruptError,
    RestoreError,
)
from src.backup.models import (
    BackupEntry,
    BackupManifest,
    BackupMetadata,
    BackupOperation,
    RestoreResult,
)
from src.backup.store import BackupStore

__all__ = [
    "BackupStore",
    "BackupEntry",
    "BackupManifest",
    "BackupMetadata",
    "BackupOperation",
    "RestoreResult",
    "BackupError",
    "BackupNotFoundError",
    "ManifestCorruptError",
    "RestoreError",
]
