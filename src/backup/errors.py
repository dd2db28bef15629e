"""Exceptions raised by the backup store."""

from src.backup.models import RestoreResult


class BackupError(Exception):
    """Base class for backup store failures."""


class BackupNotFoundError(BackupError):
    """Raised when a manifest does not exist in the backup directory."""


class ManifestCorruptError(BackupError):
    """Raised when a manifest file cannot be parsed."""


class RestoreError(BackupError):
    """Raised after a restore in which one or more entries could not be written back."""

    def __init__(self, result: RestoreResult):
        self.result = result
        super().__init__(
            f"Restore of manifest {result.manifest_id} failed for "
            f"{len(result.errors)} file(s): " + "; ".join(result.errors)
        )
