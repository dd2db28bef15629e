"""Data models for backup functionality."""

from datetime import datetime
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field


class BackupOperation(str, Enum):
    """The kind of change a backup protects against."""

    MOVE = "move"
    DELETE = "delete"
    MODIFY = "modify"


class BackupMetadata(BaseModel):
    """File attributes captured alongside a snapshot."""

    size: int = Field(..., ge=0)
    mode: int = Field(..., description="Permission bits of the original file")


class BackupEntry(BaseModel):
    """Snapshot of one file taken before it was mutated or deleted.

    The raw bytes live in a blob file named after ``id`` inside the backup
    directory. ``content`` is only populated on entries returned by
    ``BackupStore.backup_file`` and is never written into a manifest.
    """

    id: str
    timestamp: datetime = Field(default_factory=datetime.now)
    operation: BackupOperation
    source_path: Path
    target_path: Path | None = None
    metadata: BackupMetadata
    content: bytes | None = Field(default=None, exclude=True, repr=False)


class BackupManifest(BaseModel):
    """A group of backup entries covering one executed batch."""

    id: str
    timestamp: datetime = Field(default_factory=datetime.now)
    entries: list[BackupEntry] = Field(default_factory=list)
    reversible: bool = True


class RestoreResult(BaseModel):
    """Outcome of restoring a manifest."""

    manifest_id: str
    restored: list[Path] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors
