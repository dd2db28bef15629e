"""
File operation data models
"""

import os
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class OperationType(str, Enum):
    """Kind of file operation"""

    MOVE = "move"
    DELETE = "delete"
    CREATE = "create"


class FileOperation(BaseModel):
    """A proposed filesystem change with its justification."""

    type: OperationType
    source_path: Path
    target_path: Path | None = None
    reason: str
    warning: str | None = None
    is_referenced: bool = False

    model_config = ConfigDict(frozen=True)

    @field_validator("source_path", "target_path")
    @classmethod
    def normalize_path(cls, v: Path | None) -> Path | None:
        """Store absolute, normalized paths"""
        if v is None:
            return None
        return Path(os.path.abspath(v))

    @model_validator(mode="after")
    def validate_target(self) -> "FileOperation":
        if self.type is OperationType.MOVE and self.target_path is None:
            raise ValueError("Target path required for move operation")
        if self.type is not OperationType.MOVE and self.target_path is not None:
            raise ValueError(f"{self.type.value} operation does not take a target path")
        return self

    @property
    def is_destructive(self) -> bool:
        """Move and delete operations need a backup before they run."""
        return self.type in (OperationType.MOVE, OperationType.DELETE)


class OperationPlan(BaseModel):
    """Ordered operations plus the metadata shown to the user."""

    operations: list[FileOperation] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    estimated_duration_ms: int = 0

    @property
    def backup_required(self) -> bool:
        return any(op.is_destructive for op in self.operations)


class ExecutionResult(BaseModel):
    """Summary of one executor run."""

    success: bool = True
    operations_completed: int = 0
    operations_failed: int = 0
    errors: list[str] = Field(default_factory=list)
    backup_manifest_id: str | None = None
