"""Data models for repository discovery."""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class Repository(BaseModel):
    """An independent version-control root."""

    path: Path
    root_path: Path
    is_root: bool = False

    model_config = ConfigDict(frozen=True)

    @property
    def depth(self) -> int:
        """Number of path components, used to pick the most nested repository."""
        return len(self.path.parts)


class RepositoryScan(BaseModel):
    """Result of scanning a directory tree for repositories."""

    repositories: list[Repository] = Field(default_factory=list)
    root_repository: Repository | None = None
    has_multiple_repositories: bool = False
