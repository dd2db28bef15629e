"""
Interfaces for the collaborators that propose operations.
Classification and usage detection live outside the engine; any object
matching these protocols can be passed to the planner.
"""

from pathlib import Path
from typing import Protocol

from src.operations.models import FileOperation
from src.repository.models import RepositoryScan


class IFileClassifier(Protocol):
    """Interface for deciding what should happen to a root-level file."""

    async def propose(
        self, file_path: Path, scan: RepositoryScan
    ) -> FileOperation | None:
        """Return a proposed operation for the file, or None to leave it alone."""
        ...


class IUsageDetector(Protocol):
    """Interface for checking whether other code still references a file."""

    async def is_referenced(self, file_path: Path, search_roots: list[Path]) -> bool:
        """Return True if the file is referenced under any of the search roots."""
        ...
