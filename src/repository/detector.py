"""Repository discovery and cross-repository move validation."""

import os
from collections.abc import Iterable
from pathlib import Path

import aiofiles.os
import structlog

from src.config import Settings, get_settings
from src.repository.models import Repository, RepositoryScan

logger = structlog.get_logger(__name__)


def _normalize(path: str | Path) -> Path:
    return Path(os.path.abspath(path))


class RepositoryDetector:
    """Finds version-control roots under a directory and answers boundary queries."""

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()

    async def discover(self, root_path: str | Path) -> RepositoryScan:
        """Walk ``root_path`` depth-first and record every repository root."""
        root = _normalize(root_path)
        repositories: list[Repository] = []
        visited: set[str] = set()

        await self._scan_directory(root, root, repositories, visited)

        root_repository = next(
            (repo for repo in repositories if repo.path == root), None
        )

        logger.debug(
            "Repository scan complete",
            root=str(root),
            repositories=len(repositories),
        )

        return RepositoryScan(
            repositories=repositories,
            root_repository=root_repository,
            has_multiple_repositories=len(repositories) > 1,
        )

    async def _scan_directory(
        self,
        current: Path,
        root: Path,
        repositories: list[Repository],
        visited: set[str],
    ) -> None:
        real_path = os.path.realpath(current)
        if real_path in visited:
            logger.debug("Skipping already visited directory", path=str(current))
            return
        visited.add(real_path)

        try:
            if await aiofiles.os.path.exists(current / self.settings.vcs_marker):
                repositories.append(
                    Repository(path=current, root_path=root, is_root=current == root)
                )

            entries = await aiofiles.os.listdir(current)
        except OSError as e:
            # Unreadable directories are left out of the result
            logger.debug("Skipping unreadable directory", path=str(current), error=str(e))
            return

        skip = set(self.settings.skip_directories)
        for name in sorted(entries):
            if name in skip:
                continue
            child = current / name
            if await aiofiles.os.path.isdir(child):
                await self._scan_directory(child, root, repositories, visited)

    def is_within_repository(self, file_path: str | Path, repo_path: str | Path) -> bool:
        """Return True if ``file_path`` is ``repo_path`` or lies beneath it."""
        normalized_file = _normalize(file_path)
        normalized_repo = _normalize(repo_path)

        return (
            normalized_file == normalized_repo
            or normalized_repo in normalized_file.parents
        )

    def find_most_specific_repository(
        self, file_path: str | Path, repositories: Iterable[Repository]
    ) -> Repository | None:
        """Return the deepest repository containing ``file_path``."""
        best_match: Repository | None = None

        for repo in repositories:
            if not self.is_within_repository(file_path, repo.path):
                continue
            if best_match is None or repo.depth > best_match.depth:
                best_match = repo

        return best_match

    def can_move_file(
        self,
        source_path: str | Path,
        target_path: str | Path,
        repositories: Iterable[Repository],
    ) -> bool:
        """Decide whether a move keeps files inside a legal repository boundary.

        Moves within one repository are allowed, as are moves from the
        outermost root repository into a nested repository. Every other
        cross-repository move (nested to root, sibling to sibling) is denied,
        as is any move where either side has no repository.
        """
        repositories = list(repositories)
        source_repo = self.find_most_specific_repository(source_path, repositories)
        target_repo = self.find_most_specific_repository(target_path, repositories)

        if source_repo is None or target_repo is None:
            return False

        if source_repo.path == target_repo.path:
            return True

        if source_repo.is_root and not target_repo.is_root:
            return True

        return False
