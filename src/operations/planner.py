"""
Operation planning with repository boundary validation
"""

import os
from collections.abc import Callable, Iterable
from pathlib import Path

import aiofiles.os

from src.config import Settings, get_settings
from src.operations.interfaces import IFileClassifier, IUsageDetector
from src.operations.models import FileOperation, OperationPlan, OperationType
from src.repository import Repository, RepositoryDetector, RepositoryScan
from src.utils.mixins import LoggerMixin

SCRIPTS_FOLDER = "scripts"

ProgressCallback = Callable[[int, int, str], None]


class OperationPlanner(LoggerMixin):
    """Turns proposed operations into a plan that respects repository boundaries."""

    def __init__(self, detector: RepositoryDetector, settings: Settings | None = None):
        """
        Initialize OperationPlanner

        Args:
            detector: RepositoryDetector used for discovery and boundary checks
            settings: Settings instance (defaults to the cached settings)
        """
        self.detector = detector
        self.settings = settings or get_settings()

    async def create_plan(
        self,
        root_path: str | Path,
        operations: Iterable[FileOperation],
        scan: RepositoryScan | None = None,
    ) -> OperationPlan:
        """
        Validate proposed operations and build a plan

        Cross-repository moves that the boundary rules forbid are dropped, as
        are deletions of files that are still referenced elsewhere.

        Args:
            root_path: Directory treated as the scan root
            operations: Raw operations, in the order they should run
            scan: Existing repository scan of ``root_path`` to reuse

        Returns:
            The validated plan
        """
        root = Path(os.path.abspath(root_path))
        if scan is None:
            scan = await self.detector.discover(root)

        repositories = self._effective_repositories(root, scan)

        planned: list[FileOperation] = []
        warnings: list[str] = []

        for op in operations:
            if op.type is OperationType.MOVE and not self.detector.can_move_file(
                op.source_path, op.target_path, repositories  # type: ignore[arg-type]
            ):
                self.logger.warning(
                    "Dropping move across repository boundary",
                    source=str(op.source_path),
                    target=str(op.target_path),
                )
                continue

            if op.type is OperationType.DELETE and op.is_referenced:
                warnings.append(f"{op.source_path.name} is still referenced - keeping")
                continue

            if op.warning:
                warnings.append(f"{op.source_path.name}: {op.warning}")

            planned.append(op)

        plan = OperationPlan(
            operations=planned,
            warnings=warnings,
            estimated_duration_ms=len(planned) * self.settings.estimated_ms_per_operation,
        )

        self.logger.info(
            "Operation plan created",
            root=str(root),
            operations=len(plan.operations),
            warnings=len(plan.warnings),
            backup_required=plan.backup_required,
        )

        return plan

    async def plan_folder_enforcement(self, repo_path: str | Path) -> OperationPlan:
        """Create missing standard folders and move root-level scripts into scripts/."""
        root = Path(os.path.abspath(repo_path))
        operations: list[FileOperation] = []

        for folder in self.settings.required_folders:
            folder_path = root / folder
            if not await aiofiles.os.path.exists(folder_path):
                operations.append(
                    FileOperation(
                        type=OperationType.CREATE,
                        source_path=folder_path,
                        reason=f"Enforce repository structure: {folder}/ folder",
                    )
                )

        for name in sorted(await aiofiles.os.listdir(root)):
            file_path = root / name
            if self._is_script(name) and await aiofiles.os.path.isfile(file_path):
                operations.append(
                    FileOperation(
                        type=OperationType.MOVE,
                        source_path=file_path,
                        target_path=root / SCRIPTS_FOLDER / name,
                        reason=f"Move script to {SCRIPTS_FOLDER}/ folder",
                    )
                )

        return await self.create_plan(root, operations)

    async def plan_root_file_distribution(
        self,
        root_path: str | Path,
        classifier: IFileClassifier,
        usage_detector: IUsageDetector | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> OperationPlan:
        """
        Ask a classifier where each loose root-level file belongs

        Args:
            root_path: Root of the repository tree
            classifier: Proposes an operation for each root-level file
            usage_detector: Optional check that keeps referenced files from deletion
            on_progress: Called with (current, total, file name) per file

        Returns:
            The validated plan, empty when the root is not a repository
        """
        root = Path(os.path.abspath(root_path))
        scan = await self.detector.discover(root)

        if scan.root_repository is None:
            self.logger.info("Root is not a repository, nothing to distribute", root=str(root))
            return OperationPlan()

        root_files = await self._list_root_files(root)
        proposals: list[FileOperation] = []

        for index, file_path in enumerate(root_files, 1):
            if on_progress:
                on_progress(index, len(root_files), file_path.name)

            proposal = await classifier.propose(file_path, scan)
            if proposal is None:
                continue

            if (
                proposal.type is OperationType.DELETE
                and usage_detector is not None
                and not proposal.is_referenced
                and await self._is_referenced(usage_detector, file_path, root)
            ):
                proposal = proposal.model_copy(update={"is_referenced": True})

            proposals.append(proposal)

        return await self.create_plan(root, proposals, scan=scan)

    def _effective_repositories(
        self, root: Path, scan: RepositoryScan
    ) -> list[Repository]:
        # A tree without any repository is handled as one root repository
        if scan.repositories:
            return scan.repositories
        return [Repository(path=root, root_path=root, is_root=True)]

    async def _list_root_files(self, root: Path) -> list[Path]:
        keep = set(self.settings.root_keep_files)
        files = []
        for name in sorted(await aiofiles.os.listdir(root)):
            if name.startswith(".") or name in keep:
                continue
            if await aiofiles.os.path.isfile(root / name):
                files.append(root / name)
        return files

    async def _is_referenced(
        self, usage_detector: IUsageDetector, file_path: Path, root: Path
    ) -> bool:
        try:
            return await usage_detector.is_referenced(file_path, [root])
        except Exception as e:
            # Keep the file when usage cannot be determined
            self.logger.warning(
                "Usage detection failed, treating file as referenced",
                file=str(file_path),
                error=str(e),
            )
            return True

    def _is_script(self, filename: str) -> bool:
        return any(filename.endswith(ext) for ext in self.settings.script_extensions)
