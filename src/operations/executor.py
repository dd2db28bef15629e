"""
Execution of operation plans with backup-before-mutate
"""

import errno

import aiofiles.os

from src.backup import BackupEntry, BackupOperation, BackupStore
from src.operations.models import (
    ExecutionResult,
    FileOperation,
    OperationPlan,
    OperationType,
)
from src.utils.mixins import LoggerMixin


class OperationExecutor(LoggerMixin):
    """Applies a plan to the filesystem one operation at a time.

    Every move and delete is backed up before anything is applied, and a
    failing operation never stops the remaining ones.
    """

    def __init__(self, backup_store: BackupStore):
        self.backup_store = backup_store

    async def execute(self, plan: OperationPlan, dry_run: bool = False) -> ExecutionResult:
        """Back up and apply ``plan``, or only report it when ``dry_run`` is set."""
        result = ExecutionResult()

        if dry_run:
            result.operations_completed = len(plan.operations)
            self.logger.info("Dry run, no changes made", operations=len(plan.operations))
            return result

        backup_failures: dict[int, str] = {}
        if plan.backup_required:
            backup_failures = await self._backup_operations(plan, result)

        for index, op in enumerate(plan.operations):
            if index in backup_failures:
                self._record_failure(result, op, f"backup failed: {backup_failures[index]}")
                continue

            try:
                await self._execute_operation(op)
            except (OSError, ValueError) as e:
                self._record_failure(result, op, str(e))
            else:
                result.operations_completed += 1

        self.logger.info(
            "Plan executed",
            success=result.success,
            completed=result.operations_completed,
            failed=result.operations_failed,
            manifest_id=result.backup_manifest_id,
        )

        return result

    async def _backup_operations(
        self, plan: OperationPlan, result: ExecutionResult
    ) -> dict[int, str]:
        """Back up every destructive operation's source; return failures by index."""
        failures: dict[int, str] = {}
        backed_up: list[tuple[int, BackupEntry]] = []

        for index, op in enumerate(plan.operations):
            if not op.is_destructive:
                continue

            if not await aiofiles.os.path.exists(op.source_path):
                self.logger.debug("Source already gone, skipping backup", source=str(op.source_path))
                continue

            try:
                entry = await self.backup_store.backup_file(
                    op.source_path,
                    BackupOperation(op.type.value),
                    target_path=op.target_path,
                )
            except OSError as e:
                failures[index] = str(e)
                self.logger.error("Backup failed", source=str(op.source_path), error=str(e))
                continue

            backed_up.append((index, entry))

        if backed_up:
            try:
                manifest = await self.backup_store.create_manifest(
                    [entry for _, entry in backed_up]
                )
            except OSError as e:
                self.logger.error("Failed to write backup manifest", error=str(e))
                for index, _ in backed_up:
                    failures[index] = f"manifest could not be written: {e}"
            else:
                result.backup_manifest_id = manifest.id

        return failures

    async def _execute_operation(self, op: FileOperation) -> None:
        if op.type is OperationType.MOVE:
            target = op.target_path
            if target is None:
                raise ValueError("Target path required for move operation")
            if await aiofiles.os.path.exists(target) or await aiofiles.os.path.islink(
                target
            ):
                raise FileExistsError(errno.EEXIST, "Target already exists", str(target))
            await aiofiles.os.makedirs(target.parent, exist_ok=True)
            await aiofiles.os.rename(op.source_path, target)

        elif op.type is OperationType.DELETE:
            await aiofiles.os.remove(op.source_path)

        elif op.type is OperationType.CREATE:
            await aiofiles.os.makedirs(op.source_path, exist_ok=True)

    def _record_failure(
        self, result: ExecutionResult, op: FileOperation, message: str
    ) -> None:
        error = f"{op.type.value} {op.source_path}: {message}"
        result.errors.append(error)
        result.operations_failed += 1
        result.success = False
        self.logger.error("Operation failed", operation=op.type.value, error=error)
