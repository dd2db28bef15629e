"""Content-addressed backup store with restorable manifests."""

import os
import stat
import uuid
from pathlib import Path

import aiofiles
import aiofiles.os
import structlog
from pydantic import ValidationError

from src.backup.errors import BackupNotFoundError, ManifestCorruptError, RestoreError
from src.backup.models import (
    BackupEntry,
    BackupManifest,
    BackupMetadata,
    BackupOperation,
    RestoreResult,
)

logger = structlog.get_logger(__name__)

MANIFEST_SUFFIX = ".json"

_chmod = aiofiles.os.wrap(os.chmod)


class BackupStore:
    """Stores file snapshots and the manifests that group them.

    Snapshots are written as blob files named by entry id; manifests are
    separate ``<id>.json`` documents that reference entries by id. Both sets
    are only ever appended to.
    """

    def __init__(self, backup_dir: str | Path):
        self.backup_dir = Path(backup_dir)

    def blob_path(self, entry_id: str) -> Path:
        return self.backup_dir / entry_id

    def manifest_path(self, manifest_id: str) -> Path:
        return self.backup_dir / f"{manifest_id}{MANIFEST_SUFFIX}"

    async def backup_file(
        self,
        file_path: str | Path,
        operation: BackupOperation | str,
        target_path: str | Path | None = None,
    ) -> BackupEntry:
        """Snapshot ``file_path`` before it is moved, deleted or modified.

        Read errors are propagated so that callers never mutate a file they
        could not back up.
        """
        await self._ensure_backup_dir()

        source = Path(os.path.abspath(file_path))

        async with aiofiles.open(source, "rb") as f:
            content = await f.read()
        stat_result = await aiofiles.os.stat(source)

        entry = BackupEntry(
            id=str(uuid.uuid4()),
            operation=BackupOperation(operation),
            source_path=source,
            target_path=Path(os.path.abspath(target_path)) if target_path else None,
            metadata=BackupMetadata(
                size=stat_result.st_size,
                mode=stat.S_IMODE(stat_result.st_mode),
            ),
            content=content,
        )

        async with aiofiles.open(self.blob_path(entry.id), "wb") as f:
            await f.write(content)

        logger.debug(
            "File backed up",
            entry_id=entry.id,
            source=str(source),
            operation=entry.operation.value,
            size=entry.metadata.size,
        )

        return entry

    async def create_manifest(self, entries: list[BackupEntry]) -> BackupManifest:
        """Group ``entries`` into a new manifest and persist it."""
        await self._ensure_backup_dir()

        manifest = BackupManifest(id=str(uuid.uuid4()), entries=list(entries))

        async with aiofiles.open(
            self.manifest_path(manifest.id), "w", encoding="utf-8"
        ) as f:
            await f.write(manifest.model_dump_json(indent=2))

        logger.info(
            "Backup manifest created",
            manifest_id=manifest.id,
            entries=len(manifest.entries),
        )

        return manifest

    async def load_manifest(self, manifest_id: str) -> BackupManifest:
        """Load a persisted manifest by id."""
        if not manifest_id or os.sep in manifest_id or manifest_id in (".", ".."):
            raise BackupNotFoundError(f"Invalid manifest id: {manifest_id!r}")

        path = self.manifest_path(manifest_id)
        if not await aiofiles.os.path.isfile(path):
            raise BackupNotFoundError(f"Backup manifest not found: {manifest_id}")

        return await self._read_manifest(path)

    async def restore(self, manifest_id: str) -> RestoreResult:
        """Write every file in a manifest back to its original location.

        Entries are restored independently. If any entry fails, the remaining
        ones are still attempted and a ``RestoreError`` carrying the full
        result is raised at the end.
        """
        manifest = await self.load_manifest(manifest_id)
        result = RestoreResult(manifest_id=manifest.id)

        for entry in manifest.entries:
            try:
                await self._restore_entry(entry)
            except OSError as e:
                result.errors.append(f"{entry.source_path}: {e}")
                logger.error(
                    "Failed to restore file",
                    manifest_id=manifest.id,
                    entry_id=entry.id,
                    source=str(entry.source_path),
                    error=str(e),
                )
            else:
                result.restored.append(entry.source_path)

        if result.errors:
            raise RestoreError(result)

        logger.info(
            "Backup restored",
            manifest_id=manifest.id,
            files_restored=len(result.restored),
        )

        return result

    async def list_backups(self) -> list[BackupManifest]:
        """Return all persisted manifests, newest first."""
        if not await aiofiles.os.path.isdir(self.backup_dir):
            return []

        manifests: list[BackupManifest] = []
        for name in sorted(await aiofiles.os.listdir(self.backup_dir)):
            if not name.endswith(MANIFEST_SUFFIX):
                continue
            try:
                manifests.append(await self._read_manifest(self.backup_dir / name))
            except (OSError, ManifestCorruptError) as e:
                logger.warning("Skipping unreadable manifest", file=name, error=str(e))

        manifests.sort(key=lambda m: m.timestamp, reverse=True)
        return manifests

    async def _restore_entry(self, entry: BackupEntry) -> None:
        async with aiofiles.open(self.blob_path(entry.id), "rb") as f:
            content = await f.read()

        await aiofiles.os.makedirs(entry.source_path.parent, exist_ok=True)

        # Staged beside the original so a read-only file in place can be replaced
        staging_path = entry.source_path.with_name(
            f".{entry.source_path.name}.{entry.id}.restore"
        )
        try:
            async with aiofiles.open(staging_path, "wb") as f:
                await f.write(content)
            await _chmod(staging_path, entry.metadata.mode)
            await aiofiles.os.replace(staging_path, entry.source_path)
        except OSError:
            if await aiofiles.os.path.exists(staging_path):
                await aiofiles.os.remove(staging_path)
            raise

    async def _read_manifest(self, path: Path) -> BackupManifest:
        async with aiofiles.open(path, "rb") as f:
            raw = await f.read()

        try:
            return BackupManifest.model_validate_json(raw)
        except (ValidationError, UnicodeDecodeError) as e:
            raise ManifestCorruptError(f"Corrupt backup manifest {path.name}: {e}") from e

    async def _ensure_backup_dir(self) -> None:
        await aiofiles.os.makedirs(self.backup_dir, exist_ok=True)
