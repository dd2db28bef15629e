"""
End-to-end reorganization: plan, back up, apply, restore
"""

import io
import stat
from pathlib import Path

import pytest
from rich.console import Console

from src.backup import BackupStore
from src.config import get_settings
from src.main import main
from src.operations import FileOperation, OperationExecutor, OperationPlanner, OperationType
from src.repository import RepositoryDetector


@pytest.fixture
def monorepo(tmp_path, make_repo, write_file) -> Path:
    """Root repository with a nested app repository and loose root files."""
    make_repo(tmp_path)
    make_repo(tmp_path / "packages" / "app")
    write_file(tmp_path / "NOTES.md", "# Notes\n\nremember the release\n")
    write_file(tmp_path / "build.sh", "#!/bin/bash\nmake all\n")
    (tmp_path / "build.sh").chmod(0o755)
    return tmp_path


def make_console() -> Console:
    return Console(file=io.StringIO(), width=200, color_system=None)


class TestRootDistributionScenario:
    """Distribute loose root files into the root and nested repositories"""

    async def test_move_restore_round_trip(self, monorepo) -> None:
        settings = get_settings()
        planner = OperationPlanner(RepositoryDetector(settings), settings)
        store = BackupStore(settings.backup_dir_for(monorepo))
        executor = OperationExecutor(store)

        notes_target = monorepo / "documents" / "NOTES.md"
        build_target = monorepo / "packages" / "app" / "scripts" / "build.sh"
        plan = await planner.create_plan(
            monorepo,
            [
                FileOperation(
                    type=OperationType.MOVE,
                    source_path=monorepo / "NOTES.md",
                    target_path=notes_target,
                    reason="Markdown documentation file",
                ),
                FileOperation(
                    type=OperationType.MOVE,
                    source_path=monorepo / "build.sh",
                    target_path=build_target,
                    reason="Build script for app",
                ),
            ],
        )

        assert len(plan.operations) == 2
        assert plan.backup_required is True

        result = await executor.execute(plan)

        assert result.success is True
        assert result.operations_completed == 2
        assert notes_target.read_text() == "# Notes\n\nremember the release\n"
        assert build_target.read_text() == "#!/bin/bash\nmake all\n"
        assert not (monorepo / "NOTES.md").exists()
        assert not (monorepo / "build.sh").exists()

        [manifest] = await store.list_backups()
        assert manifest.id == result.backup_manifest_id
        assert len(manifest.entries) == 2

        restored = await store.restore(manifest.id)

        assert sorted(p.name for p in restored.restored) == ["NOTES.md", "build.sh"]
        assert (monorepo / "NOTES.md").read_text() == "# Notes\n\nremember the release\n"
        assert (monorepo / "build.sh").read_text() == "#!/bin/bash\nmake all\n"
        assert stat.S_IMODE((monorepo / "build.sh").stat().st_mode) == 0o755

    async def test_nested_to_root_move_never_reaches_disk(self, monorepo, write_file) -> None:
        settings = get_settings()
        nested_file = write_file(monorepo / "packages" / "app" / "main.py", "print()")
        planner = OperationPlanner(RepositoryDetector(settings), settings)

        plan = await planner.create_plan(
            monorepo,
            [
                FileOperation(
                    type=OperationType.MOVE,
                    source_path=nested_file,
                    target_path=monorepo / "main.py",
                    reason="misplaced suggestion",
                )
            ],
        )
        result = await OperationExecutor(
            BackupStore(settings.backup_dir_for(monorepo))
        ).execute(plan)

        assert plan.operations == []
        assert result.operations_completed == 0
        assert result.backup_manifest_id is None
        assert nested_file.exists()
        assert not (monorepo / "main.py").exists()


class TestCommandLine:
    """Test the repotidy command-line interface"""

    async def test_scan(self, monorepo) -> None:
        console = make_console()

        exit_code = await main(["scan", str(monorepo)], console=console)

        assert exit_code == 0
        assert "Found 2 repositories" in console.file.getvalue()

    async def test_enforce_dry_run(self, monorepo) -> None:
        console = make_console()

        exit_code = await main(["enforce", str(monorepo), "--dry-run"], console=console)

        output = console.file.getvalue()
        assert exit_code == 0
        assert "Backup required: Yes" in output
        assert "Completed: 3  Failed: 0" in output
        assert (monorepo / "build.sh").exists()
        assert not (monorepo / "scripts").exists()

    async def test_enforce_backups_and_restore(self, monorepo) -> None:
        console = make_console()

        exit_code = await main(["enforce", str(monorepo)], console=console)

        assert exit_code == 0
        assert (monorepo / "scripts" / "build.sh").exists()
        assert (monorepo / "documents").is_dir()
        assert not (monorepo / "build.sh").exists()

        store = BackupStore(get_settings().backup_dir_for(monorepo))
        [manifest] = await store.list_backups()
        assert f"Backup created: {manifest.id}" in console.file.getvalue()

        listing = make_console()
        assert await main(["backups", str(monorepo)], console=listing) == 0
        assert manifest.id in listing.file.getvalue()
        assert "Files: 1" in listing.file.getvalue()

        restore_console = make_console()
        exit_code = await main(
            ["restore", str(monorepo), manifest.id], console=restore_console
        )

        assert exit_code == 0
        assert (monorepo / "build.sh").read_text() == "#!/bin/bash\nmake all\n"
        assert "Restored 1 file(s)" in restore_console.file.getvalue()

    async def test_restore_unknown_manifest(self, monorepo) -> None:
        console = make_console()

        exit_code = await main(["restore", str(monorepo), "missing-id"], console=console)

        assert exit_code == 1
        assert "Restore failed" in console.file.getvalue()

    async def test_backups_when_none_exist(self, monorepo) -> None:
        console = make_console()

        assert await main(["backups", str(monorepo)], console=console) == 0
        assert "No backups found." in console.file.getvalue()
