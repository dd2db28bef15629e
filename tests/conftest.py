"""
Shared fixtures and collection settings.

- Adds the project root to ``sys.path`` so ``import src.*`` resolves
- Sets test environment variables for every test (autouse)
- Builds throwaway repository trees under ``tmp_path``
"""

from __future__ import annotations

import sys
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

# Project root (parent of this file's parent)
_PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))


@pytest.fixture(autouse=True)
def _test_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Set test environment variables and reset the settings cache.

    ``monkeypatch`` restores the environment when each test finishes.
    """
    from src.config import clear_settings_cache

    monkeypatch.setenv("REPOTIDY_ENVIRONMENT", "testing")
    monkeypatch.setenv("REPOTIDY_LOG_LEVEL", "WARNING")

    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def make_repo() -> Callable[[Path], Path]:
    """Return a helper that marks a directory as a git repository."""

    def _make_repo(path: Path) -> Path:
        (path / ".git").mkdir(parents=True, exist_ok=True)
        return path

    return _make_repo


@pytest.fixture
def write_file() -> Callable[..., Path]:
    """Return a helper that writes a file, creating parent directories."""

    def _write_file(path: Path, content: str | bytes = "content") -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
        return path

    return _write_file


@pytest.fixture
def backup_store(tmp_path: Path):
    """BackupStore rooted in the conventional hidden directory of ``tmp_path``."""
    from src.backup import BackupStore

    return BackupStore(tmp_path / ".repotidy" / "backups")


@pytest.fixture
def detector():
    from src.repository import RepositoryDetector

    return RepositoryDetector()
