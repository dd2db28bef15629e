"""Configuration settings for repotidy with caching utilities."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from threading import RLock
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """repotidy application settings"""

    model_config = SettingsConfigDict(
        env_prefix="REPOTIDY_",
        env_file=[".env.test", ".env"],
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Repository discovery
    vcs_marker: str = ".git"
    skip_directories: list[str] = Field(
        default_factory=lambda: [
            ".git",
            "node_modules",
            ".venv",
            "venv",
            "__pycache__",
            ".tox",
            ".mypy_cache",
            ".pytest_cache",
            ".repotidy",
        ]
    )

    # Backups (relative to the scanned root)
    backup_directory_name: str = ".repotidy/backups"

    # Folder enforcement
    required_folders: list[str] = Field(
        default_factory=lambda: ["scripts", "documents"]
    )
    script_extensions: list[str] = Field(
        default_factory=lambda: [".sh", ".bash", ".py", ".rb"]
    )

    # Root-level files that are never proposed for distribution
    root_keep_files: list[str] = Field(
        default_factory=lambda: [
            "README.md",
            "LICENSE",
            "CHANGELOG.md",
            "pyproject.toml",
            "setup.py",
            "setup.cfg",
            "package.json",
            "package-lock.json",
            "tsconfig.json",
            "Makefile",
        ]
    )

    # Progress display only
    estimated_ms_per_operation: int = 50

    # Logging
    log_level: str = "INFO"
    log_format: str = "console"
    log_file: Path | None = None

    # Environment
    environment: str = "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development mode"""
        return self.environment.lower() in ["development", "dev"]

    @property
    def is_testing(self) -> bool:
        """Check if running in testing mode"""
        return self.environment.lower() in ["testing", "test"]

    def backup_dir_for(self, root_path: Path) -> Path:
        """Return the backup directory used for a scanned root."""
        return Path(root_path) / self.backup_directory_name


_SETTINGS_LOCK = RLock()
_SETTINGS_CACHE: Settings | None = None


def get_settings(*, refresh: bool = False) -> Settings:
    """Return a cached ``Settings`` instance.

    Parameters
    ----------
    refresh:
        When ``True`` the cached instance is discarded and a new one is created.
    """

    global _SETTINGS_CACHE

    with _SETTINGS_LOCK:
        if refresh or _SETTINGS_CACHE is None:
            _SETTINGS_CACHE = Settings()
        return _SETTINGS_CACHE


def clear_settings_cache() -> None:
    """Clear the cached settings instance."""

    global _SETTINGS_CACHE

    with _SETTINGS_LOCK:
        _SETTINGS_CACHE = None


@contextmanager
def override_settings(**overrides: Any) -> Iterator[Settings]:
    """Temporarily override the cached settings within a context."""

    global _SETTINGS_CACHE

    with _SETTINGS_LOCK:
        previous_settings = _SETTINGS_CACHE

    base_settings = previous_settings or Settings()
    patched_settings = base_settings.model_copy(update=overrides)

    with _SETTINGS_LOCK:
        _SETTINGS_CACHE = patched_settings

    try:
        yield patched_settings
    finally:
        with _SETTINGS_LOCK:
            _SETTINGS_CACHE = previous_settings
