"""Test configuration module"""

from pathlib import Path


def test_settings_from_environment(monkeypatch) -> None:
    """Settings are built from REPOTIDY_ environment variables."""
    monkeypatch.setenv("REPOTIDY_BACKUP_DIRECTORY_NAME", ".backups")
    monkeypatch.setenv("REPOTIDY_REQUIRED_FOLDERS", '["scripts", "docs"]')
    monkeypatch.setenv("REPOTIDY_ESTIMATED_MS_PER_OPERATION", "25")

    from src.config import get_settings

    settings = get_settings(refresh=True)

    assert settings.environment == "testing"
    assert settings.is_testing is True
    assert settings.backup_directory_name == ".backups"
    assert settings.required_folders == ["scripts", "docs"]
    assert settings.estimated_ms_per_operation == 25


def test_defaults() -> None:
    from src.config import get_settings

    settings = get_settings()

    assert settings.vcs_marker == ".git"
    assert "node_modules" in settings.skip_directories
    assert ".repotidy" in settings.skip_directories
    assert settings.script_extensions == [".sh", ".bash", ".py", ".rb"]
    assert settings.backup_dir_for(Path("/work")) == Path("/work/.repotidy/backups")


def test_settings_are_cached() -> None:
    from src.config import clear_settings_cache, get_settings

    first = get_settings()
    assert get_settings() is first

    clear_settings_cache()
    assert get_settings() is not first


def test_override_settings_restores_previous() -> None:
    from src.config import get_settings, override_settings

    original = get_settings()

    with override_settings(vcs_marker=".hg") as patched:
        assert get_settings() is patched
        assert patched.vcs_marker == ".hg"

    assert get_settings() is original
