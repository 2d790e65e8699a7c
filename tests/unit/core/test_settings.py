"""Unit tests for settings loading.

Tests defaults, TOML loading, validation errors and the precedence of
the repository overrides.
"""

from pathlib import Path

import pytest
from dotsync.core.errors import ConfigError
from dotsync.core.settings import (
    DEFAULT_PICKER_EXCLUDES,
    REPO_ENV_VAR,
    RunOptions,
    Settings,
    load_settings,
)


class TestSettings:
    """Tests for the Settings model."""

    def test_defaults(self) -> None:
        """Settings default to ~/.dotfiles with a configs storage dir."""
        settings = Settings()

        assert settings.repository == Path("~/.dotfiles").expanduser()
        assert settings.storage_dir == "configs"
        assert settings.remote == "origin"
        assert settings.picker_excludes == DEFAULT_PICKER_EXCLUDES

    def test_excludes_are_not_shared(self) -> None:
        """Each instance gets its own exclude list."""
        first = Settings()
        first.picker_excludes.append("*.swp")

        assert Settings().picker_excludes == DEFAULT_PICKER_EXCLUDES

    def test_storage_root(self, tmp_path: Path) -> None:
        """storage_root joins repository and storage_dir."""
        settings = Settings(repository=tmp_path, storage_dir="dots")

        assert settings.storage_root == tmp_path / "dots"

    @pytest.mark.parametrize("storage_dir", ["/abs", "../outside", "a/../../b"])
    def test_storage_dir_must_stay_inside(self, storage_dir: str) -> None:
        """storage_dir may not escape the repository."""
        with pytest.raises(ValueError, match="relative path inside the repository"):
            Settings(storage_dir=storage_dir)

    def test_unknown_keys_rejected(self) -> None:
        """Typos in the settings file are errors."""
        with pytest.raises(ValueError):
            Settings(repo="/tmp/x")  # type: ignore[call-arg]


class TestRunOptions:
    """Tests for RunOptions."""

    def test_defaults_are_interactive_and_real(self) -> None:
        """Default options neither skip prompts nor suppress changes."""
        options = RunOptions()

        assert options.dry_run is False
        assert options.assume_yes is False


class TestLoadSettings:
    """Tests for load_settings function."""

    def test_missing_file_uses_defaults(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """A missing settings file is not an error."""
        monkeypatch.delenv(REPO_ENV_VAR, raising=False)

        settings = load_settings(tmp_path / "config.toml")

        assert settings.storage_dir == "configs"

    def test_reads_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Values from the settings file are applied."""
        monkeypatch.delenv(REPO_ENV_VAR, raising=False)
        config = tmp_path / "config.toml"
        config.write_text(f'repository = "{tmp_path / "dots"}"\nremote = "upstream"\n')

        settings = load_settings(config)

        assert settings.repository == (tmp_path / "dots").resolve()
        assert settings.remote == "upstream"

    def test_env_overrides_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """DOTSYNC_REPO wins over the settings file."""
        config = tmp_path / "config.toml"
        config.write_text(f'repository = "{tmp_path / "from-file"}"\n')
        monkeypatch.setenv(REPO_ENV_VAR, str(tmp_path / "from-env"))

        assert load_settings(config).repository == (tmp_path / "from-env").resolve()

    def test_option_overrides_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """An explicit repository wins over DOTSYNC_REPO."""
        monkeypatch.setenv(REPO_ENV_VAR, str(tmp_path / "from-env"))

        settings = load_settings(tmp_path / "config.toml", repository=tmp_path / "from-cli")

        assert settings.repository == (tmp_path / "from-cli").resolve()

    def test_invalid_toml(self, tmp_path: Path) -> None:
        """Malformed TOML raises ConfigError."""
        config = tmp_path / "config.toml"
        config.write_text("repository = [unclosed")

        with pytest.raises(ConfigError, match="Invalid TOML"):
            load_settings(config)

    def test_invalid_values(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Values failing validation raise ConfigError."""
        monkeypatch.delenv(REPO_ENV_VAR, raising=False)
        config = tmp_path / "config.toml"
        config.write_text('storage_dir = "../escape"\n')

        with pytest.raises(ConfigError, match="Invalid settings"):
            load_settings(config)
