"""Settings model and loading.

Settings are read from ~/.config/dotsync/config.toml. Every key is
optional; a missing file means "use the defaults". The repository
location can additionally be overridden with the DOTSYNC_REPO
environment variable or the ``--repo`` command-line option.

Example config.toml::

    repository = "~/src/dotfiles"
    storage_dir = "configs"
    remote = "origin"
    picker_excludes = [".git", ".cache", ".local/share", ".ssh"]
"""

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from dotsync.core.errors import ConfigError
from dotsync.core.paths import get_settings_path

REPO_ENV_VAR = "DOTSYNC_REPO"

DEFAULT_PICKER_EXCLUDES = [".git", ".cache", ".local/share", ".ssh"]


class Settings(BaseModel):
    """Persistent dotsync settings.

    Attributes:
        repository: Root of the dotfiles git repository.
        storage_dir: Directory inside the repository holding the categories.
        remote: Name of the git remote used for pushing.
        picker_excludes: Home-relative paths or glob patterns hidden from
            the file picker.
    """

    model_config = ConfigDict(extra="forbid")

    repository: Annotated[
        Path,
        Field(description="Root of the dotfiles repository"),
    ] = Path("~/.dotfiles")
    storage_dir: Annotated[
        str,
        Field(min_length=1, description="Storage directory inside the repository"),
    ] = "configs"
    remote: Annotated[
        str,
        Field(min_length=1, description="Git remote to push to"),
    ] = "origin"
    picker_excludes: Annotated[
        list[str],
        Field(
            default_factory=lambda: list(DEFAULT_PICKER_EXCLUDES),
            description="Paths hidden from the file picker",
        ),
    ]

    @field_validator("repository", mode="after")
    @classmethod
    def expand_repository(cls, v: Path) -> Path:
        """Expand ``~`` so the repository path is always absolute-ish."""
        return v.expanduser()

    @field_validator("storage_dir", mode="after")
    @classmethod
    def validate_storage_dir(cls, v: str) -> str:
        """Reject storage directories that would escape the repository."""
        parts = Path(v).parts
        if Path(v).is_absolute() or ".." in parts:
            msg = f"storage_dir must be a relative path inside the repository, got '{v}'"
            raise ValueError(msg)
        return v

    @property
    def storage_root(self) -> Path:
        """Absolute path of the categorized storage tree."""
        return self.repository / self.storage_dir


@dataclass(frozen=True, slots=True)
class RunOptions:
    """Per-invocation behavior switches.

    Passed explicitly to every component instead of living in module state.

    Attributes:
        dry_run: Report every action without touching the filesystem or git.
        assume_yes: Never prompt; confirmations take their safe default.
    """

    dry_run: bool = False
    assume_yes: bool = False


def load_settings(path: Path | None = None, repository: Path | None = None) -> Settings:
    """Load settings from TOML and apply repository overrides.

    Args:
        path: Settings file. If None, uses the default settings path.
        repository: Explicit repository override (from ``--repo``). Takes
            precedence over DOTSYNC_REPO and the settings file.

    Returns:
        Validated Settings object.

    Raises:
        ConfigError: If the file cannot be read, parsed or validated.
    """
    settings_path = path or get_settings_path()

    data: dict[str, object] = {}
    if settings_path.exists():
        try:
            with open(settings_path, "rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid TOML syntax in {settings_path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Failed to read settings {settings_path}: {e}") from e

    env_repo = os.environ.get(REPO_ENV_VAR)
    if repository is not None:
        data["repository"] = str(repository)
    elif env_repo:
        data["repository"] = env_repo

    try:
        settings = Settings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings in {settings_path}: {e}") from e

    return settings.model_copy(update={"repository": settings.repository.resolve()})
