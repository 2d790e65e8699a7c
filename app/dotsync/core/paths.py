"""XDG-compliant path management for dotsync.

This module provides standardized paths following the XDG Base Directory
Specification, plus the locations dotsync itself writes into the home
directory (pre-flight snapshot archives).

XDG defaults:
- Config: ~/.config/dotsync/
"""

import os
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "dotsync"

# Pre-flight snapshot archives live directly in the home directory
SNAPSHOT_PREFIX = ".dotfiles_backup_"
SNAPSHOT_SUFFIX = ".tar.gz"


def _get_xdg_dir(env_var: str, default_subdir: str) -> Path:
    """Get XDG directory respecting environment variable override.

    Args:
        env_var: XDG environment variable name (e.g., "XDG_CONFIG_HOME").
        default_subdir: Default subdirectory under home (e.g., ".config").

    Returns:
        Path to the application-specific directory.
    """
    base = os.environ.get(env_var)
    if base:
        return Path(base) / APP_NAME
    return Path.home() / default_subdir / APP_NAME


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to ~/.config/dotsync/ (or XDG_CONFIG_HOME/dotsync/).
    """
    return _get_xdg_dir("XDG_CONFIG_HOME", ".config")


def get_settings_path() -> Path:
    """Get the settings file path.

    Returns:
        Path to ~/.config/dotsync/config.toml.
    """
    return get_config_dir() / "config.toml"


def get_theme_path() -> Path:
    """Get the user theme override path.

    Returns:
        Path to ~/.config/dotsync/theme.toml.
    """
    return get_config_dir() / "theme.toml"


def snapshot_name(timestamp: int, serial: int = 0) -> str:
    """Build the archive file name for a snapshot taken at ``timestamp``.

    A non-zero ``serial`` tells apart snapshots taken within the same second.
    """
    stamp = f"{timestamp}_{serial}" if serial else str(timestamp)
    return f"{SNAPSHOT_PREFIX}{stamp}{SNAPSHOT_SUFFIX}"


def next_snapshot_path(home: Path, timestamp: int) -> Path:
    """Return the first snapshot path for ``timestamp`` that does not exist yet."""
    serial = 0
    candidate = home / snapshot_name(timestamp)
    while candidate.is_symlink() or candidate.exists():
        serial += 1
        candidate = home / snapshot_name(timestamp, serial)
    return candidate


def _snapshot_order(name: str) -> tuple[int, int] | None:
    """Parse ``<timestamp>[_<serial>]`` out of a snapshot file name."""
    stamp = name[len(SNAPSHOT_PREFIX) : -len(SNAPSHOT_SUFFIX)]
    timestamp, sep, serial = stamp.partition("_")
    if not timestamp.isdigit() or (sep and not serial.isdigit()):
        return None
    return int(timestamp), int(serial or 0)


def find_latest_snapshot(home: Path) -> Path | None:
    """Find the most recent pre-flight snapshot in the home directory.

    Snapshots are ordered by the unix timestamp embedded in their name,
    then by serial; files whose name does not carry a numeric timestamp
    are ignored.

    Args:
        home: Home directory to search.

    Returns:
        Path to the newest snapshot archive, or None if there is none.
    """
    latest: tuple[tuple[int, int], Path] | None = None
    for candidate in home.glob(f"{SNAPSHOT_PREFIX}*{SNAPSHOT_SUFFIX}"):
        order = _snapshot_order(candidate.name)
        if order is None:
            continue
        if latest is None or order > latest[0]:
            latest = (order, candidate)
    return latest[1] if latest else None


def is_within(path: Path, root: Path) -> bool:
    """Check whether ``path`` equals ``root`` or is nested beneath it.

    Comparison is done on path components, so ``/home/a/.config2`` is not
    considered to be inside ``/home/a/.config``.
    """
    return path == root or root in path.parents
