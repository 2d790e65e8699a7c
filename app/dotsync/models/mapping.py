"""Mapping models.

This module defines the pairing between a file in repository storage and
the home-directory location it must be reachable from, together with the
states that home-directory location can be in.
"""

import filecmp
from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class TargetState(str, Enum):
    """State of the home-directory entry for a mapping.

    Attributes:
        ABSENT: Nothing exists at the target path.
        LINKED: Symlink pointing at the expected storage path (terminal state).
        STALE_LINK: Symlink pointing somewhere else, dangling or not.
        IDENTICAL: Regular file with the same bytes as the storage copy.
        DIVERGED: Regular file whose content differs from the storage copy.
        DIRECTORY: A directory occupies the target path.
    """

    ABSENT = "absent"
    LINKED = "linked"
    STALE_LINK = "stale_link"
    IDENTICAL = "identical"
    DIVERGED = "diverged"
    DIRECTORY = "directory"


@dataclass(frozen=True, slots=True)
class Mapping:
    """A file in repository storage and its home-directory location.

    Attributes:
        storage_path: Absolute path of the file inside repository storage.
        relative_path: Location under the home directory, without the
            category segment.
        category: First-level storage directory the file belongs to.
    """

    storage_path: Path
    relative_path: Path
    category: str

    def __post_init__(self) -> None:
        """Validate mapping data after initialization."""
        if not self.storage_path.is_absolute():
            msg = f"Storage path must be absolute, got {self.storage_path}"
            raise ValueError(msg)
        if self.relative_path.is_absolute() or not self.relative_path.parts:
            msg = f"Relative path must be a non-empty relative path, got {self.relative_path}"
            raise ValueError(msg)
        if ".." in self.relative_path.parts:
            msg = f"Relative path must not leave the home directory: {self.relative_path}"
            raise ValueError(msg)

    def target_in(self, home: Path) -> Path:
        """Resolve the target path under the given home directory."""
        return home / self.relative_path


def classify_target(mapping: Mapping, home: Path) -> TargetState:
    """Determine the current state of a mapping's home-directory target.

    A missing storage file makes any regular file at the target count as
    identical: there is nothing in storage it could diverge from, which
    only happens in a dry run that previewed an import of that file.

    Args:
        mapping: Mapping whose target is inspected.
        home: Home directory the target lives under.

    Returns:
        TargetState describing the target.
    """
    target = mapping.target_in(home)

    if target.is_symlink():
        if Path(target.readlink()) == mapping.storage_path:
            return TargetState.LINKED
        return TargetState.STALE_LINK

    if not target.exists():
        return TargetState.ABSENT

    if target.is_dir():
        return TargetState.DIRECTORY

    if not mapping.storage_path.exists():
        return TargetState.IDENTICAL

    if filecmp.cmp(target, mapping.storage_path, shallow=False):
        return TargetState.IDENTICAL
    return TargetState.DIVERGED
