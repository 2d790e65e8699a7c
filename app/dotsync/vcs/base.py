"""Abstract base class for version-control backends.

This module defines the VersionControl interface the import engine and
the sync step use to persist repository storage.
"""

from abc import ABC, abstractmethod
from pathlib import Path


class VersionControl(ABC):
    """Abstract base class for version-control backends.

    Every call operates on an explicit repository root; implementations
    must not depend on the process working directory.

    Attributes:
        _root: Repository root directory.
        _dry_run: If True, mutating calls are reported but not executed.

    Example:
        >>> vcs = GitRepository(Path("~/.dotfiles").expanduser())
        >>> vcs.commit([storage_file], "Add .zshrc to zsh configs")
        >>> if vcs.has_remote():
        ...     vcs.push()
    """

    def __init__(self, root: Path, dry_run: bool = False) -> None:
        """Initialize the backend.

        Args:
            root: Repository root directory.
            dry_run: If True, only report mutating commands.
        """
        self._root = root
        self._dry_run = dry_run

    @abstractmethod
    def commit(self, paths: list[Path], message: str) -> None:
        """Stage ``paths`` and record them in one commit.

        Raises:
            VcsError: If staging or committing fails.
        """

    @abstractmethod
    def stage(self, paths: list[Path]) -> None:
        """Stage ``paths`` (files or directories) without committing.

        Raises:
            VcsError: If staging fails.
        """

    @abstractmethod
    def has_staged_changes(self) -> bool:
        """Check if the index holds changes that are not committed yet.

        In dry-run mode the paths passed to stage() count as staged.
        """

    @abstractmethod
    def commit_staged(self, message: str) -> None:
        """Commit whatever is currently staged.

        Raises:
            VcsError: If committing fails.
        """

    @abstractmethod
    def pull_ff_only(self) -> None:
        """Fast-forward the current branch from its upstream.

        Raises:
            SyncError: If the pull fails or is not a fast-forward.
        """

    @abstractmethod
    def push(self) -> None:
        """Push the current branch to the configured remote.

        Raises:
            SyncError: If the push fails.
        """

    @abstractmethod
    def has_remote(self) -> bool:
        """Check if a push remote is configured."""
