"""Git backend.

Runs git with ``-C <root>`` on every call, so the working directory of
the dotsync process is never consulted or changed.
"""

import logging
import subprocess
from pathlib import Path

from dotsync.core.errors import SyncError, VcsError
from dotsync.utils.formatting import print_dry_run
from dotsync.utils.shell import CommandResult, run_command
from dotsync.vcs.base import VersionControl

logger = logging.getLogger(__name__)

# Network operations may wait on credentials or slow remotes
NETWORK_TIMEOUT = 300.0


class GitRepository(VersionControl):
    """Version control through the git command-line tool.

    Attributes:
        _remote: Name of the remote used by push() and has_remote().
        _dry_run_staged: Paths a dry-run stage() would have added.
    """

    def __init__(self, root: Path, remote: str = "origin", dry_run: bool = False) -> None:
        """Initialize the git backend.

        Args:
            root: Repository root directory.
            remote: Name of the remote to push to.
            dry_run: If True, only report mutating commands.
        """
        super().__init__(root, dry_run=dry_run)
        self._remote = remote
        self._dry_run_staged: list[Path] = []

    def _git(
        self,
        *args: str,
        timeout: float | None = 60.0,
        error: type[VcsError] = VcsError,
    ) -> CommandResult:
        """Run a git subcommand against the repository root.

        Raises:
            VcsError: (or ``error``) if git is missing, times out or fails.
        """
        cmd = ["git", "-C", str(self._root), *args]
        logger.debug("Running %s", " ".join(cmd))
        try:
            result = run_command(cmd, timeout=timeout)
        except FileNotFoundError as e:
            raise error("git is not installed") from e
        except subprocess.TimeoutExpired as e:
            raise error(f"git {args[0]} timed out") from e

        if not result.success:
            detail = result.stderr.strip() or result.stdout.strip()
            raise error(f"git {args[0]} failed: {detail}")
        return result

    def _mutate(
        self,
        *args: str,
        timeout: float | None = 60.0,
        error: type[VcsError] = VcsError,
    ) -> None:
        """Run a mutating git subcommand, or report it in dry-run mode."""
        if self._dry_run:
            print_dry_run(" ".join(["git", "-C", str(self._root), *args]))
            return
        self._git(*args, timeout=timeout, error=error)

    def stage(self, paths: list[Path]) -> None:
        if self._dry_run:
            self._dry_run_staged.extend(paths)
        self._mutate("add", "--", *(str(p) for p in paths))

    def commit(self, paths: list[Path], message: str) -> None:
        self._mutate("add", "--", *(str(p) for p in paths))
        # Restrict the commit to the given paths so unrelated staged work stays staged
        self._mutate("commit", "-m", message, "--", *(str(p) for p in paths))

    def has_staged_changes(self) -> bool:
        if self._index_has_changes():
            return True
        # A dry-run stage() left the index alone; report what it would have added
        if self._dry_run and self._dry_run_staged:
            status = self._git(
                "status",
                "--porcelain",
                "--untracked-files=all",
                "--",
                *(str(p) for p in self._dry_run_staged),
            )
            return bool(status.stdout.strip())
        return False

    def _index_has_changes(self) -> bool:
        """Check if the index differs from HEAD."""
        cmd = ["git", "-C", str(self._root), "diff", "--cached", "--quiet"]
        try:
            result = run_command(cmd)
        except FileNotFoundError as e:
            raise VcsError("git is not installed") from e
        if result.returncode not in (0, 1):
            raise VcsError(f"git diff failed: {result.stderr.strip()}")
        return result.returncode == 1

    def commit_staged(self, message: str) -> None:
        self._mutate("commit", "-m", message)

    def pull_ff_only(self) -> None:
        self._mutate("pull", "--ff-only", timeout=NETWORK_TIMEOUT, error=SyncError)

    def push(self) -> None:
        self._mutate("push", timeout=NETWORK_TIMEOUT, error=SyncError)

    def has_remote(self) -> bool:
        try:
            result = run_command(
                ["git", "-C", str(self._root), "remote", "get-url", self._remote]
            )
        except FileNotFoundError:
            return False
        return result.success
