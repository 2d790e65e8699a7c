"""Conflict resolution for occupied home-directory targets.

When the target path of a mapping is already occupied, the resolver
decides what happens and performs the smallest safe change so that the
link engine can create the symlink afterwards:

1. Symlink to the expected storage path: nothing to do.
2. Symlink elsewhere: replace after confirmation, otherwise skip.
3. Regular file identical to storage: remove it silently.
4. Regular file that differs: show a diff and let the operator keep the
   local version, keep the repository version or skip.

Non-interactive runs never pick a side in a real conflict; they skip and
warn. A skip never aborts the rest of the batch.
"""

import difflib
import logging
import shutil
from pathlib import Path

from rich.syntax import Syntax

from dotsync.core.prompts import Prompter
from dotsync.core.settings import RunOptions
from dotsync.models.mapping import Mapping, TargetState
from dotsync.models.results import LinkStatus
from dotsync.utils.formatting import console, print_dry_run, print_info, print_warning

logger = logging.getLogger(__name__)

BACKUP_SUFFIX = ".bak"

CONFLICT_CHOICES = {
    "k": LinkStatus.ADOPTED_LOCAL,
    "o": LinkStatus.ADOPTED_REPO,
    "s": LinkStatus.SKIPPED,
}
CONFLICT_QUESTION = "Action: [K]eep Local, [O]verwrite, [S]kip?"


def backup_path_for(target: Path) -> Path:
    """Pick the ``.bak`` name for a file without clobbering older backups.

    Returns ``<name>.bak`` when free, otherwise the first free
    ``<name>.bak.<n>``.
    """
    candidate = target.with_name(target.name + BACKUP_SUFFIX)
    counter = 1
    while candidate.exists() or candidate.is_symlink():
        candidate = target.with_name(f"{target.name}{BACKUP_SUFFIX}.{counter}")
        counter += 1
    return candidate


def render_diff(local: Path, repo: Path) -> str:
    """Build a unified diff from the local file to the repository copy."""
    local_lines = local.read_text(errors="replace").splitlines(keepends=True)
    repo_lines = repo.read_text(errors="replace").splitlines(keepends=True)
    return "".join(
        difflib.unified_diff(
            local_lines,
            repo_lines,
            fromfile=f"{local} (local)",
            tofile=f"{repo} (repository)",
        )
    )


class ConflictResolver:
    """Resolves occupied targets before a symlink is created.

    Attributes:
        _home: Home directory the targets live under.
        _prompter: Source of operator answers.
        _options: Dry-run and non-interactive switches.
    """

    def __init__(self, home: Path, prompter: Prompter, options: RunOptions) -> None:
        self._home = home
        self._prompter = prompter
        self._options = options

    def resolve(self, mapping: Mapping, state: TargetState) -> tuple[LinkStatus, str | None]:
        """Clear the way for linking ``mapping`` or decide to skip it.

        Args:
            mapping: Mapping whose target is occupied.
            state: Current state of the target.

        Returns:
            Tuple of the resulting status and an optional detail message.
            ALREADY_LINKED and SKIPPED mean no symlink must be created;
            every other status means the target path is now free.

        Raises:
            OSError: If removing, renaming or copying fails.
        """
        rel = mapping.relative_path.as_posix()

        if state == TargetState.LINKED:
            return LinkStatus.ALREADY_LINKED, None

        if state == TargetState.STALE_LINK:
            return self._resolve_stale_link(mapping)

        if state == TargetState.IDENTICAL:
            print_info(f"{rel} matches repo version. Converting to symlink...")
            self._remove(mapping.target_in(self._home))
            return LinkStatus.CONVERTED, None

        if state == TargetState.DIRECTORY:
            print_warning(f"{rel} is a directory in the home directory. Skipping.")
            return LinkStatus.SKIPPED, "target is a directory"

        if state == TargetState.DIVERGED:
            return self._resolve_diverged(mapping)

        msg = f"Target of {rel} is not occupied ({state.value})"
        raise ValueError(msg)

    def _resolve_stale_link(self, mapping: Mapping) -> tuple[LinkStatus, str | None]:
        """Replace a symlink that points somewhere else, if allowed."""
        target = mapping.target_in(self._home)
        rel = mapping.relative_path.as_posix()
        current = target.readlink()
        print_warning(f"{rel} is a symlink pointing elsewhere: {current}")

        if not self._options.assume_yes and not self._prompter.confirm(
            "Replace existing symlink?"
        ):
            print_info(f"Skipping {rel}")
            return LinkStatus.SKIPPED, f"symlink to {current} kept"

        self._remove(target)
        return LinkStatus.RELINKED, f"was -> {current}"

    def _resolve_diverged(self, mapping: Mapping) -> tuple[LinkStatus, str | None]:
        """Handle a regular file whose content differs from storage."""
        target = mapping.target_in(self._home)
        rel = mapping.relative_path.as_posix()
        print_warning(f"Conflict detected for {rel}")

        if self._options.assume_yes:
            print_warning(f"Non-interactive mode: Skipping {rel}")
            logger.warning("Conflict left unresolved for %s", rel)
            return LinkStatus.SKIPPED, "conflict (non-interactive)"

        diff_text = render_diff(target, mapping.storage_path)
        console.print(Syntax(diff_text, "diff", theme="ansi_dark", background_color="default"))

        decision = self._prompter.choose(CONFLICT_QUESTION, CONFLICT_CHOICES)

        if decision == LinkStatus.ADOPTED_LOCAL:
            print_info("Keeping local version (updating repository)...")
            self._copy(target, mapping.storage_path)
            self._remove(target)
            return LinkStatus.ADOPTED_LOCAL, None

        if decision == LinkStatus.ADOPTED_REPO:
            print_info("Overwriting local version (backing up existing)...")
            backup = backup_path_for(target)
            self._rename(target, backup)
            return LinkStatus.ADOPTED_REPO, f"backup at {backup}"

        print_info(f"Skipping {rel}")
        return LinkStatus.SKIPPED, "conflict left unresolved"

    # === Guarded mutations ===

    def _remove(self, path: Path) -> None:
        if self._options.dry_run:
            print_dry_run(f"rm {path}")
            return
        path.unlink()
        logger.debug("Removed %s", path)

    def _rename(self, source: Path, dest: Path) -> None:
        if self._options.dry_run:
            print_dry_run(f"mv {source} {dest}")
            return
        source.rename(dest)
        logger.debug("Renamed %s to %s", source, dest)

    def _copy(self, source: Path, dest: Path) -> None:
        if self._options.dry_run:
            print_dry_run(f"cp {source} {dest}")
            return
        shutil.copy2(source, dest)
        logger.debug("Copied %s to %s", source, dest)
