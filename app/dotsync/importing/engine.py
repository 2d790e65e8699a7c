"""Import of home-directory files into repository storage.

The reverse of installation: selected files are copied to
``<storage_root>/<category>/<path relative to home>``, committed one by
one, and pushed once per batch. The full home-relative path is kept so
a later install links the file back to exactly where it came from.

Importing never creates symlinks; activating an imported file is the job
of the next install run.
"""

import logging
import re
import shutil
from pathlib import Path

from dotsync.core.errors import SyncError, VcsError
from dotsync.core.prompts import Prompter
from dotsync.core.settings import RunOptions
from dotsync.importing.picker import FilePicker
from dotsync.linking.mapper import categories_providing
from dotsync.models.mapping import Mapping
from dotsync.models.results import ImportResult, ImportStatus
from dotsync.utils.formatting import (
    console,
    print_dry_run,
    print_error,
    print_info,
    print_success,
    print_warning,
)
from dotsync.vcs.base import VersionControl

logger = logging.getLogger(__name__)

CATEGORY_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")
CATEGORY_ERROR = "Category must be alphanumeric (hyphens and underscores allowed)."

REVIEW_QUESTION = "Action: [C]ontinue, [R]e-select, [Q]uit?"
REVIEW_CHOICES = {"c": "continue", "r": "reselect", "q": "quit"}


def is_valid_category(name: str) -> bool:
    """Check a category name against the allowed character set."""
    return bool(CATEGORY_PATTERN.match(name))


def commit_message(relative_path: Path, category: str) -> str:
    """Build the commit message for one imported file."""
    return f"Add {relative_path.as_posix()} to {category} configs"


class ImportEngine:
    """Copies selected files into storage and commits them.

    Attributes:
        push_error: Error text of the final push, None if it succeeded or
            was not attempted.
    """

    def __init__(
        self,
        home: Path,
        storage_root: Path,
        vcs: VersionControl,
        prompter: Prompter,
        options: RunOptions,
    ) -> None:
        self._home = home
        self._storage_root = storage_root
        self._vcs = vcs
        self._prompter = prompter
        self._options = options
        self.push_error: str | None = None

    # === Selection ===

    def select(self, picker: FilePicker, search_root: Path) -> list[Path]:
        """Run the picker until the operator accepts a selection.

        Args:
            picker: Interactive file picker.
            search_root: Directory the picker searches.

        Returns:
            Sorted selected paths; empty if nothing was chosen or the
            operator quit.

        Raises:
            PickerUnavailableError: If the picker tool is missing.
        """
        while True:
            print_info(f"Searching in: {search_root}")
            selected = sorted(picker.pick(search_root))
            if not selected:
                print_warning("No file selected.")
                return []

            console.print("\n[info]Selected files for import:[/]")
            for path in selected:
                console.print(f"  - {path}", markup=False)

            if self._options.assume_yes:
                return selected

            choice = self._prompter.choose(REVIEW_QUESTION, REVIEW_CHOICES)
            if choice == "continue":
                return selected
            if choice == "quit":
                print_info("Import cancelled.")
                return []

    # === Import ===

    def import_files(
        self, paths: list[Path], shared_category: str | None = None
    ) -> list[ImportResult]:
        """Import each path under its category, then push once.

        Args:
            paths: Absolute paths of the files to import.
            shared_category: Category for every file. If None and more
                than one file is given, the operator is asked for one;
                an empty answer means asking per file.

        Returns:
            One ImportResult per path, in input order.

        Raises:
            ValueError: If ``shared_category`` is not a valid category name.
        """
        self.push_error = None
        if not paths:
            return []

        if shared_category is not None and not is_valid_category(shared_category):
            raise ValueError(f"Invalid category '{shared_category}'. {CATEGORY_ERROR}")

        print_info(f"Selected {len(paths)} files.")
        category = shared_category
        if category is None and len(paths) > 1:
            category = (
                self._ask_category(
                    "Enter category name for ALL files (leave empty to prompt individually)",
                    allow_empty=True,
                )
                or None
            )

        results: list[ImportResult] = []
        for path in paths:
            results.append(self._import_one(path, category))

        self._push_if_committed(results)
        return results

    def _ask_category(self, message: str, allow_empty: bool = False) -> str:
        """Prompt until a valid category is entered.

        With ``allow_empty`` an empty answer is accepted and returned as "".
        """
        while True:
            answer = self._prompter.ask(message).strip()
            if not answer:
                if allow_empty:
                    return ""
                continue
            if is_valid_category(answer):
                return answer
            print_error(CATEGORY_ERROR)

    def _import_one(self, source: Path, category: str | None) -> ImportResult:
        """Copy and commit a single file, isolating its failures."""
        try:
            relative = source.relative_to(self._home)
        except ValueError:
            print_error(f"{source} is not inside the home directory {self._home}")
            return ImportResult(
                source=source,
                status=ImportStatus.FAILED,
                dry_run=self._options.dry_run,
                error="outside the home directory",
            )

        rel = relative.as_posix()
        if source.is_symlink() or not source.is_file():
            print_warning(f"Skipping {rel}: not a regular file")
            return ImportResult(
                source=source,
                status=ImportStatus.SKIPPED,
                dry_run=self._options.dry_run,
                error="not a regular file",
            )

        print_info(f"Processing: {rel}")
        if category is None:
            category = self._ask_category(f"Enter category name for {rel} (e.g., zsh, git, vim)")

        storage_file = self._storage_root / category / relative
        mapping = Mapping(storage_path=storage_file, relative_path=relative, category=category)

        others = [c for c in categories_providing(self._storage_root, relative) if c != category]
        if others:
            owner = ", ".join(others)
            print_error(f"{rel} is already stored under category {owner}")
            return ImportResult(
                source=source,
                status=ImportStatus.FAILED,
                mapping=mapping,
                dry_run=self._options.dry_run,
                error=f"already stored under category {owner}",
            )

        if storage_file.exists():
            print_warning(f"File already exists in repo: {storage_file}")
            confirmed = self._options.assume_yes or self._prompter.confirm(
                "Overwrite repo version?"
            )
            if not confirmed:
                print_info(f"Skipping {rel}")
                return ImportResult(
                    source=source,
                    status=ImportStatus.SKIPPED,
                    mapping=mapping,
                    dry_run=self._options.dry_run,
                )
        else:
            print_info(f"Adding new file to repository: {rel}")

        try:
            self._copy(source, storage_file)
        except OSError as e:
            print_error(f"Failed to copy {rel}: {e}")
            return ImportResult(
                source=source,
                status=ImportStatus.FAILED,
                mapping=mapping,
                dry_run=self._options.dry_run,
                error=str(e),
            )

        print_info(f"Staging {rel}...")
        try:
            self._vcs.commit([storage_file], commit_message(relative, category))
        except VcsError as e:
            print_error(f"Failed to commit {rel}: {e}")
            return ImportResult(
                source=source,
                status=ImportStatus.FAILED,
                mapping=mapping,
                dry_run=self._options.dry_run,
                error=str(e),
            )

        return ImportResult(
            source=source,
            status=ImportStatus.IMPORTED,
            mapping=mapping,
            dry_run=self._options.dry_run,
        )

    def _push_if_committed(self, results: list[ImportResult]) -> None:
        """Push once for the whole batch if anything was committed."""
        if not any(r.success for r in results):
            return

        if not self._vcs.has_remote():
            print_info("No remote configured. Use --sync to push later.")
            return

        print_info("Pushing all changes to remote...")
        try:
            self._vcs.push()
        except SyncError as e:
            self.push_error = str(e)
            print_error(f"Push failed: {e}")
            return
        print_success("Imported files pushed.")

    def _copy(self, source: Path, dest: Path) -> None:
        if self._options.dry_run:
            if not dest.parent.is_dir():
                print_dry_run(f"mkdir -p {dest.parent}")
            print_dry_run(f"cp {source} {dest}")
            return
        dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source, dest)
        logger.debug("Copied %s to %s", source, dest)
