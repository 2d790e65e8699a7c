"""Run orchestration.

Validates the restriction scope, then dispatches the requested
operations in a fixed order: import, install, sync. Import runs before
install so that files brought into the repository in the same
invocation are linked right away.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from dotsync.core.errors import InvalidScopeError, VcsError
from dotsync.core.prompts import Prompter
from dotsync.core.settings import RunOptions, Settings
from dotsync.importing.engine import ImportEngine
from dotsync.importing.picker import FilePicker
from dotsync.linking.engine import LinkEngine
from dotsync.linking.mapper import filter_by_scope, merge_planned, scan_mappings
from dotsync.linking.resolver import ConflictResolver
from dotsync.linking.snapshot import Archiver, SnapshotGuard
from dotsync.models.mapping import Mapping
from dotsync.models.results import ImportResult, ImportStatus, LinkResult, LinkStatus
from dotsync.utils.formatting import print_info, print_warning
from dotsync.vcs.base import VersionControl

logger = logging.getLogger(__name__)


def resolve_scope(raw: Path | None) -> Path | None:
    """Validate and canonicalize the restriction path.

    Args:
        raw: Path given on the command line, or None.

    Returns:
        Canonical absolute directory, or None when no restriction applies.

    Raises:
        InvalidScopeError: If the path does not exist or is not a directory.
    """
    if raw is None:
        return None
    path = raw.expanduser()
    if not path.is_dir():
        raise InvalidScopeError(f"Target path does not exist or is not a directory: {raw}")
    return path.resolve()


@dataclass
class RunReport:
    """Everything one invocation did.

    Attributes:
        imports: Per-file import results.
        links: Per-mapping link results.
        snapshot: Snapshot archive written (or planned) before linking.
        push_error: Error of the push that closes an import batch.
        sync_error: Error that aborted the sync step.
    """

    imports: list[ImportResult] = field(default_factory=list)
    links: list[LinkResult] = field(default_factory=list)
    snapshot: Path | None = None
    push_error: str | None = None
    sync_error: str | None = None

    @property
    def failed(self) -> bool:
        """Check if any step reported a failure."""
        return (
            any(r.status == ImportStatus.FAILED for r in self.imports)
            or any(r.status == LinkStatus.FAILED for r in self.links)
            or self.push_error is not None
            or self.sync_error is not None
        )


class Orchestrator:
    """Wires collaborators together and runs the requested operations."""

    def __init__(
        self,
        settings: Settings,
        options: RunOptions,
        *,
        home: Path,
        prompter: Prompter,
        picker: FilePicker,
        vcs: VersionControl,
        archiver: Archiver,
    ) -> None:
        self._settings = settings
        self._options = options
        self._home = home
        self._prompter = prompter
        self._picker = picker
        self._vcs = vcs
        self._archiver = archiver

    def run(
        self,
        *,
        install: bool = False,
        add: bool = False,
        sync: bool = False,
        scope: Path | None = None,
        category: str | None = None,
    ) -> RunReport:
        """Run the requested operations in import, install, sync order.

        Args:
            install: Link repository files into the home directory.
            add: Import picked files into the repository.
            sync: Pull, commit storage changes and push.
            scope: Canonical restriction directory from resolve_scope().
            category: Shared category for every imported file.

        Returns:
            RunReport describing the outcome.

        Raises:
            PickerUnavailableError: If import needs a missing picker; no
                later operation runs.
            MappingCollisionError: If storage maps one path twice; no
                later operation runs.
            OSError: If the pre-flight snapshot cannot be written.
        """
        report = RunReport()

        if self._options.dry_run:
            print_info("Running in DRY RUN mode. No changes will be made.")

        if add:
            engine = self._import_engine()
            report.imports = self.run_import(engine, scope, category)
            report.push_error = engine.push_error

        if install:
            planned: list[Mapping] = []
            if self._options.dry_run:
                planned = [r.mapping for r in report.imports if r.success and r.mapping]
            report.links, report.snapshot = self.run_install(scope, planned)

        if sync:
            try:
                self.run_sync()
            except VcsError as e:
                report.sync_error = str(e)

        return report

    def _import_engine(self) -> ImportEngine:
        return ImportEngine(
            self._home,
            self._settings.storage_root,
            self._vcs,
            self._prompter,
            self._options,
        )

    def run_import(
        self, engine: ImportEngine, scope: Path | None, category: str | None
    ) -> list[ImportResult]:
        """Pick files below the scope (or home) and import them."""
        print_info("Starting interactive config import...")
        selected = engine.select(self._picker, scope or self._home)
        if not selected:
            return []
        return engine.import_files(selected, category)

    def run_install(
        self, scope: Path | None, planned: list[Mapping] | None = None
    ) -> tuple[list[LinkResult], Path | None]:
        """Link every eligible mapping.

        Args:
            scope: Canonical restriction directory, or None.
            planned: Mappings a dry-run import would have created.

        Returns:
            Tuple of link results and the snapshot path (None if no
            snapshot was needed).
        """
        storage_root = self._settings.storage_root
        print_info(f"Scanning {storage_root} for dotfiles...")

        mappings = scan_mappings(storage_root)
        if planned:
            mappings = merge_planned(mappings, planned)
        if not mappings:
            print_warning(f"No dotfiles found in {storage_root}.")
            return [], None

        if scope is not None:
            print_info(f"Restricting installation to: {scope}")
        eligible = filter_by_scope(mappings, self._home, scope)
        if not eligible:
            print_info("No dotfiles match the criteria/path.")
            return [], None

        resolver = ConflictResolver(self._home, self._prompter, self._options)
        guard = SnapshotGuard(self._home, self._archiver, self._options)
        engine = LinkEngine(self._home, resolver, guard, self._options)
        results = engine.install(eligible)
        return results, engine.snapshot

    def run_sync(self) -> None:
        """Pull, commit repository-storage changes and push.

        Only the storage directory is staged; other files in the
        repository are never committed by this step.

        Raises:
            SyncError: If pulling or pushing fails.
            VcsError: If staging or committing fails.
        """
        print_info("Synchronizing with remote repository...")

        print_info("Pulling latest changes...")
        self._vcs.pull_ff_only()

        print_info("Committing local changes...")
        self._vcs.stage([self._settings.storage_root])

        if not self._vcs.has_staged_changes():
            print_info("No local changes to commit.")
            return

        self._vcs.commit_staged(f"Auto-sync: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
        print_info("Pushing changes...")
        self._vcs.push()
