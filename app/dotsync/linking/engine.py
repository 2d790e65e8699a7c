"""Symlink installation.

The link engine turns Mappings into live symlinks in the home directory:
snapshot first, then per mapping ensure the parent directory, hand an
occupied target to the conflict resolver and create the symlink.

Dry runs take the same decision path; only the mutating calls are
suppressed, so the reported action list matches a real run.
"""

import logging
from pathlib import Path

from dotsync.core.settings import RunOptions
from dotsync.linking.resolver import ConflictResolver
from dotsync.linking.snapshot import SnapshotGuard
from dotsync.models.mapping import Mapping, TargetState, classify_target
from dotsync.models.results import LinkResult, LinkStatus
from dotsync.utils.formatting import print_dry_run, print_error, print_info, print_success

logger = logging.getLogger(__name__)


class LinkEngine:
    """Installs symlinks for a batch of mappings.

    Example:
        >>> engine = LinkEngine(home, resolver, guard, RunOptions(dry_run=True))
        >>> for result in engine.install(mappings):
        ...     print(result.mapping.relative_path, result.status.value)
    """

    def __init__(
        self,
        home: Path,
        resolver: ConflictResolver,
        guard: SnapshotGuard,
        options: RunOptions,
    ) -> None:
        self._home = home
        self._resolver = resolver
        self._guard = guard
        self._options = options
        self.snapshot: Path | None = None

    def install(self, mappings: list[Mapping]) -> list[LinkResult]:
        """Snapshot existing targets, then link every mapping in order.

        Args:
            mappings: Eligible mappings, already filtered by scope.

        Returns:
            One LinkResult per mapping, in input order.

        Raises:
            OSError: If the snapshot cannot be written; nothing is linked.
        """
        if not mappings:
            return []

        # Correctly linked targets are not touched, so they stay out of the archive
        needs_snapshot = [m.relative_path for m in mappings if not self._is_linked(m)]
        self.snapshot = self._guard.capture(needs_snapshot)

        results: list[LinkResult] = []
        for mapping in mappings:
            results.append(self._link_one(mapping))
        return results

    def _link_one(self, mapping: Mapping) -> LinkResult:
        """Process a single mapping, isolating its failures."""
        rel = mapping.relative_path.as_posix()
        target = mapping.target_in(self._home)
        print_info(f"Processing {rel}...")

        try:
            self._ensure_parent(target)
            state = classify_target(mapping, self._home)

            if state == TargetState.LINKED:
                print_success(f"{rel} is already correctly linked.")
                return self._result(mapping, LinkStatus.ALREADY_LINKED)

            status = LinkStatus.LINKED
            message: str | None = None
            if state != TargetState.ABSENT:
                status, message = self._resolver.resolve(mapping, state)
                if status in (LinkStatus.SKIPPED, LinkStatus.ALREADY_LINKED):
                    return self._result(mapping, status, message)

            self._symlink(target, mapping.storage_path)
            print_success(f"Linked {rel}")
            return self._result(mapping, status, message)

        except OSError as e:
            print_error(f"Failed to link {rel}: {e}")
            logger.debug("Linking %s failed", rel, exc_info=True)
            return self._result(mapping, LinkStatus.FAILED, str(e))

    def _is_linked(self, mapping: Mapping) -> bool:
        target = mapping.target_in(self._home)
        return target.is_symlink() and Path(target.readlink()) == mapping.storage_path

    def _result(
        self, mapping: Mapping, status: LinkStatus, message: str | None = None
    ) -> LinkResult:
        return LinkResult(
            mapping=mapping,
            status=status,
            dry_run=self._options.dry_run,
            message=message,
        )

    # === Guarded mutations ===

    def _ensure_parent(self, target: Path) -> None:
        parent = target.parent
        if parent.is_dir():
            return
        if self._options.dry_run:
            print_dry_run(f"mkdir -p {parent}")
            return
        parent.mkdir(parents=True, exist_ok=True)

    def _symlink(self, target: Path, storage_path: Path) -> None:
        if self._options.dry_run:
            print_dry_run(f"ln -s {storage_path} {target}")
            return
        target.symlink_to(storage_path)
        logger.debug("Linked %s -> %s", target, storage_path)
