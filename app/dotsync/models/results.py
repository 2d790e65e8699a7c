"""Result models for link and import operations.

This module defines the per-file outcomes reported by the link and
import engines. Skips and failures are results, not exceptions, so one
file never aborts the rest of a batch.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from dotsync.models.mapping import Mapping


class LinkStatus(Enum):
    """Outcome of processing one mapping during installation.

    Attributes:
        ALREADY_LINKED: Target already pointed at the storage copy.
        LINKED: Symlink created where nothing existed.
        RELINKED: Symlink pointing elsewhere was replaced.
        CONVERTED: Identical regular file was replaced by a symlink.
        ADOPTED_LOCAL: Local content was copied into storage, then linked.
        ADOPTED_REPO: Local file was renamed to ``.bak``, then linked.
        SKIPPED: Target left untouched for this run.
        FAILED: An OS error prevented processing.
    """

    ALREADY_LINKED = "already linked"
    LINKED = "linked"
    RELINKED = "relinked"
    CONVERTED = "converted"
    ADOPTED_LOCAL = "kept local"
    ADOPTED_REPO = "backed up"
    SKIPPED = "skipped"
    FAILED = "failed"


# Statuses that leave a symlink at the target
LINKED_STATUSES = frozenset(
    {
        LinkStatus.ALREADY_LINKED,
        LinkStatus.LINKED,
        LinkStatus.RELINKED,
        LinkStatus.CONVERTED,
        LinkStatus.ADOPTED_LOCAL,
        LinkStatus.ADOPTED_REPO,
    }
)


@dataclass(frozen=True, slots=True)
class LinkResult:
    """Result of processing a single mapping.

    Attributes:
        mapping: The mapping that was processed.
        status: What happened (or would happen, in a dry run).
        dry_run: Whether mutations were suppressed.
        message: Optional detail (skip reason, error text, backup path).
    """

    mapping: Mapping
    status: LinkStatus
    dry_run: bool = False
    message: str | None = None

    @property
    def linked(self) -> bool:
        """Check if the target ends up as a symlink to storage."""
        return self.status in LINKED_STATUSES

    @property
    def mutated(self) -> bool:
        """Check if processing changed (or would change) anything."""
        return self.status not in (
            LinkStatus.ALREADY_LINKED,
            LinkStatus.SKIPPED,
            LinkStatus.FAILED,
        )


class ImportStatus(Enum):
    """Outcome of importing one file into repository storage.

    Attributes:
        IMPORTED: File copied into storage and committed.
        SKIPPED: Operator declined (e.g. refused to overwrite).
        FAILED: Copy or commit failed.
    """

    IMPORTED = "imported"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class ImportResult:
    """Result of importing a single file.

    Attributes:
        source: Absolute path of the selected file.
        status: Outcome of the import.
        mapping: Storage mapping the file was (or would be) imported as.
        dry_run: Whether mutations were suppressed.
        error: Error message for failed imports.
    """

    source: Path
    status: ImportStatus
    mapping: Mapping | None = None
    dry_run: bool = False
    error: str | None = None

    @property
    def success(self) -> bool:
        """Check if the file was imported."""
        return self.status == ImportStatus.IMPORTED
