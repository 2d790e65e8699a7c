"""Pre-flight snapshots of targets about to be touched.

Before the link engine changes anything, every target path that already
exists is packed into one timestamped gzip tarball in the home directory.
The archive is never read back by dotsync; it exists so a human can
recover by hand after an interrupted or regretted run.
"""

import logging
import tarfile
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from pathlib import Path

from dotsync.core.paths import next_snapshot_path
from dotsync.core.settings import RunOptions
from dotsync.utils.formatting import print_dry_run, print_info

logger = logging.getLogger(__name__)


class Archiver(ABC):
    """Abstract archive writer."""

    @abstractmethod
    def create(self, dest: Path, base_dir: Path, relative_paths: list[Path]) -> None:
        """Write an archive of ``relative_paths`` (relative to ``base_dir``) to ``dest``.

        Raises:
            OSError: If the archive cannot be written.
        """


class TarArchiver(Archiver):
    """Writes gzip-compressed tarballs with home-relative member names.

    Symlinks are stored as symlinks, never followed. An existing archive
    at ``dest`` is never overwritten.
    """

    def create(self, dest: Path, base_dir: Path, relative_paths: list[Path]) -> None:
        with tarfile.open(dest, "x:gz", dereference=False) as archive:
            for rel in relative_paths:
                archive.add(base_dir / rel, arcname=rel.as_posix())


class SnapshotGuard:
    """Captures existing targets before the first mutation of a batch.

    Attributes:
        _home: Home directory; archive base and destination directory.
        _archiver: Archive writer.
        _options: Dry-run switch.
        _clock: Source of the unix timestamp used in the archive name.
    """

    def __init__(
        self,
        home: Path,
        archiver: Archiver,
        options: RunOptions,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._home = home
        self._archiver = archiver
        self._options = options
        self._clock = clock

    def existing(self, relative_paths: list[Path]) -> list[Path]:
        """Filter to the paths that currently exist under home.

        Symlinks count as existing even when dangling.
        """
        present: list[Path] = []
        for rel in relative_paths:
            path = self._home / rel
            if path.is_symlink() or path.exists():
                present.append(rel)
        return present

    def capture(self, relative_paths: list[Path]) -> Path | None:
        """Archive every existing target path into one snapshot.

        Args:
            relative_paths: Home-relative target paths of the batch.

        Returns:
            Path of the (planned, in a dry run) archive, or None when no
            target exists yet.

        Raises:
            OSError: If the archive cannot be written. The batch must not
                proceed in that case.
        """
        present = self.existing(relative_paths)
        if not present:
            print_info("No existing files to snapshot.")
            return None

        dest = next_snapshot_path(self._home, int(self._clock()))
        print_info(f"Creating pre-flight snapshot: {dest}")

        if self._options.dry_run:
            members = " ".join(p.as_posix() for p in present)
            print_dry_run(f"tar -czf {dest} -C {self._home} {members}")
            return dest

        self._archiver.create(dest, self._home, present)
        logger.info("Snapshot %s holds %d path(s)", dest, len(present))
        return dest
