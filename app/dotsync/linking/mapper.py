"""Storage-to-home path mapping.

Derives the Mappings between files in categorized repository storage and
their home-directory targets::

    <storage_root>/<category>/<relative_path>  ->  ~/<relative_path>

The category segment never appears in the home-directory path.
"""

import logging
import os
from pathlib import Path

from dotsync.core.errors import MappingCollisionError
from dotsync.core.paths import is_within
from dotsync.models.mapping import Mapping

logger = logging.getLogger(__name__)

# Directories inside a category that are never mapped
SKIPPED_DIR_NAMES = frozenset({".git"})


def scan_mappings(storage_root: Path) -> list[Mapping]:
    """Collect a Mapping for every regular file in every category.

    Directories and symlinks inside storage are not emitted. A missing or
    empty storage root yields no mappings.

    Args:
        storage_root: Absolute path of the categorized storage tree.

    Returns:
        Mappings sorted by relative path, then category.

    Raises:
        MappingCollisionError: If two categories provide the same
            relative path.
    """
    if not storage_root.is_dir():
        logger.debug("Storage root %s does not exist, no mappings", storage_root)
        return []

    mappings: list[Mapping] = []
    for category_dir in sorted(storage_root.iterdir()):
        if category_dir.is_symlink() or not category_dir.is_dir():
            continue
        mappings.extend(_scan_category(category_dir))

    _check_collisions(mappings)
    mappings.sort(key=lambda m: (m.relative_path.as_posix(), m.category))
    logger.debug("Found %d mapping(s) in %s", len(mappings), storage_root)
    return mappings


def categories_providing(storage_root: Path, relative_path: Path) -> list[str]:
    """List the categories whose storage holds ``relative_path``.

    Applies the same rules as scan_mappings(): only regular files inside
    non-symlink category directories count.
    """
    if not storage_root.is_dir():
        return []
    owners: list[str] = []
    for category_dir in sorted(storage_root.iterdir()):
        if category_dir.is_symlink() or not category_dir.is_dir():
            continue
        stored = category_dir / relative_path
        if stored.is_file() and not stored.is_symlink():
            owners.append(category_dir.name)
    return owners


def _scan_category(category_dir: Path) -> list[Mapping]:
    """Walk one category directory and map its regular files."""
    category = category_dir.name
    found: list[Mapping] = []

    for dirpath, dirnames, filenames in os.walk(category_dir):
        # Prune in place so os.walk does not descend into skipped dirs
        dirnames[:] = sorted(d for d in dirnames if d not in SKIPPED_DIR_NAMES)
        current = Path(dirpath)
        for name in sorted(filenames):
            path = current / name
            if path.is_symlink() or not path.is_file():
                continue
            found.append(
                Mapping(
                    storage_path=path,
                    relative_path=path.relative_to(category_dir),
                    category=category,
                )
            )

    return found


def _check_collisions(mappings: list[Mapping]) -> None:
    """Reject mappings where two categories claim one home path."""
    owners: dict[Path, str] = {}
    for mapping in mappings:
        previous = owners.get(mapping.relative_path)
        if previous is not None:
            raise MappingCollisionError(
                mapping.relative_path.as_posix(), (previous, mapping.category)
            )
        owners[mapping.relative_path] = mapping.category


def filter_by_scope(mappings: list[Mapping], home: Path, scope: Path | None) -> list[Mapping]:
    """Keep only mappings whose home target is at or under ``scope``.

    Args:
        mappings: Mappings to filter.
        home: Home directory the targets live under.
        scope: Canonical absolute restriction directory, or None for all.

    Returns:
        Eligible mappings, in input order.
    """
    if scope is None:
        return list(mappings)
    return [m for m in mappings if is_within(m.target_in(home), scope)]


def merge_planned(mappings: list[Mapping], planned: list[Mapping]) -> list[Mapping]:
    """Add mappings that a dry-run import would have created to a scan.

    Planned mappings whose relative path is already mapped are dropped.

    Args:
        mappings: Mappings found in storage.
        planned: Mappings reported by a dry-run import.

    Returns:
        Combined mappings sorted like scan_mappings() output.
    """
    known = {m.relative_path for m in mappings}
    merged = list(mappings)
    for mapping in planned:
        if mapping.relative_path not in known:
            merged.append(mapping)
            known.add(mapping.relative_path)
    merged.sort(key=lambda m: (m.relative_path.as_posix(), m.category))
    return merged
