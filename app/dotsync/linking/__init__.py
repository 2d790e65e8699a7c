"""Installation of repository files as symlinks in the home directory.

This module provides path mapping, pre-flight snapshots, conflict
resolution and the link engine that ties them together.
"""

from dotsync.linking.engine import LinkEngine
from dotsync.linking.mapper import filter_by_scope, merge_planned, scan_mappings
from dotsync.linking.resolver import ConflictResolver
from dotsync.linking.snapshot import Archiver, SnapshotGuard, TarArchiver

__all__ = [
    "Archiver",
    "ConflictResolver",
    "LinkEngine",
    "SnapshotGuard",
    "TarArchiver",
    "filter_by_scope",
    "merge_planned",
    "scan_mappings",
]
