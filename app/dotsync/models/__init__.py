"""Data models for dotsync.

This module exports the core data structures used throughout the application.
"""

from dotsync.models.mapping import Mapping, TargetState, classify_target
from dotsync.models.results import (
    LINKED_STATUSES,
    ImportResult,
    ImportStatus,
    LinkResult,
    LinkStatus,
)

__all__ = [
    "LINKED_STATUSES",
    "ImportResult",
    "ImportStatus",
    "LinkResult",
    "LinkStatus",
    "Mapping",
    "TargetState",
    "classify_target",
]
