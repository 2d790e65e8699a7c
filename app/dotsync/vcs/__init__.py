"""Version-control backends for dotsync."""

from dotsync.vcs.base import VersionControl
from dotsync.vcs.git import GitRepository

__all__ = ["GitRepository", "VersionControl"]
