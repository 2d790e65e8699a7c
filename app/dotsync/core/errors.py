"""Exception hierarchy for dotsync.

Library code raises these; the CLI layer turns them into an error
message and a non-zero exit code. Per-file conflicts and per-file import
failures are reported as results, never raised.
"""


class DotsyncError(Exception):
    """Base exception for all dotsync errors."""


class InvalidScopeError(DotsyncError):
    """Raised when the restriction path does not exist or is not a directory."""


class ConfigError(DotsyncError):
    """Raised when the settings file cannot be read or is invalid."""


class MappingCollisionError(DotsyncError):
    """Raised when two categories map to the same home-relative path."""

    def __init__(self, relative_path: str, categories: tuple[str, str]) -> None:
        self.relative_path = relative_path
        self.categories = categories
        first, second = categories
        super().__init__(
            f"Categories '{first}' and '{second}' both provide {relative_path}; "
            "remove one of them from the repository"
        )


class PickerUnavailableError(DotsyncError):
    """Raised when the interactive file picker tool is not installed."""


class VcsError(DotsyncError):
    """Raised when a version-control command fails."""


class SyncError(VcsError):
    """Raised when pulling from or pushing to the remote fails."""
