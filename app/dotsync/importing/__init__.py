"""Import of existing home-directory files into repository storage."""

from dotsync.importing.engine import ImportEngine, commit_message, is_valid_category
from dotsync.importing.picker import FilePicker, FzfPicker

__all__ = [
    "FilePicker",
    "FzfPicker",
    "ImportEngine",
    "commit_message",
    "is_valid_category",
]
