"""Interactive file selection for imports.

The import engine only needs "a set of absolute paths the operator
picked". FzfPicker provides that by walking the search root and handing
the candidates to ``fzf --multi``; tests substitute their own FilePicker.
"""

import fnmatch
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path

from dotsync.core.errors import PickerUnavailableError
from dotsync.core.paths import is_within
from dotsync.utils.shell import command_exists, run_selector

logger = logging.getLogger(__name__)

FZF_PROMPT = "Select config file(s) to import (Tab to multi-select): "

# fzf exit codes meaning "nothing chosen": no match, interrupted with Esc/Ctrl-C
FZF_NO_SELECTION = (1, 130)


class FilePicker(ABC):
    """Abstract interactive multi-select over files."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the picker can run on this system."""

    @abstractmethod
    def pick(self, search_root: Path) -> set[Path]:
        """Let the operator select files below ``search_root``.

        Returns:
            Absolute paths of the selected files; empty if none.

        Raises:
            PickerUnavailableError: If the picker tool is not installed.
        """


class FzfPicker(FilePicker):
    """File picker backed by fzf.

    Attributes:
        _home: Home directory that exclude patterns are relative to.
        _excludes: Home-relative paths or glob patterns never offered.
        _skip_roots: Absolute directories never offered (the repository).
    """

    def __init__(self, home: Path, excludes: list[str], skip_roots: list[Path]) -> None:
        self._home = home
        self._excludes = excludes
        self._skip_roots = skip_roots

    def is_available(self) -> bool:
        return command_exists("fzf")

    def pick(self, search_root: Path) -> set[Path]:
        if not self.is_available():
            raise PickerUnavailableError("fzf is required for interactive import.")

        candidates = [str(p) for p in self.candidates(search_root)]
        result = run_selector(["fzf", "--multi", f"--prompt={FZF_PROMPT}"], candidates)

        if result.returncode in FZF_NO_SELECTION:
            return set()
        if not result.success:
            logger.warning("fzf exited with status %d", result.returncode)
            return set()

        return {Path(line) for line in result.stdout.splitlines() if line.strip()}

    def candidates(self, search_root: Path) -> list[Path]:
        """List regular files below ``search_root`` that may be offered.

        Excluded directories are pruned during the walk rather than
        filtered afterwards.
        """
        found: list[Path] = []
        for dirpath, dirnames, filenames in os.walk(search_root):
            current = Path(dirpath)
            dirnames[:] = sorted(d for d in dirnames if not self._is_excluded(current / d))
            for name in sorted(filenames):
                path = current / name
                if path.is_file() and not path.is_symlink() and not self._is_excluded(path):
                    found.append(path)
        return found

    def _is_excluded(self, path: Path) -> bool:
        if any(is_within(path, root) for root in self._skip_roots):
            return True
        try:
            rel = path.relative_to(self._home)
        except ValueError:
            return False
        rel_posix = rel.as_posix()
        for pattern in self._excludes:
            if rel_posix == pattern or rel_posix.startswith(pattern.rstrip("/") + "/"):
                return True
            if fnmatch.fnmatch(rel_posix, pattern) or fnmatch.fnmatch(path.name, pattern):
                return True
        return False
