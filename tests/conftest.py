"""Pytest configuration and shared fixtures.

This module contains the fake collaborators (prompter, version control,
picker, archiver) and the home/repository layout used across all test
modules.
"""

from pathlib import Path

import pytest
from dotsync.core.errors import PickerUnavailableError, VcsError
from dotsync.core.prompts import Prompter
from dotsync.core.settings import Settings
from dotsync.importing.picker import FilePicker
from dotsync.linking.snapshot import Archiver, TarArchiver
from dotsync.vcs.base import VersionControl


class ScriptedPrompter(Prompter):
    """Prompter answering from pre-recorded lists."""

    def __init__(self) -> None:
        self.answers: list[str] = []
        self.confirmations: list[bool] = []
        self.asked: list[str] = []

    def confirm(self, message: str) -> bool:
        self.asked.append(message)
        if not self.confirmations:
            msg = f"Unexpected confirmation: {message}"
            raise AssertionError(msg)
        return self.confirmations.pop(0)

    def ask(self, message: str) -> str:
        self.asked.append(message)
        if not self.answers:
            msg = f"Unexpected question: {message}"
            raise AssertionError(msg)
        return self.answers.pop(0)


class RecordingVcs(VersionControl):
    """Version control fake recording every call."""

    def __init__(self, root: Path, remote: bool = True) -> None:
        super().__init__(root)
        self.remote = remote
        self.commits: list[tuple[list[Path], str]] = []
        self.staged: list[Path] = []
        self.pushes = 0
        self.pulls = 0
        self.fail_commit_for: set[Path] = set()
        self.pull_error: Exception | None = None
        self.push_error: Exception | None = None
        self.pending_changes = False

    def commit(self, paths: list[Path], message: str) -> None:
        if any(p in self.fail_commit_for for p in paths):
            raise VcsError(f"git commit failed for {paths}")
        self.commits.append((list(paths), message))

    def stage(self, paths: list[Path]) -> None:
        self.staged.extend(paths)

    def has_staged_changes(self) -> bool:
        return self.pending_changes

    def commit_staged(self, message: str) -> None:
        self.commits.append(([], message))

    def pull_ff_only(self) -> None:
        self.pulls += 1
        if self.pull_error is not None:
            raise self.pull_error

    def push(self) -> None:
        self.pushes += 1
        if self.push_error is not None:
            raise self.push_error

    def has_remote(self) -> bool:
        return self.remote


class StaticPicker(FilePicker):
    """Picker returning prepared selections, one per call."""

    def __init__(self) -> None:
        self.selections: list[set[Path]] = []
        self.available = True
        self.roots: list[Path] = []

    def is_available(self) -> bool:
        return self.available

    def pick(self, search_root: Path) -> set[Path]:
        if not self.available:
            raise PickerUnavailableError("fzf is required for interactive import.")
        self.roots.append(search_root)
        return self.selections.pop(0) if self.selections else set()


class RecordingArchiver(Archiver):
    """Archiver that writes a real tarball and remembers its members."""

    def __init__(self) -> None:
        self.calls: list[tuple[Path, Path, list[Path]]] = []

    def create(self, dest: Path, base_dir: Path, relative_paths: list[Path]) -> None:
        self.calls.append((dest, base_dir, list(relative_paths)))
        TarArchiver().create(dest, base_dir, relative_paths)


@pytest.fixture
def home(tmp_path: Path) -> Path:
    """Empty home directory."""
    path = tmp_path / "home"
    path.mkdir()
    return path


@pytest.fixture
def repo(tmp_path: Path) -> Path:
    """Repository root with an empty storage directory."""
    path = tmp_path / "repo"
    (path / "configs").mkdir(parents=True)
    return path


@pytest.fixture
def storage(repo: Path) -> Path:
    """Storage root inside the repository."""
    return repo / "configs"


@pytest.fixture
def settings(repo: Path) -> Settings:
    """Settings pointing at the temporary repository."""
    return Settings(repository=repo)


@pytest.fixture
def prompter() -> ScriptedPrompter:
    """Prompter with no scripted answers."""
    return ScriptedPrompter()


@pytest.fixture
def vcs(repo: Path) -> RecordingVcs:
    """Version control fake with a configured remote."""
    return RecordingVcs(repo)


@pytest.fixture
def picker() -> StaticPicker:
    """Picker fake with no prepared selections."""
    return StaticPicker()


@pytest.fixture
def archiver() -> RecordingArchiver:
    """Archiver fake writing real tarballs."""
    return RecordingArchiver()


def write(path: Path, content: str) -> Path:
    """Create parent directories and write text to ``path``."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


@pytest.fixture
def make_file():
    """Factory writing a file with parents created."""
    return write
