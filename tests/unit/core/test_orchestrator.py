"""Unit tests for run orchestration.

Tests scope validation, the import-install-sync ordering, restriction
handling, dry-run parity and the sync step.
"""

from pathlib import Path

import pytest
from dotsync.core.errors import InvalidScopeError, PickerUnavailableError, SyncError
from dotsync.core.orchestrator import Orchestrator, RunReport, resolve_scope
from dotsync.core.settings import RunOptions, Settings
from dotsync.models.results import ImportResult, ImportStatus, LinkStatus


@pytest.fixture
def make_orchestrator(settings: Settings, home: Path, prompter, picker, vcs, archiver):
    """Factory building an Orchestrator around the shared fakes."""

    def build(**options: bool) -> Orchestrator:
        return Orchestrator(
            settings,
            RunOptions(**options),
            home=home,
            prompter=prompter,
            picker=picker,
            vcs=vcs,
            archiver=archiver,
        )

    return build


class TestResolveScope:
    """Tests for resolve_scope function."""

    def test_none_means_unrestricted(self) -> None:
        """No path means no restriction."""
        assert resolve_scope(None) is None

    def test_existing_directory(self, home: Path) -> None:
        """Directories are returned canonicalized."""
        (home / ".config").mkdir()

        assert resolve_scope(home / ".config" / ".." / ".config") == home / ".config"

    def test_missing_directory(self, home: Path) -> None:
        """A path that does not exist is rejected."""
        with pytest.raises(InvalidScopeError, match="does not exist"):
            resolve_scope(home / "nope")

    def test_file_is_rejected(self, home: Path, make_file) -> None:
        """A regular file is not a valid restriction."""
        with pytest.raises(InvalidScopeError):
            resolve_scope(make_file(home / ".zshrc", "x\n"))

    def test_tilde_is_expanded(self, home: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """A leading ~ refers to the home directory."""
        monkeypatch.setenv("HOME", str(home))

        assert resolve_scope(Path("~")) == home


class TestRunReport:
    """Tests for RunReport."""

    def test_empty_report_has_not_failed(self) -> None:
        """A run that did nothing did not fail."""
        assert RunReport().failed is False

    def test_failed_import_marks_failure(self, home: Path) -> None:
        """A single failed import fails the run."""
        report = RunReport(imports=[ImportResult(home / ".x", ImportStatus.FAILED)])

        assert report.failed is True

    def test_push_error_marks_failure(self) -> None:
        """A failed push fails the run."""
        assert RunReport(push_error="rejected").failed is True


class TestInstall:
    """Tests for the install step."""

    def test_links_all_mappings(
        self, make_orchestrator, home: Path, storage: Path, make_file
    ) -> None:
        """Every stored file ends up linked into home."""
        make_file(storage / "zsh" / ".zshrc", "a\n")
        make_file(storage / "git" / ".config" / "git" / "config", "b\n")

        report = make_orchestrator().run(install=True)

        assert [r.status for r in report.links] == [LinkStatus.LINKED, LinkStatus.LINKED]
        assert (home / ".zshrc").is_symlink()
        assert (home / ".config" / "git" / "config").is_symlink()
        assert report.snapshot is None

    def test_restriction_only_touches_scope(
        self, make_orchestrator, home: Path, storage: Path, make_file
    ) -> None:
        """With a restriction, targets outside it are left alone."""
        make_file(storage / "misc" / "a" / "b", "ab\n")
        make_file(storage / "misc" / "c" / "d", "cd\n")
        (home / "a").mkdir()

        report = make_orchestrator().run(install=True, scope=home / "a")

        assert [r.mapping.relative_path for r in report.links] == [Path("a/b")]
        assert (home / "a" / "b").is_symlink()
        assert not (home / "c").exists()

    def test_empty_storage(self, make_orchestrator) -> None:
        """An empty repository installs nothing."""
        report = make_orchestrator().run(install=True)

        assert report.links == []
        assert report.failed is False

    def test_scope_without_matches(
        self, make_orchestrator, home: Path, storage: Path, make_file
    ) -> None:
        """A restriction matching nothing is not an error."""
        make_file(storage / "zsh" / ".zshrc", "a\n")
        (home / ".config").mkdir()

        report = make_orchestrator().run(install=True, scope=home / ".config")

        assert report.links == []
        assert not (home / ".zshrc").exists()


class TestImportThenInstall:
    """Tests for combining --add with --install."""

    def test_imported_file_is_linked_in_same_run(
        self, make_orchestrator, home: Path, storage: Path, picker, vcs, make_file
    ) -> None:
        """Import runs first, so install converts the imported file to a link."""
        source = make_file(home / ".zshrc", "a\n")
        picker.selections = [{source}]

        report = make_orchestrator(assume_yes=True).run(add=True, install=True, category="zsh")

        assert [r.status for r in report.imports] == [ImportStatus.IMPORTED]
        assert [r.status for r in report.links] == [LinkStatus.CONVERTED]
        assert source.is_symlink()
        assert source.readlink() == storage / "zsh" / ".zshrc"
        assert report.snapshot is not None
        assert vcs.pushes == 1

    def test_dry_run_previews_import_and_link(
        self, make_orchestrator, home: Path, storage: Path, picker, archiver, make_file
    ) -> None:
        """A dry run reports the link of a file it only pretended to import."""
        source = make_file(home / ".zshrc", "a\n")
        picker.selections = [{source}]

        report = make_orchestrator(dry_run=True, assume_yes=True).run(
            add=True, install=True, category="zsh"
        )

        assert [r.status for r in report.links] == [LinkStatus.CONVERTED]
        assert not source.is_symlink()
        assert source.read_text() == "a\n"
        assert not (storage / "zsh").exists()
        assert archiver.calls == []

    def test_import_searches_scope(self, make_orchestrator, home: Path, picker) -> None:
        """The picker searches the restriction directory when one is given."""
        (home / ".config").mkdir()

        make_orchestrator().run(add=True, scope=home / ".config")

        assert picker.roots == [home / ".config"]

    def test_missing_picker_aborts_run(
        self, make_orchestrator, storage: Path, home: Path, picker, make_file
    ) -> None:
        """Without a picker nothing else runs."""
        make_file(storage / "zsh" / ".zshrc", "a\n")
        picker.available = False

        with pytest.raises(PickerUnavailableError):
            make_orchestrator().run(add=True, install=True)

        assert not (home / ".zshrc").exists()


class TestSync:
    """Tests for the sync step."""

    def test_nothing_to_commit(self, make_orchestrator, vcs, storage: Path) -> None:
        """Without staged changes sync only pulls."""
        report = make_orchestrator().run(sync=True)

        assert vcs.pulls == 1
        assert vcs.staged == [storage]
        assert vcs.commits == []
        assert vcs.pushes == 0
        assert report.sync_error is None

    def test_commits_and_pushes_changes(self, make_orchestrator, vcs) -> None:
        """Staged storage changes are committed with a timestamp and pushed."""
        vcs.pending_changes = True

        make_orchestrator().run(sync=True)

        ((paths, message),) = vcs.commits
        assert paths == []
        assert message.startswith("Auto-sync: ")
        assert vcs.pushes == 1

    def test_pull_failure_stops_sync(self, make_orchestrator, vcs) -> None:
        """A failed pull is reported and nothing is committed."""
        vcs.pull_error = SyncError("git pull failed: diverged")
        vcs.pending_changes = True

        report = make_orchestrator().run(sync=True)

        assert report.sync_error == "git pull failed: diverged"
        assert report.failed is True
        assert vcs.staged == []
        assert vcs.pushes == 0

    def test_sync_runs_after_install(
        self, make_orchestrator, vcs, home: Path, storage: Path, make_file
    ) -> None:
        """Install and sync combine in one invocation."""
        make_file(storage / "zsh" / ".zshrc", "a\n")

        report = make_orchestrator().run(install=True, sync=True)

        assert (home / ".zshrc").is_symlink()
        assert report.links
        assert vcs.pulls == 1
