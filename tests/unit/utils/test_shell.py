"""Unit tests for shell execution utilities."""

from unittest.mock import MagicMock, patch

import pytest
from dotsync.utils.shell import CommandResult, command_exists, run_command, run_selector


class TestCommandResult:
    """Tests for CommandResult."""

    def test_success(self) -> None:
        """Only exit code 0 is a success."""
        assert CommandResult(stdout="", stderr="", returncode=0).success
        assert not CommandResult(stdout="", stderr="", returncode=1).success


class TestRunCommand:
    """Tests for run_command function."""

    @patch("dotsync.utils.shell.subprocess.run")
    def test_captures_output(self, mock_run: MagicMock) -> None:
        """run_command returns captured stdout, stderr and exit code."""
        mock_run.return_value = MagicMock(stdout="out", stderr="err", returncode=3)

        result = run_command(["git", "status"])

        assert result == CommandResult(stdout="out", stderr="err", returncode=3)
        assert mock_run.call_args.kwargs["capture_output"] is True
        assert mock_run.call_args.kwargs["timeout"] == 60.0
        assert "cwd" not in mock_run.call_args.kwargs

    def test_raises_file_not_found(self) -> None:
        """run_command raises FileNotFoundError for missing commands."""
        with pytest.raises(FileNotFoundError):
            run_command(["nonexistent_command_xyz_12345"])


class TestRunSelector:
    """Tests for run_selector function."""

    @patch("dotsync.utils.shell.subprocess.run")
    def test_feeds_candidates_on_stdin(self, mock_run: MagicMock) -> None:
        """Candidates are passed one per line on stdin."""
        mock_run.return_value = MagicMock(stdout="/h/.zshrc\n", returncode=0)

        result = run_selector(["fzf", "--multi"], ["/h/.zshrc", "/h/.vimrc"])

        assert result.stdout == "/h/.zshrc\n"
        assert mock_run.call_args.kwargs["input"] == "/h/.zshrc\n/h/.vimrc"

    @patch("dotsync.utils.shell.subprocess.run")
    def test_does_not_capture_stderr(self, mock_run: MagicMock) -> None:
        """stderr stays attached to the terminal for the selector UI."""
        mock_run.return_value = MagicMock(stdout="", returncode=130)

        result = run_selector(["fzf"], [])

        assert "stderr" not in mock_run.call_args.kwargs
        assert "capture_output" not in mock_run.call_args.kwargs
        assert result.returncode == 130


class TestCommandExists:
    """Tests for command_exists function."""

    @patch("dotsync.utils.shell.shutil.which", return_value="/usr/bin/git")
    def test_found(self, mock_which: MagicMock) -> None:
        """Commands on PATH exist."""
        assert command_exists("git") is True

    @patch("dotsync.utils.shell.shutil.which", return_value=None)
    def test_missing(self, mock_which: MagicMock) -> None:
        """Commands not on PATH do not."""
        assert command_exists("fzf") is False
