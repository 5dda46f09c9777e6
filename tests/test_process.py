"""Tests for the process executor."""

import signal
import subprocess
from unittest.mock import MagicMock, patch

import pytest

from termtab.errors import CommandError
from termtab.process import (
    CommandResult,
    kill_pid,
    run_command,
    spawn_detached,
    try_command,
)


class TestRunCommand:
    """Tests for run_command."""

    def test_returns_result(self):
        """Successful commands return their output."""
        with patch("termtab.process.subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=0, stdout="out\n", stderr="")
            result = run_command(["tmux", "list-panes"], timeout=2)

            assert result == CommandResult(0, "out\n", "")
            assert result.ok is True
            mock_run.assert_called_once()
            assert mock_run.call_args.kwargs["timeout"] == 2

    def test_never_uses_a_shell(self):
        """Commands are passed as an argument vector."""
        with patch("termtab.process.subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=0, stdout="", stderr="")
            run_command(["echo", "a; rm -rf /"])

            args, kwargs = mock_run.call_args
            assert args[0] == ["echo", "a; rm -rf /"]
            assert kwargs.get("shell", False) is False

    def test_nonzero_exit_raises_when_checking(self):
        """A non-zero exit raises CommandError carrying the result."""
        with patch("termtab.process.subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=2, stdout="", stderr="no server running")
            with pytest.raises(CommandError, match="no server running") as exc_info:
                run_command(["tmux", "ls"])

            assert exc_info.value.result.returncode == 2

    def test_nonzero_exit_returned_without_check(self):
        """check=False returns non-zero results."""
        with patch("termtab.process.subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=1, stdout="", stderr="nope")
            result = run_command(["tmux", "ls"], check=False)

            assert result.ok is False
            assert result.stderr == "nope"

    def test_timeout_raises(self):
        """A timeout is always a CommandError."""
        with patch("termtab.process.subprocess.run") as mock_run:
            mock_run.side_effect = subprocess.TimeoutExpired(cmd="osascript", timeout=3)
            with pytest.raises(CommandError, match="timed out"):
                run_command(["osascript", "-e", "x"], timeout=3, check=False)

    def test_missing_binary_raises(self):
        """A missing binary is a CommandError."""
        with patch("termtab.process.subprocess.run") as mock_run:
            mock_run.side_effect = FileNotFoundError()
            with pytest.raises(CommandError, match="Command not found: qdbus"):
                run_command(["qdbus"])


class TestTryCommand:
    """Tests for try_command."""

    def test_folds_errors_into_result(self):
        """Missing binaries come back as a failed result."""
        with patch("termtab.process.subprocess.run") as mock_run:
            mock_run.side_effect = FileNotFoundError()
            result = try_command(["kitty", "@", "ls"])

            assert result.returncode == 1
            assert "kitty" in result.stderr

    def test_timeout_is_failed_result(self):
        """Timeouts come back as a failed result."""
        with patch("termtab.process.subprocess.run") as mock_run:
            mock_run.side_effect = subprocess.TimeoutExpired(cmd="ps", timeout=1)
            result = try_command(["ps"], timeout=1)

            assert result.ok is False
            assert "timed out" in result.stderr


class TestSpawnDetached:
    """Tests for spawn_detached."""

    def test_returns_pid_of_detached_child(self):
        """The child is started in its own session with no stdio."""
        with patch("termtab.process.subprocess.Popen") as mock_popen:
            mock_popen.return_value = MagicMock(pid=4242)
            pid = spawn_detached(["alacritty", "-e", "claude"], cwd="/tmp")

            assert pid == 4242
            kwargs = mock_popen.call_args.kwargs
            assert kwargs["start_new_session"] is True
            assert kwargs["stdin"] is subprocess.DEVNULL
            assert kwargs["stdout"] is subprocess.DEVNULL
            assert kwargs["cwd"] == "/tmp"

    def test_missing_binary_raises(self):
        """A binary that is not installed raises CommandError."""
        with patch("termtab.process.subprocess.Popen") as mock_popen:
            mock_popen.side_effect = FileNotFoundError()
            with pytest.raises(CommandError, match="rio"):
                spawn_detached(["rio"])


class TestKillPid:
    """Tests for kill_pid."""

    def test_sends_sigterm(self):
        """A live PID receives SIGTERM."""
        with patch("termtab.process.os.kill") as mock_kill:
            assert kill_pid(1234) is True
            mock_kill.assert_called_once_with(1234, signal.SIGTERM)

    def test_gone_process_is_false(self):
        """An exited process is reported as not killed."""
        with patch("termtab.process.os.kill") as mock_kill:
            mock_kill.side_effect = ProcessLookupError()
            assert kill_pid(1234) is False

    def test_foreign_process_is_false(self):
        """A process owned by someone else is reported as not killed."""
        with patch("termtab.process.os.kill") as mock_kill:
            mock_kill.side_effect = PermissionError()
            assert kill_pid(1234) is False

    @pytest.mark.parametrize("pid", [0, 1, -5])
    def test_refuses_special_pids(self, pid):
        """PIDs 0, 1 and negatives are never signalled."""
        with patch("termtab.process.os.kill") as mock_kill:
            assert kill_pid(pid) is False
            mock_kill.assert_not_called()
