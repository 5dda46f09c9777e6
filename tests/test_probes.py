"""Tests for the platform probes."""

from unittest.mock import patch

import pytest

from termtab.process import CommandResult
from termtab.services.probes import (
    driver_for_bundle_id,
    driver_for_process,
    frontmost_bundle_id,
    normalize_process_name,
    parent_process_names,
    parse_ps_line,
)


class TestProcessNames:
    """Tests for ps output handling."""

    @pytest.mark.parametrize(
        "comm,expected",
        [
            ("/Applications/Ghostty.app/Contents/MacOS/ghostty", "ghostty"),
            ("/Applications/iTerm.app/Contents/MacOS/iTerm2", "iterm2"),
            ("-zsh", "zsh"),
            ("kitty", "kitty"),
            ("WindowsTerminal.exe", "windowsterminal"),
            ("/usr/libexec/gnome-terminal-server", "gnome-terminal-server"),
        ],
    )
    def test_normalize(self, comm, expected):
        """Executable names are reduced to a lowercase basename."""
        assert normalize_process_name(comm) == expected

    def test_parse_line(self):
        """ppid and comm are split on the first whitespace run."""
        assert parse_ps_line("  1234 /Applications/Visual Studio Code.app/x\n") == (
            1234,
            "/Applications/Visual Studio Code.app/x",
        )

    @pytest.mark.parametrize("output", ["", "\n", "PPID COMM", "1234"])
    def test_parse_garbage(self, output):
        """Unexpected output parses as None."""
        assert parse_ps_line(output) is None

    def test_lookup_tables(self):
        """Known executables and bundle ids map to driver names."""
        assert driver_for_process("wezterm-gui") == "wezterm"
        assert driver_for_process("bash") is None
        assert driver_for_bundle_id("com.mitchellh.ghostty\n") == "ghostty"
        assert driver_for_bundle_id("com.apple.Terminal") == "terminal.app"
        assert driver_for_process("hyper") == "hyper"
        assert driver_for_bundle_id("co.zeit.hyper") == "hyper"
        assert driver_for_bundle_id("com.microsoft.VSCode") is None


class TestParentProcessNames:
    """Tests for walking the process tree."""

    def test_walks_up_until_max_depth(self, linux):
        """Each level queries the previous level's parent."""
        with (
            patch("termtab.services.probes.os.getppid", return_value=300),
            patch("termtab.services.probes._run_ps") as mock_ps,
        ):
            mock_ps.side_effect = [
                CommandResult(0, "  200 -bash\n", ""),
                CommandResult(0, "  100 /usr/bin/kitty\n", ""),
                CommandResult(0, "  50 systemd\n", ""),
            ]
            names = list(parent_process_names(max_depth=2, timeout=1))

            assert names == ["bash", "kitty"]
            assert [c.args[0] for c in mock_ps.call_args_list] == [300, 200]

    def test_is_lazy(self, linux):
        """Consumers that stop early do not trigger more ps calls."""
        with (
            patch("termtab.services.probes.os.getppid", return_value=300),
            patch("termtab.services.probes._run_ps") as mock_ps,
        ):
            mock_ps.return_value = CommandResult(0, "  200 ghostty\n", "")
            assert next(iter(parent_process_names(max_depth=5))) == "ghostty"
            assert mock_ps.call_count == 1

    def test_stops_at_init(self, linux):
        """The walk ends when it reaches PID 1."""
        with (
            patch("termtab.services.probes.os.getppid", return_value=300),
            patch("termtab.services.probes._run_ps") as mock_ps,
        ):
            mock_ps.return_value = CommandResult(0, "  1 sshd\n", "")
            assert list(parent_process_names(max_depth=5)) == ["sshd"]
            assert mock_ps.call_count == 1

    def test_stops_on_ps_failure(self, linux):
        """A failing ps ends the walk quietly."""
        with (
            patch("termtab.services.probes.os.getppid", return_value=300),
            patch("termtab.services.probes._run_ps") as mock_ps,
        ):
            mock_ps.return_value = CommandResult(1, "", "Command not found: ps")
            assert list(parent_process_names()) == []

    def test_skipped_on_windows(self, windows):
        """Windows has no ps."""
        with patch("termtab.services.probes._run_ps") as mock_ps:
            assert list(parent_process_names()) == []
            mock_ps.assert_not_called()


class TestFrontmostBundleId:
    """Tests for the frontmost-application probe."""

    def test_returns_bundle_id_on_macos(self, macos):
        """System Events reports the frontmost bundle id."""
        with patch("termtab.backends.applescript.try_command") as mock_cmd:
            mock_cmd.return_value = CommandResult(0, "com.googlecode.iterm2\n", "")
            assert frontmost_bundle_id(timeout=2) == "com.googlecode.iterm2"
            assert "System Events" in mock_cmd.call_args.args[0][2]
            assert mock_cmd.call_args.kwargs["timeout"] == 2

    def test_permission_denied(self, macos):
        """A refused Automation permission yields None."""
        with patch("termtab.backends.applescript.try_command") as mock_cmd:
            mock_cmd.return_value = CommandResult(1, "", "Not authorized to send Apple events")
            assert frontmost_bundle_id() is None

    def test_not_macos(self, linux):
        """Other platforms never run osascript."""
        with patch("termtab.backends.applescript.try_command") as mock_cmd:
            assert frontmost_bundle_id() is None
            mock_cmd.assert_not_called()
