"""Tests for the AppleScript builder."""

from unittest.mock import patch

import pytest

from termtab.backends.applescript import AppleScript, ScriptLiteral, escape_applescript
from termtab.process import CommandResult


class TestEscaping:
    """Tests for escape_applescript and ScriptLiteral."""

    def test_escapes_quotes_and_backslashes(self):
        """Double quotes and backslashes are escaped."""
        assert escape_applescript('say "hi" \\o/') == 'say \\"hi\\" \\\\o/'

    def test_escapes_control_characters(self):
        """Newlines, carriage returns and tabs are escaped."""
        assert escape_applescript("a\nb\rc\td") == "a\\nb\\rc\\td"

    def test_literal_renders_quoted(self):
        """ScriptLiteral renders as a complete string literal."""
        assert ScriptLiteral('/Users/me/my "repo"').render() == '"/Users/me/my \\"repo\\""'


class TestAppleScript:
    """Tests for AppleScript construction."""

    def test_substitutes_literals(self):
        """Literal parameters are substituted escaped."""
        script = AppleScript('write text $command', command=ScriptLiteral('cd "x" && ls'))
        assert script.source == 'write text "cd \\"x\\" && ls"'

    def test_substitutes_ints(self):
        """Integers are substituted bare."""
        script = AppleScript("close window id $window_id", window_id=1234)
        assert script.source == "close window id 1234"

    def test_rejects_raw_strings(self):
        """Plain strings cannot be spliced into a script."""
        with pytest.raises(TypeError, match="ScriptLiteral"):
            AppleScript("write text $command", command='"; do shell script "rm -rf ~')

    def test_rejects_bools(self):
        """Booleans are not accepted as ints."""
        with pytest.raises(TypeError):
            AppleScript("set x to $flag", flag=True)

    def test_injection_attempt_stays_inside_literal(self):
        """A hostile label cannot terminate the string literal."""
        hostile = '" & (do shell script "touch /tmp/pwned") & "'
        script = AppleScript("set name to $title", title=ScriptLiteral(hostile))

        body = script.source[len("set name to ") :]
        assert body.startswith('"') and body.endswith('"')
        assert '\\"' in body
        # Every inner quote is escaped
        inner = body[1:-1].replace('\\\\', "").replace('\\"', "")
        assert '"' not in inner

    def test_run_uses_osascript(self):
        """run() passes the source to osascript -e."""
        with patch("termtab.backends.applescript.try_command") as mock_cmd:
            mock_cmd.return_value = CommandResult(0, "closed\n", "")
            result = AppleScript("return $x", x=1).run(timeout=4)

            assert result.stdout == "closed\n"
            mock_cmd.assert_called_once_with(["osascript", "-e", "return 1"], timeout=4)
