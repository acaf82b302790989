"""Tests for terminal output."""

from io import StringIO
from unittest.mock import patch

from osrs_data import terminal


def test_colorize_with_tty():
    with patch("sys.stdout.isatty", return_value=True):
        result = terminal.colorize("test", terminal.Style.RED)
        assert "\033[91m" in result
        assert "test" in result
        assert "\033[0m" in result


def test_colorize_without_tty():
    with patch("sys.stdout.isatty", return_value=False):
        result = terminal.colorize("test", terminal.Style.RED)
        assert result == "test"


def test_error_goes_to_stderr():
    output = StringIO()
    with patch("sys.stderr", output):
        terminal.error("Something failed")

    assert "✗ Something failed" in output.getvalue()


def test_error_with_context():
    output = StringIO()
    with patch("sys.stderr", output):
        terminal.error_with_context(
            "Missing user agent",
            context={"Variable": "OSRS_USER_AGENT"},
            suggestions=["Set it in .env"],
        )

    text = output.getvalue()
    assert "Missing user agent" in text
    assert "Variable: OSRS_USER_AGENT" in text
    assert "→ Set it in .env" in text


def test_counts_aligns_keys(capsys):
    terminal.counts("Records", {"items": 12, "monsters": 3})

    out = capsys.readouterr().out
    assert "Records" in out
    assert "items     " in out
    assert "monsters  " in out
    assert "12" in out


def test_counts_empty(capsys):
    terminal.counts("Records", {})

    assert "(none)" in capsys.readouterr().out


def test_step_prefix(capsys):
    terminal.step(2, 5, "Tags")

    assert "[2/5] Tags" in capsys.readouterr().out
