"""Tests for command sources."""

import io
from pathlib import Path

import pytest

from lib.ndmtelnet.exceptions import CommandSourceError, CommandTooLongError
from lib.ndmtelnet.source import (
    MAX_COMMAND_LENGTH,
    FileSource,
    InteractiveSource,
    LiteralSource,
)


def test_literal_source() -> None:
    """Test a literal source yields its command once."""
    source = LiteralSource("  show version  ")
    with source:
        assert list(source) == ["show version"]
        assert list(source) == []
    assert not source.interactive


def test_literal_source_too_long() -> None:
    """Test an oversized literal command is rejected."""
    with pytest.raises(CommandTooLongError):
        LiteralSource("x" * (MAX_COMMAND_LENGTH + 1))


def test_interactive_skips_blank_lines() -> None:
    """Test blank and whitespace-only lines are skipped."""
    stream = io.StringIO("\n  \nshow system\n")
    with InteractiveSource(stream) as source:
        assert list(source) == ["show system"]
    assert source.interactive


def test_interactive_does_not_close_stream() -> None:
    """Test the input stream stays open."""
    stream = io.StringIO("show system\n\tshow log \n")
    with InteractiveSource(stream) as source:
        commands = list(source)

    assert commands == ["show system", "show log"]
    assert not stream.closed


def test_file_source(tmp_path: Path) -> None:
    """Test commands are read from a file, last line without newline."""
    path = tmp_path / "commands.txt"
    path.write_text("show version\n\n   \ninterface Home\nshow running-config")

    with FileSource(path) as source:
        assert list(source) == ["show version", "interface Home", "show running-config"]


def test_file_source_closed_on_error(tmp_path: Path) -> None:
    """Test the file is closed when iteration is abandoned."""
    path = tmp_path / "commands.txt"
    path.write_text("first\nsecond\n")

    source = FileSource(path)
    with pytest.raises(RuntimeError):
        with source:
            for _ in source:
                raise RuntimeError("stop")

    assert source._stream is None


def test_file_source_missing(tmp_path: Path) -> None:
    """Test a missing file is reported."""
    with pytest.raises(CommandSourceError, match="Unable to open"):
        with FileSource(tmp_path / "missing.txt"):
            pass


def test_longest_command_accepted(tmp_path: Path) -> None:
    """Test a command of exactly the maximum length is accepted."""
    command = "x" * MAX_COMMAND_LENGTH
    path = tmp_path / "commands.txt"
    path.write_text(f"{command}\nnext\n")

    with FileSource(path) as source:
        assert list(source) == [command, "next"]


def test_truncated_line_rejected(tmp_path: Path) -> None:
    """Test an overlong line in the middle of a file is an error."""
    path = tmp_path / "commands.txt"
    path.write_text("show version\n" + "x" * (MAX_COMMAND_LENGTH + 10) + "\nnext\n")

    with FileSource(path) as source:
        commands = iter(source)
        assert next(commands) == "show version"
        with pytest.raises(CommandSourceError, match="truncated"):
            next(commands)


def test_overlong_final_line_rejected(tmp_path: Path) -> None:
    """Test an overlong final line without newline is too long."""
    path = tmp_path / "commands.txt"
    path.write_text("x" * (MAX_COMMAND_LENGTH + 1))

    with FileSource(path) as source:
        with pytest.raises(CommandTooLongError):
            list(source)


def test_source_not_open(tmp_path: Path) -> None:
    """Test a file source must be entered before use."""
    with pytest.raises(CommandSourceError):
        list(FileSource(tmp_path / "commands.txt"))


class TerminalStream(io.StringIO):
    """Input that must not be read past a partial line."""

    def read(self, size: int | None = -1) -> str:
        raise AssertionError("read ahead on interactive input")


def test_interactive_partial_last_line() -> None:
    """Test a final line without newline ends interactive input without reading ahead."""
    with InteractiveSource(TerminalStream("show version\nshow system")) as source:
        assert list(source) == ["show version", "show system"]


def test_interactive_overlong_line() -> None:
    """Test an overlong typed line is rejected as truncated."""
    stream = TerminalStream("x" * (MAX_COMMAND_LENGTH + 10) + "\n")

    with InteractiveSource(stream) as source:
        with pytest.raises(CommandSourceError, match="truncated"):
            list(source)
