"""Command sources: a literal command, standard input or a command file."""

import sys
from abc import ABC, abstractmethod
from collections.abc import Iterator
from pathlib import Path
from typing import TextIO

from lib.ndmtelnet.exceptions import CommandSourceError, CommandTooLongError
from lib.ndmtelnet.logging import log_debug

MAX_COMMAND_LENGTH = 4095


def check_command(command: str, source: str | None = None) -> str:
    """Trim a command and check its length.

    Parameters
    ----------
    command : str
        Raw command text
    source : str | None, optional
        Name of the command set, by default None

    Returns
    -------
    str
        Trimmed command, empty if the text was blank

    Raises
    ------
    CommandTooLongError
        If the trimmed command is longer than MAX_COMMAND_LENGTH
    """
    command = command.strip()
    if len(command) > MAX_COMMAND_LENGTH:
        raise CommandTooLongError(len(command), MAX_COMMAND_LENGTH, source=source)
    return command


class CommandSource(ABC):
    """A finite sequence of commands, consumed once.

    Sources are context managers; iterate them only inside the ``with`` block.
    """

    interactive: bool = False

    def __enter__(self) -> "CommandSource":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        pass

    @abstractmethod
    def __iter__(self) -> Iterator[str]:
        """Yield trimmed, non-empty commands."""


class LiteralSource(CommandSource):
    """Source of a single command given on the command line."""

    def __init__(self, command: str) -> None:
        self.command = check_command(command)
        self._consumed = False

    def __iter__(self) -> Iterator[str]:
        if self._consumed or not self.command:
            return
        self._consumed = True
        yield self.command


class StreamSource(CommandSource):
    """Source reading one command per line from a text stream."""

    name: str = "<stream>"

    def __init__(self) -> None:
        self._stream: TextIO | None = None

    def __iter__(self) -> Iterator[str]:
        if self._stream is None:
            raise CommandSourceError("Command source is not open", source=self.name)

        while True:
            try:
                line = self._stream.readline(MAX_COMMAND_LENGTH + 1)
            except (OSError, UnicodeDecodeError) as e:
                raise CommandSourceError(
                    f'Unable to read "{self.name}": {e}', source=self.name
                ) from e

            if not line:
                return

            if not line.endswith("\n") and self._is_cut(line):
                raise CommandSourceError(
                    f'Error reading a file: "{line}" command truncated',
                    source=self.name,
                )

            command = check_command(line, source=self.name)
            if not command:
                continue

            log_debug(f"Read command from {self.name}", command=command)
            yield command

    def _is_cut(self, line: str) -> bool:
        """Consume one character to tell a cut line from the last line."""
        try:
            return self._stream.read(1) != ""
        except (OSError, UnicodeDecodeError) as e:
            raise CommandSourceError(
                f'Unable to read "{self.name}": {e}', source=self.name
            ) from e


class InteractiveSource(StreamSource):
    """Source reading commands typed on standard input.

    The stream is never closed by this source.
    """

    name = "<stdin>"
    interactive = True

    def __init__(self, stream: TextIO | None = None) -> None:
        super().__init__()
        self._stream = stream if stream is not None else sys.stdin

    def _is_cut(self, line: str) -> bool:
        # A short line without a newline means end of input; reading ahead
        # would block on a terminal
        return len(line) > MAX_COMMAND_LENGTH


class FileSource(StreamSource):
    """Source reading a command set from a file."""

    def __init__(self, path: str | Path) -> None:
        super().__init__()
        self.path = Path(path)
        self.name = str(path)

    def __enter__(self) -> "FileSource":
        try:
            self._stream = open(self.path, "r", encoding="utf-8")
        except OSError as e:
            raise CommandSourceError(
                f'Unable to open "{self.name}": {e.strerror}', source=self.name
            ) from e
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._stream is not None:
            self._stream.close()
            self._stream = None
