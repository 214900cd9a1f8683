"""
Terminal Module

Display side of a shell session:
- Terminal: write / writeln / clear / resize interface
- StreamTerminal: a real tty (or any text stream)
- BufferTerminal: in-memory recorder for tests and headless runs
- OutputHandler: the sink command handlers print through

Author: YSNRFD
Version: 1.0.0
"""

import re
import shutil
import sys
from abc import ABC, abstractmethod
from typing import Any, Callable, List, Optional, TextIO


ANSI_COLORS = {
    'black': '\x1b[30m',
    'red': '\x1b[31m',
    'green': '\x1b[32m',
    'yellow': '\x1b[33m',
    'blue': '\x1b[34m',
    'magenta': '\x1b[35m',
    'cyan': '\x1b[36m',
    'white': '\x1b[37m',
    'bright_black': '\x1b[90m',
    'bright_red': '\x1b[91m',
    'bright_green': '\x1b[92m',
    'bright_yellow': '\x1b[93m',
    'bright_blue': '\x1b[94m',
    'bright_magenta': '\x1b[95m',
    'bright_cyan': '\x1b[96m',
    'bright_white': '\x1b[97m',
}

ANSI_RESET = '\x1b[0m'
CLEAR_SCREEN = '\x1b[2J\x1b[H'

_LINE_BREAK = re.compile(r'\r?\n')
_BARE_NEWLINE = re.compile(r'(?<!\r)\n')
_ANSI_SEQUENCE = re.compile(r'\x1b\[[0-9;?]*[A-Za-z]|\x1b[O][A-Za-z]')


def colorize(text: str, color: str) -> str:
    """
    Wrap text in an ANSI colour sequence.

    Raises:
        ValueError: If the colour name is unknown
    """
    try:
        code = ANSI_COLORS[color]
    except KeyError:
        raise ValueError(f"Unknown color: {color}") from None
    return f"{code}{text}{ANSI_RESET}"


def strip_ansi(text: str) -> str:
    """Remove ANSI escape sequences from text."""
    return _ANSI_SEQUENCE.sub('', text)


class Terminal(ABC):
    """
    Abstract display a shell session writes to.

    ``writeln`` splits embedded line breaks into separate lines, so
    ``writeln("a\\nb")`` prints two lines.
    """

    def __init__(self, columns: int = 80, rows: int = 24):
        self._columns = columns
        self._rows = rows
        self._resize_listeners: List[Callable[[int, int], Any]] = []

    @property
    def columns(self) -> int:
        return self._columns

    @property
    def rows(self) -> int:
        return self._rows

    @abstractmethod
    def write(self, text: str) -> None:
        """Write raw text."""

    def writeln(self, text: str = '') -> None:
        """Write text followed by a line break, one line per embedded break."""
        for line in _LINE_BREAK.split(text):
            self.write(line + '\r\n')

    def clear(self) -> None:
        """Clear the whole screen and home the cursor."""
        self.write(CLEAR_SCREEN)

    def on_resize(self, callback: Callable[[int, int], Any]) -> None:
        """Register a callback invoked with (columns, rows) on resize."""
        self._resize_listeners.append(callback)

    def resize(self, columns: int, rows: int) -> None:
        """Record a new size and notify resize listeners."""
        self._columns = columns
        self._rows = rows
        for callback in self._resize_listeners:
            callback(columns, rows)


class StreamTerminal(Terminal):
    """
    Terminal writing to a text stream, normally ``sys.stdout`` of a tty.

    Bare ``\\n`` is written as ``\\r\\n`` since the tty is driven with
    output post-processing left to the shell.
    """

    def __init__(self, stream: Optional[TextIO] = None):
        size = shutil.get_terminal_size()
        super().__init__(size.columns, size.lines)
        self._stream = stream or sys.stdout

    def write(self, text: str) -> None:
        self._stream.write(_BARE_NEWLINE.sub('\r\n', text))
        self._stream.flush()


class BufferTerminal(Terminal):
    """
    Terminal that records everything written to it.

    Example:
        >>> term = BufferTerminal()
        >>> term.writeln('hello')
        >>> term.lines()
        ['hello']
    """

    def __init__(self, columns: int = 80, rows: int = 24):
        super().__init__(columns, rows)
        self._chunks: List[str] = []
        self.clear_count = 0

    def write(self, text: str) -> None:
        self._chunks.append(text)

    def clear(self) -> None:
        self.clear_count += 1
        super().clear()

    @property
    def text(self) -> str:
        """Everything written, escape sequences included."""
        return ''.join(self._chunks)

    @property
    def plain_text(self) -> str:
        """Everything written, without escape sequences and carriage returns."""
        return strip_ansi(self.text).replace('\r', '')

    def lines(self) -> List[str]:
        """Completed output lines as plain text."""
        lines = self.plain_text.split('\n')
        if lines and lines[-1] == '':
            lines.pop()
        return lines

    def reset(self) -> None:
        """Forget recorded output."""
        self._chunks.clear()
        self.clear_count = 0


class OutputHandler:
    """
    Output sink handed to command handlers.

    Writes go to the attached terminal; with no terminal attached they
    are discarded. Errors, warnings and successes are whole lines in
    red, yellow and green.
    """

    def __init__(self, terminal: Optional[Terminal] = None):
        self._terminal = terminal

    @property
    def terminal(self) -> Optional[Terminal]:
        return self._terminal

    def attach(self, terminal: Optional[Terminal]) -> None:
        self._terminal = terminal

    def print(self, text: str) -> None:
        if self._terminal is not None:
            self._terminal.write(text)

    def println(self, text: str = '') -> None:
        if self._terminal is not None:
            self._terminal.writeln(text)

    def error(self, text: str) -> None:
        self.println(colorize(text, 'red'))

    def warn(self, text: str) -> None:
        self.println(colorize(text, 'yellow'))

    def success(self, text: str) -> None:
        self.println(colorize(text, 'green'))

    def color(self, text: str, color: str) -> str:
        return colorize(text, color)

    def clear(self) -> None:
        if self._terminal is not None:
            self._terminal.clear()
