"""
Line Editor Module

Turns raw terminal input into command lines:
- Insertion, deletion and cursor movement with wide-character math
- Command history browsing
- Tab completion
- IDLE / BUSY state with a single in-flight command

Author: YSNRFD
Version: 1.0.0
"""

import asyncio
import re
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Awaitable, Callable, List, Optional, Tuple

from .parser import CommandParser
from .terminal import Terminal
from fakeshell.exceptions import EditorStateError
from fakeshell.logger import get_logger


class EditorMode(Enum):
    """Input state of the editor."""
    IDLE = auto()   # Accepting input
    BUSY = auto()   # A command is running; input is dropped


@dataclass
class EditorState:
    """Buffer, cursor and history of one editor."""
    buffer: str = ''
    cursor: int = 0
    history: List[str] = field(default_factory=list)
    history_index: int = -1  # -1 when not browsing


# Control sequences
KEY_ENTER = '\r'
KEY_BACKSPACE = ('\x7f', '\b')
KEY_DELETE = '\x1b[3~'
KEY_UP = '\x1b[A'
KEY_DOWN = '\x1b[B'
KEY_RIGHT = '\x1b[C'
KEY_LEFT = '\x1b[D'
KEY_HOME = ('\x1b[H', '\x1bOH', '\x1b[1~', '\x01')
KEY_END = ('\x1b[F', '\x1bOF', '\x1b[4~', '\x05')
KEY_CLEAR_SCREEN = '\x0c'
KEY_CLEAR_LINE = '\x15'
KEY_TAB = '\t'

CLEAR_TO_EOL = '\x1b[K'

_ESCAPE_SEQUENCE = re.compile(r'\x1b(?:\[[0-9;]*[A-Za-z~]|O[A-Za-z])')
_PARTIAL_ESCAPE = re.compile(r'\x1b(?:\[[0-9;]*|O)?')
_NEEDS_ESCAPE = re.compile(r'[\s"\'\\]')

_WIDE_RANGES = (
    (0x4E00, 0x9FFF),    # CJK Unified Ideographs
    (0x3400, 0x4DBF),    # CJK Extension A
    (0xF900, 0xFAFF),    # CJK Compatibility Ideographs
    (0x20000, 0x3FFFF),  # CJK Extensions B and later
)


def is_wide_char(char: str) -> bool:
    """Check whether a character takes two terminal columns."""
    code = ord(char)
    return any(low <= code <= high for low, high in _WIDE_RANGES)


def display_width(text: str) -> int:
    """Number of terminal columns a string occupies."""
    return sum(2 if is_wide_char(c) else 1 for c in text)


def split_input(data: str) -> List[str]:
    """
    Split a raw chunk read from a terminal into input events.

    Escape sequences and control characters become single events;
    runs of printable characters are kept together.

    Example:
        >>> split_input('ls\\x1b[D\\r')
        ['ls', '\\x1b[D', '\\r']
    """
    events = []
    text = ''
    i = 0

    while i < len(data):
        char = data[i]

        if char == '\x1b':
            if text:
                events.append(text)
                text = ''
            match = _ESCAPE_SEQUENCE.match(data, i)
            if match:
                events.append(match.group(0))
                i = match.end()
            else:
                events.append(char)
                i += 1
            continue

        if ord(char) < 32 or char == '\x7f':
            if text:
                events.append(text)
                text = ''
            events.append(char)
            i += 1
            continue

        text += char
        i += 1

    if text:
        events.append(text)

    return events


def split_incomplete_escape(data: str) -> Tuple[str, str]:
    """
    Hold back an escape sequence cut off at the end of a read.

    Returns:
        Tuple of (text ready to feed, prefix to prepend to the next read)

    Example:
        >>> split_incomplete_escape('ls\\x1b[')
        ('ls', '\\x1b[')
    """
    index = data.rfind('\x1b')
    if index == -1:
        return data, ''

    tail = data[index:]
    if _PARTIAL_ESCAPE.fullmatch(tail):
        return data[:index], tail
    return data, ''


class LineEditor:
    """
    Interactive line editor.

    Feeds committed lines to ``execute`` and redraws the prompt line
    after every edit. While a command runs the editor is BUSY and all
    input is dropped, not queued.

    Inside a running event loop a committed command is scheduled as a
    task and held in the single ``in_flight`` slot; without a loop it
    runs to completion before ``handle_input`` returns.

    Example:
        >>> editor = LineEditor(dispatcher.execute, dispatcher.complete,
        ...                     prompt.generate)
        >>> editor.attach(BufferTerminal())
        >>> editor.feed('ls\\r')
    """

    def __init__(
        self,
        execute: Callable[[str], Awaitable[int]],
        complete: Callable[[str], List[str]],
        prompt: Callable[[], str],
        history_size: int = 1000,
        on_exit: Optional[Callable[[], object]] = None
    ):
        self._execute = execute
        self._complete = complete
        self._prompt = prompt
        self._history_size = history_size
        self._on_exit = on_exit
        self._terminal: Optional[Terminal] = None
        self._state = EditorState()
        self._mode = EditorMode.IDLE
        self._in_flight: Optional[asyncio.Task] = None
        self._parser = CommandParser()
        self._logger = get_logger('editor')

        self._keymap: dict[str, Callable[[], None]] = {
            KEY_ENTER: self._commit,
            KEY_DELETE: self._delete,
            KEY_UP: self._history_up,
            KEY_DOWN: self._history_down,
            KEY_RIGHT: self._cursor_right,
            KEY_LEFT: self._cursor_left,
            KEY_CLEAR_SCREEN: self._clear_screen,
            KEY_CLEAR_LINE: self._clear_line,
            KEY_TAB: self._tab,
        }
        for key in KEY_BACKSPACE:
            self._keymap[key] = self._backspace
        for key in KEY_HOME:
            self._keymap[key] = self._home
        for key in KEY_END:
            self._keymap[key] = self._end

    @property
    def state(self) -> EditorState:
        return self._state

    @property
    def buffer(self) -> str:
        return self._state.buffer

    @property
    def cursor(self) -> int:
        return self._state.cursor

    @property
    def mode(self) -> EditorMode:
        return self._mode

    @property
    def busy(self) -> bool:
        return self._mode is EditorMode.BUSY

    @property
    def in_flight(self) -> Optional[asyncio.Task]:
        """Task of the running command, if it was scheduled on a loop."""
        return self._in_flight

    @property
    def history(self) -> List[str]:
        """Committed lines, oldest first."""
        return list(self._state.history)

    def set_on_exit(self, callback: Optional[Callable[[], object]]) -> None:
        self._on_exit = callback

    def attach(self, terminal: Optional[Terminal]) -> None:
        self._terminal = terminal

    def _write(self, text: str) -> None:
        if self._terminal is not None:
            self._terminal.write(text)

    def _writeln(self, text: str = '') -> None:
        if self._terminal is not None:
            self._terminal.writeln(text)

    # Input

    def feed(self, data: str) -> None:
        """Process a raw chunk that may hold several input events."""
        for event in split_input(data):
            self.handle_input(event)

    def handle_input(self, data: str) -> None:
        """Process one input event: a text fragment or a control sequence."""
        if self._mode is EditorMode.BUSY:
            self._logger.debug("Input dropped while busy", context={'data': repr(data)})
            return

        handler = self._keymap.get(data)
        if handler is not None:
            handler()
            return

        if not data or data.startswith('\x1b'):
            return

        if ord(data[0]) >= 32 or len(data) > 1:
            text = ''.join(c for c in data if ord(c) >= 32 and c != '\x7f')
            if text:
                self._insert(text)

    # Rendering

    def show_prompt(self) -> None:
        self._write(self._prompt())

    def redraw(self) -> None:
        """Rewrite the prompt line and put the terminal cursor in place."""
        state = self._state
        self._write('\r')
        self._write(CLEAR_TO_EOL)
        self._write(self._prompt())
        self._write(state.buffer)

        distance = display_width(state.buffer[state.cursor:])
        if distance:
            self._write(f'\x1b[{distance}D')

    # Editing

    def _insert(self, text: str) -> None:
        state = self._state
        state.buffer = state.buffer[:state.cursor] + text + state.buffer[state.cursor:]
        state.cursor += len(text)
        self.redraw()

    def _backspace(self) -> None:
        state = self._state
        if state.cursor > 0:
            state.buffer = state.buffer[:state.cursor - 1] + state.buffer[state.cursor:]
            state.cursor -= 1
            self.redraw()

    def _delete(self) -> None:
        state = self._state
        if state.cursor < len(state.buffer):
            state.buffer = state.buffer[:state.cursor] + state.buffer[state.cursor + 1:]
            self.redraw()

    def _cursor_left(self) -> None:
        state = self._state
        if state.cursor > 0:
            state.cursor -= 1
            columns = 2 if is_wide_char(state.buffer[state.cursor]) else 1
            self._write(f'\x1b[{columns}D')

    def _cursor_right(self) -> None:
        state = self._state
        if state.cursor < len(state.buffer):
            columns = 2 if is_wide_char(state.buffer[state.cursor]) else 1
            state.cursor += 1
            self._write(f'\x1b[{columns}C')

    def _home(self) -> None:
        self._state.cursor = 0
        self.redraw()

    def _end(self) -> None:
        self._state.cursor = len(self._state.buffer)
        self.redraw()

    def _clear_screen(self) -> None:
        if self._terminal is not None:
            self._terminal.clear()
        self.redraw()

    def _clear_line(self) -> None:
        self._state.buffer = ''
        self._state.cursor = 0
        self.redraw()

    # History

    def _history_up(self) -> None:
        state = self._state
        if state.history_index < len(state.history) - 1:
            state.history_index += 1
            state.buffer = state.history[-1 - state.history_index]
            state.cursor = len(state.buffer)
            self.redraw()

    def _history_down(self) -> None:
        state = self._state
        if state.history_index > 0:
            state.history_index -= 1
            state.buffer = state.history[-1 - state.history_index]
            state.cursor = len(state.buffer)
            self.redraw()
        elif state.history_index == 0:
            state.history_index = -1
            state.buffer = ''
            state.cursor = 0
            self.redraw()

    def _remember(self, line: str) -> None:
        history = self._state.history
        history.append(line)
        self._state.history_index = -1

        overflow = len(history) - self._history_size
        if overflow > 0:
            del history[:overflow]

    # Completion

    def _tab(self) -> None:
        state = self._state
        completions = self._complete(state.buffer)

        if len(completions) == 1:
            state.buffer = self._apply_completion(state.buffer, completions[0])
            state.cursor = len(state.buffer)
            self.redraw()
        elif len(completions) > 1:
            self._writeln('')
            self._writeln('  '.join(completions))
            self.redraw()

    def _apply_completion(self, line: str, completion: str) -> str:
        """
        Replace the word being completed with ``completion``.

        The word is the last token as the tokenizer sees it, so a quoted
        word keeps its opening quote and an unquoted one gets its
        whitespace escaped. A completed command name gets a trailing space.
        """
        tokens = self._parser.scan(line)

        if not tokens or line[-1].isspace():
            start, index = len(line), len(tokens)
        else:
            start, index = tokens[-1][0], len(tokens) - 1

        quote = line[start] if start < len(line) and line[start] in ('"', "'") else None
        if quote is not None:
            word = quote + completion
            if not completion.endswith('/'):
                word += quote
        else:
            word = _NEEDS_ESCAPE.sub(r'\\\g<0>', completion)

        if index == 0:
            word += ' '

        return line[:start] + word

    # Execution

    def _commit(self) -> None:
        line = self._state.buffer
        command = line.strip()

        self._writeln('')

        if command:
            self._remember(line)

        if command == 'exit':
            self._state.buffer = ''
            self._state.cursor = 0
            self._writeln('logout')
            self._logger.info("Session ended by exit")
            if self._on_exit is not None:
                self._on_exit()
            return

        if not command:
            self._reset_line()
            return

        self._launch(command)

    def _launch(self, command: str) -> None:
        if self._in_flight is not None:
            raise EditorStateError(
                "command already in flight",
                context={'command': command}
            )

        self._mode = EditorMode.BUSY

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        if loop is None:
            try:
                asyncio.run(self._run(command))
            finally:
                self._reset_line()
            return

        task = loop.create_task(self._run(command))
        self._in_flight = task
        task.add_done_callback(self._on_done)

    async def _run(self, command: str) -> None:
        try:
            await self._execute(command)
        except Exception as e:
            self._logger.error(f"Command execution failed: {e}", context={'command': command})
            self._writeln(f'\x1b[31mError: {e}\x1b[0m')

    def _on_done(self, task: asyncio.Task) -> None:
        self._in_flight = None
        if task.cancelled():
            self._logger.warning("In-flight command was cancelled")
        self._reset_line()

    def _reset_line(self) -> None:
        self._state.buffer = ''
        self._state.cursor = 0
        self._mode = EditorMode.IDLE
        self.show_prompt()

    async def wait_idle(self) -> None:
        """Wait until the in-flight command, if any, has finished."""
        while self._in_flight is not None:
            await asyncio.wait([self._in_flight])
