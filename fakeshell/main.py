#!/usr/bin/env python3
"""
FakeShell - An in-memory POSIX-like shell

This is the main entry point for FakeShell.

Modes:
- Interactive: drives the line editor from the controlling tty
- Script: runs each line of a file (or of piped stdin) and exits
  with the status of the last command

Author: YSNRFD
Version: 1.0.0
"""

import argparse
import asyncio
import codecs
import os
import shutil
import signal
import sys
import termios
from typing import List, Optional

from fakeshell.core.config_loader import ConfigLoader, get_config
from fakeshell.exceptions import ConfigurationError
from fakeshell.logger import Logger, LogLevel, get_logger
from fakeshell.shell.line_editor import split_incomplete_escape
from fakeshell.shell.shell import Shell, ShellOptions
from fakeshell.shell.terminal import StreamTerminal


KEY_EOF = '\x04'
ESCAPE_TIMEOUT = 0.05  # seconds to wait for the rest of an escape sequence


class RawTerminal:
    """
    Context manager putting a tty into cbreak mode without echo.

    Carriage return is left untranslated so Enter arrives as ``\\r``.
    """

    def __init__(self, fd: int):
        self._fd = fd
        self._old: Optional[list] = None

    def __enter__(self) -> 'RawTerminal':
        self._old = termios.tcgetattr(self._fd)
        new = termios.tcgetattr(self._fd)
        new[0] = new[0] & ~termios.ICRNL
        new[3] = new[3] & ~(termios.ICANON | termios.ECHO)
        new[3] = new[3] | termios.ISIG
        new[6][termios.VMIN] = 1
        new[6][termios.VTIME] = 0
        termios.tcsetattr(self._fd, termios.TCSADRAIN, new)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._old is not None:
            termios.tcsetattr(self._fd, termios.TCSADRAIN, self._old)


async def run_interactive(shell: Shell, terminal: StreamTerminal, fd: int) -> None:
    """Feed tty input to the shell until ``exit`` or end of input."""
    loop = asyncio.get_running_loop()
    done = asyncio.Event()
    decoder = codecs.getincrementaldecoder('utf-8')('replace')

    pending = ''
    flush_handle: Optional[asyncio.TimerHandle] = None

    shell.set_on_exit(done.set)

    def flush() -> None:
        # A lone Esc press never gets the rest of a sequence
        nonlocal pending
        if pending:
            text, pending = pending, ''
            shell.handle_input(text)

    def on_readable() -> None:
        nonlocal pending, flush_handle
        data = os.read(fd, 1024)
        if not data:
            done.set()
            return

        if flush_handle is not None:
            flush_handle.cancel()
            flush_handle = None

        text = pending + decoder.decode(data)
        if text == KEY_EOF and not shell.editor.buffer and not shell.editor.busy:
            terminal.writeln('')
            done.set()
            return

        text, pending = split_incomplete_escape(text)
        if text:
            shell.handle_input(text)
        if pending:
            flush_handle = loop.call_later(ESCAPE_TIMEOUT, flush)

    def on_resize() -> None:
        size = shutil.get_terminal_size()
        terminal.resize(size.columns, size.lines)

    loop.add_reader(fd, on_readable)
    loop.add_signal_handler(signal.SIGWINCH, on_resize)
    try:
        await done.wait()
        await shell.editor.wait_idle()
    finally:
        loop.remove_reader(fd)
        loop.remove_signal_handler(signal.SIGWINCH)
        if flush_handle is not None:
            flush_handle.cancel()


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog='fakeshell',
        description='An in-memory POSIX-like shell session.'
    )
    parser.add_argument(
        '--config',
        metavar='PATH',
        help='JSON configuration file'
    )
    parser.add_argument(
        '--script',
        metavar='FILE',
        help='run the commands in FILE instead of starting an interactive session'
    )
    parser.add_argument(
        '--log-level',
        metavar='LEVEL',
        choices=[level.name for level in LogLevel],
        type=str.upper,
        help='minimum log level (default: from configuration)'
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for FakeShell.

    Startup sequence:
    1. Load configuration
    2. Initialize logging
    3. Create the shell session
    4. Run a script or the interactive session
    """
    args = parse_args(argv)

    if args.config:
        try:
            ConfigLoader().load(args.config)
        except ConfigurationError as e:
            print(f"fakeshell: {e.message}", file=sys.stderr)
            return 2

    config = get_config()
    Logger.initialize(
        level=LogLevel.from_name(args.log_level or config.logging.level),
        log_file=config.logging.log_file,
        use_colors=config.logging.use_colors,
        console_output=config.logging.console_output
    )
    logger = get_logger('shell')

    try:
        shell = Shell(ShellOptions.from_config(config))
        terminal = StreamTerminal()

        if args.script or not sys.stdin.isatty():
            if args.script:
                try:
                    with open(args.script, 'r', encoding='utf-8') as f:
                        script = f.read()
                except OSError as e:
                    print(f"fakeshell: {args.script}: {e.strerror}", file=sys.stderr)
                    return 1
            else:
                script = sys.stdin.read()

            shell.output.attach(terminal)
            status = shell.run_script(script)
            logger.debug("Script finished", context={'status': status})
            return status

        fd = sys.stdin.fileno()
        with RawTerminal(fd):
            shell.attach(terminal)
            try:
                asyncio.run(run_interactive(shell, terminal, fd))
            except KeyboardInterrupt:
                terminal.writeln('')

        return shell.last_status
    finally:
        Logger.shutdown()


if __name__ == '__main__':
    sys.exit(main())
