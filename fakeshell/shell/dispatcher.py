"""
Command Dispatcher Module

Routes a raw command line to the registered command handler.

Author: YSNRFD
Version: 1.0.0
"""

import asyncio
import inspect
import re
from typing import Callable, List, Mapping, MutableMapping, Optional, Sequence, TYPE_CHECKING

from .parser import CommandParser
from .registry import CommandRegistry, ExecutionContext
from .terminal import OutputHandler
from fakeshell.exceptions import ShellException
from fakeshell.logger import get_logger

if TYPE_CHECKING:
    from fakeshell.filesystem import VirtualFileSystem


EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_NOT_FOUND = 2
EXIT_COMMAND_NOT_FOUND = 127

_ONE_SHOT_ASSIGNMENT = re.compile(r'^([A-Za-z_][A-Za-z0-9_]*)=(\S+)\s+(.+)$', re.DOTALL)
_ASSIGNMENT = re.compile(r'^([A-Za-z_][A-Za-z0-9_]*)=')

PreExecuteHook = Callable[[str], object]


def complete_path(
    vfs: 'VirtualFileSystem',
    partial: str,
    directories_only: bool = False
) -> List[str]:
    """
    Complete a path against filesystem entries.

    The directory searched is the part of ``partial`` up to its last
    ``/`` (the working directory if there is none). Directory matches
    get a trailing ``/``.

    Example:
        >>> complete_path(vfs, '/ho')
        ['/home/']
    """
    if '/' in partial:
        base = partial[:partial.rindex('/') + 1]
        directory = base
    else:
        base = ''
        directory = '.'
    prefix = partial[len(base):]

    matches = []
    for entry in vfs.readdir(directory) or []:
        if not entry.name.startswith(prefix):
            continue
        if directories_only and not entry.is_directory:
            continue
        matches.append(base + entry.name + ('/' if entry.is_directory else ''))

    return sorted(matches)


class CommandDispatcher:
    """
    Command Dispatcher.

    Dispatch of one line:
    1. ``NAME=value rest``: run ``rest`` with NAME overridden once
    2. ``NAME=value`` alone: set NAME in the session environment
    3. empty command: status 0
    4. unknown command: ``<name>: command not found``, status 127
    5. otherwise run the handler; any failure is reported as
       ``<name>: <message>`` with status 1

    Example:
        >>> dispatcher = CommandDispatcher(registry, vfs, env, output)
        >>> status = dispatcher.run('echo hello')
    """

    def __init__(
        self,
        registry: CommandRegistry,
        vfs: 'VirtualFileSystem',
        env: MutableMapping[str, str],
        output: OutputHandler,
        history: Optional[Callable[[], Sequence[str]]] = None
    ):
        self._registry = registry
        self._vfs = vfs
        self._env = env
        self._output = output
        self._history = history
        self._parser = CommandParser()
        self._hooks: List[PreExecuteHook] = []
        self._logger = get_logger('dispatcher')

    @property
    def registry(self) -> CommandRegistry:
        return self._registry

    @property
    def parser(self) -> CommandParser:
        return self._parser

    def add_pre_execute_hook(self, hook: PreExecuteHook) -> None:
        """Register a callable observing every non-empty line before it runs."""
        self._hooks.append(hook)

    def remove_pre_execute_hook(self, hook: PreExecuteHook) -> None:
        if hook in self._hooks:
            self._hooks.remove(hook)

    def _run_hooks(self, line: str) -> None:
        for hook in list(self._hooks):
            try:
                hook(line)
            except Exception as e:
                self._logger.error(
                    f"Pre-execute hook failed: {e}",
                    context={'hook': getattr(hook, '__qualname__', repr(hook))}
                )

    def make_context(
        self,
        args: Optional[List[str]] = None,
        flags: Optional[set[str]] = None,
        overrides: Optional[Mapping[str, str]] = None
    ) -> ExecutionContext:
        """Build the context a handler or completer runs with."""
        env = dict(self._env)
        if overrides:
            env.update(overrides)

        return ExecutionContext(
            vfs=self._vfs,
            env=env,
            output=self._output,
            cwd=self._vfs.cwd,
            args=list(args or []),
            flags=set(flags or ()),
            history=tuple(self._history()) if self._history else ()
        )

    def _assignment(self, line: str) -> Optional[tuple[str, str]]:
        """Match a whole line of the form NAME=value."""
        match = _ASSIGNMENT.match(line)
        if not match:
            return None

        tokens = self._parser.tokenize(line)
        if len(tokens) != 1:
            return None

        name = match.group(1)
        return name, tokens[0][len(name) + 1:]

    async def execute(self, line: str) -> int:
        """
        Execute a command line.

        Returns:
            Exit status of the command
        """
        trimmed = line.strip()
        if not trimmed:
            return EXIT_SUCCESS

        self._run_hooks(trimmed)

        assignment = self._assignment(trimmed)
        if assignment is not None:
            name, value = assignment
            self._env[name] = value
            self._logger.debug(f"Set {name}", context={'value': value})
            return EXIT_SUCCESS

        overrides: dict[str, str] = {}
        command_line = trimmed
        match = _ONE_SHOT_ASSIGNMENT.match(trimmed)
        if match:
            overrides[match.group(1)] = ''.join(self._parser.tokenize(match.group(2)))
            command_line = match.group(3)

        parsed = self._parser.parse(command_line)
        name = parsed.command
        if not name:
            return EXIT_SUCCESS

        command = self._registry.get(name)
        if command is None:
            self._output.error(f"{name}: command not found")
            return EXIT_COMMAND_NOT_FOUND

        ctx = self.make_context(parsed.args, parsed.flags, overrides)

        self._logger.debug(
            f"Dispatching {name}",
            context={'args': str(parsed.args)[:50], 'flags': ''.join(sorted(parsed.flags))}
        )

        try:
            result = command.execute(ctx)
            if inspect.isawaitable(result):
                result = await result
        except ShellException as e:
            self._output.error(f"{name}: {e.message}")
            return EXIT_FAILURE
        except Exception as e:
            self._logger.warning(
                f"Command '{name}' raised {type(e).__name__}: {e}"
            )
            self._output.error(f"{name}: {e}")
            return EXIT_FAILURE

        return EXIT_SUCCESS if result is None else int(result)

    def run(self, line: str) -> int:
        """Execute a command line outside of an event loop."""
        return asyncio.run(self.execute(line))

    def complete(self, line: str) -> List[str]:
        """
        Get completion candidates for a partial command line.

        While the first word is still being typed, command names are
        completed. After that the command's own completer is used if it
        has one, filesystem entries otherwise.
        """
        tokens = self._parser.tokenize(line)
        ends_with_space = bool(line) and line[-1].isspace()

        if len(tokens) <= 1 and not ends_with_space:
            prefix = tokens[0] if tokens else ''
            return [n for n in self._registry.names() if n.startswith(prefix)]

        parsed = self._parser.parse(line)
        partial = '' if ends_with_space else tokens[-1]

        command = self._registry.get(parsed.command)
        if command is not None and command.complete is not None:
            ctx = self.make_context(parsed.args, parsed.flags)
            try:
                return list(command.complete(partial, ctx))
            except Exception as e:
                self._logger.error(
                    f"Completer for '{parsed.command}' failed: {e}"
                )
                return []

        return complete_path(self._vfs, partial)
