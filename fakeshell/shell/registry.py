"""
Command Registry

Holds the commands available to one shell session:
- CommandDefinition: name, help text, handler and optional completer
- ExecutionContext: per-invocation bundle passed to a handler
- CommandRegistry: name -> definition table

Author: YSNRFD
Version: 1.0.0
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Awaitable, Callable, List, Optional, Union

from fakeshell.exceptions import CommandRegistrationError
from fakeshell.logger import get_logger

if TYPE_CHECKING:
    from fakeshell.filesystem import VirtualFileSystem
    from .terminal import OutputHandler


CommandResult = Union[int, None, Awaitable[Optional[int]]]
CommandHandler = Callable[['ExecutionContext'], CommandResult]
CommandCompleter = Callable[[str, 'ExecutionContext'], List[str]]


@dataclass
class ExecutionContext:
    """
    Everything a command handler gets to see.

    ``env`` is a snapshot: the session environment merged with any
    one-shot ``NAME=value`` override for this invocation.
    """
    vfs: 'VirtualFileSystem'
    env: dict[str, str]
    output: 'OutputHandler'
    cwd: str
    args: List[str] = field(default_factory=list)
    flags: set[str] = field(default_factory=set)
    history: tuple[str, ...] = ()

    def has_flag(self, *names: str) -> bool:
        """Check whether any of the given flags was passed."""
        return any(name in self.flags for name in names)


@dataclass
class CommandDefinition:
    """
    A registered command.

    ``execute`` returns the exit status (``None`` counts as 0) and may
    be a coroutine function.
    """
    name: str
    execute: CommandHandler
    description: str = ''
    usage: str = ''
    complete: Optional[CommandCompleter] = None


class CommandRegistry:
    """
    Registry of the commands of one shell session.

    Registering a name that already exists replaces the old definition.

    Example:
        >>> registry = CommandRegistry()
        >>> registry.register(CommandDefinition('hello', lambda ctx: 0))
        >>> registry.has('hello')
        True
    """

    def __init__(self):
        self._commands: dict[str, CommandDefinition] = {}
        self._logger = get_logger('dispatcher')

    def register(self, command: CommandDefinition) -> None:
        """
        Register a command.

        Raises:
            CommandRegistrationError: If the name is empty or contains
                whitespace, or the handler is not callable
        """
        name = command.name
        if not name or any(c.isspace() for c in name):
            raise CommandRegistrationError(name, "name must be a non-empty word")
        if not callable(command.execute):
            raise CommandRegistrationError(name, "execute is not callable")

        replaced = name in self._commands
        self._commands[name] = command

        self._logger.debug(
            f"Registered command '{name}'",
            context={'replaced': replaced}
        )

    def register_all(self, commands: List[CommandDefinition]) -> None:
        """Register several commands."""
        for command in commands:
            self.register(command)

    def unregister(self, name: str) -> bool:
        """Remove a command; returns False if it was not registered."""
        return self._commands.pop(name, None) is not None

    def get(self, name: str) -> Optional[CommandDefinition]:
        return self._commands.get(name)

    def has(self, name: str) -> bool:
        return name in self._commands

    def names(self) -> List[str]:
        """Registered command names, sorted."""
        return sorted(self._commands)

    def commands(self) -> List[CommandDefinition]:
        """Registered commands in name order."""
        return [self._commands[name] for name in self.names()]

    def __contains__(self, name: Any) -> bool:
        return name in self._commands

    def __len__(self) -> int:
        return len(self._commands)
