"""
FakeShell Shell Module

A shell session: environment, virtual file system, command
dispatcher, prompt and line editor, wired to one terminal.

Author: YSNRFD
Version: 1.0.0
"""

import asyncio
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Union

from .builtins import BuiltinCommands
from .dispatcher import CommandDispatcher
from .line_editor import LineEditor
from .prompt import PromptFormatter, PromptManager
from .registry import CommandDefinition, CommandRegistry
from .terminal import OutputHandler, Terminal
from fakeshell.core.config_loader import Config, get_config
from fakeshell.filesystem import VirtualFileSystem
from fakeshell.logger import get_logger


@dataclass
class ShellOptions:
    """Settings for one shell session."""
    user: str = 'guest'
    hostname: str = 'midrai'
    home: str = '/home/guest'
    path: str = '/usr/local/bin:/usr/bin:/bin'
    initial_path: Optional[str] = None
    env: dict[str, str] = field(default_factory=dict)
    welcome_message: Optional[str] = None
    prompt_format: Union[str, PromptFormatter, None] = None
    history_size: int = 1000
    populate_defaults: bool = True
    custom_commands: List[CommandDefinition] = field(default_factory=list)

    @classmethod
    def from_config(cls, config: Optional[Config] = None) -> 'ShellOptions':
        """Build options from the loaded configuration."""
        config = config or get_config()
        shell = config.shell
        return cls(
            user=shell.user,
            hostname=shell.hostname,
            home=shell.home,
            path=shell.path,
            initial_path=shell.initial_path,
            welcome_message=shell.welcome_message,
            prompt_format=shell.prompt_format,
            history_size=shell.history_size,
            populate_defaults=config.filesystem.populate_defaults,
        )


class Shell:
    """
    FakeShell session.

    Provides:
    - Environment variables
    - Built-in and custom commands
    - Prompt and line editing
    - Command history
    - Hooks for observing commands and session end

    Example:
        >>> shell = Shell()
        >>> shell.attach(BufferTerminal())
        >>> shell.handle_input('ls\\r')
    """

    def __init__(self, options: Optional[ShellOptions] = None):
        self._options = options or ShellOptions.from_config()
        self._logger = get_logger('shell')
        self._terminal: Optional[Terminal] = None
        self._on_command: Optional[Callable[[str], object]] = None
        self._on_exit: Optional[Callable[[], object]] = None
        self._closed = False
        self._last_status = 0

        opts = self._options
        self._environ: dict[str, str] = {
            'USER': opts.user,
            'HOSTNAME': opts.hostname,
            'HOME': opts.home,
            'PATH': opts.path,
        }
        self._environ.update(opts.env)

        self._vfs = VirtualFileSystem(
            home=self._environ['HOME'],
            populate_defaults=opts.populate_defaults
        )
        if opts.initial_path and not self._vfs.chdir(opts.initial_path):
            self._logger.warning(
                f"Initial path is not a directory: {opts.initial_path}"
            )
        self._environ['PWD'] = self._vfs.cwd

        self._output = OutputHandler()
        self._registry = CommandRegistry()
        self._builtins = BuiltinCommands(self)
        self._registry.register_all(self._builtins.get_commands())
        self._registry.register_all(opts.custom_commands)

        self._prompt = PromptManager(self._vfs, self._environ)
        if callable(opts.prompt_format):
            self._prompt.set_formatter(opts.prompt_format)
        elif opts.prompt_format:
            self._prompt.set_format(opts.prompt_format)

        self._editor = LineEditor(
            execute=self.execute,
            complete=lambda line: self._dispatcher.complete(line),
            prompt=self._prompt.generate,
            history_size=opts.history_size,
            on_exit=self._handle_exit
        )
        self._dispatcher = CommandDispatcher(
            self._registry,
            self._vfs,
            self._environ,
            self._output,
            history=lambda: self._editor.history
        )

        self._logger.debug(
            "Shell session created",
            context={'user': opts.user, 'cwd': self._vfs.cwd}
        )

    @property
    def vfs(self) -> VirtualFileSystem:
        return self._vfs

    @property
    def environ(self) -> dict[str, str]:
        return self._environ

    @property
    def registry(self) -> CommandRegistry:
        return self._registry

    @property
    def dispatcher(self) -> CommandDispatcher:
        return self._dispatcher

    @property
    def prompt(self) -> PromptManager:
        return self._prompt

    @property
    def editor(self) -> LineEditor:
        return self._editor

    @property
    def output(self) -> OutputHandler:
        return self._output

    @property
    def terminal(self) -> Optional[Terminal]:
        return self._terminal

    @property
    def cwd(self) -> str:
        return self._vfs.cwd

    @property
    def closed(self) -> bool:
        """True once ``exit`` has been committed."""
        return self._closed

    @property
    def last_status(self) -> int:
        """Exit status of the most recent command."""
        return self._last_status

    def attach(self, terminal: Terminal) -> None:
        """Connect a terminal, print the welcome message and the prompt."""
        self._terminal = terminal
        self._output.attach(terminal)
        self._editor.attach(terminal)

        if self._options.welcome_message:
            terminal.writeln(self._options.welcome_message)
            terminal.writeln('')

        self._editor.show_prompt()

    def handle_input(self, data: str) -> None:
        """Feed raw terminal input to the line editor."""
        self._editor.feed(data)

    async def execute(self, line: str) -> int:
        """Run one command line through the dispatcher."""
        status = await self._dispatcher.execute(line)
        self._last_status = status
        self._environ['PWD'] = self._vfs.cwd
        return status

    def execute_line(self, line: str) -> int:
        """Run one command line outside of an event loop."""
        return asyncio.run(self.execute(line))

    def run_script(self, script: str) -> int:
        """
        Run a script (multiple commands).

        Blank lines and ``#`` comments are skipped; ``exit`` stops the
        script.

        Args:
            script: Script content

        Returns:
            Last exit code
        """
        async def run_lines() -> int:
            exit_code = 0
            for line in script.split('\n'):
                line = line.strip()
                if not line or line.startswith('#'):
                    continue
                if line == 'exit':
                    break
                exit_code = await self.execute(line)
            return exit_code

        return asyncio.run(run_lines())

    def register_command(self, command: CommandDefinition) -> None:
        """Register a custom command."""
        self._registry.register(command)

    def set_on_command(self, callback: Optional[Callable[[str], object]]) -> None:
        """
        Observe every command line before it runs.

        Replaces any previously set callback.
        """
        if self._on_command is not None:
            self._dispatcher.remove_pre_execute_hook(self._on_command)
        self._on_command = callback
        if callback is not None:
            self._dispatcher.add_pre_execute_hook(callback)

    def set_on_exit(self, callback: Optional[Callable[[], object]]) -> None:
        """Get notified when the session ends through ``exit``."""
        self._on_exit = callback

    def _handle_exit(self) -> None:
        self._closed = True
        self._logger.info("Session closed")
        if self._on_exit is not None:
            self._on_exit()

    def set_env(self, key: str, value: str) -> None:
        """Set an environment variable."""
        self._environ[key] = value

    def get_env(self, key: str) -> Optional[str]:
        """Get an environment variable."""
        return self._environ.get(key)

    def get_history(self) -> List[str]:
        """Get command history."""
        return self._editor.history

    def write(self, text: str) -> None:
        self._output.print(text)

    def writeln(self, text: str = '') -> None:
        self._output.println(text)


def create_shell(
    options: Optional[ShellOptions] = None,
    terminal: Optional[Terminal] = None
) -> Shell:
    """Factory function to create a shell, optionally attached to a terminal."""
    shell = Shell(options)
    if terminal is not None:
        shell.attach(terminal)
    return shell
