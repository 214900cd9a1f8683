"""
Shell Built-in Commands

Implements the built-in shell commands on top of the virtual
file system.

Author: YSNRFD
Version: 1.0.0
"""

import re
import time
from typing import Callable, List, Optional, TYPE_CHECKING

from .dispatcher import complete_path, EXIT_FAILURE, EXIT_NOT_FOUND, EXIT_SUCCESS
from .parser import expand_variables
from .registry import CommandDefinition, ExecutionContext
from .terminal import colorize
from fakeshell.exceptions import fs_exceptions
from fakeshell.filesystem import Node, PathResolver, VirtualFileSystem

if TYPE_CHECKING:
    from .shell import Shell


_IDENTIFIER = re.compile(r'^[A-Za-z_][A-Za-z0-9_]*$')
_ECHO_ESCAPES = re.compile(r'\\(n|t|\\)')
_ECHO_REPLACEMENTS = {'n': '\n', 't': '\t', '\\': '\\'}


def _reason(vfs: VirtualFileSystem, default: str = 'No such file or directory') -> str:
    """POSIX reason of the last failed filesystem operation."""
    error = vfs.last_error
    return error.strerror if error is not None else default


def format_size(size: int) -> str:
    """Human-readable size: 0B, 512B, 1.5K, 2M."""
    if size == 0:
        return '0B'

    value = float(size)
    for unit in ('B', 'K', 'M'):
        if value < 1024:
            break
        value /= 1024
    else:
        unit = 'G'

    text = f"{value:.1f}".rstrip('0').rstrip('.')
    return f"{text}{unit}"


class BuiltinCommands:
    """
    Built-in shell commands.

    Each command is a ``cmd_*`` method taking an ExecutionContext and
    returning its exit status.
    """

    def __init__(self, shell: 'Shell'):
        """
        Initialize built-in commands.

        Args:
            shell: The shell session the commands belong to
        """
        self._shell = shell
        self._commands: dict[str, tuple[Callable, str, str]] = {
            'ls': (self.cmd_ls, 'List directory contents', 'ls [-alh] [PATH]'),
            'cd': (self.cmd_cd, 'Change the current directory', 'cd [DIRECTORY]'),
            'pwd': (self.cmd_pwd, 'Print the current working directory', 'pwd'),
            'cat': (self.cmd_cat, 'Concatenate and print files', 'cat FILE...'),
            'echo': (self.cmd_echo, 'Display a line of text', 'echo [-ne] [STRING]...'),
            'mkdir': (self.cmd_mkdir, 'Create directories', 'mkdir [-p] DIRECTORY...'),
            'touch': (self.cmd_touch, 'Create empty files or update timestamps', 'touch FILE...'),
            'rm': (self.cmd_rm, 'Remove files or directories', 'rm [-rf] FILE...'),
            'cp': (self.cmd_cp, 'Copy files and directories', 'cp [-r] SOURCE... DEST'),
            'mv': (self.cmd_mv, 'Move or rename files', 'mv SOURCE... DEST'),
            'clear': (self.cmd_clear, 'Clear the terminal screen', 'clear'),
            'help': (self.cmd_help, 'Display help information', 'help [COMMAND]'),
            'whoami': (self.cmd_whoami, 'Print the current user', 'whoami'),
            'date': (self.cmd_date, 'Print the current date and time', 'date'),
            'history': (self.cmd_history, 'Show command history', 'history'),
            'env': (self.cmd_env, 'Print the environment', 'env'),
            'export': (self.cmd_export, 'Set environment variables', 'export [NAME=VALUE]...'),
        }
        self._completers: dict[str, Callable] = {
            'cd': self.complete_directory,
            'help': self.complete_command,
        }

    def get_commands(self) -> List[CommandDefinition]:
        """Get all built-in commands as registrable definitions."""
        return [
            CommandDefinition(
                name=name,
                execute=handler,
                description=description,
                usage=usage,
                complete=self._completers.get(name)
            )
            for name, (handler, description, usage) in self._commands.items()
        ]

    # Completion

    def complete_directory(self, partial: str, ctx: ExecutionContext) -> List[str]:
        return complete_path(ctx.vfs, partial, directories_only=True)

    def complete_command(self, partial: str, ctx: ExecutionContext) -> List[str]:
        return [n for n in self._shell.registry.names() if n.startswith(partial)]

    # Command implementations

    def cmd_ls(self, ctx: ExecutionContext) -> int:
        """List directory contents."""
        vfs = ctx.vfs
        path = ctx.args[0] if ctx.args else '.'
        show_all = ctx.has_flag('a', 'all')
        long_format = ctx.has_flag('l')
        human = ctx.has_flag('h', 'human-readable')

        node = vfs.get_node(path)
        if node is None:
            ctx.output.error(f"ls: cannot access '{path}': {_reason(vfs)}")
            return EXIT_NOT_FOUND

        entries = vfs.readdir(path) if node.is_directory else [node]

        entries = sorted(
            entries,
            key=lambda e: (not e.is_directory, e.name.lower(), e.name)
        )
        if not show_all:
            entries = [e for e in entries if not e.name.startswith('.')]

        if long_format:
            for entry in entries:
                size = format_size(entry.size) if human else str(entry.size)
                mtime = time.strftime('%b %d %H:%M', time.localtime(entry.modified_at))
                ctx.output.println(
                    f"{entry.permissions} {entry.owner:>4} {entry.group:>4} "
                    f"{size:>6} {mtime} {self._display_name(entry)}"
                )
        elif entries:
            ctx.output.println('  '.join(self._display_name(e) for e in entries))

        return EXIT_SUCCESS

    @staticmethod
    def _display_name(entry: Node) -> str:
        if entry.is_directory:
            return colorize(entry.name, 'blue')
        if entry.name.endswith('.sh') or 'x' in entry.permissions:
            return colorize(entry.name, 'green')
        return entry.name

    def cmd_cd(self, ctx: ExecutionContext) -> int:
        """Change directory."""
        path = ctx.args[0] if ctx.args else ctx.env.get('HOME', '~')

        if not ctx.vfs.chdir(path):
            ctx.output.error(f"cd: {path}: {_reason(ctx.vfs)}")
            return EXIT_FAILURE

        return EXIT_SUCCESS

    def cmd_pwd(self, ctx: ExecutionContext) -> int:
        """Print working directory."""
        ctx.output.println(ctx.vfs.cwd)
        return EXIT_SUCCESS

    def cmd_cat(self, ctx: ExecutionContext) -> int:
        """Display file contents."""
        if not ctx.args:
            ctx.output.error("cat: missing file operand")
            return EXIT_FAILURE

        status = EXIT_SUCCESS
        for path in ctx.args:
            content = ctx.vfs.read_file(path)
            if content is None:
                ctx.output.error(f"cat: {path}: {_reason(ctx.vfs)}")
                status = EXIT_FAILURE
                continue

            ctx.output.print(content)
            if not content.endswith('\n'):
                ctx.output.println()

        return status

    def cmd_echo(self, ctx: ExecutionContext) -> int:
        """Echo arguments."""
        text = expand_variables(' '.join(ctx.args), ctx.env)

        if ctx.has_flag('e'):
            text = _ECHO_ESCAPES.sub(lambda m: _ECHO_REPLACEMENTS[m.group(1)], text)

        if ctx.has_flag('n'):
            ctx.output.print(text)
        else:
            ctx.output.println(text)

        return EXIT_SUCCESS

    def cmd_mkdir(self, ctx: ExecutionContext) -> int:
        """Create directory."""
        if not ctx.args:
            ctx.output.error("mkdir: missing operand")
            return EXIT_FAILURE

        parents = ctx.has_flag('p', 'parents')
        status = EXIT_SUCCESS

        for path in ctx.args:
            if parents:
                reason = self._make_parents(ctx.vfs, path)
            elif not ctx.vfs.mkdir(path):
                reason = _reason(ctx.vfs)
            else:
                reason = None

            if reason is not None:
                ctx.output.error(f"mkdir: cannot create directory '{path}': {reason}")
                status = EXIT_FAILURE

        return status

    @staticmethod
    def _make_parents(vfs: VirtualFileSystem, path: str) -> Optional[str]:
        """Create a directory and missing parents; returns the failure reason."""
        components = PathResolver.components(vfs.resolve_path(path))
        current = '/'
        for index, component in enumerate(components):
            current = PathResolver.join(current, component)
            node = vfs.get_node(current)
            if node is None:
                if not vfs.mkdir(current):
                    return _reason(vfs)
            elif not node.is_directory:
                if index == len(components) - 1:
                    return fs_exceptions.FileExistsError.strerror
                return fs_exceptions.NotADirectoryError.strerror
        return None

    def cmd_touch(self, ctx: ExecutionContext) -> int:
        """Create empty file or update timestamp."""
        if not ctx.args:
            ctx.output.error("touch: missing file operand")
            return EXIT_FAILURE

        status = EXIT_SUCCESS
        for path in ctx.args:
            node = ctx.vfs.get_node(path)
            if node is not None:
                node.touch()
            elif not ctx.vfs.write_file(path, ''):
                ctx.output.error(f"touch: cannot touch '{path}': {_reason(ctx.vfs)}")
                status = EXIT_FAILURE

        return status

    def cmd_rm(self, ctx: ExecutionContext) -> int:
        """Remove files or directories."""
        recursive = ctx.has_flag('r', 'R', 'recursive')
        force = ctx.has_flag('f', 'force')

        if not ctx.args:
            if force:
                return EXIT_SUCCESS
            ctx.output.error("rm: missing operand")
            return EXIT_FAILURE

        status = EXIT_SUCCESS
        for path in ctx.args:
            if recursive and path.rstrip('/').rsplit('/', 1)[-1] in ('.', '..'):
                ctx.output.error(
                    f"rm: refusing to remove '.' or '..' directory: skipping '{path}'"
                )
                status = EXIT_FAILURE
                continue

            node = ctx.vfs.get_node(path)
            if node is None:
                if not force:
                    ctx.output.error(f"rm: cannot remove '{path}': No such file or directory")
                    status = EXIT_FAILURE
                continue

            if node.is_directory and not recursive:
                ctx.output.error(f"rm: cannot remove '{path}': Is a directory")
                status = EXIT_FAILURE
                continue

            if not ctx.vfs.remove(path, recursive=recursive):
                ctx.output.error(f"rm: cannot remove '{path}': {_reason(ctx.vfs)}")
                status = EXIT_FAILURE

        return status

    def _split_operands(self, ctx: ExecutionContext, name: str) -> Optional[tuple[List[str], str]]:
        """Split cp/mv operands into sources and destination."""
        if not ctx.args:
            ctx.output.error(f"{name}: missing file operand")
            return None
        if len(ctx.args) == 1:
            ctx.output.error(f"{name}: missing destination file operand after '{ctx.args[0]}'")
            return None

        *sources, dest = ctx.args
        if len(sources) > 1 and not ctx.vfs.is_directory(dest):
            ctx.output.error(f"{name}: target '{dest}' is not a directory")
            return None

        return sources, dest

    def cmd_cp(self, ctx: ExecutionContext) -> int:
        """Copy files and directories."""
        operands = self._split_operands(ctx, 'cp')
        if operands is None:
            return EXIT_FAILURE

        sources, dest = operands
        recursive = ctx.has_flag('r', 'R', 'recursive')
        status = EXIT_SUCCESS

        for source in sources:
            if not recursive and ctx.vfs.is_directory(source):
                ctx.output.error(f"cp: -r not specified; omitting directory '{source}'")
                status = EXIT_FAILURE
                continue

            if not ctx.vfs.copy(source, dest, recursive=recursive):
                ctx.output.error(f"cp: cannot copy '{source}': {_reason(ctx.vfs)}")
                status = EXIT_FAILURE

        return status

    def cmd_mv(self, ctx: ExecutionContext) -> int:
        """Move or rename files."""
        operands = self._split_operands(ctx, 'mv')
        if operands is None:
            return EXIT_FAILURE

        sources, dest = operands
        status = EXIT_SUCCESS

        for source in sources:
            if not ctx.vfs.move(source, dest):
                ctx.output.error(f"mv: cannot move '{source}' to '{dest}': {_reason(ctx.vfs)}")
                status = EXIT_FAILURE

        return status

    def cmd_clear(self, ctx: ExecutionContext) -> int:
        """Clear screen."""
        ctx.output.clear()
        return EXIT_SUCCESS

    def cmd_help(self, ctx: ExecutionContext) -> int:
        """Display help information."""
        registry = self._shell.registry

        if ctx.args:
            name = ctx.args[0]
            command = registry.get(name)
            if command is None:
                ctx.output.error(f"help: no help topics match '{name}'.")
                return EXIT_FAILURE

            ctx.output.println(colorize(f"\n{name}", 'green') + f" - {command.description}")
            if command.usage:
                ctx.output.println(f"\nUsage: {colorize(command.usage, 'yellow')}")
            ctx.output.println()
            return EXIT_SUCCESS

        commands = registry.commands()
        width = max((len(c.name) for c in commands), default=0)

        ctx.output.println(colorize('\nAvailable commands:', 'cyan'))
        ctx.output.println(colorize('─' * 50, 'bright_black'))
        for command in commands:
            ctx.output.println(f"  {colorize(command.name.ljust(width), 'green')}  {command.description}")
        ctx.output.println(colorize('─' * 50, 'bright_black'))
        ctx.output.println(f"Type {colorize('help COMMAND', 'yellow')} for more details.\n")

        return EXIT_SUCCESS

    def cmd_whoami(self, ctx: ExecutionContext) -> int:
        """Display current user."""
        ctx.output.println(ctx.env.get('USER', ''))
        return EXIT_SUCCESS

    def cmd_date(self, ctx: ExecutionContext) -> int:
        """Display current date/time."""
        ctx.output.println(time.strftime('%a %b %d %H:%M:%S %Z %Y'))
        return EXIT_SUCCESS

    def cmd_history(self, ctx: ExecutionContext) -> int:
        """Display command history."""
        for i, line in enumerate(ctx.history, 1):
            ctx.output.println(f"  {i:4d}  {line}")
        return EXIT_SUCCESS

    def cmd_env(self, ctx: ExecutionContext) -> int:
        """Display environment."""
        for key, value in sorted(ctx.env.items()):
            ctx.output.println(f"{key}={value}")
        return EXIT_SUCCESS

    def cmd_export(self, ctx: ExecutionContext) -> int:
        """Set environment variables."""
        if not ctx.args:
            for key, value in sorted(self._shell.environ.items()):
                ctx.output.println(f'declare -x {key}="{value}"')
            return EXIT_SUCCESS

        status = EXIT_SUCCESS
        for arg in ctx.args:
            name, sep, value = arg.partition('=')
            if not _IDENTIFIER.match(name):
                ctx.output.error(f"export: `{arg}': not a valid identifier")
                status = EXIT_FAILURE
                continue
            if sep:
                self._shell.set_env(name, value)
            elif name not in self._shell.environ:
                self._shell.set_env(name, '')

        return status
