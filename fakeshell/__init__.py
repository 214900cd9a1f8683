"""
FakeShell - An in-memory POSIX-like shell

This package provides a complete shell session simulation implemented
in Python 3.10+ using only the standard library: a virtual file
system, a command dispatcher with built-in commands, and an
interactive line editor.
"""

__version__ = "1.0.0"
__author__ = "YSNRFD"

# Import main components for convenience
from .filesystem import VirtualFileSystem, PathResolver
from .shell.registry import CommandDefinition, ExecutionContext
from .shell.terminal import Terminal, StreamTerminal, BufferTerminal
from .shell.shell import Shell, ShellOptions, create_shell

__all__ = [
    'VirtualFileSystem',
    'PathResolver',
    'CommandDefinition',
    'ExecutionContext',
    'Terminal',
    'StreamTerminal',
    'BufferTerminal',
    'Shell',
    'ShellOptions',
    'create_shell',
]
