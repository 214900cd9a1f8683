"""
FakeShell Shell Module

Provides the interactive command-line shell:
- Command parsing and dispatch
- Built-in commands
- Prompt generation
- Line editing with history and completion
"""

from .parser import CommandParser, ParsedCommand, expand_variables
from .registry import CommandDefinition, CommandRegistry, ExecutionContext
from .dispatcher import CommandDispatcher, complete_path
from .terminal import (
    Terminal,
    StreamTerminal,
    BufferTerminal,
    OutputHandler,
    ANSI_COLORS,
    ANSI_RESET,
    colorize,
)
from .prompt import PromptManager, PromptContext
from .line_editor import (
    LineEditor,
    EditorMode,
    EditorState,
    split_input,
    split_incomplete_escape,
    is_wide_char,
    display_width,
)
from .builtins import BuiltinCommands
from .shell import Shell, ShellOptions, create_shell

__all__ = [
    'CommandParser',
    'ParsedCommand',
    'expand_variables',
    'CommandDefinition',
    'CommandRegistry',
    'ExecutionContext',
    'CommandDispatcher',
    'complete_path',
    'Terminal',
    'StreamTerminal',
    'BufferTerminal',
    'OutputHandler',
    'ANSI_COLORS',
    'ANSI_RESET',
    'colorize',
    'PromptManager',
    'PromptContext',
    'LineEditor',
    'EditorMode',
    'EditorState',
    'split_input',
    'split_incomplete_escape',
    'is_wide_char',
    'display_width',
    'BuiltinCommands',
    'Shell',
    'ShellOptions',
    'create_shell',
]
