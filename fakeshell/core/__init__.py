"""
FakeShell Core Module

Configuration for shell sessions.
"""

from .config_loader import (
    ConfigLoader,
    Config,
    ShellConfig,
    FilesystemConfig,
    LoggingConfig,
    get_config,
)

__all__ = [
    'ConfigLoader',
    'Config',
    'ShellConfig',
    'FilesystemConfig',
    'LoggingConfig',
    'get_config',
]
