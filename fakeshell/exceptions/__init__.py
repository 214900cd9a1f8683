"""
FakeShell Exception Hierarchy

Architecture:
    ShellException
    ├── ConfigurationError
    ├── CommandError
    ├── CommandRegistrationError
    └── EditorStateError
    FileSystemException
    ├── FileNotFoundError
    ├── FileExistsError
    ├── PermissionDeniedError
    ├── DirectoryNotEmptyError
    ├── InvalidPathError
    ├── IsADirectoryError
    └── NotADirectoryError
"""

from .shell_exceptions import (
    ShellException,
    ConfigurationError,
    CommandError,
    CommandRegistrationError,
    EditorStateError,
)

from .fs_exceptions import (
    FileSystemException,
    FileNotFoundError,
    FileExistsError,
    PermissionDeniedError,
    DirectoryNotEmptyError,
    InvalidPathError,
    IsADirectoryError,
    NotADirectoryError,
)

__all__ = [
    # Shell exceptions
    "ShellException",
    "ConfigurationError",
    "CommandError",
    "CommandRegistrationError",
    "EditorStateError",
    # Filesystem exceptions
    "FileSystemException",
    "FileNotFoundError",
    "FileExistsError",
    "PermissionDeniedError",
    "DirectoryNotEmptyError",
    "InvalidPathError",
    "IsADirectoryError",
    "NotADirectoryError",
]
