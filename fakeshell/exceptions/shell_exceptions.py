"""
Shell Exceptions

Exceptions related to shell sessions, configuration, command
registration and command execution.

Author: YSNRFD
Version: 1.0.0
"""

from typing import Optional, Any


class ShellException(Exception):
    """
    Base exception for all shell-related errors.

    Attributes:
        message: Human-readable error description
        error_code: Numeric error code for programmatic handling
        recoverable: Whether the session can continue after the error
        context: Additional context about the error

    Example:
        >>> raise ShellException("Session failure", error_code=1001)
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[int] = None,
        recoverable: bool = True,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code or 0
        self.recoverable = recoverable
        self.context = context or {}

    def __str__(self) -> str:
        base = f"[Error {self.error_code}] {self.message}"
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base = f"{base} ({context_str})"
        return base

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code}, "
            f"recoverable={self.recoverable})"
        )


class ConfigurationError(ShellException):
    """
    Error loading or updating the shell configuration.

    Common causes:
    - Configuration file missing
    - Invalid JSON
    - Unknown configuration key
    """

    def __init__(
        self,
        message: str,
        key: Optional[str] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        ctx = context or {}
        if key:
            ctx["key"] = key
        super().__init__(
            message=message,
            error_code=1001,
            recoverable=False,
            context=ctx
        )
        self.key = key


class CommandError(ShellException):
    """
    A command handler failed.

    Handlers raise this for failures they want reported as
    ``<command>: <message>``; the dispatcher maps it to status 1.

    Example:
        >>> raise CommandError("invalid option -- 'z'", command="ls")
    """

    def __init__(
        self,
        message: str,
        command: Optional[str] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        ctx = context or {}
        if command:
            ctx["command"] = command
        super().__init__(
            message=message,
            error_code=2001,
            context=ctx
        )
        self.command = command


class CommandRegistrationError(ShellException):
    """Raised when a command definition cannot be registered."""

    def __init__(
        self,
        name: str,
        reason: str,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        ctx = context or {}
        ctx["command"] = name
        super().__init__(
            message=f"Cannot register command '{name}': {reason}",
            error_code=2002,
            context=ctx
        )
        self.name = name
        self.reason = reason


class EditorStateError(ShellException):
    """
    The line editor was driven in a way its state machine forbids.

    Example:
        >>> raise EditorStateError("command already in flight")
    """

    def __init__(
        self,
        message: str,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        super().__init__(
            message=message,
            error_code=3001,
            context=context
        )
