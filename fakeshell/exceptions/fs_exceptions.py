"""
Filesystem Exceptions

Exceptions raised inside the virtual file system. The public VFS
operations convert them into explicit success/failure results; the
exception object is kept on the filesystem as ``last_error`` so that
commands can report the POSIX reason of a failure.

Author: YSNRFD
Version: 1.0.0
"""

from typing import Optional, Any


class FileSystemException(Exception):
    """
    Base exception for all filesystem-related errors.

    Attributes:
        message: Human-readable error description
        path: File path associated with the error (if applicable)
        error_code: Numeric error code for programmatic handling
        strerror: POSIX-style reason shown to shell users
    """

    strerror = "Input/output error"

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        error_code: Optional[int] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.path = path
        self.error_code = error_code or 4000
        self.context = context or {}
        if path:
            self.context["path"] = path

    def __str__(self) -> str:
        base = f"[Error {self.error_code}] {self.message}"
        if self.path:
            base = f"{base} (path={self.path})"
        return base


class FileNotFoundError(FileSystemException):
    """
    The specified path does not exist.

    Example:
        >>> raise FileNotFoundError("/path/to/file")
    """

    strerror = "No such file or directory"

    def __init__(
        self,
        path: str,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        super().__init__(
            message=f"File not found: {path}",
            path=path,
            error_code=4001,
            context=context
        )


class FileExistsError(FileSystemException):
    """
    The specified path already exists.

    Raised when creating a directory over an existing entry, or when
    writing a file over an existing directory.
    """

    strerror = "File exists"

    def __init__(
        self,
        path: str,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        super().__init__(
            message=f"File already exists: {path}",
            path=path,
            error_code=4002,
            context=context
        )


class PermissionDeniedError(FileSystemException):
    """
    The operation is not allowed on this node.

    Permissions are cosmetic in the simulation; this is only raised for
    structurally forbidden operations such as detaching the root.

    Example:
        >>> raise PermissionDeniedError("/", operation="remove")
    """

    strerror = "Permission denied"

    def __init__(
        self,
        path: str,
        operation: Optional[str] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        ctx = context or {}
        if operation:
            ctx["operation"] = operation
        super().__init__(
            message=f"Permission denied: {path}",
            path=path,
            error_code=4003,
            context=ctx
        )
        self.operation = operation


class DirectoryNotEmptyError(FileSystemException):
    """
    Directory is not empty.

    Raised when removing a directory that still has children without
    the recursive flag.
    """

    strerror = "Directory not empty"

    def __init__(
        self,
        path: str,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        super().__init__(
            message=f"Directory not empty: {path}",
            path=path,
            error_code=4004,
            context=context
        )


class InvalidPathError(FileSystemException):
    """
    The path cannot be used for the requested operation.

    Common causes:
    - The path names the root where a child name is required
    - A directory would be copied into its own subtree

    Example:
        >>> raise InvalidPathError("/a/b", reason="destination inside source")
    """

    strerror = "Invalid argument"

    def __init__(
        self,
        path: str,
        reason: Optional[str] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        ctx = context or {}
        if reason:
            ctx["reason"] = reason
        super().__init__(
            message=f"Invalid path: {path}",
            path=path,
            error_code=4006,
            context=ctx
        )
        self.reason = reason


class IsADirectoryError(FileSystemException):
    """
    Path is a directory where a regular file was expected.

    Example:
        >>> raise IsADirectoryError("/home/guest")
    """

    strerror = "Is a directory"

    def __init__(
        self,
        path: str,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        super().__init__(
            message=f"Is a directory: {path}",
            path=path,
            error_code=4008,
            context=context
        )


class NotADirectoryError(FileSystemException):
    """
    Path is not a directory.

    Raised when a directory operation is attempted on a file, or when
    a parent path component resolves to a file.
    """

    strerror = "Not a directory"

    def __init__(
        self,
        path: str,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        super().__init__(
            message=f"Not a directory: {path}",
            path=path,
            error_code=4009,
            context=context
        )
