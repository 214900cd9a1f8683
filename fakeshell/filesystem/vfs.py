"""
Virtual File System (VFS) Module

An in-memory, single-rooted tree of files and directories:
- Ino-keyed node table (parent/child links are ino numbers)
- POSIX-style path resolution relative to a working directory
- File and directory operations with explicit success results

Public operations never raise for user errors. They return ``False``
or ``None`` and keep the underlying ``FileSystemException`` in
``last_error`` until the next operation.

Author: YSNRFD
Version: 1.0.0
"""

from functools import wraps
from typing import Any, Callable, Optional, List

from .node import Node, NodeType, FileStat
from .path_resolver import PathResolver
from fakeshell.core.config_loader import get_config
from fakeshell.exceptions import (
    FileSystemException,
    FileNotFoundError,
    FileExistsError,
    PermissionDeniedError,
    DirectoryNotEmptyError,
    InvalidPathError,
    IsADirectoryError,
    NotADirectoryError,
)
from fakeshell.logger import get_logger


ROOT_INO = 1


def _reports_failure(failure: Any) -> Callable:
    """
    Turn a raising VFS operation into one returning ``failure``.

    The caught exception is stored in ``last_error``; a successful call
    clears it.
    """
    def decorator(func):
        @wraps(func)
        def wrapper(self, *args, **kwargs):
            try:
                result = func(self, *args, **kwargs)
            except FileSystemException as e:
                self._last_error = e
                self._logger.debug(
                    f"{func.__name__} failed: {e.strerror}",
                    context=dict(e.context)
                )
                return failure
            self._last_error = None
            return result
        return wrapper
    return decorator


class VirtualFileSystem:
    """
    Virtual File System.

    Example:
        >>> vfs = VirtualFileSystem()
        >>> vfs.mkdir('/tmp/work')
        True
        >>> vfs.write_file('/tmp/work/a.txt', 'hello')
        True
        >>> vfs.read_file('/tmp/work/a.txt')
        'hello'
    """

    def __init__(
        self,
        home: Optional[str] = None,
        populate_defaults: Optional[bool] = None
    ):
        config = get_config()

        self._logger = get_logger('filesystem')
        self._nodes: dict[int, Node] = {}
        self._next_ino = ROOT_INO + 1
        self._home = PathResolver.normalize('/' + (home or config.shell.home))
        self._cwd = '/'
        self._last_error: Optional[FileSystemException] = None

        self._nodes[ROOT_INO] = Node(
            ino=ROOT_INO,
            node_type=NodeType.DIRECTORY,
            name=''
        )

        if populate_defaults is None:
            populate_defaults = config.filesystem.populate_defaults

        if populate_defaults:
            self._create_standard_layout()

        self._logger.debug(
            "Virtual filesystem initialized",
            context={'home': self._home, 'nodes': len(self._nodes)}
        )

    def _create_standard_layout(self) -> None:
        """Create standard UNIX directories and the sample files."""
        config = get_config()

        for path in ('/bin', '/etc', '/home', '/tmp', '/usr', '/var', '/root', '/proc'):
            self.mkdir(path)

        self._makedirs(self._home)
        self._cwd = self._home

        if config.filesystem.hostname_file:
            self.write_file('/etc/hostname', f"{config.shell.hostname}\n")
        self.write_file('/etc/motd', config.filesystem.motd)
        self.write_file(
            PathResolver.join(self._home, '.bashrc'),
            '# .bashrc\nexport PS1="\\u@\\h:\\w\\$ "\n'
        )
        self.write_file(
            PathResolver.join(self._home, 'readme.txt'),
            'Welcome to the fake terminal!\n\n'
            'Try typing some commands like:\n'
            '  ls, cd, pwd, cat, echo, mkdir, touch, rm\n'
        )

    def _makedirs(self, path: str) -> None:
        """Create ``path`` and any missing parents."""
        current = '/'
        for component in PathResolver.components(path):
            current = PathResolver.join(current, component)
            if not self.exists(current):
                self.mkdir(current)

    @property
    def cwd(self) -> str:
        """Current working directory."""
        return self._cwd

    @property
    def home(self) -> str:
        """Home directory used for ``~``."""
        return self._home

    @property
    def last_error(self) -> Optional[FileSystemException]:
        """Failure reason of the most recent operation, if it failed."""
        return self._last_error

    def _generate_ino(self) -> int:
        ino = self._next_ino
        self._next_ino += 1
        return ino

    def resolve_path(self, path: str) -> str:
        """
        Resolve a path to its normalized absolute form.

        ``''`` and ``~`` resolve to the home directory; relative paths
        are taken from the current working directory.
        """
        return PathResolver.resolve(path, self._cwd, self._home)

    def _walk(self, resolved: str) -> Node:
        """Walk an absolute path from the root, raising on failure."""
        node = self._nodes[ROOT_INO]

        for component in PathResolver.components(resolved):
            if not node.is_directory:
                raise NotADirectoryError(resolved)

            ino = node.get_entry(component)
            if ino is None:
                raise FileNotFoundError(resolved)

            node = self._nodes[ino]

        return node

    def _parent_of(self, resolved: str) -> tuple[Node, str]:
        """Get the parent directory node and child name for a new entry."""
        parent_path, name = PathResolver.split(resolved)

        if not name:
            raise InvalidPathError(resolved, reason="root has no parent")

        parent = self._walk(parent_path)
        if not parent.is_directory:
            raise NotADirectoryError(parent_path)

        return parent, name

    @_reports_failure(None)
    def get_node(self, path: str) -> Optional[Node]:
        """
        Get the node at a path.

        Returns:
            Node or None if any segment is missing or an intermediate
            segment is not a directory
        """
        return self._walk(self.resolve_path(path))

    def exists(self, path: str) -> bool:
        """Check if a path exists."""
        return self.get_node(path) is not None

    def is_directory(self, path: str) -> bool:
        node = self.get_node(path)
        return node is not None and node.is_directory

    def is_file(self, path: str) -> bool:
        node = self.get_node(path)
        return node is not None and node.is_file

    @_reports_failure(None)
    def stat(self, path: str) -> Optional[FileStat]:
        """
        Get metadata for a path.

        Returns:
            FileStat or None if the path does not exist
        """
        return self._walk(self.resolve_path(path)).to_stat()

    def _create_node(self, parent: Node, name: str, node_type: NodeType, content: str = '') -> Node:
        node = Node(
            ino=self._generate_ino(),
            node_type=node_type,
            name=name,
            parent=parent.ino,
            content=content
        )
        self._nodes[node.ino] = node
        parent.add_entry(name, node.ino)
        return node

    @_reports_failure(False)
    def mkdir(self, path: str) -> bool:
        """
        Create a directory.

        Fails if the parent is missing or not a directory, or if an
        entry with that name already exists.
        """
        resolved = self.resolve_path(path)
        parent, name = self._parent_of(resolved)

        if parent.get_entry(name) is not None:
            raise FileExistsError(resolved)

        node = self._create_node(parent, name, NodeType.DIRECTORY)

        self._logger.debug(
            "Created directory",
            context={'path': resolved, 'ino': node.ino}
        )
        return True

    @_reports_failure(False)
    def write_file(self, path: str, content: str) -> bool:
        """
        Create a file or overwrite an existing file's content.

        Fails if the parent is missing or not a directory, or if a
        directory of the same name exists.
        """
        resolved = self.resolve_path(path)
        self._write(resolved, content)
        return True

    def _write(self, resolved: str, content: str) -> Node:
        parent, name = self._parent_of(resolved)

        ino = parent.get_entry(name)
        if ino is None:
            node = self._create_node(parent, name, NodeType.FILE, content)
            self._logger.debug(
                "Created file",
                context={'path': resolved, 'ino': node.ino, 'size': node.size}
            )
            return node

        node = self._nodes[ino]
        if node.is_directory:
            raise IsADirectoryError(resolved)

        node.set_content(content)
        return node

    @_reports_failure(None)
    def read_file(self, path: str) -> Optional[str]:
        """
        Read a file's content.

        Returns:
            The content, or None if the path does not resolve to a file
        """
        resolved = self.resolve_path(path)
        node = self._walk(resolved)

        if node.is_directory:
            raise IsADirectoryError(resolved)

        return node.content

    @_reports_failure(None)
    def readdir(self, path: Optional[str] = None) -> Optional[List[Node]]:
        """
        List the direct children of a directory.

        Args:
            path: Directory path (defaults to the working directory)

        Returns:
            Child nodes in no guaranteed order, or None if the target
            is not a directory
        """
        resolved = self._cwd if path is None else self.resolve_path(path)
        node = self._walk(resolved)

        if not node.is_directory:
            raise NotADirectoryError(resolved)

        return [self._nodes[ino] for _, ino in node.list_entries()]

    @_reports_failure(False)
    def chdir(self, path: str) -> bool:
        """Change the working directory; fails unless the target is a directory."""
        resolved = self.resolve_path(path)
        node = self._walk(resolved)

        if not node.is_directory:
            raise NotADirectoryError(resolved)

        self._cwd = resolved
        return True

    @_reports_failure(False)
    def remove(self, path: str, recursive: bool = False) -> bool:
        """
        Remove a file or directory.

        A non-empty directory is only removed when ``recursive`` is set;
        the whole subtree is then released from the node table.
        """
        self._remove(self.resolve_path(path), recursive)
        return True

    def _remove(self, resolved: str, recursive: bool) -> None:
        if resolved == '/':
            raise PermissionDeniedError(resolved, operation="remove")

        node = self._walk(resolved)

        if node.is_directory and node.children and not recursive:
            raise DirectoryNotEmptyError(resolved)

        parent = self._nodes[node.parent]
        parent.remove_entry(node.name)
        released = self._release(node)

        self._logger.debug(
            "Removed",
            context={'path': resolved, 'released': released}
        )

    def _release(self, node: Node) -> int:
        """Drop a detached node and all of its descendants from the table."""
        released = 0
        pending = [node.ino]

        while pending:
            ino = pending.pop()
            current = self._nodes.pop(ino)
            released += 1
            if current.is_directory:
                pending.extend(current.children.values())
                current.children.clear()

        return released

    @_reports_failure(False)
    def copy(self, src: str, dest: str, recursive: bool = False) -> bool:
        """
        Copy a file, or a directory tree when ``recursive`` is set.

        If ``dest`` is an existing directory the source is copied into
        it under its own name.
        """
        self._copy(self.resolve_path(src), self.resolve_path(dest), recursive)
        return True

    def _copy_target(self, src_resolved: str, dest_resolved: str) -> str:
        """Work out where a copy or move of ``src`` into ``dest`` lands."""
        dest_node = self.get_node(dest_resolved)
        if dest_node is not None and dest_node.is_directory:
            dest_resolved = PathResolver.join(dest_resolved, PathResolver.basename(src_resolved))

        if dest_resolved == src_resolved:
            raise InvalidPathError(dest_resolved, reason="source and destination are the same")

        return dest_resolved

    def _copy(self, src_resolved: str, dest_resolved: str, recursive: bool) -> str:
        source = self._walk(src_resolved)

        if source.is_directory and not recursive:
            raise IsADirectoryError(src_resolved)

        target = self._copy_target(src_resolved, dest_resolved)

        if source.is_directory and PathResolver.is_within(target, src_resolved):
            raise InvalidPathError(target, reason="destination inside source")

        if source.is_file:
            node = self._write(target, source.content)
            node.permissions = source.permissions
        else:
            self._copy_tree(source, target)

        self._logger.debug(
            "Copied",
            context={'src': src_resolved, 'dest': target}
        )
        return target

    def _copy_tree(self, source: Node, target: str) -> None:
        parent, name = self._parent_of(target)

        ino = parent.get_entry(name)
        if ino is None:
            directory = self._create_node(parent, name, NodeType.DIRECTORY)
        else:
            directory = self._nodes[ino]
            if not directory.is_directory:
                raise NotADirectoryError(target)
        directory.permissions = source.permissions

        for child_name, child_ino in list(source.children.items()):
            child = self._nodes[child_ino]
            child_target = PathResolver.join(target, child_name)
            if child.is_directory:
                self._copy_tree(child, child_target)
            else:
                node = self._write(child_target, child.content)
                node.permissions = child.permissions

    @_reports_failure(False)
    def move(self, src: str, dest: str) -> bool:
        """
        Move or rename a file or directory.

        Implemented as a recursive copy followed by removal of the
        source. Not atomic: if removing the source fails, the copy at
        the destination is left in place.
        """
        src_resolved = self.resolve_path(src)
        self._copy(src_resolved, self.resolve_path(dest), recursive=True)
        self._remove(src_resolved, recursive=True)
        return True

    def get_stats(self) -> dict[str, Any]:
        """Get filesystem statistics."""
        files = [n for n in self._nodes.values() if n.is_file]
        return {
            'total_nodes': len(self._nodes),
            'files': len(files),
            'directories': len(self._nodes) - len(files),
            'total_size': sum(n.size for n in files),
        }
