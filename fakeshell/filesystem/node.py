"""
Node Module

Implements the node abstraction for the virtual file system.
Nodes live in an ino-keyed table owned by the filesystem; parent and
child links are ino numbers, never object references.

Author: YSNRFD
Version: 1.0.0
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List


class NodeType(Enum):
    """Types of filesystem nodes."""
    FILE = 'file'
    DIRECTORY = 'directory'


DEFAULT_FILE_PERMISSIONS = '-rw-r--r--'
DEFAULT_DIR_PERMISSIONS = 'drwxr-xr-x'
DEFAULT_OWNER = 'root'
DEFAULT_GROUP = 'root'


@dataclass
class FileStat:
    """Metadata snapshot returned by ``VirtualFileSystem.stat``."""
    node_type: NodeType
    size: int
    created_at: float
    modified_at: float
    permissions: str
    owner: str
    group: str

    @property
    def is_directory(self) -> bool:
        return self.node_type is NodeType.DIRECTORY

    @property
    def is_file(self) -> bool:
        return self.node_type is NodeType.FILE


@dataclass
class Node:
    """
    A file or directory entry.

    The root is the only node with an empty name and no parent.
    Permissions, owner and group are cosmetic.
    """

    ino: int
    node_type: NodeType
    name: str
    parent: Optional[int] = None
    content: str = ''
    children: dict[str, int] = field(default_factory=dict, repr=False)
    created_at: float = field(default_factory=time.time)
    modified_at: float = field(default_factory=time.time)
    permissions: str = ''
    owner: str = DEFAULT_OWNER
    group: str = DEFAULT_GROUP

    def __post_init__(self):
        if not self.permissions:
            self.permissions = (
                DEFAULT_DIR_PERMISSIONS if self.is_directory else DEFAULT_FILE_PERMISSIONS
            )

    @property
    def is_directory(self) -> bool:
        return self.node_type is NodeType.DIRECTORY

    @property
    def is_file(self) -> bool:
        return self.node_type is NodeType.FILE

    @property
    def size(self) -> int:
        """Content length for files, 0 for directories."""
        return len(self.content) if self.is_file else 0

    def touch(self) -> None:
        """Update the modification time."""
        self.modified_at = time.time()

    def set_content(self, content: str) -> None:
        """Replace the file content."""
        if not self.is_file:
            raise ValueError("Not a file")
        self.content = content
        self.touch()

    # Directory operations

    def add_entry(self, name: str, ino: int) -> None:
        """Add a directory entry."""
        if not self.is_directory:
            raise ValueError("Not a directory")

        self.children[name] = ino
        self.touch()

    def remove_entry(self, name: str) -> Optional[int]:
        """Remove a directory entry."""
        if not self.is_directory:
            raise ValueError("Not a directory")

        ino = self.children.pop(name, None)
        if ino is not None:
            self.touch()
        return ino

    def get_entry(self, name: str) -> Optional[int]:
        """Get the ino for a directory entry."""
        if not self.is_directory:
            return None
        return self.children.get(name)

    def list_entries(self) -> List[tuple[str, int]]:
        """List all directory entries."""
        if not self.is_directory:
            return []
        return list(self.children.items())

    def to_stat(self) -> FileStat:
        return FileStat(
            node_type=self.node_type,
            size=self.size,
            created_at=self.created_at,
            modified_at=self.modified_at,
            permissions=self.permissions,
            owner=self.owner,
            group=self.group,
        )
