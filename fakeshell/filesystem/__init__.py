"""
FakeShell Virtual File System Module

Provides the in-memory file system backing a shell session:
- Hierarchical directory structure
- Ino-keyed node table
- Cosmetic permissions and ownership
- File operations with explicit success results
"""

from .node import Node, NodeType, FileStat
from .path_resolver import PathResolver, ParsedPath
from .vfs import VirtualFileSystem

__all__ = [
    # Node
    'Node',
    'NodeType',
    'FileStat',
    # Path Resolver
    'PathResolver',
    'ParsedPath',
    # VFS
    'VirtualFileSystem',
]
