"""
Path Resolver Module

Handles path resolution and manipulation in the virtual file system.
Resolution is lenient: ``..`` above the root stays at the root and
never raises.

Author: YSNRFD
Version: 1.0.0
"""

from dataclasses import dataclass
from typing import List, Tuple


@dataclass
class ParsedPath:
    """A parsed path with its components."""
    is_absolute: bool
    components: List[str]


class PathResolver:
    """
    Resolves and manipulates filesystem paths.

    Handles:
    - Absolute and relative paths
    - ``~`` and ``~/...`` home references
    - . and .. components
    - Path normalization
    """

    @staticmethod
    def parse(path: str) -> ParsedPath:
        """
        Parse a path into components.

        Empty components and ``.`` are dropped.
        """
        is_absolute = path.startswith('/')
        components = [c for c in path.split('/') if c and c != '.']
        return ParsedPath(is_absolute=is_absolute, components=components)

    @staticmethod
    def normalize(path: str) -> str:
        """
        Normalize a path by resolving . and ..

        Args:
            path: Path to normalize

        Returns:
            Normalized path string
        """
        parsed = PathResolver.parse(path)

        result: List[str] = []

        for component in parsed.components:
            if component == '..':
                if result:
                    result.pop()
            else:
                result.append(component)

        if parsed.is_absolute:
            return '/' + '/'.join(result)
        return '/'.join(result) if result else '.'

    @staticmethod
    def join(*paths: str) -> str:
        """
        Join multiple path components.

        A later absolute component replaces everything before it.
        """
        if not paths:
            return '.'

        result = paths[0]

        for path in paths[1:]:
            if path.startswith('/'):
                result = path
            else:
                result = result.rstrip('/') + '/' + path

        return PathResolver.normalize(result)

    @staticmethod
    def resolve(path: str, cwd: str = '/', home: str = '/') -> str:
        """
        Resolve a path to an absolute, normalized path.

        Args:
            path: Path to resolve
            cwd: Current working directory
            home: Home directory used for ``''``, ``~`` and ``~/...``

        Returns:
            Absolute resolved path
        """
        if not path or path == '~':
            return PathResolver.normalize('/' + home)

        if path.startswith('~/'):
            return PathResolver.normalize(home.rstrip('/') + '/' + path[2:])

        if path.startswith('/'):
            return PathResolver.normalize(path)

        combined = cwd.rstrip('/') + '/' + path
        return PathResolver.normalize('/' + combined)

    @staticmethod
    def dirname(path: str) -> str:
        """Get the directory name of a path."""
        normalized = PathResolver.normalize(path)

        if '/' not in normalized:
            return '.'

        if normalized == '/':
            return '/'

        return normalized.rsplit('/', 1)[0] or '/'

    @staticmethod
    def basename(path: str) -> str:
        """Get the base name of a path."""
        normalized = PathResolver.normalize(path)

        if normalized == '/':
            return ''

        if '/' not in normalized:
            return normalized

        return normalized.rsplit('/', 1)[1]

    @staticmethod
    def split(path: str) -> Tuple[str, str]:
        """
        Split a path into directory and base name.

        Returns:
            Tuple of (dirname, basename); the root splits into ('/', '')
        """
        return (PathResolver.dirname(path), PathResolver.basename(path))

    @staticmethod
    def is_within(path: str, ancestor: str) -> bool:
        """Check whether ``path`` equals ``ancestor`` or lies below it."""
        path = PathResolver.normalize(path)
        ancestor = PathResolver.normalize(ancestor)
        if ancestor == '/':
            return path.startswith('/')
        return path == ancestor or path.startswith(ancestor + '/')

    @staticmethod
    def components(path: str) -> List[str]:
        """Get the components of a normalized absolute path."""
        return [c for c in PathResolver.normalize(path).split('/') if c]
