"""
Prompt Module

Generates the shell prompt from the session environment and the
current directory.

Author: YSNRFD
Version: 1.0.0
"""

import re
from dataclasses import dataclass
from typing import Callable, Mapping, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from fakeshell.filesystem import VirtualFileSystem


@dataclass(frozen=True)
class PromptContext:
    """Values available to a prompt formatter."""
    user: str
    host: str
    path: str
    is_root: bool

    @property
    def symbol(self) -> str:
        return '#' if self.is_root else '$'


PromptFormatter = Callable[[PromptContext], str]

_PLACEHOLDER = re.compile(
    r'\\u|\$\{user\}'
    r'|\\h|\$\{host\}'
    r'|\\w|\$\{path\}'
    r'|\\W|\$\{shortPath\}'
    r'|\\\$|\$\{promptSymbol\}'
)


def short_path(path: str) -> str:
    """Last segment of a formatted path; ``~`` and ``/`` are kept as-is."""
    if path in ('~', '/'):
        return path
    return path.rstrip('/').rsplit('/', 1)[-1] or '/'


class PromptManager:
    """
    Prompt generator.

    The default prompt is ``user@host:shortpath$ `` (``#`` for root).
    A format string may use either placeholder form:
    - \\u or ${user}: user name
    - \\h or ${host}: host name
    - \\w or ${path}: current path, home shown as ~
    - \\W or ${shortPath}: last segment of the path
    - \\$ or ${promptSymbol}: # for root, $ otherwise

    Example:
        >>> prompt = PromptManager(vfs, env)
        >>> prompt.set_format('[\\u ${shortPath}]\\$ ')
    """

    def __init__(self, vfs: 'VirtualFileSystem', env: Mapping[str, str]):
        self._vfs = vfs
        self._env = env
        self._formatter: PromptFormatter = self._default_formatter

    def set_format(self, template: str) -> None:
        """Use a template string for the prompt."""
        def formatter(ctx: PromptContext) -> str:
            values = {
                'u': ctx.user, 'user': ctx.user,
                'h': ctx.host, 'host': ctx.host,
                'w': ctx.path, 'path': ctx.path,
                'W': short_path(ctx.path), 'shortPath': short_path(ctx.path),
                '$': ctx.symbol, 'promptSymbol': ctx.symbol,
            }

            def replace(match):
                token = match.group(0)
                key = token[1:] if token.startswith('\\') else token[2:-1]
                return values[key]

            return _PLACEHOLDER.sub(replace, template)

        self._formatter = formatter

    def set_formatter(self, formatter: PromptFormatter) -> None:
        """Replace the template mechanism with a custom function."""
        self._formatter = formatter

    def reset(self) -> None:
        """Go back to the default prompt."""
        self._formatter = self._default_formatter

    def context(self) -> PromptContext:
        user = self._env.get('USER', '')
        return PromptContext(
            user=user,
            host=self._env.get('HOSTNAME', ''),
            path=self.format_path(self._vfs.cwd),
            is_root=user == 'root'
        )

    def generate(self) -> str:
        """Generate the current prompt."""
        return self._formatter(self.context())

    def format_path(self, path: str, user: Optional[str] = None) -> str:
        """Replace the ``/home/<user>`` prefix of a path with ``~``."""
        home = f"/home/{user if user is not None else self._env.get('USER', '')}"
        if path == home:
            return '~'
        if path.startswith(home + '/'):
            return '~' + path[len(home):]
        return path

    @staticmethod
    def _default_formatter(ctx: PromptContext) -> str:
        return f"{ctx.user}@{ctx.host}:{short_path(ctx.path)}{ctx.symbol} "
