"""
Command Parser Module

Parses shell command lines into a command name, positional
arguments and a flag set.

Author: YSNRFD
Version: 1.0.0
"""

import re
from dataclasses import dataclass, field
from typing import Mapping, List, Set, Tuple


@dataclass
class ParsedCommand:
    """A parsed command line."""
    command: str
    args: List[str] = field(default_factory=list)
    flags: Set[str] = field(default_factory=set)
    tokens: List[str] = field(default_factory=list)


class CommandParser:
    """
    Parses shell command lines.

    Handles:
    - Command and arguments
    - Quoted strings (whitespace and the other quote are literal inside)
    - Backslash escapes, inside quotes as well
    - Long (--name) and bundled short (-xyz) flags

    Unterminated quotes and a trailing backslash never fail; the quote
    runs to the end of the line.

    Example:
        >>> parser = CommandParser()
        >>> cmd = parser.parse('rm -rf "/tmp/my dir"')
        >>> cmd.args
        ['/tmp/my dir']
    """

    def parse(self, line: str) -> ParsedCommand:
        """
        Parse a command line.

        Args:
            line: Command line string

        Returns:
            ParsedCommand; ``command`` is empty for a blank line
        """
        tokens = self.tokenize(line)

        if not tokens:
            return ParsedCommand(command="")

        cmd = ParsedCommand(command=tokens[0], tokens=tokens)

        for token in tokens[1:]:
            if token.startswith('--') and len(token) > 2:
                cmd.flags.add(token[2:])
            elif token.startswith('-') and len(token) > 1 and token != '--':
                cmd.flags.update(token[1:])
            else:
                cmd.args.append(token)

        return cmd

    def tokenize(self, line: str) -> List[str]:
        """Convert a line into word tokens."""
        return [text for _, text in self.scan(line)]

    def scan(self, line: str) -> List[Tuple[int, str]]:
        """
        Split a line into tokens along with where each starts in ``line``.

        Example:
            >>> CommandParser().scan('cd "my dir"')
            [(0, 'cd'), (3, 'my dir')]
        """
        tokens = []
        current = ""
        start = 0
        in_token = False
        in_quote = None
        escaped = False

        for i, char in enumerate(line):
            if escaped:
                current += char
                escaped = False
                continue

            if not in_token and not char.isspace():
                start = i

            # Handle escape
            if char == '\\':
                escaped = True
                in_token = True
                continue

            # Handle quotes
            if char in ('"', "'"):
                if in_quote is None:
                    in_quote = char
                    in_token = True
                    continue
                if char == in_quote:
                    in_quote = None
                    continue

            # Handle whitespace
            if char.isspace() and in_quote is None:
                if in_token:
                    tokens.append((start, current))
                    current = ""
                    in_token = False
                continue

            # Regular character
            current += char
            in_token = True

        # Don't forget last token
        if in_token:
            tokens.append((start, current))

        return tokens


_VARIABLE_PATTERN = re.compile(r'\$(?:\{(\w+)\}|(\w+))')


def expand_variables(text: str, env: Mapping[str, str]) -> str:
    """
    Expand ``$VAR`` and ``${VAR}`` references in text.

    Unknown variables expand to the empty string.
    """
    def replace_var(match):
        name = match.group(1) or match.group(2)
        return env.get(name, '')

    return _VARIABLE_PATTERN.sub(replace_var, text)
