#!/usr/bin/env python3
"""
Command parser for the FileManager shell.

This module translates a raw input line into a structured ParsedCommand
that the executor can dispatch to a registered handler.

Design Principles:
- Single responsibility: Parse commands, don't execute them
- Two independent steps: tokenize the line, then classify the tokens
- Single left-to-right pass with one token of lookahead, no backtracking
- Testable: Pure functions with predictable outputs
"""

from typing import List, Dict, Set, Optional, Iterable, FrozenSet
from dataclasses import dataclass, field


QUOTE_CHARS = ('"', "'")

# Short options that consume the following token as their value (-m 755)
DEFAULT_VALUE_OPTIONS = frozenset({'m'})


def tokenize(line: str) -> List[str]:
    """
    Split a raw input line into tokens, honoring single and double quotes.

    Unquoted whitespace separates tokens. A quoted section always produces
    its own token, even when empty, so ``rm ""`` has one (empty) argument.
    The other quote character is literal inside quotes. There is no escape
    character. An unterminated quote does not raise; its partial token is
    emitted if non-empty.
    """
    tokens = []
    current = []
    quote = None

    for char in line:
        if quote is not None:
            if char == quote:
                # Closing quote: flush even an empty token
                tokens.append(''.join(current))
                current = []
                quote = None
            else:
                current.append(char)
        elif char in QUOTE_CHARS:
            if current:
                tokens.append(''.join(current))
                current = []
            quote = char
        elif char.isspace():
            if current:
                tokens.append(''.join(current))
                current = []
        else:
            current.append(char)

    if current:
        tokens.append(''.join(current))

    return tokens


def is_option_like(token: str) -> bool:
    """Check if a token is flag/option syntax rather than a positional argument."""
    return len(token) > 1 and token.startswith('-')


@dataclass
class ParsedCommand:
    """
    Represents a single parsed input line.

    Built fresh for every line by the parser and consumed once by the
    executor. Non-empty ``errors`` means the command must not be dispatched.
    """
    command: str = ''
    options: Dict[str, str] = field(default_factory=dict)
    flags: Set[str] = field(default_factory=set)
    arguments: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    def has_flag(self, *names: str) -> bool:
        """Return True if any of the given names was passed as a flag."""
        return any(name in self.flags for name in names)

    def option(self, *names: str, default: Optional[str] = None) -> Optional[str]:
        """Return the value of the first of the given options that is present."""
        for name in names:
            if name in self.options:
                return self.options[name]
        return default

    def __str__(self) -> str:
        parts = [self.command]
        for name in sorted(self.flags):
            parts.append(f"-{name}" if len(name) == 1 else f"--{name}")
        for key, value in self.options.items():
            parts.append(f"--{key}={value}")
        parts.extend(self.arguments)
        return ' '.join(parts)


class CommandParser:
    """
    Parser for FileManager command syntax.

    This parser handles:
    - Short flags (-p) and clusters of short flags (-rf)
    - Short options with a separate value (-m 755) or attached value (-m755)
    - Long flags (--parents) and long options (--mode=755)
    - Positional arguments
    """

    def __init__(self, value_options: Optional[Iterable[str]] = None):
        """Initialize the parser with the short options that take a value."""
        self.value_options: FrozenSet[str] = (
            frozenset(value_options) if value_options is not None
            else DEFAULT_VALUE_OPTIONS
        )

    def parse_line(self, line: str) -> ParsedCommand:
        """Tokenize and parse a raw input line."""
        return self.parse(tokenize(line))

    def parse(self, tokens: List[str]) -> ParsedCommand:
        """
        Parse a token sequence into a ParsedCommand.

        This is the main entry point for parsing. The first token is the
        command name and is lower-cased here, exactly once.
        """
        result = ParsedCommand()

        if not tokens or not tokens[0]:
            result.errors.append("no command provided")
            return result

        result.command = tokens[0].lower()

        i = 1
        while i < len(tokens):
            token = tokens[i]
            next_token = tokens[i + 1] if i + 1 < len(tokens) else None

            if not is_option_like(token):
                result.arguments.append(token)
            elif token.startswith('--'):
                self._parse_long(token, result)
            elif self._consume_short(token, next_token, result):
                # The following token was used as this option's value
                i += 1
            i += 1

        return result

    def _parse_long(self, token: str, result: ParsedCommand) -> None:
        """Parse --name and --name=value."""
        body = token[2:]
        name, sep, value = body.partition('=')

        if not name:
            result.errors.append(f"invalid option '{token}'")
        elif sep:
            result.options[name] = value
        else:
            result.flags.add(name)

    def _consume_short(self, token: str, next_token: Optional[str],
                       result: ParsedCommand) -> bool:
        """
        Parse a single-dash token.

        Returns True if ``next_token`` was consumed as a value.
        """
        body = token[1:]
        has_value = next_token is not None and not is_option_like(next_token)

        if body.isalpha():
            # -x or a cluster -xyz; only the last letter may take a value
            for char in body[:-1]:
                result.flags.add(char)
            last = body[-1]
            if last in self.value_options and has_value:
                result.options[last] = next_token
                return True
            result.flags.add(last)
            return False

        if body[0] in self.value_options:
            # Attached value: -m755
            result.options[body[0]] = body[1:]
            return False

        # Anything else (-5, -x.y): generic key with optional separate value
        if has_value:
            result.options[body] = next_token
            return True
        result.flags.add(body)
        return False
