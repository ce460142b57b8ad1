"""
Console output and confirmation prompts for the FileManager shell.

Handlers report everything through a Console so that tests can capture
output and script the answers to confirmation prompts with in-memory
streams.
"""

import logging
import sys
from typing import Optional, TextIO


logger = logging.getLogger(__name__)

RED = '\033[31m'
YELLOW = '\033[33m'
RESET = '\033[0m'


class Console:
    """Writes messages, warnings and errors, and asks yes/no questions."""

    def __init__(self, stdin: Optional[TextIO] = None,
                 stdout: Optional[TextIO] = None,
                 stderr: Optional[TextIO] = None,
                 enable_colors: bool = True):
        self.stdin = stdin or sys.stdin
        self.stdout = stdout or sys.stdout
        self.stderr = stderr or sys.stderr
        self.enable_colors = enable_colors

    def _colorize(self, text: str, color: str, stream: TextIO) -> str:
        isatty = getattr(stream, 'isatty', None)
        if self.enable_colors and isatty is not None and isatty():
            return f'{color}{text}{RESET}'
        return text

    def message(self, text: str) -> None:
        """Print a normal message."""
        print(text, file=self.stdout)

    def error(self, text: str) -> None:
        """Print an error message."""
        print(self._colorize(f"Error: {text}", RED, self.stderr), file=self.stderr)

    def warning(self, text: str) -> None:
        """Print a warning message."""
        print(self._colorize(f"Warning: {text}", YELLOW, self.stderr), file=self.stderr)

    def read_line(self, prompt: str = '') -> Optional[str]:
        """Show a prompt and read one line. Returns None at end of input."""
        self.stdout.write(prompt)
        self.stdout.flush()
        line = self.stdin.readline()
        if not line:
            return None
        return line.rstrip('\r\n')

    def confirm(self, question: str) -> bool:
        """
        Ask a yes/no question.

        Only an answer starting with 'y' or 'Y' counts as yes; an empty line
        or end of input is a no.
        """
        answer = self.read_line(f"{question} [y/N] ")
        confirmed = bool(answer) and answer[0] in ('y', 'Y')
        logger.debug("confirm %r -> %r (%s)", question, answer, confirmed)
        return confirmed
