"""
Exceptions raised by FileManager command handlers.

Filesystem failures are left as the builtin ``OSError`` subclasses; the
classes here cover the failures that belong to the shell itself.
"""


class FileManagerError(Exception):
    """Base exception class for FileManager errors."""

    pass


class UsageError(FileManagerError):
    """A command was invoked with missing operands or malformed options."""

    pass


class RootPathError(FileManagerError):
    """A destructive operation targeted a filesystem root."""

    def __init__(self, path: str):
        super().__init__(
            f"it is dangerous to operate recursively on '{path}' "
            f"(use --no-preserve-root to override this failsafe)"
        )
        self.path = path


class TreeDepthError(FileManagerError):
    """A directory tree is nested deeper than the configured limit."""

    def __init__(self, path: str, max_depth: int):
        super().__init__(f"directory tree too deep at '{path}' (limit {max_depth})")
        self.path = path
        self.max_depth = max_depth
