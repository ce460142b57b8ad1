"""
FileManager - An interactive shell for basic filesystem operations

This package provides a line-oriented command prompt with pwd, ld, cd,
mkdir, touch and rm, built from a quote-aware tokenizer, a POSIX-style
option parser, a command registry and a pluggable filesystem layer.
"""

__version__ = "0.1.0"

from .command_parser import (
    tokenize,
    ParsedCommand,
    CommandParser,
)

from .registry import (
    CommandRegistry,
)

from .filesystem import (
    FileSystem,
    LocalFileSystem,
    MemoryFileSystem,
    EntryStat,
    EntryType,
    Mode,
)

from .console import (
    Console,
)

from .errors import (
    FileManagerError,
    UsageError,
    RootPathError,
    TreeDepthError,
)

from .remover import (
    Remover,
)

from .commands import (
    FileCommands,
)

from .terminal import (
    TerminalSession,
    TerminalConfig,
    CommandExecutor,
    main,
)

__all__ = [
    # Parsing
    "tokenize",
    "ParsedCommand",
    "CommandParser",

    # Dispatch
    "CommandRegistry",
    "CommandExecutor",

    # Filesystem
    "FileSystem",
    "LocalFileSystem",
    "MemoryFileSystem",
    "EntryStat",
    "EntryType",
    "Mode",

    # Handlers
    "FileCommands",
    "Remover",
    "Console",

    # Errors
    "FileManagerError",
    "UsageError",
    "RootPathError",
    "TreeDepthError",

    # Terminal
    "TerminalSession",
    "TerminalConfig",
    "main",

    # Version info
    "__version__",
]
