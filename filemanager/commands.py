#!/usr/bin/env python3
"""
Command handlers for the FileManager shell.

Every handler takes a ParsedCommand, reports through the Console and works
on the FileSystem it was given. Usage problems are raised as UsageError,
other shell-level failures as FileManagerError; the executor turns both
into messages. Per-path filesystem failures are reported by the handler
itself so the remaining paths are still processed.

The handler docstrings double as the text shown by ``help``.
"""

import logging
from datetime import datetime
from typing import Dict, List, Optional

from .command_parser import ParsedCommand
from .console import Console
from .errors import FileManagerError, UsageError
from .filesystem import EntryStat, EntryType, FileSystem
from .registry import CommandRegistry
from .remover import DEFAULT_MAX_DEPTH, Remover


logger = logging.getLogger(__name__)

COMMANDS = ('pwd', 'ld', 'cd', 'mkdir', 'touch', 'rm', 'help')

TYPE_MARKERS = {
    EntryType.DIRECTORY: '/',
    EntryType.SYMLINK: '@',
}
DEFAULT_MARKER = '*'

SIZE_UNITS = ('B', 'KB', 'MB', 'GB')
NOT_AVAILABLE = 'N/A'


def extract_docstring_sections(docstring: Optional[str]) -> dict:
    """Extract structured sections from a handler docstring."""
    sections = {
        'description': '',
        'usage': '',
        'options': [],
        'examples': []
    }
    if not docstring:
        return sections

    lines = docstring.strip().split('\n')

    # First line is always the description
    sections['description'] = lines[0].strip()

    current_section = None
    for line in lines[1:]:
        line = line.strip()
        if line.startswith('Usage:'):
            current_section = 'usage'
        elif line.startswith('Options:'):
            current_section = 'options'
        elif line.startswith('Examples:'):
            current_section = 'examples'
        elif line and current_section == 'usage':
            sections['usage'] = line
        elif line and current_section:
            sections[current_section].append(line)

    return sections


def format_mode(mode: int) -> str:
    """Format mode bits as an ls-style type and rwx string."""
    if mode & 0o170000 == 0o040000:
        result = 'd'
    elif mode & 0o170000 == 0o120000:
        result = 'l'
    else:
        result = '-'

    for shift in (6, 3, 0):
        bits = (mode >> shift) & 0o7
        result += 'r' if bits & 0o4 else '-'
        result += 'w' if bits & 0o2 else '-'
        result += 'x' if bits & 0o1 else '-'

    return result


def format_size(size: int) -> str:
    """Format a byte count as B, KB, MB or GB, truncating to an integer."""
    for unit in SIZE_UNITS[:-1]:
        if size < 1024:
            return f"{size}{unit}"
        size //= 1024
    return f"{size}{SIZE_UNITS[-1]}"


def format_mtime(mtime: Optional[float]) -> str:
    if mtime is None:
        return NOT_AVAILABLE
    try:
        return datetime.fromtimestamp(mtime).strftime('%Y-%m-%d %H:%M:%S')
    except (OverflowError, OSError, ValueError):
        return NOT_AVAILABLE


def _reason(error: OSError) -> str:
    return error.strerror or str(error)


class FileCommands:
    """
    The built-in FileManager commands.

    Bind an instance to a registry with register_all(); each public command
    method then becomes the handler of the command with the same name.
    """

    def __init__(self, fs: FileSystem, console: Console,
                 registry: Optional[CommandRegistry] = None,
                 max_depth: int = DEFAULT_MAX_DEPTH):
        self.fs = fs
        self.console = console
        self.registry = registry
        self.max_depth = max_depth

    def register_all(self, registry: CommandRegistry) -> CommandRegistry:
        """Register every built-in command with its usage line."""
        self.registry = registry
        for name in COMMANDS:
            handler = getattr(self, name)
            usage = extract_docstring_sections(handler.__doc__)['usage']
            registry.register(name, handler, usage)
        return registry

    # Navigation

    def pwd(self, cmd: ParsedCommand) -> None:
        """Print working directory.

        Usage:
            pwd

        Examples:
            pwd                    # Show the absolute current directory
        """
        self.console.message(self.fs.getcwd())

    def cd(self, cmd: ParsedCommand) -> None:
        """Change the current directory.

        Usage:
            cd PATH

        Options:
            PATH                   Directory to change to

        Examples:
            cd projects            # Enter a subdirectory
            cd ..                  # Go to the parent directory
            cd "My Documents"      # Quote names containing spaces
        """
        if not cmd.arguments:
            raise UsageError("missing operand")

        path = cmd.arguments[0]
        try:
            self.fs.chdir(path)
        except OSError as e:
            raise FileManagerError(f"{path}: {_reason(e)}")
        logger.debug("cwd is now %s", self.fs.getcwd())

    def ld(self, cmd: ParsedCommand) -> None:
        """List directory contents.

        Usage:
            ld [OPTIONS] [PATH]

        Options:
            -a, --all              Show hidden entries (starting with .)
            -l, --long             Show permissions, size and modification time
            PATH                   Directory to list (default: current)

        Examples:
            ld                     # '/' marks directories, '@' links, '*' files
            ld -l                  # Long listing
            ld -a ..               # Everything in the parent directory
        """
        target = cmd.arguments[0] if cmd.arguments else '.'
        show_all = cmd.has_flag('a', 'all')
        long_format = cmd.has_flag('l', 'long')

        try:
            names = self.fs.listdir(target)
        except OSError as e:
            raise FileManagerError(f"cannot access '{target}': {_reason(e)}")

        for name in names:
            if name.startswith('.') and not show_all:
                continue

            try:
                entry = self.fs.stat(self.fs.pathmod.join(target, name))
            except OSError:
                entry = None

            marker = TYPE_MARKERS.get(entry.type, DEFAULT_MARKER) if entry else DEFAULT_MARKER
            if long_format:
                self.console.message(self._long_line(marker + name, entry))
            else:
                self.console.message(marker + name)

    def _long_line(self, label: str, entry: Optional[EntryStat]) -> str:
        if entry is None:
            return f"{'?' * 10}  {NOT_AVAILABLE:>8}  {NOT_AVAILABLE:<19}  {label}"

        if entry.type is EntryType.FILE and entry.size is not None:
            size = format_size(entry.size)
        else:
            size = NOT_AVAILABLE
        return f"{format_mode(entry.mode)}  {size:>8}  {format_mtime(entry.mtime):<19}  {label}"

    # File operations

    def mkdir(self, cmd: ParsedCommand) -> bool:
        """Create directories.

        Usage:
            mkdir [OPTIONS] DIRECTORY...

        Options:
            -p, --parents          Create parent directories as needed, no error if existing
            -m, --mode=MODE        Set the permission bits (octal, e.g. 750)
            -v, --verbose          Print a message for each created directory

        Examples:
            mkdir photos           # Create a directory
            mkdir -p a/b/c         # Create nested directories
            mkdir -m 700 private   # Create with restricted permissions
        """
        if not cmd.arguments:
            raise UsageError("missing operand")

        mode = self._parse_mode(cmd)
        parents = cmd.has_flag('p', 'parents')
        verbose = cmd.has_flag('v', 'verbose')

        ok = True
        for path in cmd.arguments:
            try:
                existed = parents and self.fs.is_dir(path)
                self.fs.mkdir(path, mode=mode, parents=parents)
            except OSError as e:
                self.console.error(f"mkdir: cannot create directory '{path}': {_reason(e)}")
                ok = False
                continue
            if verbose and not existed:
                self.console.message(f"created directory '{path}'")
        return ok

    def _parse_mode(self, cmd: ParsedCommand) -> Optional[int]:
        value = cmd.option('m', 'mode')
        if value is None:
            if cmd.has_flag('m', 'mode'):
                raise UsageError("option requires an argument -- 'mode'")
            return None

        try:
            mode = int(value, 8)
        except ValueError:
            raise UsageError(f"invalid mode '{value}'")
        if not 0 <= mode <= 0o7777:
            raise UsageError(f"invalid mode '{value}'")
        return mode

    def touch(self, cmd: ParsedCommand) -> bool:
        """Create empty files.

        Usage:
            touch [OPTIONS] FILE...

        Options:
            -f, --force            Truncate existing files without asking
            -i, --interactive      Ask before truncating an existing file
            -v, --verbose          Print a message for each created or rewritten file

        Examples:
            touch notes.txt        # Create an empty file
            touch -i notes.txt     # Ask before emptying an existing file
            touch -f log.txt       # Empty an existing file
        """
        if not cmd.arguments:
            raise UsageError("missing operand")

        force = cmd.has_flag('f', 'force')
        interactive = cmd.has_flag('i', 'interactive') and not force
        verbose = cmd.has_flag('v', 'verbose')

        ok = True
        for path in cmd.arguments:
            try:
                if not self.fs.exists(path):
                    self.fs.create_file(path)
                    if verbose:
                        self.console.message(f"created file '{path}'")
                    continue

                if not force:
                    self.console.warning(f"touch: file '{path}' already exists")
                    if not interactive or not self.console.confirm(f"touch: overwrite '{path}'?"):
                        continue

                self.fs.create_file(path)
                if verbose:
                    self.console.message(f"rewrote file '{path}'")
            except OSError as e:
                self.console.error(f"touch: cannot touch '{path}': {_reason(e)}")
                ok = False
        return ok

    def rm(self, cmd: ParsedCommand) -> bool:
        """Remove files or directories.

        Usage:
            rm [OPTIONS] FILE...

        Options:
            -r, -R, --recursive    Remove directories and their contents
            -f, --force            Ignore missing files, never ask
            -i, --interactive      Ask before every removal
            -v, --verbose          Print a message for each removed argument
            --no-preserve-root     Allow removing a filesystem root

        Examples:
            rm notes.txt           # Remove a file
            rm -r old_project      # Remove a directory tree
            rm -ri downloads       # Confirm every step
            rm -rf build           # Remove without questions
        """
        if not cmd.arguments:
            raise UsageError("missing operand")

        # Root protection stays on if both forms are given
        preserve_root = cmd.has_flag('preserve-root') or not cmd.has_flag('no-preserve-root')

        remover = Remover(
            self.fs, self.console,
            force=cmd.has_flag('f', 'force'),
            interactive=cmd.has_flag('i', 'interactive'),
            recursive=cmd.has_flag('r', 'R', 'recursive'),
            verbose=cmd.has_flag('v', 'verbose'),
            preserve_root=preserve_root,
            max_depth=self.max_depth,
        )
        return remover.remove(cmd.arguments)

    # Help

    def help(self, cmd: ParsedCommand) -> None:
        """Show help for commands.

        Usage:
            help [COMMAND]

        Options:
            COMMAND                Command to get help for

        Examples:
            help                   # List all commands
            help rm                # Show help for rm
        """
        if self.registry is None:
            raise FileManagerError("no commands registered")

        if cmd.arguments:
            self.console.message(self._command_help(cmd.arguments[0].lower()))
        else:
            self.console.message(self._all_commands_help())

    def _command_help(self, name: str) -> str:
        handler = self.registry.get(name)
        if handler is None:
            raise FileManagerError(f"no help available for '{name}'")

        docstring = getattr(handler, '__doc__', None)
        if not docstring:
            return f"{name} - No documentation available"

        sections = extract_docstring_sections(docstring)
        help_lines = [f"{name} - {sections['description']}", ""]

        if sections['usage']:
            help_lines.append("Usage:")
            help_lines.append(f"    {sections['usage']}")
            help_lines.append("")

        if sections['options']:
            help_lines.append("Options:")
            for opt in sections['options']:
                help_lines.append(f"    {opt}")
            help_lines.append("")

        if sections['examples']:
            help_lines.append("Examples:")
            for ex in sections['examples']:
                help_lines.append(f"    {ex}")
            help_lines.append("")

        return '\n'.join(help_lines).rstrip()

    def _all_commands_help(self) -> str:
        descriptions: Dict[str, str] = {}
        for name in self.registry.names():
            doc = getattr(self.registry.get(name), '__doc__', None)
            descriptions[name] = extract_docstring_sections(doc)['description']

        help_lines: List[str] = ["Available commands:"]
        for name, description in descriptions.items():
            help_lines.append(f"  {name:<10} {description}")
        help_lines.append(f"  {'exit':<10} Leave FileManager")
        help_lines.append("")
        help_lines.append("Type 'help COMMAND' for detailed help on a specific command.")
        return '\n'.join(help_lines)
