#!/usr/bin/env python3
"""
Interactive terminal for FileManager.

This module ties the pieces together: it reads lines, parses them, and
dispatches the parsed commands to the handlers in the registry. It keeps
the session alive whatever a handler does.

Design Principles:
- Clean separation between parsing and execution
- Handlers are looked up in a registry, never hard-coded in the loop
- A failing command is reported, never fatal to the session
"""

import argparse
import logging
import os
import sys
from dataclasses import dataclass, field
from typing import FrozenSet, List, Optional

from .command_parser import (
    CommandParser, ParsedCommand, DEFAULT_VALUE_OPTIONS
)
from .commands import FileCommands
from .console import Console
from .errors import FileManagerError, UsageError
from .filesystem import FileSystem, LocalFileSystem
from .registry import CommandRegistry
from .remover import DEFAULT_MAX_DEPTH


logger = logging.getLogger(__name__)

EXIT_COMMAND = 'exit'


@dataclass
class TerminalConfig:
    """Configuration for terminal session."""
    initial_dir: Optional[str] = None
    prompt_format: str = '{cwd_name}> '
    enable_colors: bool = True
    value_options: FrozenSet[str] = field(default_factory=lambda: DEFAULT_VALUE_OPTIONS)
    max_depth: int = DEFAULT_MAX_DEPTH


class CommandExecutor:
    """
    Executes parsed commands by dispatching them to registered handlers.

    Every failure, from parse errors to exceptions escaping a handler, is
    reported on the console and never propagates to the caller.
    """

    def __init__(self, registry: CommandRegistry, console: Console):
        """Initialize with the command table and the console to report to."""
        self.registry = registry
        self.console = console

    def execute(self, parsed: ParsedCommand) -> bool:
        """
        Execute a ParsedCommand.

        Returns True if a handler ran to completion, False if the command
        was rejected or the handler raised.
        """
        if parsed.errors:
            for error in parsed.errors:
                self.console.error(error)
            return False

        name = parsed.command
        handler = self.registry.get(name)
        if handler is None:
            self.console.error(f"unknown command: {name}")
            self.console.message("Type 'help' for available commands")
            return False

        logger.debug("dispatching %s", parsed)
        try:
            handler(parsed)
        except UsageError as e:
            self.console.error(f"{name}: {e}")
            usage = self.registry.usage(name)
            if usage:
                self.console.message(f"Usage: {usage}")
            return False
        except FileManagerError as e:
            self.console.error(f"{name}: {e}")
            return False
        except Exception as e:
            logger.debug("handler for %r raised", name, exc_info=True)
            self.console.error(f"error executing command '{name}': {e}")
            return False

        return True


class TerminalSession:
    """
    Main terminal session manager.

    This class provides the REPL loop and manages the terminal session,
    including prompt display and command execution.
    """

    def __init__(self, config: Optional[TerminalConfig] = None,
                 fs: Optional[FileSystem] = None,
                 console: Optional[Console] = None):
        """Initialize terminal session."""
        self.config = config or TerminalConfig()
        self.fs = fs or LocalFileSystem()
        self.console = console or Console(enable_colors=self.config.enable_colors)
        self.parser = CommandParser(self.config.value_options)
        self.registry = CommandRegistry()
        self.commands = FileCommands(self.fs, self.console, max_depth=self.config.max_depth)
        self.commands.register_all(self.registry)
        self.executor = CommandExecutor(self.registry, self.console)
        self.running = False

        if self.config.initial_dir:
            self.fs.chdir(self.config.initial_dir)

    def get_prompt(self) -> str:
        """Generate the command prompt."""
        cwd = self.fs.getcwd()
        cwd_name = self.fs.pathmod.basename(cwd.rstrip(self.fs.pathmod.sep)) or cwd
        return self.config.prompt_format.format(cwd=cwd, cwd_name=cwd_name)

    def execute_command(self, command_line: str) -> bool:
        """
        Execute one input line.

        Returns False when the line ends the session, True otherwise.
        """
        line = command_line.strip()
        if not line:
            return True

        if line == EXIT_COMMAND:
            return False

        self.executor.execute(self.parser.parse_line(line))
        return True

    def run_interactive(self) -> None:
        """Run the interactive REPL loop."""
        self.running = True

        self.console.message("Welcome to FileManager!")
        self.console.message('To leave enter "exit"')

        while self.running:
            try:
                command_line = self.console.read_line(self.get_prompt())
                if command_line is None:
                    # End of input
                    self.console.message('')
                    break
                if not self.execute_command(command_line):
                    break
            except KeyboardInterrupt:
                self.console.message("^C")
                continue

        self.running = False
        self.console.message("Bye!")

    def run_script(self, script_lines: List[str]) -> None:
        """Run a list of command lines, stopping at 'exit'."""
        for line in script_lines:
            # Skip comments
            if line.strip().startswith('#'):
                continue
            if not self.execute_command(line):
                break


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the FileManager shell."""
    parser = argparse.ArgumentParser(description='FileManager interactive shell')
    parser.add_argument('-c', '--command', help='Execute command and exit')
    parser.add_argument('-d', '--directory', help='Set initial directory')
    parser.add_argument('--no-color', action='store_true', help='Disable colored error output')
    parser.add_argument('--log-level', default=os.environ.get('FILEMANAGER_LOG_LEVEL', 'WARNING'),
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Diagnostic log level (default: WARNING)')
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format='%(asctime)s %(name)s %(levelname)s: %(message)s',
    )

    config = TerminalConfig(
        initial_dir=args.directory,
        enable_colors=not args.no_color,
    )

    try:
        session = TerminalSession(config=config)
    except OSError as e:
        print(f"Error: cannot start in '{args.directory}': {e.strerror or e}", file=sys.stderr)
        return 1

    # Run command or interactive session
    if args.command:
        session.execute_command(args.command)
    else:
        session.run_interactive()
    return 0


if __name__ == '__main__':
    sys.exit(main())
