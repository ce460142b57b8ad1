"""
Command registry: the table that maps command names to handlers.

A handler is any callable taking a ParsedCommand. The registry is filled
once when the session starts and only read afterwards, but commands can be
registered and unregistered at any time.
"""

import logging
from typing import Callable, Dict, List, Optional

from .command_parser import ParsedCommand


logger = logging.getLogger(__name__)

Handler = Callable[[ParsedCommand], object]


class CommandRegistry:
    """Maps lower-case command names to handler callables."""

    def __init__(self):
        self._handlers: Dict[str, Handler] = {}
        self._usage: Dict[str, str] = {}

    def register(self, name: str, handler: Handler, usage: Optional[str] = None) -> None:
        """Register a handler, replacing any previous one with the same name."""
        name = name.lower()
        if name in self._handlers:
            logger.debug("replacing handler for %r", name)
        self._handlers[name] = handler
        if usage:
            self._usage[name] = usage
        else:
            self._usage.pop(name, None)

    def unregister(self, name: str) -> bool:
        """Remove a command. Returns False if it was not registered."""
        name = name.lower()
        self._usage.pop(name, None)
        return self._handlers.pop(name, None) is not None

    def get(self, name: str) -> Optional[Handler]:
        """Return the handler for a command name, or None."""
        return self._handlers.get(name)

    def usage(self, name: str) -> Optional[str]:
        """Return the one-line usage for a command, if known."""
        return self._usage.get(name)

    def names(self) -> List[str]:
        """Return all registered command names, sorted."""
        return sorted(self._handlers)

    def __contains__(self, name: str) -> bool:
        return name in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)
