#!/usr/bin/env python3
"""
Recursive, interactive and force-aware removal for the ``rm`` command.

Behavior summary:
- Arguments are processed in the order given; a failure on one argument is
  reported and the next one is still processed.
- Root protection is checked for every argument before anything is removed,
  and a single root path aborts the whole invocation.
- Directories are removed depth first, children before their parent.
- Without force the first failure inside a tree aborts the rest of that
  tree. With force failures are swallowed and a final best-effort removal
  of the whole tree is attempted.
- In interactive mode every removal is confirmed, and a non-empty
  directory must be confirmed before it is descended into.
"""

import logging
from typing import List

from .console import Console
from .errors import FileManagerError, RootPathError, TreeDepthError
from .filesystem import FileSystem


logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 512


class Remover:
    """Removes files and directory trees on behalf of one ``rm`` invocation."""

    def __init__(self, fs: FileSystem, console: Console,
                 force: bool = False, interactive: bool = False,
                 recursive: bool = False, verbose: bool = False,
                 preserve_root: bool = True,
                 max_depth: int = DEFAULT_MAX_DEPTH):
        self.fs = fs
        self.console = console
        self.force = force
        # Force always wins over interactive
        self.interactive = interactive and not force
        self.recursive = recursive
        self.verbose = verbose
        self.preserve_root = preserve_root
        self.max_depth = max_depth

    def remove(self, paths: List[str]) -> bool:
        """
        Remove every path in order.

        Returns True if every path was handled without error. Raises
        RootPathError, before touching anything, if root protection is on
        and any path is a filesystem root.
        """
        if self.preserve_root:
            self.check_roots(paths)

        failed = False
        for path in paths:
            if not self._remove_one(path):
                failed = True

        if failed and not self.force:
            self.console.error("rm: some files could not be removed")
        return not failed

    def check_roots(self, paths: List[str]) -> None:
        """Raise RootPathError if any path resolves to a filesystem root."""
        for path in paths:
            if path and self.fs.is_root(path):
                raise RootPathError(path)

    def _report(self, path: str, reason: str) -> None:
        self.console.error(f"rm: cannot remove '{path}': {reason}")

    def _remove_one(self, path: str) -> bool:
        """Handle a single top-level argument. Returns False on error."""
        try:
            if not path or not self.fs.exists(path):
                if self.force:
                    return True
                self._report(path, "No such file or directory")
                return False

            if self.fs.is_dir(path):
                if not self.recursive:
                    self._report(path, "Is a directory")
                    return False
                if self._remove_directory(path) and self.verbose:
                    self.console.message(f"removed directory '{path}'")
            elif self._remove_file(path) and self.verbose:
                self.console.message(f"removed file '{path}'")

        except OSError as e:
            if self.force:
                logger.debug("suppressed error for %s: %s", path, e)
            else:
                self._report(path, e.strerror or str(e))
            return False
        except FileManagerError as e:
            self.console.error(f"rm: {e}")
            return False

        return True

    def _remove_directory(self, path: str) -> bool:
        """Remove a directory tree, falling back to a full sweep when forced."""
        try:
            removed = self._remove_tree(path, 0)
        except (OSError, TreeDepthError):
            if not self.force:
                raise
            logger.debug("error while removing %s", path, exc_info=True)
            removed = False

        if self.force and self.fs.exists(path):
            logger.debug("falling back to full subtree removal of %s", path)
            self.fs.remove_tree(path, ignore_errors=True)
            removed = not self.fs.exists(path)

        return removed

    def _remove_tree(self, path: str, depth: int) -> bool:
        """
        Depth-first removal of a directory.

        Returns True if ``path`` itself was removed, False if it was kept
        because the user declined something or a forced step failed.
        """
        if depth > self.max_depth:
            raise TreeDepthError(path, self.max_depth)

        children = self.fs.listdir(path)
        if not children:
            return self._remove_empty_dir(path)

        if self.interactive and not self.console.confirm(
                f"rm: descend into directory '{path}'?"):
            return False

        kept = False
        for name in children:
            child = self.fs.pathmod.join(path, name)
            try:
                if self.fs.is_dir(child):
                    removed = self._remove_tree(child, depth + 1)
                else:
                    removed = self._remove_file(child)
            except OSError:
                if not self.force:
                    raise
                logger.debug("ignoring error while removing %s", child, exc_info=True)
                removed = False
            if not removed:
                kept = True

        if kept:
            # Something below was kept, so the directory cannot go
            return False

        return self._remove_empty_dir(path)

    def _remove_empty_dir(self, path: str) -> bool:
        if self.interactive and not self.console.confirm(
                f"rm: remove directory '{path}'?"):
            return False
        try:
            self.fs.remove_dir(path)
        except OSError:
            if not self.force:
                raise
            logger.debug("ignoring error while removing %s", path, exc_info=True)
            return False
        logger.debug("removed directory %s", path)
        return True

    def _remove_file(self, path: str) -> bool:
        if self.interactive and not self.console.confirm(
                f"rm: remove file '{path}'?"):
            return False
        self.fs.remove_file(path)
        logger.debug("removed file %s", path)
        return True
