#!/usr/bin/env python3
"""
Filesystem capability used by the FileManager command handlers.

Handlers never touch ``os`` directly. They go through a FileSystem object,
which also owns the current working directory, so the same handlers run
against the real disk (LocalFileSystem) or an in-memory tree
(MemoryFileSystem) without mutating process state.

Both backends report failures with the builtin OSError subclasses
(FileNotFoundError, FileExistsError, NotADirectoryError, ...).
"""

import errno
import os
import posixpath
import shutil
import stat as stat_module
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Dict, List, Optional


MAX_SYMLINK_HOPS = 40


class Mode(IntEnum):
    """Unix-style file type and permission bits."""
    # File types
    IFMT = 0o170000
    IFREG = 0o100000  # regular file
    IFDIR = 0o040000  # directory
    IFLNK = 0o120000  # symbolic link

    # Permissions
    IWUSR = 0o200  # owner write
    PERMS = 0o7777

    # Common combinations
    FILE_DEFAULT = IFREG | 0o644
    DIR_DEFAULT = IFDIR | 0o755
    LINK_DEFAULT = IFLNK | 0o777


class EntryType(Enum):
    """Kind of a directory entry, as seen without following symlinks."""
    FILE = 'file'
    DIRECTORY = 'dir'
    SYMLINK = 'symlink'
    OTHER = 'other'


@dataclass(frozen=True)
class EntryStat:
    """Metadata for a single path (lstat semantics)."""
    type: EntryType
    mode: int
    size: Optional[int] = None
    mtime: Optional[float] = None

    def is_dir(self) -> bool:
        return self.type is EntryType.DIRECTORY

    def is_symlink(self) -> bool:
        return self.type is EntryType.SYMLINK


def _os_error(cls, code: int, path: str) -> OSError:
    return cls(code, os.strerror(code), path)


class FileSystem(ABC):
    """
    Abstract interface for the filesystem operations the shell needs.

    Relative paths are resolved against the filesystem's own current
    directory, see getcwd() and chdir().
    """

    pathmod = os.path

    @abstractmethod
    def getcwd(self) -> str:
        """Return the absolute current working directory."""

    @abstractmethod
    def chdir(self, path: str) -> None:
        """Change the current working directory."""

    def abspath(self, path: str) -> str:
        """Make a path absolute and normalize '.' and '..' components."""
        return self.pathmod.normpath(self.pathmod.join(self.getcwd(), path))

    def is_root(self, path: str) -> bool:
        """Check if a path names a filesystem root."""
        absolute = self.abspath(path)
        return self.pathmod.dirname(absolute) == absolute

    @abstractmethod
    def exists(self, path: str) -> bool:
        """Check if a path exists. A dangling symlink exists."""

    @abstractmethod
    def stat(self, path: str) -> EntryStat:
        """Return metadata for a path without following a final symlink."""

    def is_dir(self, path: str) -> bool:
        """Check if a path is a real directory (not a symlink to one)."""
        try:
            return self.stat(path).is_dir()
        except OSError:
            return False

    @abstractmethod
    def listdir(self, path: str) -> List[str]:
        """Return the sorted names of the direct children of a directory."""

    @abstractmethod
    def mkdir(self, path: str, mode: Optional[int] = None, parents: bool = False) -> None:
        """
        Create a directory.

        With ``parents`` missing intermediate directories are created and an
        existing directory is not an error. ``mode`` applies to the last
        component only.
        """

    @abstractmethod
    def chmod(self, path: str, mode: int) -> None:
        """Set the permission bits of a path."""

    @abstractmethod
    def remove_file(self, path: str) -> None:
        """Remove a file or symlink."""

    @abstractmethod
    def remove_dir(self, path: str) -> None:
        """Remove an empty directory."""

    @abstractmethod
    def remove_tree(self, path: str, ignore_errors: bool = False) -> None:
        """Remove a directory and everything below it."""

    @abstractmethod
    def create_file(self, path: str) -> None:
        """Create an empty file, truncating it if it already exists."""


class LocalFileSystem(FileSystem):
    """FileSystem backed by the real disk and the process working directory."""

    pathmod = os.path

    def getcwd(self) -> str:
        return os.getcwd()

    def chdir(self, path: str) -> None:
        os.chdir(path)

    def exists(self, path: str) -> bool:
        return os.path.lexists(path)

    def stat(self, path: str) -> EntryStat:
        st = os.lstat(path)
        if stat_module.S_ISDIR(st.st_mode):
            entry_type = EntryType.DIRECTORY
        elif stat_module.S_ISLNK(st.st_mode):
            entry_type = EntryType.SYMLINK
        elif stat_module.S_ISREG(st.st_mode):
            entry_type = EntryType.FILE
        else:
            entry_type = EntryType.OTHER
        return EntryStat(type=entry_type, mode=st.st_mode,
                         size=st.st_size, mtime=st.st_mtime)

    def listdir(self, path: str) -> List[str]:
        return sorted(os.listdir(path))

    def mkdir(self, path: str, mode: Optional[int] = None, parents: bool = False) -> None:
        if parents:
            existed = os.path.isdir(path)
            os.makedirs(path, exist_ok=True)
            if existed:
                return
        else:
            os.mkdir(path)
        if mode is not None:
            # os.mkdir's mode is filtered by the umask
            os.chmod(path, mode)

    def chmod(self, path: str, mode: int) -> None:
        os.chmod(path, mode)

    def remove_file(self, path: str) -> None:
        os.unlink(path)

    def remove_dir(self, path: str) -> None:
        os.rmdir(path)

    def remove_tree(self, path: str, ignore_errors: bool = False) -> None:
        shutil.rmtree(path, ignore_errors=ignore_errors)

    def create_file(self, path: str) -> None:
        with open(path, 'wb'):
            pass


@dataclass
class Node:
    """A file, directory or symlink in a MemoryFileSystem."""
    mode: int
    mtime: float = field(default_factory=time.time)
    content: bytes = b''
    target: Optional[str] = None

    def file_type(self) -> int:
        return self.mode & Mode.IFMT

    def is_dir(self) -> bool:
        return self.file_type() == Mode.IFDIR

    def is_symlink(self) -> bool:
        return self.file_type() == Mode.IFLNK

    def is_writable(self) -> bool:
        return bool(self.mode & Mode.IWUSR)


class MemoryFileSystem(FileSystem):
    """
    In-memory POSIX filesystem.

    Nodes are indexed by normalized absolute path. Creating or removing an
    entry requires the owner write bit on its parent directory, which makes
    permission failures reproducible without touching the real disk.
    """

    pathmod = posixpath

    def __init__(self):
        # Path index: absolute path -> node
        self.nodes: Dict[str, Node] = {'/': Node(mode=Mode.DIR_DEFAULT)}
        self._cwd = '/'

    # Path handling

    def abspath(self, path: str) -> str:
        if not path.startswith('/'):
            path = f'{self._cwd}/{path}'

        normalized = []
        for part in path.split('/'):
            if part == '' or part == '.':
                continue
            elif part == '..':
                if normalized:
                    normalized.pop()
            else:
                normalized.append(part)

        return '/' + '/'.join(normalized)

    def _resolve(self, path: str, follow_last: bool = True, hops: int = 0) -> str:
        """Resolve symlinks in a path, optionally leaving the last component."""
        parts = [part for part in self.abspath(path).split('/') if part]
        current = '/'

        for index, part in enumerate(parts):
            candidate = posixpath.join(current, part)
            node = self.nodes.get(candidate)
            is_last = index == len(parts) - 1
            if node is not None and node.is_symlink() and (follow_last or not is_last):
                hops += 1
                if hops > MAX_SYMLINK_HOPS:
                    raise _os_error(OSError, errno.ELOOP, path)
                candidate = self._resolve(posixpath.join(current, node.target), True, hops)
            current = candidate

        return current

    def _lookup(self, path: str, follow_last: bool = True) -> Optional[Node]:
        if not path:
            return None
        return self.nodes.get(self._resolve(path, follow_last))

    def _require(self, path: str, follow_last: bool = True) -> Node:
        node = self._lookup(path, follow_last)
        if node is None:
            raise _os_error(FileNotFoundError, errno.ENOENT, path)
        return node

    def _parent_for_write(self, resolved: str, path: str) -> Node:
        """Return the parent directory of a new/removed entry, checking access."""
        parent = self.nodes.get(posixpath.dirname(resolved))
        if parent is None:
            raise _os_error(FileNotFoundError, errno.ENOENT, path)
        if not parent.is_dir():
            raise _os_error(NotADirectoryError, errno.ENOTDIR, path)
        if not parent.is_writable():
            raise _os_error(PermissionError, errno.EACCES, path)
        return parent

    def _children(self, resolved: str) -> List[str]:
        return sorted(
            posixpath.basename(p) for p in self.nodes
            if p != '/' and posixpath.dirname(p) == resolved
        )

    # Working directory

    def getcwd(self) -> str:
        return self._cwd

    def chdir(self, path: str) -> None:
        node = self._require(path)
        if not node.is_dir():
            raise _os_error(NotADirectoryError, errno.ENOTDIR, path)
        self._cwd = self._resolve(path)

    # Queries

    def exists(self, path: str) -> bool:
        return self._lookup(path, follow_last=False) is not None

    def stat(self, path: str) -> EntryStat:
        node = self._require(path, follow_last=False)
        if node.is_dir():
            return EntryStat(EntryType.DIRECTORY, node.mode, 0, node.mtime)
        if node.is_symlink():
            return EntryStat(EntryType.SYMLINK, node.mode, len(node.target), node.mtime)
        return EntryStat(EntryType.FILE, node.mode, len(node.content), node.mtime)

    def listdir(self, path: str) -> List[str]:
        node = self._require(path)
        if not node.is_dir():
            raise _os_error(NotADirectoryError, errno.ENOTDIR, path)
        return self._children(self._resolve(path))

    # Mutations

    def mkdir(self, path: str, mode: Optional[int] = None, parents: bool = False) -> None:
        if not path:
            raise _os_error(FileNotFoundError, errno.ENOENT, path)
        resolved = self._resolve(path)
        existing = self.nodes.get(resolved)

        if existing is not None:
            if parents and existing.is_dir():
                return
            raise _os_error(FileExistsError, errno.EEXIST, path)

        parent_path = posixpath.dirname(resolved)
        if parents and parent_path not in self.nodes:
            self.mkdir(parent_path, parents=True)

        self._parent_for_write(resolved, path)
        perms = Mode.DIR_DEFAULT & Mode.PERMS if mode is None else mode & Mode.PERMS
        self.nodes[resolved] = Node(mode=Mode.IFDIR | perms)

    def chmod(self, path: str, mode: int) -> None:
        node = self._require(path)
        node.mode = node.file_type() | (mode & Mode.PERMS)

    def remove_file(self, path: str) -> None:
        node = self._require(path, follow_last=False)
        if node.is_dir():
            raise _os_error(IsADirectoryError, errno.EISDIR, path)
        resolved = self._resolve(path, follow_last=False)
        self._parent_for_write(resolved, path)
        del self.nodes[resolved]

    def remove_dir(self, path: str) -> None:
        node = self._require(path, follow_last=False)
        if not node.is_dir():
            raise _os_error(NotADirectoryError, errno.ENOTDIR, path)
        resolved = self._resolve(path, follow_last=False)
        if resolved == '/':
            raise _os_error(OSError, errno.EBUSY, path)
        if self._children(resolved):
            raise _os_error(OSError, errno.ENOTEMPTY, path)
        self._parent_for_write(resolved, path)
        del self.nodes[resolved]

    def remove_tree(self, path: str, ignore_errors: bool = False) -> None:
        try:
            node = self._require(path, follow_last=False)
            if node.is_symlink():
                raise OSError("Cannot call rmtree on a symbolic link")
            children = self._children(self._resolve(path, follow_last=False))
        except OSError:
            if ignore_errors:
                return
            raise

        for name in children:
            child = posixpath.join(path, name)
            try:
                if self.is_dir(child):
                    self.remove_tree(child, ignore_errors)
                else:
                    self.remove_file(child)
            except OSError:
                if not ignore_errors:
                    raise

        try:
            self.remove_dir(path)
        except OSError:
            if not ignore_errors:
                raise

    def create_file(self, path: str) -> None:
        self.write_file(path, b'')

    # Helpers for seeding and inspecting the tree

    def write_file(self, path: str, content: bytes = b'', mtime: Optional[float] = None) -> None:
        """Create or overwrite a regular file."""
        if isinstance(content, str):
            content = content.encode('utf-8')

        if not path:
            raise _os_error(FileNotFoundError, errno.ENOENT, path)
        resolved = self._resolve(path)
        node = self.nodes.get(resolved)
        if node is not None:
            if node.is_dir():
                raise _os_error(IsADirectoryError, errno.EISDIR, path)
            if not node.is_writable():
                raise _os_error(PermissionError, errno.EACCES, path)
            node.content = content
            node.mtime = mtime if mtime is not None else time.time()
            return

        self._parent_for_write(resolved, path)
        self.nodes[resolved] = Node(mode=Mode.FILE_DEFAULT, content=content,
                                    mtime=mtime if mtime is not None else time.time())

    def read_file(self, path: str) -> bytes:
        """Return the content of a regular file."""
        node = self._require(path)
        if node.is_dir():
            raise _os_error(IsADirectoryError, errno.EISDIR, path)
        return node.content

    def symlink(self, target: str, path: str) -> None:
        """Create a symlink at ``path`` pointing to ``target``."""
        resolved = self._resolve(path, follow_last=False)
        if resolved in self.nodes:
            raise _os_error(FileExistsError, errno.EEXIST, path)
        self._parent_for_write(resolved, path)
        self.nodes[resolved] = Node(mode=Mode.LINK_DEFAULT, target=target)
