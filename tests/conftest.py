"""
Shared fixtures for the FileManager tests.
"""

import io
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest

from filemanager.console import Console
from filemanager.filesystem import MemoryFileSystem
from filemanager.terminal import TerminalSession


def make_console(answers: str = '') -> Console:
    """Console reading ``answers`` as user input and capturing all output."""
    return Console(
        stdin=io.StringIO(answers),
        stdout=io.StringIO(),
        stderr=io.StringIO(),
        enable_colors=False,
    )


@pytest.fixture
def fs():
    """A fresh in-memory filesystem."""
    return MemoryFileSystem()


@pytest.fixture
def tree(fs):
    """
    In-memory filesystem holding:

        /t/a/b/          (empty directory)
        /t/a/f.txt
        /other.txt
    """
    fs.mkdir('/t/a/b', parents=True)
    fs.write_file('/t/a/f.txt', b'content')
    fs.write_file('/other.txt', b'other')
    return fs


@pytest.fixture
def make_session(fs):
    """Factory for a TerminalSession on the in-memory filesystem."""
    def factory(answers: str = '') -> TerminalSession:
        return TerminalSession(fs=fs, console=make_console(answers))
    return factory
