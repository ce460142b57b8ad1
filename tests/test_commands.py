#!/usr/bin/env python3
"""
Tests for the built-in command handlers, run through a TerminalSession on
the in-memory filesystem.
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import re

import pytest

from filemanager.commands import (
    extract_docstring_sections, format_mode, format_size, format_mtime, COMMANDS
)


def run(session, *lines):
    for line in lines:
        session.execute_command(line)
    return session.console.stdout.getvalue(), session.console.stderr.getvalue()


class TestPwdAndCd:
    """Test navigation commands."""

    def test_pwd_at_root(self, make_session):
        out, err = run(make_session(), 'pwd')
        assert out == '/\n'
        assert err == ''

    def test_cd_and_pwd(self, fs, make_session):
        fs.mkdir('/home/user', parents=True)
        out, err = run(make_session(), 'cd home', 'cd user', 'pwd', 'cd ..', 'pwd')
        assert out.splitlines() == ['/home/user', '/home']
        assert err == ''

    def test_cd_quoted_name(self, fs, make_session):
        fs.mkdir('/My Documents')
        out, err = run(make_session(), 'cd "My Documents"', 'pwd')
        assert out == '/My Documents\n'

    def test_cd_missing_operand(self, make_session):
        out, err = run(make_session(), 'cd')
        assert 'Error: cd: missing operand' in err
        assert 'Usage: cd PATH' in out

    def test_cd_nonexistent_keeps_directory(self, fs, make_session):
        fs.mkdir('/start')
        session = make_session()
        out, err = run(session, 'cd start', 'cd nowhere')
        assert 'cd: nowhere: No such file or directory' in err
        assert fs.getcwd() == '/start'

    def test_cd_into_file(self, fs, make_session):
        fs.write_file('/file.txt', b'data')
        out, err = run(make_session(), 'cd file.txt')
        assert 'cd: file.txt: Not a directory' in err
        assert fs.getcwd() == '/'

    def test_cd_follows_symlink(self, fs, make_session):
        fs.mkdir('/real')
        fs.symlink('/real', '/alias')
        out, err = run(make_session(), 'cd alias', 'pwd')
        assert out == '/real\n'


class TestLd:
    """Test directory listing."""

    @pytest.fixture
    def listing_fs(self, fs):
        fs.mkdir('/docs')
        fs.write_file('/a.txt', b'hello')
        fs.write_file('/.hidden', b'')
        fs.symlink('/docs', '/link')
        return fs

    def test_default_format(self, listing_fs, make_session):
        out, err = run(make_session(), 'ld')
        assert out.splitlines() == ['*a.txt', '/docs', '@link']
        assert err == ''

    def test_all_shows_hidden(self, listing_fs, make_session):
        out, err = run(make_session(), 'ld -a')
        assert out.splitlines() == ['*.hidden', '*a.txt', '/docs', '@link']

    def test_one_line_per_entry(self, fs, make_session):
        for i in range(7):
            fs.write_file(f'/f{i}')
        out, err = run(make_session(), 'ld')
        assert len(out.splitlines()) == 7

    def test_empty_directory(self, make_session):
        out, err = run(make_session(), 'ld')
        assert out == ''
        assert err == ''

    def test_long_format(self, listing_fs, make_session):
        out, err = run(make_session(), 'ld --long')
        lines = out.splitlines()
        assert len(lines) == 3

        file_line, dir_line, link_line = lines
        assert file_line.startswith('-rw-r--r--')
        assert ' 5B ' in file_line
        assert file_line.endswith('*a.txt')
        assert re.search(r'\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}', file_line)

        assert dir_line.startswith('drwxr-xr-x')
        assert 'N/A' in dir_line
        assert dir_line.endswith('/docs')

        assert link_line.startswith('l')
        assert link_line.endswith('@link')

    def test_path_argument(self, listing_fs, make_session):
        listing_fs.write_file('/docs/readme.md')
        out, err = run(make_session(), 'ld docs')
        assert out.splitlines() == ['*readme.md']

    def test_nonexistent_path(self, make_session):
        out, err = run(make_session(), 'ld missing')
        assert "ld: cannot access 'missing': No such file or directory" in err


class TestMkdir:
    """Test directory creation."""

    def test_create(self, fs, make_session):
        out, err = run(make_session(), 'mkdir photos music')
        assert fs.is_dir('/photos')
        assert fs.is_dir('/music')
        assert out == ''
        assert err == ''

    def test_missing_operand(self, make_session):
        out, err = run(make_session(), 'mkdir')
        assert 'mkdir: missing operand' in err
        assert 'Usage: mkdir [OPTIONS] DIRECTORY...' in out

    def test_parents(self, fs, make_session):
        out, err = run(make_session(), 'mkdir -p -v a/b/c')
        assert fs.is_dir('/a/b/c')
        assert out == "created directory 'a/b/c'\n"

    def test_parents_existing_is_success(self, fs, make_session):
        fs.mkdir('/a')
        out, err = run(make_session(), 'mkdir -p -v a')
        assert err == ''
        assert out == ''

    def test_missing_parent_without_p(self, fs, make_session):
        out, err = run(make_session(), 'mkdir a/b/c')
        assert "mkdir: cannot create directory 'a/b/c': No such file or directory" in err
        assert not fs.exists('/a')

    def test_existing_only_fails_that_path(self, fs, make_session):
        fs.mkdir('/old')
        out, err = run(make_session(), 'mkdir new1 old new2')
        assert "mkdir: cannot create directory 'old': File exists" in err
        assert fs.is_dir('/new1')
        assert fs.is_dir('/new2')

    def test_mode(self, fs, make_session):
        run(make_session(), 'mkdir -m 700 private', 'mkdir --mode=750 shared')
        assert fs.stat('/private').mode & 0o7777 == 0o700
        assert fs.stat('/shared').mode & 0o7777 == 0o750

    def test_attached_mode(self, fs, make_session):
        run(make_session(), 'mkdir -m711 x')
        assert fs.stat('/x').mode & 0o7777 == 0o711

    def test_invalid_mode_creates_nothing(self, fs, make_session):
        out, err = run(make_session(), 'mkdir -m 9z9 a b')
        assert "mkdir: invalid mode '9z9'" in err
        assert not fs.exists('/a')
        assert not fs.exists('/b')

    def test_out_of_range_mode(self, fs, make_session):
        out, err = run(make_session(), 'mkdir -m 77777 a')
        assert "invalid mode '77777'" in err
        assert not fs.exists('/a')

    def test_mode_without_value(self, fs, make_session):
        out, err = run(make_session(), 'mkdir a -m')
        assert 'option requires an argument' in err
        assert not fs.exists('/a')


class TestTouch:
    """Test file creation and the overwrite rules."""

    def test_create(self, fs, make_session):
        out, err = run(make_session(), 'touch -v notes.txt')
        assert fs.read_file('/notes.txt') == b''
        assert out == "created file 'notes.txt'\n"

    def test_missing_operand(self, make_session):
        out, err = run(make_session(), 'touch')
        assert 'touch: missing operand' in err

    def test_existing_without_flags_is_untouched(self, fs, make_session):
        fs.write_file('/notes.txt', b'keep me', mtime=1000.0)
        out, err = run(make_session(), 'touch notes.txt')
        assert "file 'notes.txt' already exists" in err
        assert fs.read_file('/notes.txt') == b'keep me'
        assert fs.stat('/notes.txt').mtime == 1000.0

    def test_interactive_declined(self, fs, make_session):
        fs.write_file('/notes.txt', b'keep me', mtime=1000.0)
        out, err = run(make_session('n\n'), 'touch -i notes.txt')
        assert "touch: overwrite 'notes.txt'? [y/N]" in out
        assert fs.read_file('/notes.txt') == b'keep me'
        assert fs.stat('/notes.txt').mtime == 1000.0

    def test_interactive_accepted(self, fs, make_session):
        fs.write_file('/notes.txt', b'old', mtime=1000.0)
        out, err = run(make_session('y\n'), 'touch -i -v notes.txt')
        assert fs.read_file('/notes.txt') == b''
        assert fs.stat('/notes.txt').mtime != 1000.0
        assert "rewrote file 'notes.txt'" in out

    def test_force_truncates_without_asking(self, fs, make_session):
        fs.write_file('/notes.txt', b'old')
        out, err = run(make_session(), 'touch -f -i notes.txt')
        assert fs.read_file('/notes.txt') == b''
        assert '[y/N]' not in out
        assert err == ''

    def test_missing_directory(self, fs, make_session):
        out, err = run(make_session(), 'touch nowhere/x.txt ok.txt')
        assert "touch: cannot touch 'nowhere/x.txt': No such file or directory" in err
        assert fs.exists('/ok.txt')


class TestRm:
    """Test the rm command through the dispatcher."""

    def test_missing_operand_has_no_effect(self, tree, make_session):
        before = dict(tree.nodes)
        out, err = run(make_session(), 'rm')
        assert 'rm: missing operand' in err
        assert 'Usage: rm [OPTIONS] FILE...' in out
        assert tree.nodes == before

    def test_root_is_protected(self, tree, make_session):
        before = sorted(tree.nodes)
        out, err = run(make_session(), 'rm -r /')
        assert 'rm: it is dangerous to operate recursively on' in err
        assert sorted(tree.nodes) == before

    def test_root_with_other_arguments(self, tree, make_session):
        out, err = run(make_session(), 'rm -rf other.txt /')
        assert tree.exists('/other.txt')

    def test_preserve_root_wins(self, tree, make_session):
        out, err = run(make_session(), 'rm -rf --no-preserve-root --preserve-root /')
        assert 'dangerous' in err
        assert tree.exists('/t')

    def test_rm_rf_tree(self, fs, make_session):
        out, err = run(make_session(), 'mkdir -p t/a/b', 'touch t/a/f.txt', 'rm -rf t')
        assert not fs.exists('/t')
        assert out == ''
        assert err == ''

    def test_upper_case_recursive_flag(self, tree, make_session):
        run(make_session(), 'rm -R t')
        assert not tree.exists('/t')

    def test_long_flags(self, tree, make_session):
        out, err = run(make_session(), 'rm --recursive --verbose t')
        assert not tree.exists('/t')
        assert out == "removed directory 't'\n"

    def test_interactive_session(self, tree, make_session):
        out, err = run(make_session('y\n'), 'rm -i other.txt')
        assert not tree.exists('/other.txt')


class TestHelp:
    """Test the help command."""

    def test_lists_all_commands(self, make_session):
        out, err = run(make_session(), 'help')
        for name in COMMANDS:
            assert f"  {name} " in out
        assert 'exit' in out
        assert err == ''

    def test_command_help(self, make_session):
        out, err = run(make_session(), 'help rm')
        assert out.startswith('rm - Remove files or directories.')
        assert 'Usage:\n    rm [OPTIONS] FILE...' in out
        assert '--no-preserve-root' in out
        assert 'Examples:' in out

    def test_unknown_command_help(self, make_session):
        out, err = run(make_session(), 'help frobnicate')
        assert "help: no help available for 'frobnicate'" in err


class TestFormatting:
    """Test the listing helpers."""

    @pytest.mark.parametrize('size,expected', [
        (0, '0B'),
        (1023, '1023B'),
        (1024, '1KB'),
        (1536, '1KB'),
        (5 * 1024 ** 2 + 10, '5MB'),
        (3 * 1024 ** 3, '3GB'),
        (5000 * 1024 ** 3, '5000GB'),
    ])
    def test_format_size(self, size, expected):
        assert format_size(size) == expected

    def test_format_mode(self):
        assert format_mode(0o040755) == 'drwxr-xr-x'
        assert format_mode(0o100600) == '-rw-------'
        assert format_mode(0o120777) == 'lrwxrwxrwx'

    def test_format_mtime_unknown(self):
        assert format_mtime(None) == 'N/A'
        assert format_mtime(1e20) == 'N/A'

    def test_extract_docstring_sections(self):
        doc = """Do a thing.

        Usage:
            thing [OPTIONS] X

        Options:
            -a                     First
            -b                     Second

        Examples:
            thing x                # Example
        """
        sections = extract_docstring_sections(doc)
        assert sections['description'] == 'Do a thing.'
        assert sections['usage'] == 'thing [OPTIONS] X'
        assert len(sections['options']) == 2
        assert sections['examples'] == ['thing x                # Example']

    def test_extract_empty_docstring(self):
        assert extract_docstring_sections(None)['usage'] == ''
