#!/usr/bin/env python3
"""
FakeShell Unit Tests

Test suite for the individual FakeShell components.

Run with: python -m pytest fakeshell/tests/unit_tests.py -v
Or: python -m fakeshell.tests.unit_tests

Author: YSNRFD
Version: 1.0.0
"""

import asyncio
import json
import os
import sys
import tempfile
import unittest


def make_session():
    """A shell whose command output goes to a buffer terminal."""
    from fakeshell.shell import BufferTerminal, Shell, ShellOptions

    shell = Shell(ShellOptions(welcome_message=None))
    terminal = BufferTerminal()
    shell.output.attach(terminal)
    return shell, terminal


class TestExceptions(unittest.TestCase):
    """Test the exception hierarchy."""

    def test_shell_exception(self):
        """Test ShellException creation and properties."""
        from fakeshell.exceptions import ShellException

        exc = ShellException("Test error", error_code=1001, recoverable=True)

        self.assertEqual(exc.message, "Test error")
        self.assertEqual(exc.error_code, 1001)
        self.assertTrue(exc.recoverable)
        self.assertIn("1001", str(exc))

    def test_command_exceptions(self):
        """Test command exceptions."""
        from fakeshell.exceptions import CommandError, CommandRegistrationError

        exc = CommandError("invalid option", command="ls")
        self.assertEqual(exc.command, "ls")
        self.assertEqual(exc.message, "invalid option")

        exc = CommandRegistrationError("bad name", "name must be a non-empty word")
        self.assertEqual(exc.name, "bad name")
        self.assertIn("bad name", exc.message)

    def test_filesystem_exceptions(self):
        """Test filesystem exceptions carry a POSIX reason."""
        from fakeshell.exceptions import (
            FileSystemException,
            FileNotFoundError,
            DirectoryNotEmptyError,
            PermissionDeniedError,
        )

        exc = FileNotFoundError("/missing")
        self.assertIsInstance(exc, FileSystemException)
        self.assertEqual(exc.path, "/missing")
        self.assertEqual(exc.error_code, 4001)
        self.assertEqual(exc.strerror, "No such file or directory")
        self.assertIn("/missing", str(exc))

        self.assertEqual(DirectoryNotEmptyError("/a").strerror, "Directory not empty")
        self.assertEqual(PermissionDeniedError("/", operation="remove").strerror, "Permission denied")


class TestLogger(unittest.TestCase):
    """Test the logging system."""

    def setUp(self):
        from fakeshell.logger import Logger, LogLevel

        Logger.shutdown()
        Logger.initialize(level=LogLevel.DEBUG, console_output=False)

    def tearDown(self):
        from fakeshell.logger import Logger

        Logger.shutdown()

    def test_logger_creation(self):
        """Test logger creation and singleton."""
        from fakeshell.logger import Logger, get_logger

        log1 = Logger('test1')
        log2 = get_logger('test1')

        self.assertIs(log1, log2)  # Same subsystem = same instance
        self.assertEqual(log1.subsystem, 'test1')

    def test_log_levels(self):
        """Test log level ordering and lookup."""
        from fakeshell.logger import LogLevel

        self.assertTrue(LogLevel.ERROR > LogLevel.INFO)
        self.assertTrue(LogLevel.DEBUG < LogLevel.WARNING)
        self.assertEqual(LogLevel.from_name('notice'), LogLevel.NOTICE)

        with self.assertRaises(ValueError):
            LogLevel.from_name('verbose')

    def test_session_logs(self):
        """Test records are kept in the session buffer."""
        from fakeshell.logger import Logger, get_logger

        get_logger('unit').info("hello", context={'answer': 42})

        logs = Logger.get_session_logs(subsystem='unit')
        self.assertEqual(logs[-1]['message'], "hello")
        self.assertEqual(logs[-1]['context'], {'answer': 42})
        self.assertEqual(logs[-1]['level'], 'INFO')


class TestConfig(unittest.TestCase):
    """Test the configuration system."""

    def tearDown(self):
        from fakeshell.core.config_loader import ConfigLoader

        ConfigLoader().reset()

    def test_default_config(self):
        """Test default configuration values."""
        from fakeshell.core.config_loader import Config

        config = Config()

        self.assertEqual(config.shell.user, "guest")
        self.assertEqual(config.shell.hostname, "midrai")
        self.assertEqual(config.shell.home, "/home/guest")
        self.assertEqual(config.shell.history_size, 1000)
        self.assertTrue(config.filesystem.populate_defaults)

    def test_load_dict(self):
        """Test overriding part of a section."""
        from fakeshell.core.config_loader import ConfigLoader, get_config

        ConfigLoader().load_dict({'shell': {'user': 'alice', 'home': '/home/alice'}})

        config = get_config()
        self.assertEqual(config.shell.user, 'alice')
        self.assertEqual(config.shell.hostname, 'midrai')
        self.assertEqual(ConfigLoader().get('shell.home'), '/home/alice')

    def test_unknown_keys_rejected(self):
        """Test unknown keys raise ConfigurationError."""
        from fakeshell.core.config_loader import ConfigLoader
        from fakeshell.exceptions import ConfigurationError

        with self.assertRaises(ConfigurationError):
            ConfigLoader().load_dict({'shell': {'colour': 'red'}})

    def test_load_file(self):
        """Test loading a JSON file."""
        from fakeshell.core.config_loader import ConfigLoader

        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, 'fakeshell.json')
            with open(path, 'w', encoding='utf-8') as f:
                json.dump({'logging': {'level': 'DEBUG'}}, f)

            config = ConfigLoader().load(path)

        self.assertEqual(config.logging.level, 'DEBUG')

    def test_load_errors(self):
        """Test missing files and bad JSON."""
        from fakeshell.core.config_loader import ConfigLoader
        from fakeshell.exceptions import ConfigurationError

        with self.assertRaises(ConfigurationError):
            ConfigLoader().load('/nonexistent/fakeshell.json')

        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, 'broken.json')
            with open(path, 'w', encoding='utf-8') as f:
                f.write('{not json')

            with self.assertRaises(ConfigurationError):
                ConfigLoader().load(path)

    def test_set_and_get(self):
        """Test runtime updates by dot-notation key."""
        from fakeshell.core.config_loader import ConfigLoader
        from fakeshell.exceptions import ConfigurationError

        loader = ConfigLoader()
        loader.set('shell.history_size', 5)

        self.assertEqual(loader.get('shell.history_size'), 5)
        self.assertEqual(loader.get('shell.missing', 'fallback'), 'fallback')
        self.assertEqual(loader.to_dict()['shell']['history_size'], 5)

        with self.assertRaises(ConfigurationError):
            loader.set('shell.missing', 1)

    def test_shell_options_from_config(self):
        """Test shell options follow the loaded configuration."""
        from fakeshell.core.config_loader import ConfigLoader
        from fakeshell.shell import ShellOptions

        config = ConfigLoader().load_dict({'shell': {'hostname': 'box', 'prompt_format': '\\u> '}})
        options = ShellOptions.from_config(config)

        self.assertEqual(options.hostname, 'box')
        self.assertEqual(options.prompt_format, '\\u> ')


class TestPathResolver(unittest.TestCase):
    """Test path resolution."""

    def test_parent_of_nested_directory(self):
        """Test .. from /a/b resolves to /a."""
        from fakeshell.filesystem import PathResolver

        self.assertEqual(PathResolver.resolve('..', '/a/b'), '/a')

    def test_parent_of_root(self):
        """Test .. never climbs above the root."""
        from fakeshell.filesystem import PathResolver

        self.assertEqual(PathResolver.resolve('..', '/'), '/')
        self.assertEqual(PathResolver.resolve('../../..', '/a'), '/')

    def test_home_references(self):
        """Test empty path, ~ and ~/ resolve against home."""
        from fakeshell.filesystem import PathResolver

        self.assertEqual(PathResolver.resolve('', '/tmp', '/home/guest'), '/home/guest')
        self.assertEqual(PathResolver.resolve('~', '/tmp', '/home/guest'), '/home/guest')
        self.assertEqual(PathResolver.resolve('~/docs', '/tmp', '/home/guest'), '/home/guest/docs')

    def test_normalize(self):
        """Test normalization of . and .. and repeated slashes."""
        from fakeshell.filesystem import PathResolver

        self.assertEqual(PathResolver.normalize('/a//b/./c/..'), '/a/b')
        self.assertEqual(PathResolver.normalize('/'), '/')
        self.assertEqual(PathResolver.join('/a', 'b', '../c'), '/a/c')
        self.assertEqual(PathResolver.join('/a', '/b'), '/b')

    def test_idempotence(self):
        """Test resolving a resolved path changes nothing."""
        from fakeshell.filesystem import PathResolver

        for path in ('', '~', 'a/../b', '/x/./y/', '../../..', '~/docs', 'a b/c'):
            resolved = PathResolver.resolve(path, '/home/guest', '/home/guest')
            self.assertEqual(PathResolver.resolve(resolved, '/tmp', '/root'), resolved)

    def test_split(self):
        """Test dirname, basename and split."""
        from fakeshell.filesystem import PathResolver

        self.assertEqual(PathResolver.split('/a/b'), ('/a', 'b'))
        self.assertEqual(PathResolver.dirname('/a'), '/')
        self.assertEqual(PathResolver.basename('/'), '')
        self.assertEqual(PathResolver.components('/a/b/'), ['a', 'b'])

    def test_is_within(self):
        """Test ancestor checks respect segment boundaries."""
        from fakeshell.filesystem import PathResolver

        self.assertTrue(PathResolver.is_within('/a/b', '/a'))
        self.assertTrue(PathResolver.is_within('/a', '/a'))
        self.assertFalse(PathResolver.is_within('/ab', '/a'))
        self.assertTrue(PathResolver.is_within('/anything', '/'))


class TestFilesystem(unittest.TestCase):
    """Test the virtual file system."""

    def setUp(self):
        from fakeshell.filesystem import VirtualFileSystem

        self.vfs = VirtualFileSystem()

    def test_default_layout(self):
        """Test the standard directories and sample files."""
        for path in ('/bin', '/etc', '/home', '/tmp', '/usr', '/var', '/root', '/proc'):
            self.assertTrue(self.vfs.is_directory(path), path)

        self.assertEqual(self.vfs.cwd, '/home/guest')
        self.assertEqual(self.vfs.read_file('/etc/hostname'), 'midrai\n')
        self.assertTrue(self.vfs.is_file('/home/guest/.bashrc'))
        self.assertIn('Welcome', self.vfs.read_file('~/readme.txt'))

    def test_empty_filesystem(self):
        """Test a filesystem without default content."""
        from fakeshell.filesystem import VirtualFileSystem

        vfs = VirtualFileSystem(populate_defaults=False)

        self.assertEqual(vfs.readdir('/'), [])
        self.assertEqual(vfs.cwd, '/')

    def test_write_read_round_trip(self):
        """Test content comes back exactly as written."""
        for content in ('', 'hello', 'line1\nline2\n', '中文 ✓', '  padded  '):
            self.assertTrue(self.vfs.write_file('/tmp/f.txt', content))
            self.assertEqual(self.vfs.read_file('/tmp/f.txt'), content)

    def test_relative_paths(self):
        """Test operations resolve against the working directory."""
        self.assertTrue(self.vfs.mkdir('work'))
        self.assertTrue(self.vfs.chdir('work'))
        self.assertTrue(self.vfs.write_file('notes.txt', 'x'))

        self.assertEqual(self.vfs.cwd, '/home/guest/work')
        self.assertTrue(self.vfs.exists('/home/guest/work/notes.txt'))
        self.assertTrue(self.vfs.chdir('..'))
        self.assertEqual(self.vfs.cwd, '/home/guest')

    def test_mkdir_failures(self):
        """Test mkdir reports why it failed."""
        from fakeshell.exceptions import FileExistsError, FileNotFoundError, InvalidPathError

        self.assertFalse(self.vfs.mkdir('/tmp'))
        self.assertIsInstance(self.vfs.last_error, FileExistsError)

        self.assertFalse(self.vfs.mkdir('/missing/child'))
        self.assertIsInstance(self.vfs.last_error, FileNotFoundError)

        self.assertFalse(self.vfs.mkdir('/'))
        self.assertIsInstance(self.vfs.last_error, InvalidPathError)

        self.assertTrue(self.vfs.mkdir('/tmp/ok'))
        self.assertIsNone(self.vfs.last_error)

    def test_type_mismatches(self):
        """Test file operations on directories and vice versa."""
        from fakeshell.exceptions import IsADirectoryError, NotADirectoryError

        self.assertFalse(self.vfs.write_file('/tmp', 'x'))
        self.assertIsInstance(self.vfs.last_error, IsADirectoryError)

        self.assertIsNone(self.vfs.read_file('/tmp'))

        self.vfs.write_file('/tmp/f', 'x')
        self.assertIsNone(self.vfs.readdir('/tmp/f'))
        self.assertIsInstance(self.vfs.last_error, NotADirectoryError)

        self.assertFalse(self.vfs.chdir('/tmp/f'))
        self.assertEqual(self.vfs.cwd, '/home/guest')

        self.assertIsNone(self.vfs.get_node('/tmp/f/child'))
        self.assertFalse(self.vfs.write_file('/tmp/f/child', 'x'))

    def test_remove_non_empty_guard(self):
        """Test non-empty directories need recursive removal."""
        from fakeshell.exceptions import DirectoryNotEmptyError

        self.vfs.mkdir('/a')
        self.vfs.mkdir('/a/b')
        self.vfs.write_file('/a/b/f', 'data')

        self.assertFalse(self.vfs.remove('/a'))
        self.assertIsInstance(self.vfs.last_error, DirectoryNotEmptyError)
        self.assertTrue(self.vfs.exists('/a/b/f'))

        self.assertTrue(self.vfs.remove('/a', recursive=True))
        self.assertFalse(self.vfs.exists('/a'))
        self.assertFalse(self.vfs.exists('/a/b'))
        self.assertFalse(self.vfs.exists('/a/b/f'))

    def test_remove_releases_nodes(self):
        """Test recursive removal drops every descendant from the node table."""
        before = self.vfs.get_stats()['total_nodes']

        self.vfs.mkdir('/tmp/tree')
        self.vfs.mkdir('/tmp/tree/sub')
        self.vfs.write_file('/tmp/tree/sub/f1', '1')
        self.vfs.write_file('/tmp/tree/f2', '2')
        self.assertEqual(self.vfs.get_stats()['total_nodes'], before + 4)

        self.vfs.remove('/tmp/tree', recursive=True)
        self.assertEqual(self.vfs.get_stats()['total_nodes'], before)

    def test_remove_root_refused(self):
        """Test the root cannot be removed."""
        from fakeshell.exceptions import PermissionDeniedError

        self.assertFalse(self.vfs.remove('/', recursive=True))
        self.assertIsInstance(self.vfs.last_error, PermissionDeniedError)
        self.assertTrue(self.vfs.exists('/etc'))

    def test_copy_file(self):
        """Test copying a file, and into an existing directory."""
        self.vfs.write_file('/tmp/a.txt', 'alpha')

        self.assertTrue(self.vfs.copy('/tmp/a.txt', '/tmp/b.txt'))
        self.assertEqual(self.vfs.read_file('/tmp/b.txt'), 'alpha')

        self.assertTrue(self.vfs.copy('/tmp/a.txt', '/home/guest'))
        self.assertEqual(self.vfs.read_file('/home/guest/a.txt'), 'alpha')
        self.assertTrue(self.vfs.exists('/tmp/a.txt'))

    def test_copy_directory(self):
        """Test directories need recursive copy and cannot go inside themselves."""
        from fakeshell.exceptions import IsADirectoryError, InvalidPathError

        self.vfs.mkdir('/src')
        self.vfs.mkdir('/src/sub')
        self.vfs.write_file('/src/sub/f', 'deep')
        self.vfs.mkdir('/dst')

        self.assertFalse(self.vfs.copy('/src', '/dst'))
        self.assertIsInstance(self.vfs.last_error, IsADirectoryError)

        self.assertTrue(self.vfs.copy('/src', '/dst', recursive=True))
        self.assertEqual(self.vfs.read_file('/dst/src/sub/f'), 'deep')

        self.assertFalse(self.vfs.copy('/src', '/src/sub', recursive=True))
        self.assertIsInstance(self.vfs.last_error, InvalidPathError)

    def test_copy_is_independent(self):
        """Test a copy does not share content with its source."""
        self.vfs.write_file('/tmp/a', 'one')
        self.vfs.copy('/tmp/a', '/tmp/b')
        self.vfs.write_file('/tmp/a', 'two')

        self.assertEqual(self.vfs.read_file('/tmp/b'), 'one')

    def test_move(self):
        """Test renaming and moving into a directory."""
        self.vfs.write_file('/tmp/a', 'payload')

        self.assertTrue(self.vfs.move('/tmp/a', '/tmp/c'))
        self.assertFalse(self.vfs.exists('/tmp/a'))
        self.assertEqual(self.vfs.read_file('/tmp/c'), 'payload')

        self.vfs.mkdir('/tmp/dir')
        self.vfs.write_file('/tmp/dir/inner', 'x')
        self.assertTrue(self.vfs.move('/tmp/dir', '/home/guest'))
        self.assertEqual(self.vfs.read_file('/home/guest/dir/inner'), 'x')
        self.assertFalse(self.vfs.exists('/tmp/dir'))

        self.assertFalse(self.vfs.move('/tmp/missing', '/tmp/x'))

    def test_stat(self):
        """Test stat metadata."""
        self.vfs.write_file('/tmp/s', 'abcd')

        stat = self.vfs.stat('/tmp/s')
        self.assertTrue(stat.is_file)
        self.assertEqual(stat.size, 4)
        self.assertEqual(stat.permissions, '-rw-r--r--')
        self.assertEqual(stat.owner, 'root')

        stat = self.vfs.stat('/etc')
        self.assertTrue(stat.is_directory)
        self.assertEqual(stat.size, 0)
        self.assertEqual(stat.permissions, 'drwxr-xr-x')

        self.assertIsNone(self.vfs.stat('/nope'))

    def test_parent_timestamp_updates(self):
        """Test a directory's mtime changes with its children."""
        parent = self.vfs.get_node('/tmp')
        parent.modified_at = 0

        self.vfs.write_file('/tmp/new', 'x')
        self.assertGreater(parent.modified_at, 0)

        parent.modified_at = 0
        self.vfs.remove('/tmp/new')
        self.assertGreater(parent.modified_at, 0)

    def test_node_links(self):
        """Test parent links are node ids of the containing directory."""
        self.vfs.mkdir('/tmp/p')
        self.vfs.write_file('/tmp/p/c', '')

        parent = self.vfs.get_node('/tmp/p')
        child = self.vfs.get_node('/tmp/p/c')
        root = self.vfs.get_node('/')

        self.assertEqual(child.parent, parent.ino)
        self.assertEqual(parent.children['c'], child.ino)
        self.assertIsNone(root.parent)
        self.assertEqual(root.name, '')


class TestParser(unittest.TestCase):
    """Test command parsing."""

    def test_quoted_argument(self):
        """Test quotes keep whitespace in one argument."""
        from fakeshell.shell import CommandParser

        cmd = CommandParser().parse('mkdir "my dir"')

        self.assertEqual(cmd.command, 'mkdir')
        self.assertEqual(cmd.args, ['my dir'])

    def test_short_flags(self):
        """Test bundled short flags."""
        from fakeshell.shell import CommandParser

        cmd = CommandParser().parse('rm -rf /tmp/x')

        self.assertEqual(cmd.flags, {'r', 'f'})
        self.assertEqual(cmd.args, ['/tmp/x'])

    def test_long_flags_and_dashes(self):
        """Test long flags, and bare - and -- as arguments."""
        from fakeshell.shell import CommandParser

        cmd = CommandParser().parse('ls --all - --')

        self.assertEqual(cmd.flags, {'all'})
        self.assertEqual(cmd.args, ['-', '--'])

    def test_tokenize(self):
        """Test quoting and escaping rules."""
        from fakeshell.shell import CommandParser

        parser = CommandParser()

        self.assertEqual(parser.tokenize('echo "it\'s"'), ['echo', "it's"])
        self.assertEqual(parser.tokenize("echo 'say \"hi\"'"), ['echo', 'say "hi"'])
        self.assertEqual(parser.tokenize('a\\ b'), ['a b'])
        self.assertEqual(parser.tokenize('"a\\"b"'), ['a"b'])
        self.assertEqual(parser.tokenize('echo ""'), ['echo', ''])
        self.assertEqual(parser.tokenize('  spaced\t out  '), ['spaced', 'out'])

    def test_unterminated_input(self):
        """Test unterminated quotes and escapes do not fail."""
        from fakeshell.shell import CommandParser

        parser = CommandParser()

        self.assertEqual(parser.tokenize('echo "open ended'), ['echo', 'open ended'])
        self.assertEqual(parser.tokenize('echo trailing\\'), ['echo', 'trailing'])

    def test_scan_positions(self):
        """Test each token reports where it starts in the line."""
        from fakeshell.shell import CommandParser

        parser = CommandParser()

        self.assertEqual(parser.scan('  ls "a b" c'), [(2, 'ls'), (5, 'a b'), (11, 'c')])
        self.assertEqual(parser.scan('cat my\\ n'), [(0, 'cat'), (4, 'my n')])
        self.assertEqual(parser.scan('   '), [])

    def test_empty_line(self):
        """Test a blank line has no command."""
        from fakeshell.shell import CommandParser

        cmd = CommandParser().parse('   ')

        self.assertEqual(cmd.command, '')
        self.assertEqual(cmd.args, [])

    def test_expand_variables(self):
        """Test $VAR and ${VAR} expansion."""
        from fakeshell.shell import expand_variables

        env = {'HOME': '/home/guest', 'USER': 'guest'}

        self.assertEqual(expand_variables('$HOME and ${USER}!', env), '/home/guest and guest!')
        self.assertEqual(expand_variables('[$MISSING]', env), '[]')
        self.assertEqual(expand_variables('no vars', env), 'no vars')


class TestRegistry(unittest.TestCase):
    """Test the command registry."""

    def test_register_and_lookup(self):
        """Test registration, replacement and listing."""
        from fakeshell.shell import CommandDefinition, CommandRegistry

        registry = CommandRegistry()
        registry.register(CommandDefinition('zeta', lambda ctx: 0))
        registry.register(CommandDefinition('alpha', lambda ctx: 0, description='first'))
        registry.register(CommandDefinition('alpha', lambda ctx: 1, description='second'))

        self.assertEqual(registry.names(), ['alpha', 'zeta'])
        self.assertEqual(registry.get('alpha').description, 'second')
        self.assertIn('zeta', registry)
        self.assertEqual(len(registry), 2)

        self.assertTrue(registry.unregister('zeta'))
        self.assertFalse(registry.unregister('zeta'))
        self.assertIsNone(registry.get('zeta'))

    def test_invalid_definitions(self):
        """Test bad names and handlers are rejected."""
        from fakeshell.exceptions import CommandRegistrationError
        from fakeshell.shell import CommandDefinition, CommandRegistry

        registry = CommandRegistry()

        with self.assertRaises(CommandRegistrationError):
            registry.register(CommandDefinition('', lambda ctx: 0))
        with self.assertRaises(CommandRegistrationError):
            registry.register(CommandDefinition('two words', lambda ctx: 0))
        with self.assertRaises(CommandRegistrationError):
            registry.register(CommandDefinition('broken', None))


class TestDispatcher(unittest.TestCase):
    """Test command dispatch."""

    def setUp(self):
        from fakeshell.filesystem import VirtualFileSystem
        from fakeshell.shell import (
            BufferTerminal,
            CommandDispatcher,
            CommandRegistry,
            OutputHandler,
        )

        self.vfs = VirtualFileSystem()
        self.env = {'USER': 'guest', 'HOME': '/home/guest'}
        self.terminal = BufferTerminal()
        self.registry = CommandRegistry()
        self.dispatcher = CommandDispatcher(
            self.registry,
            self.vfs,
            self.env,
            OutputHandler(self.terminal)
        )

    def register(self, name, handler):
        from fakeshell.shell import CommandDefinition

        self.registry.register(CommandDefinition(name, handler))

    def test_echo_without_newline(self):
        """Test echo -n prints no line break."""
        shell, terminal = make_session()

        status = shell.execute_line('echo -n hi')

        self.assertEqual(status, 0)
        self.assertEqual(terminal.text, 'hi')

    def test_unknown_command(self):
        """Test unknown commands exit 127 with an error line."""
        status = self.dispatcher.run('unknown-cmd')

        self.assertEqual(status, 127)
        self.assertEqual(self.terminal.lines(), ['unknown-cmd: command not found'])
        self.assertIn('\x1b[31m', self.terminal.text)

    def test_empty_line(self):
        """Test blank lines do nothing."""
        self.assertEqual(self.dispatcher.run(''), 0)
        self.assertEqual(self.dispatcher.run('   '), 0)
        self.assertEqual(self.terminal.text, '')

    def test_context(self):
        """Test handlers receive args, flags and the working directory."""
        seen = []
        self.register('probe', seen.append)

        self.assertEqual(self.dispatcher.run('probe -v --long "a b" c'), 0)

        ctx = seen[0]
        self.assertEqual(ctx.args, ['a b', 'c'])
        self.assertEqual(ctx.flags, {'v', 'long'})
        self.assertEqual(ctx.cwd, '/home/guest')
        self.assertIs(ctx.vfs, self.vfs)

    def test_persistent_assignment(self):
        """Test NAME=value sets the environment without running anything."""
        self.assertEqual(self.dispatcher.run('FOO=bar'), 0)
        self.assertEqual(self.env['FOO'], 'bar')

        self.assertEqual(self.dispatcher.run('GREETING="hello world"'), 0)
        self.assertEqual(self.env['GREETING'], 'hello world')

        self.assertEqual(self.dispatcher.run('EMPTY='), 0)
        self.assertEqual(self.env['EMPTY'], '')
        self.assertEqual(self.terminal.text, '')

    def test_one_shot_override(self):
        """Test NAME=value cmd applies to that command only."""
        seen = []
        self.register('show', lambda ctx: seen.append(ctx.env.get('MODE')))

        self.assertEqual(self.dispatcher.run('MODE=fast show'), 0)

        self.assertEqual(seen, ['fast'])
        self.assertNotIn('MODE', self.env)

    def test_handler_faults(self):
        """Test handler exceptions become status 1 and an error line."""
        from fakeshell.exceptions import CommandError

        def crash(ctx):
            raise RuntimeError('boom')

        def refuse(ctx):
            raise CommandError('bad input', command='refuse')

        self.register('crash', crash)
        self.register('refuse', refuse)

        self.assertEqual(self.dispatcher.run('crash'), 1)
        self.assertEqual(self.dispatcher.run('refuse'), 1)
        self.assertEqual(self.terminal.lines(), ['crash: boom', 'refuse: bad input'])

    def test_return_values(self):
        """Test None counts as success and coroutine handlers are awaited."""
        async def slow(ctx):
            await asyncio.sleep(0)
            return 3

        self.register('quiet', lambda ctx: None)
        self.register('slow', slow)

        self.assertEqual(self.dispatcher.run('quiet'), 0)
        self.assertEqual(self.dispatcher.run('slow'), 3)

    def test_pre_execute_hooks(self):
        """Test hooks see the trimmed line and their failures are contained."""
        seen = []

        def broken(line):
            raise ValueError('hook failure')

        self.register('noop', lambda ctx: 0)
        self.dispatcher.add_pre_execute_hook(broken)
        self.dispatcher.add_pre_execute_hook(seen.append)

        self.assertEqual(self.dispatcher.run('  noop arg  '), 0)
        self.assertEqual(seen, ['noop arg'])

        self.dispatcher.remove_pre_execute_hook(seen.append)
        self.dispatcher.run('noop')
        self.assertEqual(seen, ['noop arg'])

    def test_complete_command_names(self):
        """Test the first word completes against command names."""
        for name in ('echo', 'env', 'export', 'ls'):
            self.register(name, lambda ctx: 0)

        self.assertEqual(self.dispatcher.complete('e'), ['echo', 'env', 'export'])
        self.assertEqual(self.dispatcher.complete('ls'), ['ls'])
        self.assertEqual(len(self.dispatcher.complete('')), 4)

    def test_complete_paths(self):
        """Test filesystem completion for arguments."""
        self.register('cat', lambda ctx: 0)
        self.vfs.mkdir('/home/guest/docs')

        self.assertEqual(self.dispatcher.complete('cat /et'), ['/etc/'])
        self.assertEqual(self.dispatcher.complete('cat rea'), ['readme.txt'])
        self.assertEqual(self.dispatcher.complete('cat d'), ['docs/'])
        self.assertEqual(self.dispatcher.complete('cat /etc/ho'), ['/etc/hostname'])
        self.assertIn('readme.txt', self.dispatcher.complete('cat '))

    def test_complete_with_command_completer(self):
        """Test a command's own completer takes over."""
        from fakeshell.shell import CommandDefinition

        self.registry.register(CommandDefinition(
            'pick',
            lambda ctx: 0,
            complete=lambda partial, ctx: [c for c in ('red', 'green') if c.startswith(partial)]
        ))

        self.assertEqual(self.dispatcher.complete('pick g'), ['green'])
        self.assertEqual(self.dispatcher.complete('pick '), ['red', 'green'])


class TestPrompt(unittest.TestCase):
    """Test prompt generation."""

    def setUp(self):
        from fakeshell.filesystem import VirtualFileSystem
        from fakeshell.shell import PromptManager

        self.vfs = VirtualFileSystem()
        self.env = {'USER': 'guest', 'HOSTNAME': 'midrai'}
        self.prompt = PromptManager(self.vfs, self.env)

    def test_default_prompt(self):
        """Test the default user@host:short$ format."""
        self.assertEqual(self.prompt.generate(), 'guest@midrai:~$ ')

        self.vfs.chdir('/usr')
        self.assertEqual(self.prompt.generate(), 'guest@midrai:usr$ ')

        self.vfs.chdir('/')
        self.assertEqual(self.prompt.generate(), 'guest@midrai:/$ ')

    def test_home_substitution(self):
        """Test the home prefix renders as ~."""
        self.vfs.mkdir('/home/guest/p')
        self.vfs.chdir('/home/guest/p')

        self.assertEqual(self.prompt.context().path, '~/p')
        self.assertEqual(self.prompt.generate(), 'guest@midrai:p$ ')
        self.assertEqual(self.prompt.format_path('/home/guestx'), '/home/guestx')

    def test_root_prompt(self):
        """Test root gets # instead of $."""
        self.env['USER'] = 'root'

        self.assertEqual(self.prompt.generate(), 'root@midrai:guest# ')

    def test_template_forms(self):
        """Test both placeholder forms give the same prompt."""
        self.vfs.chdir('/etc')

        self.prompt.set_format('\\u@\\h:\\w (\\W)\\$ ')
        legacy = self.prompt.generate()

        self.prompt.set_format('${user}@${host}:${path} (${shortPath})${promptSymbol} ')
        named = self.prompt.generate()

        self.assertEqual(legacy, 'guest@midrai:/etc (etc)$ ')
        self.assertEqual(named, legacy)

    def test_single_substitution_pass(self):
        """Test substituted values are not expanded again."""
        self.env['USER'] = '${host}'
        self.prompt.set_format('\\u> ')

        self.assertEqual(self.prompt.generate(), '${host}> ')

    def test_custom_formatter(self):
        """Test a formatter function replaces templates."""
        self.prompt.set_formatter(lambda ctx: f'[{ctx.user} {ctx.path}] ')
        self.assertEqual(self.prompt.generate(), '[guest ~] ')

        self.prompt.reset()
        self.assertEqual(self.prompt.generate(), 'guest@midrai:~$ ')


class TestTerminal(unittest.TestCase):
    """Test terminals and the output sink."""

    def test_writeln_splits_lines(self):
        """Test embedded line breaks become separate lines."""
        from fakeshell.shell import BufferTerminal

        terminal = BufferTerminal()
        terminal.writeln('a\nb\r\nc')

        self.assertEqual(terminal.lines(), ['a', 'b', 'c'])
        self.assertEqual(terminal.text, 'a\r\nb\r\nc\r\n')

    def test_stream_terminal_translates_newlines(self):
        """Test bare newlines are written as CRLF."""
        import io
        from fakeshell.shell import StreamTerminal

        stream = io.StringIO()
        terminal = StreamTerminal(stream)
        terminal.write('one\ntwo\r\n')

        self.assertEqual(stream.getvalue(), 'one\r\ntwo\r\n')

    def test_resize(self):
        """Test resize updates the size and notifies listeners."""
        from fakeshell.shell import BufferTerminal

        terminal = BufferTerminal()
        sizes = []
        terminal.on_resize(lambda columns, rows: sizes.append((columns, rows)))
        terminal.resize(120, 40)

        self.assertEqual((terminal.columns, terminal.rows), (120, 40))
        self.assertEqual(sizes, [(120, 40)])

    def test_output_handler(self):
        """Test colored output and detached handlers."""
        from fakeshell.shell import BufferTerminal, OutputHandler, colorize

        OutputHandler().println('dropped')

        terminal = BufferTerminal()
        output = OutputHandler(terminal)
        output.error('bad')
        output.warn('careful')
        output.success('done')

        self.assertEqual(terminal.lines(), ['bad', 'careful', 'done'])
        self.assertIn('\x1b[31mbad\x1b[0m', terminal.text)
        self.assertIn('\x1b[33mcareful\x1b[0m', terminal.text)
        self.assertEqual(output.color('x', 'bright_blue'), '\x1b[94mx\x1b[0m')
        self.assertEqual(colorize('x', 'green'), '\x1b[32mx\x1b[0m')

        with self.assertRaises(ValueError):
            colorize('x', 'mauve')


def run_tests():
    """Run all tests."""
    loader = unittest.TestLoader()
    suite = loader.loadTestsFromModule(sys.modules[__name__])

    runner = unittest.TextTestRunner(verbosity=2)
    result = runner.run(suite)

    return 0 if result.wasSuccessful() else 1


if __name__ == '__main__':
    sys.exit(run_tests())
