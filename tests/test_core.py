"""
Unit tests for mountio core: configuration, handler registry, errors and
debug output.

Author: Tim Hosking
Contact: https://github.com/Munger
License: MIT
"""

import errno
import os
import sys
import unittest
import zipfile

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))

import pytest

import mountio
from mountio import ArchiveError, ErrorKind, Event, FileStoreError, MountIO, NullObserver
from mountio.api.config_api import ConfigAPI
from mountio.core.base_handler import ArchiveHandler
from mountio.core.errors import kind_for_os_error
from mountio.core.global_config import GlobalConfig
from mountio.core.handler_manager import HandlerManager
from mountio.core.logging import DebugPrintObserver, debug_print, is_enabled
from mountio.handlers.zip_handler import ZipHandler


class TestConfig(unittest.TestCase):
    """Test case for GlobalConfig and ConfigAPI."""

    def setUp(self):
        self.config = MountIO().config

    def tearDown(self):
        GlobalConfig.reset()

    def test_defaults(self):
        self.assertEqual(self.config.debug_level, 0)
        self.assertEqual(self.config.encoding, 'utf-8')
        self.assertEqual(self.config['buffer_size'], 8192)
        self.assertEqual(self.config.compression, zipfile.ZIP_DEFLATED)
        self.assertEqual(sorted(self.config), sorted(GlobalConfig.keys()))
        self.assertEqual(len(self.config), 4)

    def test_set_and_reset(self):
        self.config.debug_level = 3
        self.config['buffer_size'] = 65536
        self.assertEqual(GlobalConfig.get_debug_level(), 3)
        self.assertEqual(ConfigAPI.get_debug_level(), 3)
        self.assertEqual(GlobalConfig.get_buffer_size(), 65536)
        self.config.reset('buffer_size')
        self.assertEqual(self.config.buffer_size, 8192)
        self.assertEqual(self.config.debug_level, 3)
        self.config.reset()
        self.assertEqual(self.config.debug_level, 0)

    def test_unknown_keys(self):
        with self.assertRaises(AttributeError):
            self.config.no_such_key
        with self.assertRaises(AttributeError):
            self.config.no_such_key = 1
        with self.assertRaises(KeyError):
            self.config['no_such_key']
        with self.assertRaises(KeyError):
            GlobalConfig.get('no_such_key')

    def test_buffer_size_must_be_positive(self):
        with self.assertRaises(ValueError):
            self.config.buffer_size = 0
        self.assertEqual(self.config.buffer_size, 8192)


class TestHandlerManager(unittest.TestCase):
    """Test case for the container handler registry."""

    def test_zip_registered(self):
        self.assertIs(HandlerManager.get_handler('.zip'), ZipHandler)
        self.assertIs(HandlerManager.get_handler_for_path('/tmp/Bundle.JAR'), ZipHandler)
        self.assertIn('.zip', HandlerManager.get_supported_formats())
        self.assertIn('.jar', HandlerManager.get_supported_formats())

    def test_default_handler(self):
        self.assertIs(HandlerManager.get_handler_for_path('archive.bin'), ZipHandler)

    def test_subclass_registration(self):
        class ApkHandler(ZipHandler):
            @classmethod
            def get_supported_extensions(cls):
                return {'.apk'}
        try:
            self.assertIs(HandlerManager.get_handler_for_path('app.apk'), ApkHandler)
        finally:
            HandlerManager.deregister_handler('.apk')
        self.assertIsNone(HandlerManager.get_handler('.apk'))

    def test_abstract_base_not_registered(self):
        self.assertNotIn(ArchiveHandler, HandlerManager._registry.values())


class TestErrors(unittest.TestCase):
    """Test case for error kinds."""

    def test_kind_for_os_error(self):
        self.assertIs(kind_for_os_error(FileNotFoundError(errno.ENOENT, "x")), ErrorKind.NOT_FOUND)
        self.assertIs(kind_for_os_error(PermissionError(errno.EACCES, "x")), ErrorKind.PERMISSION)
        self.assertIs(kind_for_os_error(FileExistsError(errno.EEXIST, "x")), ErrorKind.ALREADY_EXISTS)
        self.assertIs(kind_for_os_error(UnicodeDecodeError('utf-8', b'\xff', 0, 1, "bad")),
                      ErrorKind.DECODE_ERROR)
        self.assertIs(kind_for_os_error(OSError(errno.EIO, "x")), ErrorKind.IO)

    def test_error_attributes(self):
        err = ArchiveError(ErrorKind.CORRUPT, "bad", container="a.zip", entry="/x")
        self.assertEqual((err.container, err.entry, str(err)), ("a.zip", "/x", "bad"))
        self.assertFalse(err.recoverable)
        self.assertTrue(ArchiveError(ErrorKind.NOT_FOUND, "gone").recoverable)
        ferr = FileStoreError(ErrorKind.NOT_FOUND, "gone", path="p")
        self.assertIsInstance(ferr, IOError)
        self.assertEqual(ferr.path, "p")


def test_debug_print_respects_level(capsys):
    GlobalConfig.set_debug_level(2)
    try:
        debug_print("shown", level=2)
        debug_print("hidden", level=3)
        assert is_enabled("INFO")
        assert not is_enabled("DEBUG")
    finally:
        GlobalConfig.reset()
    out = capsys.readouterr().out
    assert "[MOUNTIO-DEBUG-2] shown" in out
    assert "hidden" not in out


def test_debug_print_observer_format(capsys):
    GlobalConfig.set_debug_level(2)
    try:
        DebugPrintObserver().notify(Event("INFO", "ZipHandler: mount opened", {"container": "a.zip"}))
        DebugPrintObserver().notify(Event("DEBUG", "ZipHandler: entry read", {}))
    finally:
        GlobalConfig.reset()
    out = capsys.readouterr().out
    assert out == "[MOUNTIO-DEBUG-2] INFO ZipHandler: mount opened (container=a.zip)\n"


def test_traceback_at_level_four(capsys):
    GlobalConfig.set_debug_level(4)
    try:
        try:
            raise OSError("broken pipe")
        except OSError as e:
            DebugPrintObserver().notify(Event("ERROR", "failed", {"exc": e}))
    finally:
        GlobalConfig.reset()
    out = capsys.readouterr().out
    assert "[MOUNTIO-DEBUG-1] ERROR failed" in out
    assert "Traceback" in out


def test_silent_by_default(capsys, tmp_path):
    fs = MountIO()
    fs.archives.write_entry(tmp_path / "a.zip", "a.txt", "x")
    with pytest.raises(ArchiveError):
        fs.archives.read_entry(tmp_path / "a.zip", "b.txt")
    assert capsys.readouterr().out == ""


def test_null_observer(tmp_path):
    fs = MountIO(NullObserver())
    fs.files.write_text(tmp_path / "a.txt", "x")
    assert fs.files.read_text(tmp_path / "a.txt") == "x"


def test_public_api():
    for name in mountio.__all__:
        assert hasattr(mountio, name)
    fs = MountIO()
    for namespace in ("files", "archives", "streams", "config"):
        assert hasattr(fs, namespace)


def test_event_attributes_not_shared():
    with pytest.raises(TypeError):
        Event("INFO", "no attributes")
    first = Event("INFO", "one", {})
    first.attributes["k"] = 1
    assert Event("INFO", "two", {}).attributes == {}


if __name__ == "__main__":
    unittest.main()
