"""
mountio: zip containers as mountable filesystems, plain file operations and
instrumented streaming reads.

This module combines the public APIs into the MountIO entry point.

Author: Tim Hosking
Contact: https://github.com/Munger
License: MIT
"""

from typing import Optional

import mountio.handlers  # noqa: F401  registers container handlers
from .api.archives_api import ArchiveFileSystem
from .api.config_api import ConfigAPI
from .api.files_api import PlainFileStore
from .api.streams_api import BufferedVsUnbufferedComparator, ReadMethod, StreamReader
from .core.logging import EventObserver


class StreamsAPI:
    """Namespace for the streaming readers and the buffered/unbuffered comparator."""

    def __init__(self, observer: Optional[EventObserver] = None):
        self.reader = StreamReader(observer)
        self.comparator = BufferedVsUnbufferedComparator(observer)

    def read_binary(self, path) -> bytes:
        return self.reader.read_binary(path)

    def read_chars(self, path, encoding: str = 'utf-8') -> str:
        return self.reader.read_chars(path, encoding=encoding)

    def measure(self, stream, method: ReadMethod = ReadMethod.UNBUFFERED):
        return self.comparator.measure(stream, method)

    def compare(self, path):
        return self.comparator.compare(path)


class MountIO:
    """
    Main entry point for mountio.
    Provides a namespaced API; every namespace shares the observer given here.

    Attributes:
        files: Plain file operations (read/write/copy/move/delete/stat/list)
        archives: Zip container operations (write/read/copy-in/exists/list/remove)
        streams: Unit-at-a-time readers and buffered vs unbuffered timing
        config: Configuration
    """

    def __init__(self, observer: Optional[EventObserver] = None):
        self.files = PlainFileStore(observer)
        self.archives = ArchiveFileSystem(observer)
        self.streams = StreamsAPI(observer)
        self.config = ConfigAPI()
