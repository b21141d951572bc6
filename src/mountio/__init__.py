"""
mountio: file access layer

Zip containers mounted as virtual filesystems, whole-file operations on the
host filesystem, and byte/character streaming reads with buffered vs.
unbuffered timing.

Author: Tim Hosking
Contact: https://github.com/Munger
License: MIT

Public API:
    - MountIO: Main entry point. Provides .files, .archives, .streams, .config namespaces.

Example usage:
    from mountio import MountIO
    fs = MountIO()
    fs.archives.write_entry('bundle.zip', 'hello.txt', 'Hi')
    fs.archives.read_entry_text('bundle.zip', 'hello.txt')
    fs.files.copy('notes.txt', 'notes_copy.txt', replace_existing=True)
    result = fs.streams.compare('large.bin')
"""

import mountio.handlers
from .api.archives_api import ArchiveFileSystem
from .api.files_api import FileRecord, PlainFileStore
from .api.streams_api import (
    BufferedVsUnbufferedComparator,
    ComparisonResult,
    ReadMethod,
    StreamReader,
    TimingSample,
)
from .core.base_handler import ArchiveEntry
from .core.errors import ArchiveError, ErrorKind, FileStoreError
from .core.logging import DebugPrintObserver, Event, NullObserver, RecordingObserver
from .core.stream_timer import StreamTimer
from .mountio import MountIO

__version__ = '0.1.0'
__all__ = [
    "MountIO",
    "ArchiveFileSystem",
    "PlainFileStore",
    "BufferedVsUnbufferedComparator",
    "StreamReader",
    "StreamTimer",
    "ArchiveEntry",
    "FileRecord",
    "TimingSample",
    "ComparisonResult",
    "ReadMethod",
    "ArchiveError",
    "FileStoreError",
    "ErrorKind",
    "Event",
    "DebugPrintObserver",
    "RecordingObserver",
    "NullObserver",
]
