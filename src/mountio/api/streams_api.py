"""
Streaming reads for mountio.

StreamReader reads plain files one byte or one character at a time.
BufferedVsUnbufferedComparator times the same file read through a raw,
unbuffered stream and through a buffered one.

Author: Tim Hosking
Contact: https://github.com/Munger
License: MIT
"""

import io
import os
from enum import Enum
from typing import IO, NamedTuple, Optional

from mountio.core.errors import ErrorKind, FileStoreError
from mountio.core.global_config import GlobalConfig
from mountio.core.logging import DEBUG, EventEmitter, EventObserver, is_enabled
from mountio.core.physical_io import PhysicalIO
from mountio.core.stream_timer import StreamTimer

NS_PER_MS = 1_000_000


class ReadMethod(Enum):
    UNBUFFERED = "unbuffered"
    BUFFERED = "buffered"


class TimingSample(NamedTuple):
    """One measured drain of a stream. Immutable."""
    duration_ns: int
    byte_count: int
    method: ReadMethod

    @property
    def duration_ms(self) -> float:
        return self.duration_ns / NS_PER_MS


class ComparisonResult(NamedTuple):
    unbuffered: TimingSample
    buffered: TimingSample
    delta_ns: int

    @property
    def buffered_faster(self) -> bool:
        return self.delta_ns > 0


class BufferedVsUnbufferedComparator(EventEmitter):
    """
    Compares draining a file byte-by-byte with and without a buffering layer.

    compare() always runs the unbuffered pass first and the buffered pass second,
    one after the other. The second pass reads from an OS page cache the first pass
    has already warmed, which favours the buffered result; keep the order fixed so
    deltas stay comparable between runs. A negative delta is a normal outcome for
    small files, not an error.
    """

    def __init__(self, observer: Optional[EventObserver] = None, timer: Optional[StreamTimer] = None,
                 buffer_size: Optional[int] = None):
        super().__init__(observer)
        if buffer_size is not None and buffer_size <= 0:
            raise ValueError("buffer_size must be positive")
        self.timer = timer if timer is not None else StreamTimer()
        self.buffer_size = buffer_size

    def measure(self, stream: IO, method: ReadMethod = ReadMethod.UNBUFFERED) -> TimingSample:
        """Drain stream fully and return how long it took."""
        if stream is None:
            raise ValueError("stream cannot be None")
        try:
            duration, count = self.timer.drain(stream)
        except OSError as e:
            self._handle_error("error while reading stream", e, method=method.value)
            raise
        return TimingSample(duration, count, method)

    def _open_unbuffered(self, path) -> IO:
        return PhysicalIO.open(path, 'rb', buffering=0)

    def _open_buffered(self, path) -> IO:
        size = self.buffer_size or GlobalConfig.get_buffer_size()
        raw = PhysicalIO.open(path, 'rb', buffering=0)
        try:
            return io.BufferedReader(raw, buffer_size=size)
        except BaseException:
            raw.close()
            raise

    def measure_unbuffered(self, path) -> TimingSample:
        with self._open_unbuffered(path) as stream:
            sample = self.measure(stream, ReadMethod.UNBUFFERED)
        self._log("unbuffered read", path=os.fspath(path), ms=sample.duration_ns // NS_PER_MS,
                  bytes=sample.byte_count)
        return sample

    def measure_buffered(self, path) -> TimingSample:
        with self._open_buffered(path) as stream:
            sample = self.measure(stream, ReadMethod.BUFFERED)
        self._log("buffered read", path=os.fspath(path), ms=sample.duration_ns // NS_PER_MS,
                  bytes=sample.byte_count)
        return sample

    def compare(self, path) -> ComparisonResult:
        """
        Measure path unbuffered, then buffered.

        Returns:
            ComparisonResult with delta_ns = unbuffered - buffered (may be negative)

        Raises:
            ValueError: path is None
            FileStoreError: the file cannot be opened or read
        """
        if path is None:
            raise ValueError("path cannot be None")
        unbuffered = self.measure_unbuffered(path)
        buffered = self.measure_buffered(path)
        delta = unbuffered.duration_ns - buffered.duration_ns
        self._log("read performance difference", path=os.fspath(path), ms=delta // NS_PER_MS)
        return ComparisonResult(unbuffered, buffered, delta)


class StreamReader(EventEmitter):
    """
    Unit-at-a-time readers for plain files.

    A per-unit DEBUG event is emitted only when the debug level shows DEBUG
    output, so normal reads do not build one event per byte.
    """

    def __init__(self, observer: Optional[EventObserver] = None):
        super().__init__(observer)

    def read_binary(self, path) -> bytes:
        """Read path byte by byte through an unbuffered stream."""
        data = bytearray()
        trace = is_enabled(DEBUG)
        with PhysicalIO.open(path, 'rb', buffering=0) as stream:
            self._log("opened for byte reading", path=os.fspath(path))
            while True:
                b = stream.read(1)
                if not b:
                    break
                data += b
                if trace:
                    self._debug("byte read", value=b[0])
        self._log("byte reading finished", path=os.fspath(path), bytes=len(data))
        return bytes(data)

    def read_chars(self, path, encoding: str = 'utf-8') -> str:
        """Read path one decoded character at a time."""
        chars = []
        trace = is_enabled(DEBUG)
        with PhysicalIO.open(path, 'r', encoding=encoding) as stream:
            self._log("opened for character reading", path=os.fspath(path), encoding=encoding)
            while True:
                try:
                    c = stream.read(1)
                except UnicodeDecodeError as e:
                    err = FileStoreError(ErrorKind.DECODE_ERROR, f"Cannot decode '{path}': {e}",
                                         path=os.fspath(path))
                    self._handle_error("character decoding failed", err, path=os.fspath(path))
                    raise err from e
                if not c:
                    break
                chars.append(c)
                if trace:
                    self._debug("char read", value=c)
        self._log("character reading finished", path=os.fspath(path), chars=len(chars))
        return ''.join(chars)

