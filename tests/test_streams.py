"""
Unit tests for mountio stream timing, streaming reads and the buffered vs
unbuffered comparator.

Author: Tim Hosking
Contact: https://github.com/Munger
License: MIT
"""
import io
import os
import sys
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))
import shutil
import tempfile

import pytest

from mountio import (
    BufferedVsUnbufferedComparator,
    ErrorKind,
    FileStoreError,
    MountIO,
    ReadMethod,
    RecordingObserver,
    StreamReader,
    StreamTimer,
)
from mountio.core.global_config import GlobalConfig
from mountio.core.physical_io import PhysicalIO


@pytest.fixture(scope="function")
def temp_dir():
    debug_level = os.environ.get('MOUNTIO_DEBUG_LEVEL')
    if debug_level is not None:
        GlobalConfig.set_debug_level(int(debug_level))
    d = tempfile.mkdtemp()
    yield d
    shutil.rmtree(d)
    GlobalConfig.reset()


@pytest.fixture
def sample_file(temp_dir):
    path = os.path.join(temp_dir, "largeTest.bin")
    with open(path, 'wb') as f:
        f.write(os.urandom(4096))
    return path


class FixedTimer(StreamTimer):
    """Drains for real but reports scripted durations."""

    def __init__(self, durations):
        super().__init__()
        self.durations = list(durations)
        self.stream_types = []

    def drain(self, stream):
        self.stream_types.append(type(stream))
        _, count = super().drain(stream)
        return self.durations.pop(0), count


class FailingStream:
    def read(self, size=-1):
        raise OSError("device error")


# --- StreamTimer ---
def test_timer_counts_bytes():
    duration, count = StreamTimer().drain(io.BytesIO(b"abc"))
    assert count == 3
    assert duration >= 0


def test_timer_counts_characters():
    _, count = StreamTimer().drain(io.StringIO("héllo"))
    assert count == 5


def test_timer_empty_stream():
    duration, count = StreamTimer().drain(io.BytesIO(b""))
    assert count == 0
    assert duration >= 0
    assert StreamTimer().time(io.BytesIO(b"")) >= 0


def test_timer_exhausts_stream():
    stream = io.BytesIO(b"0123456789")
    StreamTimer().time(stream)
    assert stream.read() == b""


def test_timer_never_negative():
    ticks = iter([500, 100])
    timer = StreamTimer(clock=lambda: next(ticks))
    assert timer.time(io.BytesIO(b"x")) == 0


def test_timer_uses_clock_difference():
    ticks = iter([1_000, 4_500])
    timer = StreamTimer(clock=lambda: next(ticks))
    assert timer.drain(io.BytesIO(b"xyz")) == (3_500, 3)


def test_timer_rejects_none():
    with pytest.raises(ValueError):
        StreamTimer().time(None)


def test_timer_propagates_io_errors():
    with pytest.raises(OSError):
        StreamTimer().time(FailingStream())


# --- BufferedVsUnbufferedComparator ---
def test_compare_reads_whole_file_both_ways(sample_file):
    observer = RecordingObserver()
    comparator = BufferedVsUnbufferedComparator(observer)
    result = comparator.compare(sample_file)
    assert result.unbuffered.byte_count == 4096
    assert result.buffered.byte_count == 4096
    assert result.unbuffered.method is ReadMethod.UNBUFFERED
    assert result.buffered.method is ReadMethod.BUFFERED
    assert result.delta_ns == result.unbuffered.duration_ns - result.buffered.duration_ns
    info = observer.messages("INFO")
    assert info.index("BufferedVsUnbufferedComparator: unbuffered read") < \
        info.index("BufferedVsUnbufferedComparator: buffered read")
    assert "BufferedVsUnbufferedComparator: read performance difference" in info


def test_compare_runs_unbuffered_first(sample_file):
    timer = FixedTimer([2_000_000, 1_000_000])
    comparator = BufferedVsUnbufferedComparator(RecordingObserver(), timer=timer)
    result = comparator.compare(sample_file)
    assert timer.stream_types == [io.FileIO, io.BufferedReader]
    assert result.delta_ns == 1_000_000
    assert result.buffered_faster
    assert result.unbuffered.duration_ms == 2.0


def test_compare_tolerates_negative_delta(sample_file):
    timer = FixedTimer([100, 300])
    comparator = BufferedVsUnbufferedComparator(RecordingObserver(), timer=timer)
    result = comparator.compare(sample_file)
    assert result.delta_ns == -200
    assert not result.buffered_faster


def test_compare_empty_file(temp_dir):
    path = os.path.join(temp_dir, "empty.bin")
    open(path, 'wb').close()
    result = BufferedVsUnbufferedComparator(RecordingObserver()).compare(path)
    assert result.unbuffered.byte_count == 0
    assert result.buffered.byte_count == 0


def test_compare_uses_configured_buffer_size(sample_file):
    comparator = BufferedVsUnbufferedComparator(RecordingObserver(), buffer_size=16)
    with comparator._open_buffered(sample_file) as stream:
        assert isinstance(stream, io.BufferedReader)
    assert comparator.measure_buffered(sample_file).byte_count == 4096


def test_compare_rejects_none():
    with pytest.raises(ValueError):
        BufferedVsUnbufferedComparator(RecordingObserver()).compare(None)
    with pytest.raises(ValueError):
        BufferedVsUnbufferedComparator(RecordingObserver()).measure(None)


def test_compare_missing_file(temp_dir):
    with pytest.raises(FileStoreError) as excinfo:
        BufferedVsUnbufferedComparator(RecordingObserver()).compare(os.path.join(temp_dir, "missing.bin"))
    assert excinfo.value.kind is ErrorKind.NOT_FOUND


def test_measure_reports_read_failure():
    observer = RecordingObserver()
    comparator = BufferedVsUnbufferedComparator(observer)
    with pytest.raises(OSError):
        comparator.measure(FailingStream(), ReadMethod.BUFFERED)
    assert observer.messages("ERROR") == ["BufferedVsUnbufferedComparator: error while reading stream"]


def test_streams_namespace(sample_file):
    fs = MountIO(RecordingObserver())
    with open(sample_file, 'rb') as stream:
        sample = fs.streams.measure(stream, ReadMethod.BUFFERED)
    assert sample.byte_count == 4096
    assert fs.streams.compare(sample_file).buffered.byte_count == 4096


# --- StreamReader ---
def test_read_binary(temp_dir):
    path = os.path.join(temp_dir, "binaryFile.bin")
    with open(path, 'wb') as f:
        f.write(bytes([65, 66, 67, 68, 69]))
    observer = RecordingObserver()
    assert StreamReader(observer).read_binary(path) == b"ABCDE"
    assert "StreamReader: byte reading finished" in observer.messages("INFO")
    assert observer.messages("DEBUG") == []


def test_read_binary_traces_each_byte_at_debug_level(temp_dir):
    path = os.path.join(temp_dir, "binaryFile.bin")
    with open(path, 'wb') as f:
        f.write(b"xyz")
    GlobalConfig.set_debug_level(3)
    observer = RecordingObserver()
    StreamReader(observer).read_binary(path)
    assert observer.messages("DEBUG") == ["StreamReader: byte read"] * 3


def test_read_chars(temp_dir):
    path = os.path.join(temp_dir, "textFile.txt")
    with open(path, 'w', encoding='utf-8') as f:
        f.write("Привет, мир!")
    fs = MountIO(RecordingObserver())
    assert fs.streams.read_chars(path) == "Привет, мир!"
    assert fs.streams.read_binary(path) == "Привет, мир!".encode('utf-8')


def test_read_chars_decode_error(temp_dir):
    path = os.path.join(temp_dir, "bad.txt")
    with open(path, 'wb') as f:
        f.write(b"ok\xff\xfe")
    observer = RecordingObserver()
    with pytest.raises(FileStoreError) as excinfo:
        StreamReader(observer).read_chars(path)
    assert excinfo.value.kind is ErrorKind.DECODE_ERROR
    assert "StreamReader: character decoding failed" in observer.messages("ERROR")


def test_read_missing_file(temp_dir):
    with pytest.raises(FileStoreError) as excinfo:
        StreamReader(RecordingObserver()).read_binary(os.path.join(temp_dir, "missing.bin"))
    assert excinfo.value.kind is ErrorKind.NOT_FOUND


def test_comparator_rejects_non_positive_buffer_size():
    with pytest.raises(ValueError):
        BufferedVsUnbufferedComparator(RecordingObserver(), buffer_size=0)
    with pytest.raises(ValueError):
        BufferedVsUnbufferedComparator(RecordingObserver(), buffer_size=-1)


def test_buffered_open_failure_closes_raw_stream(sample_file, monkeypatch):
    opened = []
    real_open = PhysicalIO.open

    def recording_open(*args, **kwargs):
        stream = real_open(*args, **kwargs)
        opened.append(stream)
        return stream
    monkeypatch.setattr(PhysicalIO, "open", staticmethod(recording_open))
    comparator = BufferedVsUnbufferedComparator(RecordingObserver())
    comparator.buffer_size = -1
    with pytest.raises(ValueError):
        comparator.measure_buffered(sample_file)
    assert len(opened) == 1
    assert opened[0].closed
