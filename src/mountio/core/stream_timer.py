"""
Stream timing for mountio.
Measures the wall-clock time needed to drain a stream one unit at a time.

Author: Tim Hosking
Contact: https://github.com/Munger
License: MIT
"""

import time
from typing import IO, Tuple


class StreamTimer:
    """
    Drains a stream with read(1) until end-of-data and reports how long it took.

    A byte stream yields b'' at end-of-data and a text stream yields ''; both are
    falsy, so the same loop handles either. I/O errors propagate unchanged and the
    partial duration is never reported.
    """

    def __init__(self, clock=time.perf_counter_ns):
        self._clock = clock

    def drain(self, stream: IO) -> Tuple[int, int]:
        """
        Read stream to exhaustion.

        Returns:
            (duration in nanoseconds, number of units read)
        """
        if stream is None:
            raise ValueError("stream cannot be None")
        read = stream.read
        count = 0
        start = self._clock()
        while read(1):
            count += 1
        elapsed = self._clock() - start
        return max(elapsed, 0), count

    def time(self, stream: IO) -> int:
        """Return nanoseconds taken to exhaust stream."""
        return self.drain(stream)[0]
