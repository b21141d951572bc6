"""
Logging and debug output for mountio.

Components never print directly. They hand an Event to the observer they were
constructed with; the default observer routes events through debug_print,
which consults GlobalConfig for the current debug level.

Author: Tim Hosking
Contact: https://github.com/Munger
License: MIT
"""

import sys
import traceback
from typing import Any, Dict, List, NamedTuple, Optional

if sys.version_info >= (3, 8):
    from typing import Protocol
else:
    from typing_extensions import Protocol

from mountio.core.global_config import GlobalConfig

ERROR = "ERROR"
WARNING = "WARNING"
INFO = "INFO"
DEBUG = "DEBUG"

# Debug level at which each event level becomes visible
_LEVEL_THRESHOLDS = {ERROR: 1, WARNING: 1, INFO: 2, DEBUG: 3}


def debug_print(msg, level=1, exc=None):
    """
    Print debug output if the current debug level is >= level.
    If debug level is 4 or higher, also print the full stack traceback.

    Args:
        msg: Message to print
        level: Debug level threshold
        exc: Optional exception object (if provided, stack trace will be printed at debug_level >= 4)
    """
    debug_level = GlobalConfig.get_debug_level()
    if debug_level >= level:
        print(f"[MOUNTIO-DEBUG-{level}] {msg}")
        if exc is not None and debug_level >= 4:
            print("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)))


def is_enabled(level: str) -> bool:
    """Whether an event of this level would be printed at the current debug level."""
    return GlobalConfig.get_debug_level() >= _LEVEL_THRESHOLDS.get(level, 1)


class Event(NamedTuple):
    """A structured, log-like notification emitted by a component."""
    level: str
    message: str
    attributes: Dict[str, Any]


class EventObserver(Protocol):
    def notify(self, event: Event) -> None:
        ...


class DebugPrintObserver:
    """Default observer: formats events and hands them to debug_print."""

    def notify(self, event: Event) -> None:
        threshold = _LEVEL_THRESHOLDS.get(event.level, 1)
        attrs = " ".join(f"{k}={v}" for k, v in event.attributes.items() if k != "exc")
        msg = f"{event.level} {event.message}"
        if attrs:
            msg = f"{msg} ({attrs})"
        debug_print(msg, level=threshold, exc=event.attributes.get("exc"))


class RecordingObserver:
    """Keeps every event it receives; used by tests to assert on emitted events."""

    def __init__(self):
        self.events: List[Event] = []

    def notify(self, event: Event) -> None:
        self.events.append(event)

    def messages(self, level: Optional[str] = None) -> List[str]:
        return [e.message for e in self.events if level is None or e.level == level]

    def clear(self):
        self.events.clear()


class NullObserver:
    def notify(self, event: Event) -> None:
        pass


class EventEmitter:
    """
    Mixin giving a component an injected observer and small helpers to emit
    events on it. Components call self._log(...) the way handlers in this
    library always have; the observer decides what happens to the event.
    """

    def __init__(self, observer: Optional[EventObserver] = None):
        self.observer = observer if observer is not None else DebugPrintObserver()

    def _emit(self, level: str, message: str, **attributes):
        self.observer.notify(Event(level, message, attributes))

    def _log(self, message: str, **attributes):
        self._emit(INFO, f"{type(self).__name__}: {message}", **attributes)

    def _debug(self, message: str, **attributes):
        self._emit(DEBUG, f"{type(self).__name__}: {message}", **attributes)

    def _handle_error(self, message: str, exc: BaseException, **attributes):
        self._emit(ERROR, f"{type(self).__name__}: {message}", exc=exc, **attributes)
