"""
Base handler for archive containers.
Defines the mount lifecycle and the entry-level interface every container
handler implements.

Author: Tim Hosking
Contact: https://github.com/Munger
License: MIT
"""

import contextlib
import os
from abc import ABC, abstractmethod
from enum import Enum
from typing import List, NamedTuple, Optional, Set

from mountio.core.errors import ArchiveError, ErrorKind
from mountio.core.logging import EventEmitter, EventObserver


class ArchiveEntry(NamedTuple):
    """Information about an entry in an archive."""
    path: str
    size: int
    modified: float
    is_dir: bool


class MountState(Enum):
    UNMOUNTED = "unmounted"
    MOUNTING = "mounting"
    MOUNTED = "mounted"
    OPERATING = "operating"
    UNMOUNTING = "unmounting"


class ArchiveHandler(EventEmitter, ABC):
    """
    Base class for archive container handlers.

    A handler instance is one mounted container (an "archive handle"). It is valid
    between mount() and unmount(); entry operations outside that window raise
    ValueError. Used as a context manager it mounts on entry and unmounts on exit,
    committing pending changes only when the block finished without an exception.

    Concrete subclasses are registered with HandlerManager on definition, keyed by
    get_supported_extensions().
    """

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        from mountio.core.handler_manager import HandlerManager
        if not getattr(cls.get_supported_extensions, '__isabstractmethod__', False):
            for ext in cls.get_supported_extensions():
                HandlerManager.register_handler(ext, cls)

    def __init__(self, path, writable: bool = False, create: bool = False,
                 observer: Optional[EventObserver] = None):
        """
        Args:
            path: Path of the backing container file
            writable: Whether entry writes are allowed while mounted
            create: Create the container on commit if it does not exist yet
            observer: Receives mount and entry events
        """
        super().__init__(observer)
        self.path = os.fspath(path)
        self.writable = writable
        self.create = create
        self.state = MountState.UNMOUNTED

    # --- Lifecycle ---
    def mount(self):
        if self.state is not MountState.UNMOUNTED:
            raise ValueError(f"Container already mounted: {self.path}")
        self.state = MountState.MOUNTING
        try:
            self._mount()
        except BaseException:
            self.state = MountState.UNMOUNTED
            raise
        self.state = MountState.MOUNTED
        self._log("mount opened", container=self.path, writable=self.writable)
        return self

    def unmount(self, commit: bool = True):
        """Flush (when commit is true) and release the container. Safe to call once per mount."""
        if self.state is MountState.UNMOUNTED:
            return
        self.state = MountState.UNMOUNTING
        try:
            self._unmount(commit)
        finally:
            self.state = MountState.UNMOUNTED
        self._log("mount closed", container=self.path, committed=commit)

    @property
    def mounted(self) -> bool:
        return self.state in (MountState.MOUNTED, MountState.OPERATING)

    @contextlib.contextmanager
    def operating(self):
        """Mark the handle busy with one logical operation."""
        if not self.mounted:
            raise ValueError(f"I/O operation on unmounted container: {self.path}")
        self.state = MountState.OPERATING
        try:
            yield self
        finally:
            if self.state is MountState.OPERATING:
                self.state = MountState.MOUNTED

    def __enter__(self):
        return self.mount()

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.unmount(commit=exc_type is None)

    # --- Path normalization helpers ---
    @staticmethod
    def normalize_entry_name(name: str) -> str:
        """
        Turn '/dir/file.txt', 'dir/file.txt' or 'dir\\file.txt' into the stored
        form 'dir/file.txt'.
        """
        if name is None:
            raise ValueError("Entry name cannot be None")
        norm = name.strip().replace('\\', '/')
        while '//' in norm:
            norm = norm.replace('//', '/')
        norm = norm.lstrip('/')
        if not norm:
            raise ValueError(f"Entry name cannot be empty: {name!r}")
        if any(part in ('.', '..') for part in norm.rstrip('/').split('/')):
            raise ValueError(f"Entry name may not contain '.' or '..' components: {name!r}")
        return norm

    @staticmethod
    def display_name(stored: str) -> str:
        return '/' + stored

    def _require_writable(self, entry: str):
        if not self.writable:
            raise ArchiveError(ErrorKind.IO, f"Container mounted read-only: {self.path}",
                               container=self.path, entry=entry)

    # --- Abstract methods ---
    @abstractmethod
    def _mount(self) -> None:
        """Open the container for access."""

    @abstractmethod
    def _unmount(self, commit: bool) -> None:
        """Write pending changes when commit is true, then release all resources."""

    @abstractmethod
    def entry_exists(self, name: str) -> bool:
        pass

    @abstractmethod
    def read_entry(self, name: str) -> bytes:
        pass

    @abstractmethod
    def write_entry(self, name: str, data: bytes) -> None:
        """Stage data under name, replacing any existing entry of that name."""

    @abstractmethod
    def remove_entry(self, name: str) -> None:
        pass

    @abstractmethod
    def list_entries(self) -> List[ArchiveEntry]:
        pass

    @classmethod
    @abstractmethod
    def get_supported_extensions(cls) -> Set[str]:
        """
        Get the file extensions supported by this handler.

        Returns:
            Set of supported extensions (with leading dot)
        """
