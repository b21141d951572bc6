"""
Archive operations for mountio.

Each public method is one logical operation wrapped in its own mount:
mount -> operate -> unmount, with the unmount guaranteed on every exit path.

Author: Tim Hosking
Contact: https://github.com/Munger
License: MIT
"""

import os
from typing import List, Optional, Union

from mountio.core.base_handler import ArchiveEntry
from mountio.core.errors import ArchiveError, ErrorKind, FileStoreError
from mountio.core.global_config import GlobalConfig
from mountio.core.logging import EventEmitter, EventObserver
from mountio.core.mount_provider import MountProvider
from mountio.core.physical_io import PhysicalIO


class ArchiveFileSystem(EventEmitter):
    """
    ARCHIVE API: zip containers as mountable filesystems.
    Exposed as MountIO.archives.

    Usage:
        archives = ArchiveFileSystem()
        archives.write_entry('bundle.zip', 'hello.txt', 'Hi')
        archives.entry_exists('bundle.zip', '/hello.txt')   # True
        archives.read_entry_text('bundle.zip', 'hello.txt') # 'Hi'

    Entry names are slash-rooted; 'hello.txt' and '/hello.txt' name the same entry.
    Errors are ArchiveError with kind NOT_FOUND (missing container or entry,
    recoverable) or CORRUPT (container cannot be parsed, not retried).
    """

    def __init__(self, observer: Optional[EventObserver] = None):
        super().__init__(observer)
        self._mounts = MountProvider(self.observer)

    def _encode(self, content: Union[str, bytes], encoding: Optional[str]) -> bytes:
        if isinstance(content, str):
            return content.encode(encoding or GlobalConfig.get_encoding())
        if isinstance(content, (bytes, bytearray, memoryview)):
            return bytes(content)
        raise TypeError(f"Entry content must be str or bytes, not {type(content).__name__}")

    def write_entry(self, container_path, entry_name: str, content: Union[str, bytes],
                    encoding: Optional[str] = None) -> None:
        """
        Write content under entry_name, creating the container if it is absent and
        replacing any existing entry of that name.

        Either the entry is durably present with the new content afterwards, or an
        error is raised and the container (or its absence) is as it was.
        """
        data = self._encode(content, encoding)
        try:
            with self._mounts.mounted(container_path, writable=True) as handle:
                handle.write_entry(entry_name, data)
        except ArchiveError as e:
            self._handle_error("write_entry failed", e, container=os.fspath(container_path), entry=entry_name)
            raise

    def read_entry(self, container_path, entry_name: str) -> bytes:
        """
        Return the bytes stored under entry_name.

        Raises:
            ArchiveError(NOT_FOUND): container or entry missing
            ArchiveError(CORRUPT): container or entry data cannot be decoded
        """
        try:
            with self._mounts.mounted(container_path) as handle:
                # Explicit probe: a missing entry must never surface as a decode error
                if not handle.entry_exists(entry_name):
                    raise ArchiveError(ErrorKind.NOT_FOUND,
                                       f"File {entry_name} not found in archive {os.fspath(container_path)}",
                                       container=os.fspath(container_path), entry=entry_name)
                return handle.read_entry(entry_name)
        except ArchiveError as e:
            self._handle_error("read_entry failed", e, container=os.fspath(container_path), entry=entry_name)
            raise

    def read_entry_text(self, container_path, entry_name: str, encoding: Optional[str] = None) -> str:
        return self.read_entry(container_path, entry_name).decode(encoding or GlobalConfig.get_encoding())

    def copy_external_file(self, container_path, source_path, target_entry_name: str) -> None:
        """
        Import a host file into the container as target_entry_name, replacing any
        entry of that name.

        The source is read before the container is mounted, so a missing source
        (FileStoreError NOT_FOUND) leaves the container untouched.
        """
        try:
            data = PhysicalIO.read_bytes(source_path)
        except FileStoreError as e:
            self._handle_error("copy_external_file failed reading source", e, source=os.fspath(source_path))
            raise
        try:
            with self._mounts.mounted(container_path, writable=True) as handle:
                handle.write_entry(target_entry_name, data)
        except ArchiveError as e:
            self._handle_error("copy_external_file failed", e, container=os.fspath(container_path),
                               entry=target_entry_name)
            raise
        self._log("external file copied", source=os.path.basename(os.fspath(source_path)),
                  entry=target_entry_name)

    def entry_exists(self, container_path, entry_name: str) -> bool:
        """
        Whether entry_name exists in the container. A missing entry is False, not
        an error; a missing or corrupt container raises ArchiveError.
        """
        try:
            with self._mounts.mounted(container_path) as handle:
                return handle.entry_exists(entry_name)
        except ArchiveError as e:
            self._handle_error("entry_exists failed", e, container=os.fspath(container_path), entry=entry_name)
            raise

    def list_entries(self, container_path) -> List[ArchiveEntry]:
        try:
            with self._mounts.mounted(container_path) as handle:
                return handle.list_entries()
        except ArchiveError as e:
            self._handle_error("list_entries failed", e, container=os.fspath(container_path))
            raise

    def remove_entry(self, container_path, entry_name: str) -> None:
        """Remove entry_name from the container; ArchiveError(NOT_FOUND) if absent."""
        try:
            with self._mounts.mounted(container_path, writable=True) as handle:
                handle.remove_entry(entry_name)
        except ArchiveError as e:
            self._handle_error("remove_entry failed", e, container=os.fspath(container_path), entry=entry_name)
            raise
