"""
ZIP container handler for mountio.
Mounts a zip archive so its entries can be read, written and removed.

Author: Tim Hosking
Contact: https://github.com/Munger
License: MIT
"""

import contextlib
import os
import tempfile
import time
import zipfile
import zlib
from datetime import datetime
from typing import Dict, List, Optional, Set

from mountio.core.base_handler import ArchiveEntry, ArchiveHandler
from mountio.core.errors import ArchiveError, ErrorKind, kind_for_os_error
from mountio.core.global_config import GlobalConfig
from mountio.core.handler_manager import HandlerManager
from mountio.core.physical_io import match_mode

TEMP_PREFIX = ".mountio-zip-"

# zipfile signals a damaged container through several unrelated exceptions
_CORRUPTION_ERRORS = (zipfile.BadZipFile, zlib.error, EOFError, NotImplementedError)


def _dos_to_timestamp(date_time) -> float:
    return time.mktime(datetime(*date_time).timetuple())


class ZipHandler(ArchiveHandler):
    """
    Handler for ZIP format containers.

    Reads go straight to the open ZipFile. Writes and removals are staged in
    memory and applied on unmount by rebuilding the whole archive into a temporary
    file beside the container, then moving it into place with os.replace. The zip
    format cannot drop or overwrite a member in place, and rebuilding is what
    keeps one entry per name and leaves the old container untouched when anything
    fails before the final rename.
    """

    def __init__(self, path, writable: bool = False, create: bool = False, observer=None,
                 compression: Optional[int] = None):
        super().__init__(path, writable=writable, create=create, observer=observer)
        self.compression = compression if compression is not None else GlobalConfig.get("compression")
        self.zip_file: Optional[zipfile.ZipFile] = None
        # name -> new content, or None for a removed entry
        self._pending: Dict[str, Optional[bytes]] = {}
        self.modified = False

    @classmethod
    def get_supported_extensions(cls) -> Set[str]:
        return {'.zip', '.jar'}

    # --- Error translation ---
    @contextlib.contextmanager
    def _zip_errors(self, action: str, entry: Optional[str] = None):
        try:
            yield
        except ArchiveError:
            raise
        except _CORRUPTION_ERRORS as e:
            raise ArchiveError(ErrorKind.CORRUPT, f"Corrupt zip container '{self.path}': {e}",
                               container=self.path, entry=entry) from e
        except OSError as e:
            kind = kind_for_os_error(e)
            raise ArchiveError(kind, f"Error {action} '{self.path}': {e}",
                               container=self.path, entry=entry) from e

    # --- Lifecycle ---
    def _mount(self) -> None:
        if not os.path.exists(self.path):
            if self.writable and self.create:
                # Created on commit; nothing to open yet
                self.zip_file = None
                return
            raise ArchiveError(ErrorKind.NOT_FOUND, f"Container does not exist: {self.path}",
                               container=self.path)
        with self._zip_errors("mounting"):
            self.zip_file = zipfile.ZipFile(self.path, 'r')

    def _unmount(self, commit: bool) -> None:
        try:
            if commit and self.modified:
                self._rebuild_zip()
        finally:
            if self.zip_file is not None:
                self.zip_file.close()
                self.zip_file = None
            self._pending.clear()
            self.modified = False

    def _rebuild_zip(self) -> None:
        """Write existing plus staged members to a temp file and swap it in."""
        target_dir = os.path.dirname(os.path.abspath(self.path))
        with self._zip_errors("creating temporary container"):
            fd, temp_path = tempfile.mkstemp(prefix=TEMP_PREFIX, suffix='.zip', dir=target_dir)
        try:
            with self._zip_errors("rebuilding"):
                with os.fdopen(fd, 'wb') as raw, zipfile.ZipFile(raw, 'w', self.compression) as new_zip:
                    if self.zip_file is not None:
                        # getinfo resolves a duplicated name to its last member, as read() does
                        for name in dict.fromkeys(self.zip_file.namelist()):
                            if name in self._pending:
                                continue
                            info = self.zip_file.getinfo(name)
                            # Fresh ZipInfo: writestr rewrites offsets on the one it is given
                            clone = zipfile.ZipInfo(info.filename, date_time=info.date_time)
                            clone.compress_type = info.compress_type
                            clone.external_attr = info.external_attr
                            clone.comment = info.comment
                            new_zip.writestr(clone, self.zip_file.read(info))
                    for name, data in self._pending.items():
                        if data is None:
                            continue
                        info = zipfile.ZipInfo(name, date_time=time.localtime()[:6])
                        info.compress_type = self.compression
                        info.external_attr = 0o644 << 16
                        new_zip.writestr(info, data)
                if self.zip_file is not None:
                    self.zip_file.close()
                    self.zip_file = None
                match_mode(temp_path, self.path)
                os.replace(temp_path, self.path)
        except BaseException:
            with contextlib.suppress(FileNotFoundError):
                os.remove(temp_path)
            raise
        self._debug("container rebuilt", container=self.path, changes=len(self._pending))

    # --- Entry operations ---
    def _stored_names(self) -> List[str]:
        return self.zip_file.namelist() if self.zip_file is not None else []

    def entry_exists(self, name: str) -> bool:
        """
        Explicit existence probe. A name counts as present if it is a member, or
        a directory that has members below it.
        """
        stored = self.normalize_entry_name(name)
        with self.operating():
            if stored in self._pending:
                return self._pending[stored] is not None
            bare = stored.rstrip('/')
            prefix = bare + '/'
            for candidate in self._live_names():
                if candidate == bare or candidate.startswith(prefix):
                    return True
            return False

    def _live_names(self) -> List[str]:
        names = [n for n in self._stored_names() if n not in self._pending]
        names.extend(n for n, data in self._pending.items() if data is not None)
        return names

    def read_entry(self, name: str) -> bytes:
        stored = self.normalize_entry_name(name)
        if not self.entry_exists(stored):
            raise ArchiveError(ErrorKind.NOT_FOUND,
                               f"Entry {self.display_name(stored)} not found in {self.path}",
                               container=self.path, entry=self.display_name(stored))
        with self.operating():
            pending = self._pending.get(stored)
            if pending is not None:
                return pending
            if stored not in self._stored_names():
                raise ArchiveError(ErrorKind.IO, f"Entry {self.display_name(stored)} is a directory",
                                   container=self.path, entry=self.display_name(stored))
            with self._zip_errors("reading entry", entry=stored):
                data = self.zip_file.read(stored)
        self._debug("entry read", container=self.path, entry=self.display_name(stored), size=len(data))
        return data

    def write_entry(self, name: str, data: bytes) -> None:
        stored = self.normalize_entry_name(name)
        if stored.endswith('/'):
            raise ValueError(f"Cannot write file content to a directory entry: {name}")
        self._require_writable(self.display_name(stored))
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise TypeError(f"Entry content must be bytes, not {type(data).__name__}")
        with self.operating():
            self._pending[stored] = bytes(data)
            self.modified = True
        self._log("entry written", container=self.path, entry=self.display_name(stored), size=len(data))

    def remove_entry(self, name: str) -> None:
        stored = self.normalize_entry_name(name)
        self._require_writable(self.display_name(stored))
        with self.operating():
            if stored not in self._pending and stored not in self._stored_names():
                raise ArchiveError(ErrorKind.NOT_FOUND,
                                   f"Entry {self.display_name(stored)} not found in {self.path}",
                                   container=self.path, entry=self.display_name(stored))
            if self._pending.get(stored, b'') is None:
                raise ArchiveError(ErrorKind.NOT_FOUND,
                                   f"Entry {self.display_name(stored)} already removed",
                                   container=self.path, entry=self.display_name(stored))
            self._pending[stored] = None
            self.modified = True
        self._log("entry removed", container=self.path, entry=self.display_name(stored))

    def list_entries(self) -> List[ArchiveEntry]:
        with self.operating():
            result = []
            if self.zip_file is not None:
                for name in dict.fromkeys(self.zip_file.namelist()):
                    if name in self._pending:
                        continue
                    info = self.zip_file.getinfo(name)
                    result.append(ArchiveEntry(
                        path=self.display_name(info.filename),
                        size=info.file_size,
                        modified=_dos_to_timestamp(info.date_time),
                        is_dir=info.is_dir(),
                    ))
            now = time.time()
            for name, data in self._pending.items():
                if data is not None:
                    result.append(ArchiveEntry(self.display_name(name), len(data), now, False))
            return sorted(result, key=lambda e: e.path)


HandlerManager.set_default('.zip')
