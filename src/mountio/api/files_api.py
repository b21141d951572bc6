"""
Plain file operations for mountio.

Whole-file read/write/copy/move/delete, metadata inspection and directory
listing against the host filesystem. Metadata is never cached; every call goes
back to the host.

Author: Tim Hosking
Contact: https://github.com/Munger
License: MIT
"""

import errno
import os
import stat
from typing import Iterator, List, NamedTuple, Optional

from mountio.core.errors import ErrorKind, FileStoreError
from mountio.core.logging import EventEmitter, EventObserver
from mountio.core.physical_io import PhysicalIO


class FileRecord(NamedTuple):
    """Snapshot of a host file's metadata at the time it was taken."""
    path: str
    size: int
    modified: float
    is_dir: bool

    @classmethod
    def from_stat(cls, path, st_result: os.stat_result) -> 'FileRecord':
        return cls(os.fspath(path), st_result.st_size, st_result.st_mtime, stat.S_ISDIR(st_result.st_mode))


class PlainFileStore(EventEmitter):
    """
    Implementation of plain file operations.
    Exposed as MountIO.files; can also be used on its own.
    """

    def __init__(self, observer: Optional[EventObserver] = None):
        super().__init__(observer)

    def _fail(self, message: str, exc: FileStoreError):
        self._handle_error(message, exc, path=exc.path, kind=exc.kind.value)
        return exc

    # --- Text and bytes ---
    def write_text(self, path, content: str, encoding: str = 'utf-8', create_parents: bool = False) -> int:
        """
        Overwrite the file at path with content.

        Args:
            path: Target file
            content: Text to write
            encoding: Text encoding
            create_parents: Create missing parent directories first

        Returns:
            Number of characters written
        """
        try:
            written = PhysicalIO.write_text(path, content, encoding=encoding, create_parents=create_parents)
        except FileStoreError as e:
            raise self._fail("write_text failed", e)
        self._log("file written", path=os.fspath(path), chars=written)
        return written

    def read_text(self, path, encoding: str = 'utf-8') -> str:
        try:
            return PhysicalIO.read_text(path, encoding=encoding)
        except FileStoreError as e:
            raise self._fail("read_text failed", e)

    def read_lines(self, path, encoding: str = 'utf-8') -> List[str]:
        """Read a text file and split it into lines without line terminators."""
        return self.read_text(path, encoding=encoding).splitlines()

    def write_bytes(self, path, data: bytes, create_parents: bool = False) -> int:
        try:
            written = PhysicalIO.write_bytes(path, data, create_parents=create_parents)
        except FileStoreError as e:
            raise self._fail("write_bytes failed", e)
        self._log("file written", path=os.fspath(path), size=written)
        return written

    def read_bytes(self, path) -> bytes:
        try:
            return PhysicalIO.read_bytes(path)
        except FileStoreError as e:
            raise self._fail("read_bytes failed", e)

    # --- Copy / move / delete ---
    def _check_destination(self, dst, replace_existing: bool):
        if not replace_existing and PhysicalIO.exists(dst):
            raise self._fail("destination exists", FileStoreError(
                ErrorKind.ALREADY_EXISTS, f"Destination already exists: {dst}", path=os.fspath(dst)))

    def copy(self, src, dst, replace_existing: bool = False) -> None:
        """
        Copy src to dst. dst ends up either fully replaced or unchanged.

        Raises:
            FileStoreError(ALREADY_EXISTS): dst exists and replace_existing is false
            FileStoreError(NOT_FOUND): src does not exist
        """
        self._check_destination(dst, replace_existing)
        if PhysicalIO.is_dir(src):
            raise self._fail("copy failed", FileStoreError(
                ErrorKind.IO, f"Cannot copy a directory: {src}", path=os.fspath(src)))
        try:
            PhysicalIO.copy_atomic(src, dst)
        except FileStoreError as e:
            raise self._fail("copy failed", e)
        self._log("file copied", src=os.fspath(src), dst=os.fspath(dst))

    def move(self, src, dst, replace_existing: bool = False) -> None:
        """
        Move (rename) src to dst. Atomic on one filesystem; across filesystems
        the file is copied and src is deleted only once the copy succeeded.
        """
        self._check_destination(dst, replace_existing)
        try:
            PhysicalIO.replace(src, dst)
        except FileStoreError as e:
            cause = e.__cause__
            if not (isinstance(cause, OSError) and cause.errno == errno.EXDEV):
                raise self._fail("move failed", e)
            self._debug("cross-device move, copying instead", src=os.fspath(src), dst=os.fspath(dst))
            try:
                PhysicalIO.copy_atomic(src, dst)
                PhysicalIO.remove(src)
            except FileStoreError as copy_err:
                raise self._fail("move failed", copy_err)
        self._log("file moved", src=os.fspath(src), dst=os.fspath(dst))

    def delete(self, path, if_exists: bool = False) -> bool:
        """
        Delete a file or an empty directory.

        Args:
            path: Path to remove
            if_exists: Treat a missing path as success instead of an error

        Returns:
            True if something was deleted
        """
        try:
            PhysicalIO.remove(path)
        except FileStoreError as e:
            if if_exists and e.kind is ErrorKind.NOT_FOUND:
                return False
            raise self._fail("delete failed", e)
        self._log("file deleted", path=os.fspath(path))
        return True

    # --- Metadata and traversal ---
    def exists(self, path) -> bool:
        return PhysicalIO.exists(path)

    def mkdir(self, path, create_parents: bool = False) -> None:
        try:
            PhysicalIO.mkdir(path, parents=create_parents, exist_ok=True)
        except FileStoreError as e:
            raise self._fail("mkdir failed", e)

    def stat(self, path) -> FileRecord:
        try:
            st = PhysicalIO.stat(path)
        except FileStoreError as e:
            raise self._fail("stat failed", e)
        return FileRecord.from_stat(path, st)

    def list_directory(self, path) -> Iterator[FileRecord]:
        """
        Lazily yield a FileRecord for each entry of the directory at path.

        Each call starts a new traversal. A broken symlink is reported with the
        link's own metadata; entries that vanish between listing and stat are
        skipped.
        """
        try:
            for entry in PhysicalIO.scandir(path):
                st = self._stat_entry(entry.path)
                if st is not None:
                    yield FileRecord.from_stat(entry.path, st)
        except FileStoreError as e:
            raise self._fail("list_directory failed", e)

    @staticmethod
    def _stat_entry(path) -> Optional[os.stat_result]:
        for follow in (True, False):
            try:
                return PhysicalIO.stat(path, follow_symlinks=follow)
            except FileStoreError as e:
                if e.kind is not ErrorKind.NOT_FOUND:
                    raise
        return None
