"""
Error types for mountio.

Each component raises one error type carrying an ErrorKind tag, so callers
branch on ``err.kind`` instead of on a class hierarchy:

    try:
        fs.archives.read_entry(zip_path, "missing.txt")
    except ArchiveError as e:
        if e.kind is ErrorKind.NOT_FOUND:
            ...

Author: Tim Hosking
Contact: https://github.com/Munger
License: MIT
"""

import errno
from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    NOT_FOUND = "not_found"
    CORRUPT = "corrupt"
    PERMISSION = "permission"
    DECODE_ERROR = "decode_error"
    ALREADY_EXISTS = "already_exists"
    IO = "io"


class ArchiveError(Exception):
    """Failure mounting or operating on an archive container."""

    def __init__(self, kind: ErrorKind, message: str, container: Optional[str] = None, entry: Optional[str] = None):
        super().__init__(message)
        self.kind = kind
        self.container = container
        self.entry = entry

    @property
    def recoverable(self) -> bool:
        return self.kind is ErrorKind.NOT_FOUND


class FileStoreError(IOError):
    """Failure of a plain-file operation."""

    def __init__(self, kind: ErrorKind, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.kind = kind
        self.path = path


def kind_for_os_error(exc: BaseException) -> ErrorKind:
    """Map an OSError (or decode failure) onto the ErrorKind it represents."""
    if isinstance(exc, UnicodeError):
        return ErrorKind.DECODE_ERROR
    if isinstance(exc, FileNotFoundError):
        return ErrorKind.NOT_FOUND
    if isinstance(exc, PermissionError):
        return ErrorKind.PERMISSION
    if isinstance(exc, FileExistsError):
        return ErrorKind.ALREADY_EXISTS
    if isinstance(exc, OSError) and exc.errno == errno.ENOENT:
        return ErrorKind.NOT_FOUND
    return ErrorKind.IO
