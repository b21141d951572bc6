"""
physical_io.py

*** INTERNAL MODULE: THE ONLY PLACE MOUNTIO TOUCHES THE HOST FILESYSTEM DIRECTLY ***

Every host syscall made by mountio goes through PhysicalIO so that OSError and
decode failures are translated into FileStoreError in exactly one place. Public
code should use PlainFileStore (mountio.api.files_api) or ArchiveFileSystem
(mountio.api.archives_api) instead of calling this module.

Author: Tim Hosking
Contact: https://github.com/Munger
License: MIT
"""

import contextlib
import os
import shutil
import stat
import tempfile
from typing import Iterator

from mountio.core.errors import FileStoreError, kind_for_os_error
from mountio.core.logging import debug_print

TEMP_PREFIX = ".mountio-"


@contextlib.contextmanager
def translate_errors(op: str, path):
    """Re-raise OSError/UnicodeError from the wrapped block as FileStoreError."""
    try:
        yield
    except FileStoreError:
        raise
    except (OSError, UnicodeError) as e:
        kind = kind_for_os_error(e)
        debug_print(f"[PhysicalIO.{op}] {kind.value}: {path}: {e}", level=1, exc=e)
        raise FileStoreError(kind, f"{op} failed for '{path}': {e}", path=os.fspath(path)) from e


def match_mode(temp_path, reference):
    """
    Give temp_path the permission bits of reference, or the umask default for a
    new file when reference does not exist. mkstemp always creates 0600.
    """
    try:
        mode = stat.S_IMODE(os.stat(reference).st_mode)
    except FileNotFoundError:
        mask = os.umask(0)
        os.umask(mask)
        mode = 0o666 & ~mask
    os.chmod(temp_path, mode)


class PhysicalIO:
    """
    INTERNAL IO BACKEND FOR MOUNTIO ONLY.

    Thin static wrappers over os/shutil/open. Nothing here caches state between
    calls; every method goes back to the host filesystem.
    """

    @staticmethod
    def open(path, mode='r', buffering=-1, encoding=None):
        if path is None:
            raise ValueError("PhysicalIO.open: path cannot be None")
        debug_print(f"[PhysicalIO.open] path={path}, mode={mode}, buffering={buffering}", level=3)
        with translate_errors("open", path):
            return open(path, mode, buffering=buffering, encoding=encoding)

    @staticmethod
    def read_bytes(path) -> bytes:
        debug_print(f"[PhysicalIO.read_bytes] path={path}", level=3)
        with translate_errors("read", path):
            with open(path, 'rb') as f:
                return f.read()

    @staticmethod
    def write_bytes(path, data: bytes, create_parents=False) -> int:
        debug_print(f"[PhysicalIO.write_bytes] path={path}, size={len(data)}", level=3)
        with translate_errors("write", path):
            if create_parents:
                PhysicalIO._make_parents(path)
            with open(path, 'wb') as f:
                return f.write(data)

    @staticmethod
    def read_text(path, encoding='utf-8') -> str:
        debug_print(f"[PhysicalIO.read_text] path={path}, encoding={encoding}", level=3)
        with translate_errors("read", path):
            with open(path, 'r', encoding=encoding, newline='') as f:
                return f.read()

    @staticmethod
    def write_text(path, content: str, encoding='utf-8', create_parents=False) -> int:
        debug_print(f"[PhysicalIO.write_text] path={path}, encoding={encoding}", level=3)
        with translate_errors("write", path):
            if create_parents:
                PhysicalIO._make_parents(path)
            with open(path, 'w', encoding=encoding, newline='') as f:
                return f.write(content)

    @staticmethod
    def _make_parents(path):
        parent = os.path.dirname(os.fspath(path))
        if parent:
            os.makedirs(parent, exist_ok=True)

    @staticmethod
    def copy_atomic(src, dst):
        """
        Copy src over dst through a temporary file in dst's directory, so dst is
        either fully replaced or left as it was.
        """
        debug_print(f"[PhysicalIO.copy_atomic] src={src}, dst={dst}", level=3)
        dst_dir = os.path.dirname(os.path.abspath(os.fspath(dst)))
        with translate_errors("copy", src):
            fsrc = open(src, 'rb')
        with fsrc, translate_errors("copy", dst):
            fd, temp_path = tempfile.mkstemp(prefix=TEMP_PREFIX, dir=dst_dir)
            try:
                with os.fdopen(fd, 'wb') as fdst:
                    shutil.copyfileobj(fsrc, fdst)
                shutil.copymode(src, temp_path)
                os.replace(temp_path, dst)
            except BaseException:
                with contextlib.suppress(FileNotFoundError):
                    os.remove(temp_path)
                raise

    @staticmethod
    def replace(src, dst):
        debug_print(f"[PhysicalIO.replace] src={src}, dst={dst}", level=3)
        # A present source means the failure lies with the destination
        blamed = dst if os.path.lexists(src) else src
        with translate_errors("rename", blamed):
            os.replace(src, dst)

    @staticmethod
    def remove(path):
        debug_print(f"[PhysicalIO.remove] path={path}", level=3)
        with translate_errors("remove", path):
            if os.path.isdir(path) and not os.path.islink(path):
                os.rmdir(path)
            else:
                os.remove(path)

    @staticmethod
    def mkdir(path, parents=False, exist_ok=True):
        debug_print(f"[PhysicalIO.mkdir] path={path}, parents={parents}, exist_ok={exist_ok}", level=3)
        with translate_errors("mkdir", path):
            if parents:
                os.makedirs(path, exist_ok=exist_ok)
            elif not (exist_ok and os.path.isdir(path)):
                os.mkdir(path)

    @staticmethod
    def stat(path, follow_symlinks=True) -> os.stat_result:
        debug_print(f"[PhysicalIO.stat] path={path}, follow_symlinks={follow_symlinks}", level=3)
        with translate_errors("stat", path):
            return os.stat(path, follow_symlinks=follow_symlinks)

    @staticmethod
    def exists(path) -> bool:
        return os.path.exists(path)

    @staticmethod
    def is_dir(path) -> bool:
        return os.path.isdir(path)

    @staticmethod
    def scandir(path) -> Iterator[os.DirEntry]:
        """Yield directory entries lazily; the scandir handle is closed when the generator ends."""
        debug_print(f"[PhysicalIO.scandir] path={path}", level=3)
        with translate_errors("scandir", path):
            it = os.scandir(path)
        with it:
            for entry in it:
                yield entry
