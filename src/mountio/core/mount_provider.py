"""
Mount provider for mountio.
Resolves the handler for a container path and scopes one mount around one
logical operation.

Author: Tim Hosking
Contact: https://github.com/Munger
License: MIT
"""

import os
from contextlib import contextmanager
from typing import Iterator, Optional

from mountio.core.base_handler import ArchiveHandler
from mountio.core.errors import ArchiveError, ErrorKind
from mountio.core.handler_manager import HandlerManager
from mountio.core.logging import EventObserver


class MountProvider:
    """
    Creates archive handles and guarantees they are released.

    Every mount obtained through mounted() is unmounted exactly once when the
    with-block exits, whether it returns, raises, or is interrupted. Pending
    changes are committed only on a clean exit.

    Two MountProviders (or two processes) mounting the same container are not
    coordinated; concurrent writers race and the last os.replace wins.
    """

    def __init__(self, observer: Optional[EventObserver] = None):
        self.observer = observer

    def handler_for(self, container_path):
        handler_cls = HandlerManager.get_handler_for_path(container_path)
        if handler_cls is None:
            raise ArchiveError(ErrorKind.IO, f"No handler available for container: {container_path}",
                               container=os.fspath(container_path))
        return handler_cls

    @contextmanager
    def mounted(self, container_path, writable: bool = False) -> Iterator[ArchiveHandler]:
        """
        Mount container_path for the duration of the block.

        Args:
            container_path: Path to the container
            writable: Mount for writing; a missing container is then created on commit

        Raises:
            ArchiveError(NOT_FOUND): container missing on a read-only mount
            ArchiveError(CORRUPT): container cannot be parsed
        """
        if container_path is None:
            raise ValueError("container_path cannot be None")
        handler_cls = self.handler_for(container_path)
        handler = handler_cls(container_path, writable=writable, create=writable, observer=self.observer)
        handler.mount()
        clean_exit = False
        try:
            yield handler
            clean_exit = True
        finally:
            handler.unmount(commit=clean_exit)
