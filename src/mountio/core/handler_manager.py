"""
HandlerManager for mountio.
Maps container file extensions to the handler class that mounts them.

Author: Tim Hosking
Contact: https://github.com/Munger
License: MIT
"""

import os
from typing import Dict, List, Optional


class HandlerManager:
    """
    Central registry of archive handlers.

    Usage example:
        HandlerManager.register_handler('.zip', ZipHandler)
        handler_cls = HandlerManager.get_handler_for_path('bundle.zip')
        HandlerManager.deregister_handler('.zip')
    """
    _registry: Dict[str, type] = {}
    _default: Optional[str] = None

    @classmethod
    def register_handler(cls, ext: str, handler_cls: type):
        cls._registry[ext.lower()] = handler_cls

    @classmethod
    def deregister_handler(cls, ext: str):
        cls._registry.pop(ext.lower(), None)

    @classmethod
    def set_default(cls, ext: str):
        """Handler used for container paths whose extension is not registered."""
        cls._default = ext.lower()

    @classmethod
    def get_handler(cls, ext: str):
        return cls._registry.get(ext.lower())

    @classmethod
    def get_handler_for_path(cls, path) -> Optional[type]:
        """
        Resolve the handler for a given path, longest extension first.
        Falls back to the default handler, or None if there is none.
        """
        basename = os.path.basename(os.fspath(path)).lower()
        for ext in sorted(cls._registry.keys(), key=len, reverse=True):
            if basename.endswith(ext):
                return cls._registry[ext]
        if cls._default is not None:
            return cls._registry.get(cls._default)
        return None

    @classmethod
    def get_supported_formats(cls) -> List[str]:
        return sorted(cls._registry.keys())
