"""
global_config.py
Central configuration for the mountio library: debug level, text encoding,
read buffer size and archive compression.

Author: Tim Hosking
Contact: https://github.com/Munger
License: MIT
"""

import zipfile


class GlobalConfig:
    _defaults = {
        "debug_level": 0,
        "encoding": "utf-8",
        "buffer_size": 8192,
        "compression": zipfile.ZIP_DEFLATED,
    }
    _settings = _defaults.copy()

    @classmethod
    def set(cls, key, value):
        if key not in cls._defaults:
            raise KeyError(f"Unknown config key: {key}")
        cls._settings[key] = value

    @classmethod
    def get(cls, key):
        if key not in cls._defaults:
            raise KeyError(f"Unknown config key: {key}")
        return cls._settings.get(key, cls._defaults[key])

    @classmethod
    def keys(cls):
        return list(cls._defaults.keys())

    @classmethod
    def reset(cls, key=None):
        if key is None:
            cls._settings = cls._defaults.copy()
        elif key in cls._defaults:
            cls._settings[key] = cls._defaults[key]

    @classmethod
    def set_debug_level(cls, value: int):
        cls.set("debug_level", int(value))

    @classmethod
    def get_debug_level(cls) -> int:
        return cls.get("debug_level")

    @classmethod
    def get_buffer_size(cls) -> int:
        return cls.get("buffer_size")

    @classmethod
    def set_buffer_size(cls, value: int):
        value = int(value)
        if value <= 0:
            raise ValueError("buffer_size must be positive")
        cls.set("buffer_size", value)

    @classmethod
    def get_encoding(cls) -> str:
        return cls.get("encoding")
