"""
Configuration operations for mountio.

Author: Tim Hosking
Contact: https://github.com/Munger
License: MIT
"""

from mountio.core.global_config import GlobalConfig


class ConfigAPI:
    """
    MOUNTIO Public API: Configuration Operations

    Unified attribute and dict-style access to the global configuration
    (debug level, encoding, buffer size, compression).

    Examples:
        fs.config.debug_level = 2
        fs.config['buffer_size'] = 64 * 1024
        x = fs.config.encoding
        fs.config.reset()
    """

    def set(self, key, value):
        """Set a global config value by key."""
        if key == 'buffer_size':
            GlobalConfig.set_buffer_size(value)
        elif key == 'debug_level':
            GlobalConfig.set_debug_level(value)
        else:
            GlobalConfig.set(key, value)

    def get(self, key):
        return GlobalConfig.get(key)

    def reset(self, key=None):
        """Reset all global config, or just a single key if provided."""
        GlobalConfig.reset(key)

    @staticmethod
    def get_debug_level() -> int:
        return GlobalConfig.get_debug_level()

    def __getattr__(self, key):
        if key in GlobalConfig.keys():
            return GlobalConfig.get(key)
        raise AttributeError(f"No config for key '{key}'")

    def __setattr__(self, key, value):
        if key not in GlobalConfig.keys():
            raise AttributeError(f"No config for key '{key}'")
        self.set(key, value)

    def __getitem__(self, key):
        if key in GlobalConfig.keys():
            return GlobalConfig.get(key)
        raise KeyError(f"No config for key '{key}'")

    def __setitem__(self, key, value):
        if key not in GlobalConfig.keys():
            raise KeyError(f"No config for key '{key}'")
        self.set(key, value)

    def __iter__(self):
        yield from GlobalConfig.keys()

    def __len__(self):
        return len(GlobalConfig.keys())
