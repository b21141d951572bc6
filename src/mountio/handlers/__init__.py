"""
Container handlers package for mountio.
Importing this package registers every handler with HandlerManager.

Author: Tim Hosking
Contact: https://github.com/Munger
License: MIT
"""

from .zip_handler import ZipHandler

__all__ = ["ZipHandler"]
