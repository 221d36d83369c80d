"""
Persistence adapters.

Routers depend on JsonStorage rather than touching the JSON file.
"""

from .json_storage import JsonStorage, NotFoundError, StorageError, StorageIOError

__all__ = ["JsonStorage", "NotFoundError", "StorageError", "StorageIOError"]
