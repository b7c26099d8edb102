"""
polycache — Storage Backends

Exports available storage implementations.

Redis storage is lazy-loaded via factory.py to avoid a hard dependency
on the redis client when only in-process storage is used.
"""

from .mapping import MappingStorage
from .memory import MemoryStorage

__all__ = [
    "MappingStorage",
    "MemoryStorage",
]
