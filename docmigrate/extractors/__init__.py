"""Source adapters."""

from .base import BaseSource, SelectStatement
from .memory import MemorySource
from .sqlite import SQLiteSource

__all__ = [
    "BaseSource",
    "SelectStatement",
    "MemorySource",
    "SQLiteSource",
]
