"""Destination adapters."""

from .base import BaseDestination
from .memory import MemoryDestination
from .sqlite import SQLiteDestination

__all__ = [
    "BaseDestination",
    "MemoryDestination",
    "SQLiteDestination",
]
