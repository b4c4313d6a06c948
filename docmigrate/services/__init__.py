"""Service layer for the migration engine."""

from .mapping_index import MappingIndex, MappingRegistry
from .handlers import HandlerRegistry, BoundHandler
from .transformer import RecordTransformer
from .direct_copy import DirectCopyPlanner
from .progress import ProgressStore, InMemoryProgressStore, JsonFileProgressStore
from .volume import VolumeChecker, VolumeMismatch

__all__ = [
    "MappingIndex",
    "MappingRegistry",
    "HandlerRegistry",
    "BoundHandler",
    "RecordTransformer",
    "DirectCopyPlanner",
    "ProgressStore",
    "InMemoryProgressStore",
    "JsonFileProgressStore",
    "VolumeChecker",
    "VolumeMismatch",
]
