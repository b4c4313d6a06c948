"""Data models for the migration engine."""

from .schema import (
    FieldType,
    MapDirection,
    FieldDefinition,
    Document,
    HandlerConfig,
    FieldRule,
    MapSide,
    MigrationMapping,
)
from .migration import (
    StepStatus,
    DocumentStatus,
    CopyStrategy,
    AdapterSettings,
    MigrationConfig,
    DocumentResult,
    StepReport,
)
from .record import (
    Record,
    RecordSet,
)

__all__ = [
    "FieldType",
    "MapDirection",
    "FieldDefinition",
    "Document",
    "HandlerConfig",
    "FieldRule",
    "MapSide",
    "MigrationMapping",
    "StepStatus",
    "DocumentStatus",
    "CopyStrategy",
    "AdapterSettings",
    "MigrationConfig",
    "DocumentResult",
    "StepReport",
    "Record",
    "RecordSet",
]
