"""
Exception hierarchy for the migration engine.

Hierarchy:
    MigrationError
    ├── MappingError: Invalid mapping rules or unknown handlers
    ├── AdapterError: Source/destination adapter misuse
    └── ConfigurationError: Invalid or missing configuration
"""

from typing import Any, Dict, Optional


class MigrationError(Exception):
    """
    Base exception for all migration errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dict with extra context for debugging.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        payload: Dict[str, Any] = {
            "error": type(self).__name__,
            "message": self.message,
        }
        if self.details:
            payload["details"] = self.details
        return payload


class MappingError(MigrationError):
    """Raised when a mapping rule or handler binding cannot be resolved."""


class AdapterError(MigrationError):
    """Raised when a storage adapter is asked for something it does not have."""


class ConfigurationError(MigrationError):
    """Raised when the migration configuration is invalid."""
