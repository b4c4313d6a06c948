"""Schema models for documents and document/field mappings."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from enum import Enum
import json


class FieldType(str, Enum):
    """Supported field types."""
    STRING = "string"
    TEXT = "text"
    INTEGER = "integer"
    DECIMAL = "decimal"
    BOOLEAN = "boolean"
    DATE = "date"
    DATETIME = "datetime"
    TIMESTAMP = "timestamp"
    JSON = "json"
    BLOB = "blob"


class MapDirection(str, Enum):
    """Side of the mapping a lookup is made from."""
    SOURCE = "source"
    DESTINATION = "destination"


@dataclass
class FieldDefinition:
    """Definition of a field in a document structure."""
    name: str
    type: FieldType = FieldType.STRING
    nullable: bool = True
    primary: bool = False
    default: Optional[Any] = None
    length: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        result = {
            "name": self.name,
            "type": self.type.value if isinstance(self.type, FieldType) else self.type,
            "nullable": self.nullable,
        }
        if self.primary:
            result["primary"] = True
        if self.default is not None:
            result["default"] = self.default
        if self.length:
            result["length"] = self.length
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FieldDefinition":
        """Create from dictionary representation."""
        field_type = data.get("type", "string")
        if isinstance(field_type, str):
            try:
                field_type = FieldType(field_type.lower())
            except ValueError:
                field_type = FieldType.STRING

        return cls(
            name=data.get("name", ""),
            type=field_type,
            nullable=data.get("nullable", True),
            primary=data.get("primary", False),
            default=data.get("default"),
            length=data.get("length"),
        )


@dataclass
class Document:
    """
    A named structured collection (e.g. a table) with an ordered field structure.

    Field order is the insertion order of ``fields`` and is the order handlers
    are applied in.
    """
    name: str
    fields: Dict[str, FieldDefinition] = field(default_factory=dict)

    @property
    def field_names(self) -> List[str]:
        """Field names in structure order."""
        return list(self.fields.keys())

    @property
    def primary_keys(self) -> List[str]:
        """Primary key fields in structure order."""
        return [name for name, definition in self.fields.items() if definition.primary]

    @property
    def primary_key(self) -> Optional[str]:
        """Name of the single primary key field, if there is exactly one."""
        keys = self.primary_keys
        return keys[0] if len(keys) == 1 else None

    def has_field(self, name: str) -> bool:
        return name in self.fields

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "name": self.name,
            "fields": {k: v.to_dict() for k, v in self.fields.items()},
        }

    @classmethod
    def from_dict(cls, name: str, data: Dict[str, Any]) -> "Document":
        """Create from dictionary representation."""
        fields = {}
        for field_name, field_data in data.get("fields", {}).items():
            if isinstance(field_data, str):
                field_data = {"type": field_data}
            fields[field_name] = FieldDefinition.from_dict({**field_data, "name": field_name})
        return cls(name=name, fields=fields)


@dataclass
class HandlerConfig:
    """A transformation handler bound to a field."""
    name: str
    params: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        result: Dict[str, Any] = {"name": self.name}
        if self.params:
            result["params"] = self.params
        return result

    @classmethod
    def from_dict(cls, data: Any) -> "HandlerConfig":
        """Create from dictionary representation (or a bare handler name)."""
        if isinstance(data, str):
            return cls(name=data)
        return cls(name=data.get("name", ""), params=data.get("params", {}))


@dataclass
class FieldRule:
    """
    A rule for one field of one document.

    ``document`` and ``field`` may contain ``*`` wildcards. ``move`` renames
    the field (``"field"`` or ``"document.field"``), ``ignore`` drops it and
    ``handlers`` bind transformation handlers to it.
    """
    document: str
    field: str
    ignore: bool = False
    move: Optional[str] = None
    handlers: List[HandlerConfig] = field(default_factory=list)

    @property
    def is_wildcard(self) -> bool:
        return "*" in self.document or "*" in self.field

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        result: Dict[str, Any] = {"document": self.document, "field": self.field}
        if self.ignore:
            result["ignore"] = True
        if self.move:
            result["move"] = self.move
        if len(self.handlers) == 1:
            result["handler"] = self.handlers[0].to_dict()
        elif self.handlers:
            result["handlers"] = [h.to_dict() for h in self.handlers]
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FieldRule":
        """Create from dictionary representation."""
        handlers = [HandlerConfig.from_dict(h) for h in data.get("handlers", [])]
        if data.get("handler"):
            handlers.insert(0, HandlerConfig.from_dict(data["handler"]))

        return cls(
            document=data.get("document", ""),
            field=data.get("field", ""),
            ignore=data.get("ignore", False),
            move=data.get("move"),
            handlers=handlers,
        )


@dataclass
class MapSide:
    """Document and field rules defined looking outward from one side."""
    ignored_documents: List[str] = field(default_factory=list)
    renamed_documents: Dict[str, str] = field(default_factory=dict)
    field_rules: List[FieldRule] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "document_rules": {
                "ignore": self.ignored_documents,
                "rename": self.renamed_documents,
            },
            "field_rules": [r.to_dict() for r in self.field_rules],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MapSide":
        """Create from dictionary representation."""
        document_rules = data.get("document_rules", {})
        return cls(
            ignored_documents=list(document_rules.get("ignore", [])),
            renamed_documents=dict(document_rules.get("rename", {})),
            field_rules=[FieldRule.from_dict(r) for r in data.get("field_rules", [])],
        )


@dataclass
class MigrationMapping:
    """Complete mapping configuration for a migration step."""
    name: str = "map_file"
    version: str = "1.0"
    description: str = ""
    source: MapSide = field(default_factory=MapSide)
    destination: MapSide = field(default_factory=MapSide)

    def side(self, direction: MapDirection) -> MapSide:
        """Get the rules defined for one direction."""
        return self.source if direction == MapDirection.SOURCE else self.destination

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "name": self.name,
            "version": self.version,
            "description": self.description,
            "source": self.source.to_dict(),
            "destination": self.destination.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MigrationMapping":
        """Create from dictionary representation."""
        return cls(
            name=data.get("name", "map_file"),
            version=data.get("version", "1.0"),
            description=data.get("description", ""),
            source=MapSide.from_dict(data.get("source", {})),
            destination=MapSide.from_dict(data.get("destination", {})),
        )

    @classmethod
    def from_json_file(cls, file_path: str) -> "MigrationMapping":
        """Load mapping from JSON file."""
        with open(file_path, 'r') as f:
            data = json.load(f)
        return cls.from_dict(data)

    def save_to_json(self, file_path: str) -> None:
        """Save mapping to JSON file."""
        with open(file_path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)
