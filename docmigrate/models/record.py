"""Record models for migration data."""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List

from .schema import Document


@dataclass
class Record:
    """One row of data belonging to a document."""
    document: Document
    data: Dict[str, Any] = field(default_factory=dict)

    def get_value(self, name: str, default: Any = None) -> Any:
        """Get a field value."""
        return self.data.get(name, default)

    def set_value(self, name: str, value: Any) -> None:
        """Set a field value."""
        self.data[name] = value

    def get_fields(self) -> List[str]:
        """Names of the fields set on this record, in structure order first."""
        names = [n for n in self.document.field_names if n in self.data]
        names.extend(n for n in self.data if n not in self.document.fields)
        return names

    def copy(self) -> "Record":
        """Shallow copy sharing the same document."""
        return Record(document=self.document, data=dict(self.data))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {"document": self.document.name, "data": self.data}


@dataclass
class RecordSet:
    """An ordered collection of records destined for a single write."""
    document: Document
    records: List[Record] = field(default_factory=list)

    def add_record(self, record: Record) -> None:
        """Append a record to the set."""
        if record.document.name != self.document.name:
            raise ValueError(
                f"Record of {record.document.name} cannot be added to {self.document.name} record set"
            )
        self.records.append(record)

    def get_columns(self) -> List[str]:
        """Union of fields set across the records, in first-seen order."""
        columns: List[str] = []
        for record in self.records:
            for name in record.get_fields():
                if name not in columns:
                    columns.append(name)
        return columns

    def __iter__(self) -> Iterator[Record]:
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.records)
