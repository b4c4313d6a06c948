"""Migration execution models."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from enum import Enum
from datetime import datetime
import json
import uuid


class StepStatus(str, Enum):
    """Status of a migration step run."""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class DocumentStatus(str, Enum):
    """Status of a single document within a step run."""
    PENDING = "pending"
    DIRECT_COPIED = "direct_copied"
    PAGING = "paging"
    DONE = "done"
    SKIPPED = "skipped"
    FAILED = "failed"


class CopyStrategy(str, Enum):
    """How a document's records reached the destination."""
    DIRECT = "direct"
    PAGED = "paged"


@dataclass
class AdapterSettings:
    """Configuration for a source or destination adapter."""
    type: str = "memory"  # memory, sqlite
    path: Optional[str] = None
    prefix: str = ""
    schema: Optional[str] = None  # Database/schema name used to qualify documents
    options: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "type": self.type,
            "path": self.path,
            "prefix": self.prefix,
            "schema": self.schema,
            "options": self.options,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AdapterSettings":
        """Create from dictionary representation."""
        return cls(
            type=data.get("type", "memory"),
            path=data.get("path"),
            prefix=data.get("prefix", ""),
            schema=data.get("schema"),
            options=data.get("options", {}),
        )


@dataclass
class MigrationConfig:
    """Configuration for a migration step."""
    name: str = ""
    description: str = ""
    step_id: str = "map_data"

    # Stores
    source: AdapterSettings = field(default_factory=AdapterSettings)
    destination: AdapterSettings = field(default_factory=AdapterSettings)

    # Mapping
    mapping_file: Optional[str] = None
    mapping_profile: str = "map_file"

    # Execution options
    direct_document_copy: bool = False
    bulk_size: int = 100
    page_sizes: Dict[str, int] = field(default_factory=dict)  # Source document -> page size
    fields_update_on_duplicate: Dict[str, List[str]] = field(default_factory=dict)  # Destination document -> fields

    # Progress and output
    progress_file: str = "./data/progress.json"
    output_dir: str = "./data"
    save_report: bool = True

    def get_fields_update_on_duplicate(self, document_name: str) -> List[str]:
        """Fields to update on a duplicate-key conflict for a destination document."""
        return list(self.fields_update_on_duplicate.get(document_name, []))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "name": self.name,
            "description": self.description,
            "step_id": self.step_id,
            "source": self.source.to_dict(),
            "destination": self.destination.to_dict(),
            "mapping_file": self.mapping_file,
            "mapping_profile": self.mapping_profile,
            "direct_document_copy": self.direct_document_copy,
            "bulk_size": self.bulk_size,
            "page_sizes": self.page_sizes,
            "fields_update_on_duplicate": self.fields_update_on_duplicate,
            "progress_file": self.progress_file,
            "output_dir": self.output_dir,
            "save_report": self.save_report,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MigrationConfig":
        """Create from dictionary representation."""
        return cls(
            name=data.get("name", ""),
            description=data.get("description", ""),
            step_id=data.get("step_id", "map_data"),
            source=AdapterSettings.from_dict(data.get("source", {})),
            destination=AdapterSettings.from_dict(data.get("destination", {})),
            mapping_file=data.get("mapping_file"),
            mapping_profile=data.get("mapping_profile", "map_file"),
            direct_document_copy=bool(data.get("direct_document_copy", False)),
            bulk_size=data.get("bulk_size", 100),
            page_sizes=data.get("page_sizes", {}),
            fields_update_on_duplicate=data.get("fields_update_on_duplicate", {}),
            progress_file=data.get("progress_file", "./data/progress.json"),
            output_dir=data.get("output_dir", "./data"),
            save_report=data.get("save_report", True),
        )

    @classmethod
    def from_json_file(cls, file_path: str) -> "MigrationConfig":
        """Load configuration from JSON file."""
        with open(file_path, 'r') as f:
            data = json.load(f)
        return cls.from_dict(data)


@dataclass
class DocumentResult:
    """Outcome of migrating one source document."""
    source_document: str
    destination_document: Optional[str] = None
    status: DocumentStatus = DocumentStatus.PENDING
    strategy: Optional[CopyStrategy] = None
    pages: int = 0
    records_written: int = 0
    skip_reason: Optional[str] = None
    error: Optional[str] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "source_document": self.source_document,
            "destination_document": self.destination_document,
            "status": self.status.value,
            "strategy": self.strategy.value if self.strategy else None,
            "pages": self.pages,
            "records_written": self.records_written,
            "skip_reason": self.skip_reason,
            "error": self.error,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }


@dataclass
class StepReport:
    """A complete run of one migration step."""
    step_id: str
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    status: StepStatus = StepStatus.PENDING
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    documents: List[DocumentResult] = field(default_factory=list)
    previously_completed: List[str] = field(default_factory=list)
    errors: List[Dict[str, Any]] = field(default_factory=list)

    def add_document(self, source_document: str) -> DocumentResult:
        """Add a new document result to the report."""
        result = DocumentResult(source_document=source_document)
        self.documents.append(result)
        return result

    def get_document(self, source_document: str) -> Optional[DocumentResult]:
        """Get a document result by source document name."""
        for result in self.documents:
            if result.source_document == source_document:
                return result
        return None

    def documents_with_status(self, status: DocumentStatus) -> List[DocumentResult]:
        return [d for d in self.documents if d.status == status]

    @property
    def total_records_written(self) -> int:
        return sum(d.records_written for d in self.documents)

    @property
    def duration_seconds(self) -> Optional[float]:
        """Get duration in seconds."""
        if self.started_at and self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "step_id": self.step_id,
            "status": self.status.value,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "documents": [d.to_dict() for d in self.documents],
            "previously_completed": self.previously_completed,
            "total_records_written": self.total_records_written,
            "errors": self.errors,
        }
