"""
Pytest configuration & shared fixtures.
"""

from typing import Any, Callable, Dict

import pytest

from docmigrate.extractors.memory import MemorySource
from docmigrate.loaders.memory import MemoryDestination
from docmigrate.models.migration import MigrationConfig
from docmigrate.models.schema import Document, FieldDefinition, FieldType
from docmigrate.services.progress import InMemoryProgressStore


@pytest.fixture
def make_document() -> Callable[..., Document]:
    """Build a document whose ``id`` field is an integer primary key."""

    def _make(name: str, *fields: str, primary: str = "id") -> Document:
        return Document(
            name=name,
            fields={
                f: FieldDefinition(
                    name=f,
                    type=FieldType.INTEGER if f == primary else FieldType.STRING,
                    primary=f == primary,
                )
                for f in fields
            },
        )

    return _make


@pytest.fixture
def source() -> MemorySource:
    return MemorySource()


@pytest.fixture
def destination(source: MemorySource) -> MemoryDestination:
    destination = MemoryDestination()
    destination.attach("memory", source)
    return destination


@pytest.fixture
def progress() -> InMemoryProgressStore:
    return InMemoryProgressStore()


@pytest.fixture
def config(tmp_path) -> MigrationConfig:
    return MigrationConfig(
        progress_file=str(tmp_path / "progress.json"),
        output_dir=str(tmp_path),
        save_report=False,
    )


@pytest.fixture
def memory_config_data(tmp_path) -> Dict[str, Any]:
    """A complete config with in-memory stores, as loaded from JSON."""
    customer_fields = {
        "id": {"type": "integer", "primary": True},
        "name": "string",
    }
    return {
        "name": "memory-test",
        "step_id": "map_data",
        "source": {
            "type": "memory",
            "options": {
                "documents": {
                    "customer": {
                        "fields": customer_fields,
                        "records": [{"id": 1, "name": "Ann"}, {"id": 2, "name": "Bob"}],
                    },
                    "legacy_log": {
                        "fields": {"id": {"type": "integer", "primary": True}, "message": "text"},
                        "records": [{"id": 1, "message": "boot"}],
                    },
                },
            },
        },
        "destination": {
            "type": "memory",
            "options": {
                "documents": {
                    "customer": {"fields": customer_fields},
                },
            },
        },
        "progress_file": str(tmp_path / "progress.json"),
        "output_dir": str(tmp_path),
        "save_report": False,
    }
