"""In-memory destination adapter."""

import logging
from typing import Any, Dict, List, Optional, Tuple

from ..exceptions import AdapterError
from ..extractors.base import SelectStatement
from ..extractors.memory import MemorySource
from ..models.schema import Document
from .base import BaseDestination

logger = logging.getLogger(__name__)


class MemoryDestination(BaseDestination):
    """
    Destination backed by Python lists of dicts.

    Set-based copies read from MemorySource instances attached under the
    schema name their select statements are qualified with.
    """

    def __init__(self, prefix: str = "", attached: Optional[Dict[str, MemorySource]] = None):
        super().__init__(prefix=prefix)
        self._documents: Dict[str, Tuple[Document, List[Dict[str, Any]]]] = {}
        self.attached: Dict[str, MemorySource] = dict(attached or {})
        self.write_batches: List[Tuple[str, int]] = []
        self.direct_copies: List[str] = []

    def attach(self, schema: str, source: MemorySource) -> None:
        """Make a source readable by set-based copies."""
        self.attached[schema] = source

    def add_document(self, document: Document, records: Optional[List[Dict[str, Any]]] = None) -> None:
        """Add a document (and optional existing records)."""
        self._documents[document.name] = (document, [dict(r) for r in records or []])

    def get_document(self, name: str) -> Optional[Document]:
        entry = self._documents.get(name)
        return entry[0] if entry else None

    def get_rows(self, name: str) -> List[Dict[str, Any]]:
        """Current rows of a document."""
        return [dict(r) for r in self._entry(name)[1]]

    def clear_document(self, name: str) -> None:
        self._entry(name)[1].clear()

    def get_records_count(self, name: str) -> int:
        return len(self._entry(name)[1])

    def write_rows(
        self,
        name: str,
        columns: List[str],
        rows: List[List[Any]],
        fields_update_on_duplicate: List[str]
    ) -> int:
        written = self._store_rows(name, columns, rows, fields_update_on_duplicate)
        self.write_batches.append((name, written))
        return written

    def insert_from_select(self, select: SelectStatement, table: str, columns: List[str]) -> int:
        source = self.attached.get(select.schema or "")
        if source is None:
            raise AdapterError(f"No source attached under schema {select.schema!r}")

        name = table[len(self.prefix):] if table.startswith(self.prefix) else table
        projected = source.select_rows(select.document, select.source_columns)
        rows = [[row[c] for c in select.source_columns] for row in projected]

        written = self._store_rows(name, columns, rows, [])
        self.direct_copies.append(name)
        return written

    def _store_rows(
        self,
        name: str,
        columns: List[str],
        rows: List[List[Any]],
        fields_update_on_duplicate: List[str]
    ) -> int:
        document, stored = self._entry(name)
        for column in columns:
            if not document.has_field(column):
                raise AdapterError(f"Unknown column {column} in destination document {name}")

        key = document.primary_key
        by_key = {r.get(key): r for r in stored if r.get(key) is not None} if key else {}
        for values in rows:
            row = dict(zip(columns, values))
            existing = by_key.get(row.get(key)) if key and row.get(key) is not None else None
            if existing is None:
                stored.append(row)
                if key and row.get(key) is not None:
                    by_key[row[key]] = row
            elif fields_update_on_duplicate:
                for field_name in fields_update_on_duplicate:
                    if field_name in row:
                        existing[field_name] = row[field_name]
            else:
                raise AdapterError(f"Duplicate key {row.get(key)!r} in destination document {name}")
        return len(rows)

    def _entry(self, name: str) -> Tuple[Document, List[Dict[str, Any]]]:
        entry = self._documents.get(name)
        if entry is None:
            raise AdapterError(f"Document not found in destination: {name}")
        return entry
