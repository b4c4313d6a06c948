"""In-memory source adapter."""

import logging
from typing import Any, Dict, List, Optional, Tuple

from ..exceptions import AdapterError
from ..models.schema import Document
from .base import BaseSource

logger = logging.getLogger(__name__)


class MemorySource(BaseSource):
    """
    Source backed by Python lists of dicts.

    Useful for tests, dry runs and for feeding data that was already
    extracted by other means.
    """

    def __init__(
        self,
        prefix: str = "",
        schema: Optional[str] = "memory",
        bulk_size: int = 100,
        page_sizes: Optional[Dict[str, int]] = None
    ):
        super().__init__(prefix=prefix, schema=schema, bulk_size=bulk_size, page_sizes=page_sizes)
        self._documents: Dict[str, Tuple[Document, List[Dict[str, Any]]]] = {}
        self.fetched_pages: List[Tuple[str, int]] = []

    def add_document(self, document: Document, records: Optional[List[Dict[str, Any]]] = None) -> None:
        """Add a document and its records to the catalog."""
        self._documents[document.name] = (document, [dict(r) for r in records or []])

    def list_documents(self) -> List[str]:
        return list(self._documents.keys())

    def get_document(self, name: str) -> Optional[Document]:
        entry = self._documents.get(name)
        return entry[0] if entry else None

    def get_records_count(self, name: str) -> int:
        return len(self._rows(name))

    def fetch_page(
        self,
        name: str,
        page_number: int,
        page_size: int,
        last_loaded: Optional[Dict[str, Any]] = None
    ) -> List[Dict[str, Any]]:
        self.fetched_pages.append((name, page_number))
        start = page_number * page_size
        return [dict(r) for r in self._rows(name)[start:start + page_size]]

    def select_rows(self, qualified_name: str, columns: List[str]) -> List[Dict[str, Any]]:
        """Project all rows of a qualified document onto ``columns``."""
        name = qualified_name[len(self.prefix):] if qualified_name.startswith(self.prefix) else qualified_name
        rows = self._rows(name)
        document = self._documents[name][0]
        for column in columns:
            if not document.has_field(column):
                raise AdapterError(f"Unknown column {column} in document {name}")
        return [{c: row.get(c) for c in columns} for row in rows]

    def _rows(self, name: str) -> List[Dict[str, Any]]:
        entry = self._documents.get(name)
        if entry is None:
            raise AdapterError(f"Document not found in source: {name}")
        return entry[1]
