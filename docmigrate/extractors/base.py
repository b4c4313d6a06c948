"""Base source adapter interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional
import logging

from ..exceptions import ConfigurationError
from ..models.schema import Document

logger = logging.getLogger(__name__)


def _check_page_size(setting: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ConfigurationError(f"{setting} must be a positive integer, got {value!r}")
    return value


@dataclass
class SelectStatement:
    """
    A set-based read of one source document.

    ``columns`` maps output column (destination field) to source column, in
    the order the destination insert expects them.
    """
    document: str  # Qualified (prefixed) source document name
    columns: Dict[str, str] = field(default_factory=dict)
    schema: Optional[str] = None

    @property
    def output_columns(self) -> List[str]:
        return list(self.columns.keys())

    @property
    def source_columns(self) -> List[str]:
        return list(self.columns.values())


class BaseSource(ABC):
    """
    Base class for all source adapters.

    Sources enumerate documents, describe their structure and hand out
    records page by page. They also remember the last record loaded per
    document, which implementations may use for keyset pagination.
    """

    def __init__(
        self,
        prefix: str = "",
        schema: Optional[str] = None,
        bulk_size: int = 100,
        page_sizes: Optional[Dict[str, int]] = None
    ):
        """
        Initialize the source.

        Args:
            prefix: Prefix prepended to document names in the store
            schema: Database/schema name used to qualify documents in set-based reads
            bulk_size: Default page size
            page_sizes: Per-document page size overrides

        Raises:
            ConfigurationError: If a page size is not a positive integer
        """
        self.prefix = prefix
        self.schema = schema
        self.bulk_size = _check_page_size("bulk_size", bulk_size)
        self.page_sizes = {
            name: _check_page_size(f"page_sizes.{name}", size)
            for name, size in (page_sizes or {}).items()
        }
        self._last_loaded: Dict[str, Dict[str, Any]] = {}

    @abstractmethod
    def list_documents(self) -> List[str]:
        """
        List the document names of the catalog, without prefix.

        Returns:
            Document names in catalog order
        """
        pass

    @abstractmethod
    def get_document(self, name: str) -> Optional[Document]:
        """Get a document with its structure, or None if it does not exist."""
        pass

    @abstractmethod
    def get_records_count(self, name: str) -> int:
        """Count the records of a document."""
        pass

    @abstractmethod
    def fetch_page(
        self,
        name: str,
        page_number: int,
        page_size: int,
        last_loaded: Optional[Dict[str, Any]] = None
    ) -> List[Dict[str, Any]]:
        """
        Fetch one page of raw records.

        Args:
            name: Document name
            page_number: Zero-based page number
            page_size: Records per page
            last_loaded: Last record of the previous page, if known

        Returns:
            Raw records; an empty list once the document is exhausted
        """
        pass

    def get_page_size(self, name: str) -> int:
        """Page size for a document."""
        return self.page_sizes.get(name, self.bulk_size)

    def get_records(self, name: str, page_number: int) -> List[Dict[str, Any]]:
        """
        Get one page of records.

        The first page never uses a remembered cursor, so a restarted
        document is always read from the beginning.
        """
        last_loaded = self._last_loaded.get(name) if page_number > 0 else None
        return self.fetch_page(name, page_number, self.get_page_size(name), last_loaded or None)

    def set_last_loaded_record(self, name: str, record: Optional[Dict[str, Any]]) -> None:
        """Remember (or with an empty record, forget) the last loaded record."""
        if record:
            self._last_loaded[name] = dict(record)
        else:
            self._last_loaded.pop(name, None)

    def get_last_loaded_record(self, name: str) -> Optional[Dict[str, Any]]:
        return self._last_loaded.get(name)

    def add_document_prefix(self, name: str) -> str:
        """Qualify a document name with the configured prefix."""
        return f"{self.prefix}{name}"

    def build_select(self, document: Document, columns: Dict[str, str]) -> SelectStatement:
        """
        Build a set-based read of a document.

        Args:
            document: Source document
            columns: Output column -> source column

        Returns:
            SelectStatement over the qualified document
        """
        return SelectStatement(
            document=self.add_document_prefix(document.name),
            columns=dict(columns),
            schema=self.schema,
        )

    def stream(self, name: str) -> Iterator[List[Dict[str, Any]]]:
        """
        Stream all records of a document page by page.

        Yields:
            Non-empty pages of raw records
        """
        page_number = 0
        while True:
            page = self.get_records(name, page_number)
            if not page:
                break
            yield page
            self.set_last_loaded_record(name, page[-1])
            page_number += 1
        self.set_last_loaded_record(name, None)

    def close(self) -> None:
        """Release any resources held by the source."""
        pass
