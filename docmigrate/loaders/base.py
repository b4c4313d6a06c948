"""Base destination adapter interface."""

from abc import ABC, abstractmethod
from typing import Any, List, Optional
import logging

from ..extractors.base import SelectStatement
from ..models.record import RecordSet
from ..models.schema import Document

logger = logging.getLogger(__name__)


class BaseDestination(ABC):
    """
    Base class for destination adapters.

    Destinations describe their documents, can be cleared document by
    document, accept batched writes with update-on-duplicate semantics and
    run set-based insert-from-select copies.
    """

    def __init__(self, prefix: str = ""):
        """
        Initialize the destination.

        Args:
            prefix: Prefix prepended to document names in the store
        """
        self.prefix = prefix

    @abstractmethod
    def get_document(self, name: str) -> Optional[Document]:
        """Get a document with its structure, or None if it does not exist."""
        pass

    @abstractmethod
    def clear_document(self, name: str) -> None:
        """Delete every record of a document."""
        pass

    @abstractmethod
    def get_records_count(self, name: str) -> int:
        """Count the records of a document."""
        pass

    @abstractmethod
    def write_rows(
        self,
        name: str,
        columns: List[str],
        rows: List[List[Any]],
        fields_update_on_duplicate: List[str]
    ) -> int:
        """
        Write rows to a document.

        Args:
            name: Document name (unprefixed)
            columns: Column names, aligned with each row
            rows: Row values
            fields_update_on_duplicate: Fields overwritten when a row collides
                with an existing key; an empty list means plain insert

        Returns:
            Number of rows written
        """
        pass

    @abstractmethod
    def insert_from_select(self, select: SelectStatement, table: str, columns: List[str]) -> int:
        """
        Copy rows straight from a source document.

        Args:
            select: Set-based read of the source document
            table: Qualified destination document name
            columns: Destination columns, aligned with ``select`` output

        Returns:
            Number of rows copied, when the store reports it
        """
        pass

    def save_records(
        self,
        name: str,
        record_set: RecordSet,
        fields_update_on_duplicate: Optional[List[str]] = None
    ) -> int:
        """
        Save a record set.

        Args:
            name: Destination document name
            record_set: Records to write
            fields_update_on_duplicate: Fields to overwrite on a key conflict

        Returns:
            Number of records written
        """
        if not len(record_set):
            return 0

        columns = record_set.get_columns()
        rows = [[record.get_value(column) for column in columns] for record in record_set]
        written = self.write_rows(name, columns, rows, list(fields_update_on_duplicate or []))
        logger.debug(f"Saved {written} records to {name}")
        return written

    def add_document_prefix(self, name: str) -> str:
        """Qualify a document name with the configured prefix."""
        return f"{self.prefix}{name}"

    def close(self) -> None:
        """Release any resources held by the destination."""
        pass
