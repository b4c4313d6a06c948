"""Direct (insert-from-select) document copy."""

import logging
from typing import Dict

from ..extractors.base import BaseSource, SelectStatement
from ..loaders.base import BaseDestination
from ..models.schema import Document, MapDirection
from .mapping_index import MappingIndex

logger = logging.getLogger(__name__)


class DirectCopyPlanner:
    """
    Copies whole documents with one set-based statement when no record
    needs transforming.

    A document qualifies only when direct copy is enabled and no field of
    either document has a handler. The copy is best effort: any failure is
    logged and reported as "not copied" so the caller can fall back to
    paging.
    """

    def __init__(self, source: BaseSource, destination: BaseDestination, enabled: bool = False):
        """
        Initialize the planner.

        Args:
            source: Source adapter the select statement is built against
            destination: Destination adapter that runs the copy
            enabled: Whether direct document copy is allowed at all
        """
        self.source = source
        self.destination = destination
        self.enabled = enabled
        self._columns_cache: Dict[str, Dict[str, str]] = {}

    def try_direct_copy(
        self,
        source_document: Document,
        destination_document: Document,
        mapping: MappingIndex
    ) -> bool:
        """
        Copy a document directly if it qualifies.

        Returns:
            True if the copy ran and committed; False if it was not
            attempted or failed
        """
        if not self.can_direct_copy(source_document, destination_document, mapping):
            return False

        columns = self.get_columns_by_map(source_document, mapping)
        try:
            copied = self.destination.insert_from_select(
                self.build_select(source_document, mapping),
                self.destination.add_document_prefix(destination_document.name),
                list(columns.keys()),
            )
        except Exception as e:
            logger.warning(
                f"Document {source_document.name} can not be copied directly because of error: {e}"
            )
            return False

        logger.debug(f"Copied {source_document.name} directly ({copied} records)")
        return True

    def can_direct_copy(
        self,
        source_document: Document,
        destination_document: Document,
        mapping: MappingIndex
    ) -> bool:
        """Check the configuration flag and handler bindings on both sides."""
        return (
            self.enabled
            and not self._has_handlers(source_document, mapping, MapDirection.SOURCE)
            and not self._has_handlers(destination_document, mapping, MapDirection.DESTINATION)
        )

    @staticmethod
    def _has_handlers(document: Document, mapping: MappingIndex, direction: MapDirection) -> bool:
        return any(
            mapping.has_handler(document.name, field_name, direction)
            for field_name in document.field_names
        )

    def build_select(self, source_document: Document, mapping: MappingIndex) -> SelectStatement:
        """Build the set-based read of the mapped source columns."""
        return self.source.build_select(source_document, self.get_columns_by_map(source_document, mapping))

    def get_columns_by_map(self, source_document: Document, mapping: MappingIndex) -> Dict[str, str]:
        """
        Destination field -> source field for every mapped source field.

        Memoized per source document name for the lifetime of the planner.
        """
        name = source_document.name
        if name not in self._columns_cache:
            columns = {}
            for field_name in source_document.field_names:
                target = mapping.field_target(name, field_name, MapDirection.SOURCE)
                if target:
                    columns[target] = field_name
            self._columns_cache[name] = columns
        return self._columns_cache[name]
