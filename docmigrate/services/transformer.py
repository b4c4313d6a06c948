"""Record transformation between a source and a destination document."""

import logging
from typing import List, Optional

from ..models.record import Record
from ..models.schema import Document, MapDirection
from .handlers import BoundHandler, HandlerRegistry
from .mapping_index import MappingIndex

logger = logging.getLogger(__name__)


class RecordTransformer:
    """
    Transforms source records into destination records for one document pair.

    The transform runs in three passes:
    - source-side handlers, in source field order, on a working copy of the source record
    - copy of every mapped source field that exists in the destination structure
    - destination-side handlers, in destination field order, on the destination record

    An instance may be reused for any number of records of the same document
    pair but never across documents.
    """

    def __init__(
        self,
        source_document: Document,
        destination_document: Document,
        mapping: MappingIndex,
        handler_registry: Optional[HandlerRegistry] = None
    ):
        """
        Initialize the transformer.

        Args:
            source_document: Document records are read from
            destination_document: Document records are built for
            mapping: Mapping index to resolve fields and handlers
            handler_registry: Registry to resolve handler names
        """
        self.source_document = source_document
        self.destination_document = destination_document
        self.mapping = mapping
        self.handler_registry = handler_registry or HandlerRegistry()
        self.source_handlers: List[BoundHandler] = []
        self.destination_handlers: List[BoundHandler] = []

    def init(self) -> Optional["RecordTransformer"]:
        """
        Bind the handlers declared for both documents.

        Returns:
            The transformer, or None when no field has a handler and an
            identity copy is enough
        """
        self.source_handlers = self._bind_handlers(self.source_document, MapDirection.SOURCE)
        self.destination_handlers = self._bind_handlers(self.destination_document, MapDirection.DESTINATION)

        if not self.source_handlers and not self.destination_handlers:
            return None

        logger.debug(
            f"Transformer for {self.source_document.name} -> {self.destination_document.name}: "
            f"{len(self.source_handlers)} source handlers, {len(self.destination_handlers)} destination handlers"
        )
        return self

    def _bind_handlers(self, document: Document, direction: MapDirection) -> List[BoundHandler]:
        handlers = []
        for field_name in document.field_names:
            for config in self.mapping.handler_configs(document.name, field_name, direction):
                handlers.append(self.handler_registry.bind(config, field_name))
        return handlers

    def transform(self, source_record: Record, destination_record: Record) -> None:
        """
        Fill ``destination_record`` from ``source_record``.

        Handler errors are not caught.
        """
        working = source_record.copy()
        for handler in self.source_handlers:
            handler.handle(working, destination_record)

        self.copy_by_map(working, destination_record, self.mapping)

        for handler in self.destination_handlers:
            handler.handle(destination_record, working)

    @staticmethod
    def copy_by_map(source_record: Record, destination_record: Record, mapping: MappingIndex) -> None:
        """
        Identity copy of every mapped field, driven only by the mapping.

        Fields whose target is ignored or missing from the destination
        structure are dropped.
        """
        source_name = source_record.document.name
        destination_document = destination_record.document

        for field_name in source_record.get_fields():
            target = mapping.field_target(source_name, field_name, MapDirection.SOURCE)
            if target and destination_document.has_field(target):
                destination_record.set_value(target, source_record.get_value(field_name))
