"""Migration step runner - moves every mapped document from source to destination."""

import json
import logging
import math
from datetime import datetime
from pathlib import Path
from typing import Optional

from .exceptions import ConfigurationError
from .models.schema import Document, MapDirection, MigrationMapping
from .models.migration import (
    CopyStrategy,
    DocumentResult,
    DocumentStatus,
    MigrationConfig,
    StepReport,
    StepStatus,
)
from .models.record import Record, RecordSet
from .services.mapping_index import MappingIndex, MappingRegistry
from .services.handlers import HandlerRegistry
from .services.transformer import RecordTransformer
from .services.direct_copy import DirectCopyPlanner
from .services.progress import JsonFileProgressStore, ProgressStore
from .extractors.base import BaseSource
from .extractors.memory import MemorySource
from .extractors.sqlite import SQLiteSource
from .loaders.base import BaseDestination
from .loaders.memory import MemoryDestination
from .loaders.sqlite import SQLiteDestination

logger = logging.getLogger(__name__)


class MigrationStepRunner:
    """
    Runs one data migration step.

    For every source document not yet checkpointed by this step:
    - resolve the destination document through the mapping (skip if none)
    - clear the destination document
    - try a direct copy, otherwise page through the source, transform each
      record and write each page as one batch
    - checkpoint the document as done

    Errors raised while paging, writing or transforming abort the step.
    Rerunning the step resumes after the last checkpointed document and
    rebuilds any document that was in flight from scratch.
    """

    def __init__(
        self,
        source: BaseSource,
        destination: BaseDestination,
        mapping: MappingIndex,
        progress: ProgressStore,
        config: Optional[MigrationConfig] = None,
        handler_registry: Optional[HandlerRegistry] = None
    ):
        """
        Initialize the runner.

        Args:
            source: Source adapter
            destination: Destination adapter
            mapping: Mapping index for this step
            progress: Store for completed-document checkpoints
            config: Step configuration
            handler_registry: Registry used to resolve field handlers
        """
        self.source = source
        self.destination = destination
        self.mapping = mapping
        self.progress = progress
        self.config = config or MigrationConfig()
        self.handler_registry = handler_registry or HandlerRegistry()
        self.step_id = self.config.step_id
        self.direct_copy = DirectCopyPlanner(
            source,
            destination,
            enabled=self.config.direct_document_copy,
        )
        self.report: Optional[StepReport] = None

    @classmethod
    def from_config(
        cls,
        config: MigrationConfig,
        mapping_registry: Optional[MappingRegistry] = None,
        progress: Optional[ProgressStore] = None,
        handler_registry: Optional[HandlerRegistry] = None
    ) -> "MigrationStepRunner":
        """Build a runner with adapters, mapping and progress store from configuration."""
        source = create_source(config)
        destination = create_destination(config, source)
        return cls(
            source=source,
            destination=destination,
            mapping=load_mapping_index(config, mapping_registry),
            progress=progress or JsonFileProgressStore(config.progress_file),
            config=config,
            handler_registry=handler_registry,
        )

    def run(self) -> StepReport:
        """
        Run the step.

        Returns:
            StepReport with a result per document handled in this run

        Raises:
            Any error raised while migrating a document, after it has been
            recorded in the report
        """
        self.report = report = StepReport(step_id=self.step_id)
        report.started_at = datetime.utcnow()
        report.status = StepStatus.RUNNING

        try:
            source_documents = self.source.list_documents()
            processed = self.progress.get_processed_entities(self.step_id)
            report.previously_completed = [d for d in source_documents if d in processed]
            pending = [d for d in source_documents if d not in processed]

            logger.info(
                f"Step {self.step_id}: {len(pending)} documents to migrate, "
                f"{len(report.previously_completed)} already done"
            )

            for name in pending:
                self._migrate_document(name, report)

            report.status = StepStatus.COMPLETED
            logger.info(f"Step {self.step_id} completed: {report.total_records_written} records written")

        except Exception as e:
            logger.error(f"Step {self.step_id} failed: {e}")
            report.status = StepStatus.FAILED
            report.errors.append({
                "error": str(e),
                "type": type(e).__name__,
                "timestamp": datetime.utcnow().isoformat(),
            })
            raise

        finally:
            report.completed_at = datetime.utcnow()
            if self.config.save_report:
                self._save_report(report)

        return report

    def _migrate_document(self, name: str, report: StepReport) -> None:
        """Move one source document to its destination document."""
        result = report.add_document(name)

        source_document = self.source.get_document(name)
        if source_document is None:
            self._skip(result, "source document not found")
            return

        destination_name = self.mapping.document_target(name, MapDirection.SOURCE)
        if not destination_name:
            self._skip(result, "no destination mapping")
            return

        destination_document = self.destination.get_document(destination_name)
        if destination_document is None:
            result.destination_document = destination_name
            self._skip(result, "destination document not found")
            return

        result.destination_document = destination_name
        result.started_at = datetime.utcnow()
        self.destination.clear_document(destination_name)
        logger.debug(f"Migrating {name} -> {destination_name}")

        try:
            if self.direct_copy.try_direct_copy(source_document, destination_document, self.mapping):
                result.status = DocumentStatus.DIRECT_COPIED
                result.strategy = CopyStrategy.DIRECT
            else:
                if self.direct_copy.can_direct_copy(source_document, destination_document, self.mapping):
                    # A failed direct copy may have left rows behind
                    self.destination.clear_document(destination_name)
                result.status = DocumentStatus.PAGING
                result.strategy = CopyStrategy.PAGED
                self._copy_by_pages(source_document, destination_document, result)
        except Exception as e:
            result.status = DocumentStatus.FAILED
            result.error = str(e)
            result.completed_at = datetime.utcnow()
            raise

        self.source.set_last_loaded_record(name, None)
        self.progress.add_processed_entity(self.step_id, name)
        result.status = DocumentStatus.DONE
        result.completed_at = datetime.utcnow()
        logger.info(
            f"Migrated {name} -> {destination_name} ({result.strategy.value}, "
            f"{result.pages} pages, {result.records_written} records)"
        )

    def _copy_by_pages(
        self,
        source_document: Document,
        destination_document: Document,
        result: DocumentResult
    ) -> None:
        """Page through a source document, transforming and writing one page at a time."""
        name = source_document.name
        page_size = self.source.get_page_size(name)
        logger.debug(f"{name}: expecting {self.expected_pages(name)} pages of {page_size} records")

        transformer = self.get_record_transformer(source_document, destination_document)
        fields_update_on_duplicate = self.config.get_fields_update_on_duplicate(destination_document.name)

        page_number = 0
        while True:
            items = self.source.get_records(name, page_number)
            if not items:
                break
            page_number += 1

            record_set = RecordSet(document=destination_document)
            for data in items:
                source_record = Record(document=source_document, data=data)
                destination_record = Record(document=destination_document)
                if transformer:
                    transformer.transform(source_record, destination_record)
                else:
                    RecordTransformer.copy_by_map(source_record, destination_record, self.mapping)
                record_set.add_record(destination_record)

            self.destination.save_records(destination_document.name, record_set, fields_update_on_duplicate)
            self.source.set_last_loaded_record(name, items[-1])

            result.pages += 1
            result.records_written += len(record_set)
            logger.debug(f"{name}: page {page_number} written ({len(record_set)} records)")

    def get_record_transformer(
        self,
        source_document: Document,
        destination_document: Document
    ) -> Optional[RecordTransformer]:
        """Transformer for a document pair, or None when an identity copy suffices."""
        return RecordTransformer(
            source_document,
            destination_document,
            self.mapping,
            self.handler_registry,
        ).init()

    def _skip(self, result: DocumentResult, reason: str) -> None:
        result.status = DocumentStatus.SKIPPED
        result.skip_reason = reason
        logger.debug(f"Skipping {result.source_document}: {reason}")

    def _save_report(self, report: StepReport) -> None:
        """Save the step report."""
        logs_dir = Path(self.config.output_dir) / "logs"
        logs_dir.mkdir(parents=True, exist_ok=True)
        filepath = logs_dir / f"step_report_{self.step_id}_{datetime.utcnow().strftime('%Y%m%d_%H%M%S')}.json"
        with open(filepath, 'w') as f:
            json.dump(report.to_dict(), f, indent=2, default=str)
        logger.info(f"Saved step report to {filepath}")

    def expected_pages(self, name: str) -> int:
        """Number of pages a source document will be read in."""
        return math.ceil(self.source.get_records_count(name) / self.source.get_page_size(name))

    def close(self) -> None:
        """Close both adapters."""
        self.source.close()
        self.destination.close()


def create_source(config: MigrationConfig) -> BaseSource:
    """Create a source adapter from configuration."""
    settings = config.source

    if settings.type == "sqlite":
        if not settings.path:
            raise ConfigurationError("SQLite source requires a path")
        return SQLiteSource(
            path=settings.path,
            prefix=settings.prefix,
            schema=settings.schema or "source",
            bulk_size=config.bulk_size,
            page_sizes=config.page_sizes,
        )
    elif settings.type == "memory":
        source = MemorySource(
            prefix=settings.prefix,
            schema=settings.schema or "memory",
            bulk_size=config.bulk_size,
            page_sizes=config.page_sizes,
        )
        for name, data in settings.options.get("documents", {}).items():
            source.add_document(Document.from_dict(name, data), data.get("records", []))
        return source
    else:
        raise ConfigurationError(f"Unsupported source type: {settings.type}")


def create_destination(config: MigrationConfig, source: BaseSource) -> BaseDestination:
    """Create a destination adapter that can read ``source`` for direct copies."""
    settings = config.destination

    if settings.type == "sqlite":
        if not settings.path:
            raise ConfigurationError("SQLite destination requires a path")
        attached = {}
        if isinstance(source, SQLiteSource) and source.schema:
            attached[source.schema] = source.path
        return SQLiteDestination(path=settings.path, prefix=settings.prefix, attached=attached)
    elif settings.type == "memory":
        destination = MemoryDestination(prefix=settings.prefix)
        if isinstance(source, MemorySource) and source.schema:
            destination.attach(source.schema, source)
        for name, data in settings.options.get("documents", {}).items():
            destination.add_document(Document.from_dict(name, data), data.get("records", []))
        return destination
    else:
        raise ConfigurationError(f"Unsupported destination type: {settings.type}")


def load_mapping_index(
    config: MigrationConfig,
    mapping_registry: Optional[MappingRegistry] = None
) -> MappingIndex:
    """Resolve the mapping index for a step from a registry or the configured mapping file."""
    if mapping_registry is not None:
        return mapping_registry.get_index(config.mapping_profile)

    if config.mapping_file:
        return MappingIndex(MigrationMapping.from_json_file(config.mapping_file))

    logger.warning("No mapping configured, documents and fields map to themselves")
    return MappingIndex(MigrationMapping(name=config.mapping_profile))
