"""Record count comparison between source and destination."""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ..extractors.base import BaseSource
from ..loaders.base import BaseDestination
from ..models.migration import DocumentStatus, StepReport

logger = logging.getLogger(__name__)


@dataclass
class VolumeMismatch:
    """A document whose destination count differs from its source count."""
    source_document: str
    destination_document: str
    source_count: int
    destination_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source_document": self.source_document,
            "destination_document": self.destination_document,
            "source_count": self.source_count,
            "destination_count": self.destination_count,
        }


class VolumeChecker:
    """Compares record counts of migrated documents."""

    def __init__(self, source: BaseSource, destination: BaseDestination):
        self.source = source
        self.destination = destination

    def check_document(self, source_document: str, destination_document: str) -> Optional[VolumeMismatch]:
        """Compare one document pair; None when the counts agree."""
        source_count = self.source.get_records_count(source_document)
        destination_count = self.destination.get_records_count(destination_document)
        if source_count == destination_count:
            return None

        logger.warning(
            f"Volume mismatch for {source_document} -> {destination_document}: "
            f"{source_count} source records, {destination_count} destination records"
        )
        return VolumeMismatch(source_document, destination_document, source_count, destination_count)

    def check(self, pairs: Dict[str, str]) -> List[VolumeMismatch]:
        """Compare every source -> destination document pair."""
        mismatches = []
        for source_document, destination_document in pairs.items():
            mismatch = self.check_document(source_document, destination_document)
            if mismatch:
                mismatches.append(mismatch)

        logger.info(f"Volume check of {len(pairs)} documents: {len(mismatches)} mismatches")
        return mismatches

    def check_report(self, report: StepReport) -> List[VolumeMismatch]:
        """Compare every document a step report marks as done."""
        return self.check({
            result.source_document: result.destination_document
            for result in report.documents_with_status(DocumentStatus.DONE)
        })
