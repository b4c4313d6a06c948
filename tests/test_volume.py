"""
Tests for VolumeChecker.
"""

import logging

from docmigrate.models.migration import DocumentStatus, StepReport
from docmigrate.services.volume import VolumeChecker


def test_matching_counts(make_document, source, destination) -> None:
    document = make_document("customer", "id")
    source.add_document(document, [{"id": 1}, {"id": 2}])
    destination.add_document(document, [{"id": 1}, {"id": 2}])

    assert VolumeChecker(source, destination).check({"customer": "customer"}) == []


def test_mismatch_is_reported(make_document, source, destination, caplog) -> None:
    source.add_document(make_document("sales_order", "id"), [{"id": 1}, {"id": 2}])
    destination.add_document(make_document("order", "id"), [{"id": 1}])

    with caplog.at_level(logging.WARNING):
        mismatches = VolumeChecker(source, destination).check({"sales_order": "order"})

    assert [m.to_dict() for m in mismatches] == [{
        "source_document": "sales_order",
        "destination_document": "order",
        "source_count": 2,
        "destination_count": 1,
    }]
    assert "Volume mismatch for sales_order -> order" in caplog.text


def test_check_report_only_looks_at_done_documents(make_document, source, destination) -> None:
    source.add_document(make_document("customer", "id"), [{"id": 1}])
    destination.add_document(make_document("customer", "id"), [])

    report = StepReport(step_id="map_data")
    skipped = report.add_document("legacy_log")
    skipped.status = DocumentStatus.SKIPPED
    done = report.add_document("customer")
    done.destination_document = "customer"
    done.status = DocumentStatus.DONE

    mismatches = VolumeChecker(source, destination).check_report(report)

    assert [m.source_document for m in mismatches] == ["customer"]
