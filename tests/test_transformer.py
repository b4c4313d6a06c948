"""
Tests for RecordTransformer.
"""

import pytest

from docmigrate.exceptions import MappingError
from docmigrate.models.record import Record
from docmigrate.models.schema import MigrationMapping
from docmigrate.services.mapping_index import MappingIndex
from docmigrate.services.transformer import RecordTransformer


def index(data: dict) -> MappingIndex:
    return MappingIndex(MigrationMapping.from_dict(data))


def test_no_handlers_means_identity_copy(make_document) -> None:
    src = make_document("customer", "id", "name")
    dst = make_document("customer", "id", "name")

    assert RecordTransformer(src, dst, index({})).init() is None


def test_source_handler_then_move(make_document) -> None:
    """Source handlers run before fields are copied to their targets."""
    src = make_document("order_item", "id", "price", "internal_note")
    dst = make_document("order_item", "id", "price_cents")
    mapping = index({
        "source": {
            "field_rules": [{
                "document": "order_item",
                "field": "price",
                "move": "price_cents",
                "handler": {"name": "multiply", "params": {"factor": 100, "integer": True}},
            }],
        },
    })
    transformer = RecordTransformer(src, dst, mapping).init()

    source_record = Record(src, {"id": 1, "price": "9.99", "internal_note": "x"})
    destination_record = Record(dst)
    transformer.transform(source_record, destination_record)

    assert destination_record.data == {"id": 1, "price_cents": 999}
    assert source_record.get_value("price") == "9.99"


def test_destination_handler_fills_new_field(make_document) -> None:
    src = make_document("customer", "id", "name")
    dst = make_document("customer", "id", "name", "status")
    mapping = index({
        "destination": {
            "field_rules": [{
                "document": "customer",
                "field": "status",
                "handler": {"name": "set_value", "params": {"value": "migrated"}},
            }],
        },
    })
    transformer = RecordTransformer(src, dst, mapping).init()

    destination_record = Record(dst)
    transformer.transform(Record(src, {"id": 3, "name": "Ann"}), destination_record)

    assert destination_record.data == {"id": 3, "name": "Ann", "status": "migrated"}


def test_handlers_run_in_field_order(make_document) -> None:
    src = make_document("tag", "id", "name", "slug")
    dst = make_document("tag", "id", "name", "slug")
    mapping = index({
        "source": {
            "field_rules": [
                {"document": "tag", "field": "slug", "handler": {
                    "name": "copy_field", "params": {"from": "name", "opposite": False},
                }},
                {"document": "tag", "field": "name", "handler": "uppercase"},
            ],
        },
    })
    transformer = RecordTransformer(src, dst, mapping).init()

    destination_record = Record(dst)
    transformer.transform(Record(src, {"id": 1, "name": "sale", "slug": ""}), destination_record)

    assert destination_record.get_value("slug") == "SALE"


def test_unknown_handler_fails_at_init(make_document) -> None:
    src = make_document("customer", "id")
    mapping = index({
        "source": {"field_rules": [{"document": "customer", "field": "id", "handler": "nope"}]},
    })

    with pytest.raises(MappingError):
        RecordTransformer(src, src, mapping).init()


def test_copy_by_map_drops_ignored_and_missing_fields(make_document) -> None:
    src = make_document("customer", "id", "name", "password_hash", "legacy_code")
    dst = make_document("customer", "id", "name", "password_hash")
    mapping = index({
        "source": {
            "field_rules": [{"document": "customer", "field": "password_hash", "ignore": True}],
        },
    })

    destination_record = Record(dst)
    RecordTransformer.copy_by_map(
        Record(src, {"id": 1, "name": "Ann", "password_hash": "x", "legacy_code": "L1"}),
        destination_record,
        mapping,
    )

    assert destination_record.data == {"id": 1, "name": "Ann"}
