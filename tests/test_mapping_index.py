"""
Tests for MappingIndex and MappingRegistry.
"""

import json

import pytest

from docmigrate.exceptions import MappingError
from docmigrate.models.schema import MapDirection, MigrationMapping
from docmigrate.services.mapping_index import MappingIndex, MappingRegistry

SOURCE = MapDirection.SOURCE
DESTINATION = MapDirection.DESTINATION


@pytest.fixture
def mapping() -> MappingIndex:
    return MappingIndex(MigrationMapping.from_dict({
        "source": {
            "document_rules": {
                "ignore": ["legacy_log", "tmp_*"],
                "rename": {"sales_order": "order"},
            },
            "field_rules": [
                {"document": "customer", "field": "password_hash", "ignore": True},
                {"document": "customer", "field": "mail", "move": "customer.email"},
                {"document": "*", "field": "updated_at", "handler": "placeholder"},
                {
                    "document": "order",
                    "field": "updated_at",
                    "handler": {"name": "set_value", "params": {"value": 0}},
                },
            ],
        },
        "destination": {
            "document_rules": {"ignore": ["report_cache"]},
            "field_rules": [
                {"document": "customer", "field": "legacy_code", "ignore": True},
                {"document": "customer", "field": "status", "handlers": ["uppercase", "truncate"]},
            ],
        },
    }))


def test_unlisted_document_maps_to_itself(mapping: MappingIndex) -> None:
    assert mapping.document_target("customer", SOURCE) == "customer"
    assert mapping.document_target("customer", DESTINATION) == "customer"


def test_rename_resolves_both_ways(mapping: MappingIndex) -> None:
    assert mapping.document_target("sales_order", SOURCE) == "order"
    assert mapping.document_target("order", DESTINATION) == "sales_order"


def test_ignored_documents(mapping: MappingIndex) -> None:
    """Documents ignored on either side have no counterpart."""
    assert mapping.document_target("legacy_log", SOURCE) is None
    assert mapping.document_target("tmp_import", SOURCE) is None
    assert mapping.document_target("report_cache", SOURCE) is None
    assert mapping.is_document_ignored("tmp_import", SOURCE)
    assert not mapping.is_document_ignored("customer", SOURCE)


def test_field_rules(mapping: MappingIndex) -> None:
    assert mapping.field_target("customer", "name", SOURCE) == "name"
    assert mapping.field_target("customer", "password_hash", SOURCE) is None
    assert mapping.field_target("customer", "mail", SOURCE) == "email"


def test_field_ignored_on_opposite_side(mapping: MappingIndex) -> None:
    assert mapping.field_target("customer", "legacy_code", SOURCE) is None


def test_field_of_ignored_document(mapping: MappingIndex) -> None:
    assert mapping.field_target("legacy_log", "id", SOURCE) is None


def test_exact_rule_handlers_win_over_wildcard(mapping: MappingIndex) -> None:
    exact = mapping.handler_configs("order", "updated_at", SOURCE)
    assert [h.name for h in exact] == ["set_value"]
    assert exact[0].params == {"value": 0}

    wildcard = mapping.handler_configs("customer", "updated_at", SOURCE)
    assert [h.name for h in wildcard] == ["placeholder"]


def test_handlers_keep_declaration_order(mapping: MappingIndex) -> None:
    handlers = mapping.handler_configs("customer", "status", DESTINATION)
    assert [h.name for h in handlers] == ["uppercase", "truncate"]
    assert mapping.has_handler("customer", "status", DESTINATION)
    assert not mapping.has_handler("customer", "status", SOURCE)


def test_conflicting_renames_rejected() -> None:
    with pytest.raises(MappingError):
        MappingIndex(MigrationMapping.from_dict({
            "source": {"document_rules": {"rename": {"a": "c", "b": "c"}}},
        }))


def test_registry_loads_directory(tmp_path) -> None:
    (tmp_path / "step.json").write_text(json.dumps({
        "name": "map_file",
        "source": {"document_rules": {"ignore": ["legacy_log"]}},
    }))

    registry = MappingRegistry(str(tmp_path))

    assert registry.list_mappings() == ["map_file"]
    index = registry.get_index("map_file")
    assert index is registry.get_index()
    assert index.document_target("legacy_log", SOURCE) is None


def test_registry_missing_profile() -> None:
    registry = MappingRegistry()
    registry.register_mapping(MigrationMapping(name="map_file"))

    with pytest.raises(MappingError):
        registry.get_index("map_customer")


def test_registry_missing_directory(tmp_path) -> None:
    registry = MappingRegistry()
    assert registry.load_mappings_from_directory(str(tmp_path / "nope")) == 0


def test_mapping_json_round_trip(tmp_path) -> None:
    mapping = MigrationMapping.from_dict({
        "name": "map_file",
        "source": {"field_rules": [{"document": "a", "field": "b", "move": "c"}]},
    })
    path = tmp_path / "map.json"
    mapping.save_to_json(str(path))

    loaded = MigrationMapping.from_json_file(str(path))
    assert loaded.source.field_rules[0].move == "c"
