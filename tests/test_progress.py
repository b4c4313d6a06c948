"""
Tests for the progress stores.
"""

import json

from docmigrate.services.progress import InMemoryProgressStore, JsonFileProgressStore


def test_json_store_persists_between_instances(tmp_path) -> None:
    path = tmp_path / "state" / "progress.json"
    store = JsonFileProgressStore(str(path))
    store.add_processed_entity("map_data", "customer")
    store.add_processed_entity("map_data", "customer")
    store.add_processed_entity("map_data", "order_item")

    reopened = JsonFileProgressStore(str(path))
    assert reopened.get_processed_entities("map_data") == {"customer", "order_item"}

    data = json.loads(path.read_text())
    assert data["steps"]["map_data"]["processed"] == ["customer", "order_item"]
    assert "updated_at" in data["steps"]["map_data"]
    assert [p.name for p in path.parent.iterdir()] == ["progress.json"]


def test_json_store_missing_file(tmp_path) -> None:
    store = JsonFileProgressStore(str(tmp_path / "progress.json"))
    assert store.get_processed_entities("map_data") == set()


def test_json_store_reset_is_per_step(tmp_path) -> None:
    store = JsonFileProgressStore(str(tmp_path / "progress.json"))
    store.add_processed_entity("map_data", "customer")
    store.add_processed_entity("map_eav", "attribute")

    store.reset("map_data")

    assert store.get_processed_entities("map_data") == set()
    assert store.get_processed_entities("map_eav") == {"attribute"}


def test_in_memory_store() -> None:
    store = InMemoryProgressStore()
    store.add_processed_entity("map_data", "customer")

    assert store.get_processed_entities("map_data") == {"customer"}
    assert store.get_processed_entities("other") == set()

    store.reset("map_data")
    assert store.get_processed_entities("map_data") == set()
