"""
Tests for the HTTP API.
"""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from docmigrate.api.main import create_app
from docmigrate.models.migration import MigrationConfig
from docmigrate.models.schema import MigrationMapping
from docmigrate.orchestrator import MigrationStepRunner
from docmigrate.services.handlers import HandlerRegistry
from docmigrate.services.progress import InMemoryProgressStore


@pytest.fixture
def progress() -> InMemoryProgressStore:
    return InMemoryProgressStore()


@pytest.fixture
def app(memory_config_data, progress) -> FastAPI:
    return create_app(MigrationConfig.from_dict(memory_config_data), progress=progress)


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


def test_health_check(client: TestClient) -> None:
    """Health endpoint should return 200 with app info."""
    response = client.get("/api/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert "version" in data


def test_run_step(client: TestClient) -> None:
    response = client.post("/api/steps/map_data/run", json={})
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "completed"
    assert data["total_records_written"] == 2
    statuses = {d["source_document"]: d["status"] for d in data["documents"]}
    assert statuses == {"customer": "done", "legacy_log": "skipped"}


def test_progress_endpoints(client: TestClient) -> None:
    client.post("/api/steps/map_data/run", json={})

    response = client.get("/api/steps/map_data/progress")
    assert response.status_code == 200
    assert response.json() == {"step_id": "map_data", "processed": ["customer"]}

    rerun = client.post("/api/steps/map_data/run", json={}).json()
    assert rerun["previously_completed"] == ["customer"]

    assert client.delete("/api/steps/map_data/progress").json() == {"status": "reset"}
    assert client.get("/api/steps/map_data/progress").json()["processed"] == []


def test_run_with_reset_and_direct_copy(client: TestClient) -> None:
    client.post("/api/steps/map_data/run", json={})

    response = client.post("/api/steps/map_data/run", json={"reset": True, "direct_document_copy": True})
    assert response.status_code == 200
    customer = next(d for d in response.json()["documents"] if d["source_document"] == "customer")
    assert customer["strategy"] == "direct"


def test_unknown_step(client: TestClient) -> None:
    assert client.get("/api/steps/map_eav/progress").status_code == 404
    assert client.post("/api/steps/map_eav/run", json={}).status_code == 404


def test_invalid_configuration(memory_config_data) -> None:
    memory_config_data["destination"]["type"] = "mongodb"
    client = TestClient(create_app(MigrationConfig.from_dict(memory_config_data), progress=InMemoryProgressStore()))

    response = client.post("/api/steps/map_data/run", json={})
    assert response.status_code == 400
    assert "Unsupported destination type" in response.json()["detail"]


def test_step_failure(memory_config_data, tmp_path) -> None:
    mapping_file = tmp_path / "map.json"
    MigrationMapping.from_dict({
        "source": {"field_rules": [{"document": "customer", "field": "name", "handler": "explode"}]},
    }).save_to_json(str(mapping_file))
    memory_config_data["mapping_file"] = str(mapping_file)

    def explode(record, opposite, field, params):
        raise RuntimeError("boom")

    registry = HandlerRegistry()
    registry.register_handler("explode", explode)

    def runner_factory(config, progress):
        return MigrationStepRunner.from_config(config, progress=progress, handler_registry=registry)

    progress = InMemoryProgressStore()
    client = TestClient(create_app(
        MigrationConfig.from_dict(memory_config_data),
        progress=progress,
        runner_factory=runner_factory,
    ))

    response = client.post("/api/steps/map_data/run", json={})
    assert response.status_code == 500
    assert "boom" in response.json()["detail"]
    assert progress.get_processed_entities("map_data") == set()
