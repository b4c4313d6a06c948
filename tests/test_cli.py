"""
Tests for the command line interface.
"""

import json
import sqlite3

import pytest

from docmigrate.cli import main


@pytest.fixture
def config_path(memory_config_data, tmp_path) -> str:
    path = tmp_path / "config.json"
    path.write_text(json.dumps(memory_config_data))
    return str(path)


@pytest.fixture
def sqlite_config_path(tmp_path) -> str:
    for name, count in (("source.db", 3), ("destination.db", 0)):
        conn = sqlite3.connect(str(tmp_path / name))
        with conn:
            conn.execute("CREATE TABLE customer (id INTEGER PRIMARY KEY, name TEXT)")
            conn.executemany(
                "INSERT INTO customer (id, name) VALUES (?, ?)",
                [(i, f"customer {i}") for i in range(1, count + 1)],
            )
        conn.close()

    path = tmp_path / "config.json"
    path.write_text(json.dumps({
        "source": {"type": "sqlite", "path": str(tmp_path / "source.db")},
        "destination": {"type": "sqlite", "path": str(tmp_path / "destination.db")},
        "progress_file": str(tmp_path / "progress.json"),
        "output_dir": str(tmp_path),
    }))
    return str(path)


def test_run_prints_summary(config_path, capsys) -> None:
    assert main(["run", "--config", config_path]) == 0

    out = capsys.readouterr().out
    assert "STEP COMPLETE" in out
    assert "customer: done (paged, 2 records)" in out
    assert "legacy_log: skipped - destination document not found" in out


def test_progress_show_and_reset(config_path, capsys) -> None:
    main(["run", "--config", config_path])
    capsys.readouterr()

    assert main(["progress", "--config", config_path]) == 0
    assert json.loads(capsys.readouterr().out) == {"step_id": "map_data", "processed": ["customer"]}

    assert main(["progress", "--config", config_path, "--reset"]) == 0
    capsys.readouterr()
    main(["progress", "--config", config_path])
    assert json.loads(capsys.readouterr().out)["processed"] == []


def test_run_and_verify_sqlite(sqlite_config_path, tmp_path, capsys) -> None:
    assert main(["run", "--config", sqlite_config_path, "--direct-copy"]) == 0
    assert "customer: done (direct, 0 records)" in capsys.readouterr().out
    assert list((tmp_path / "logs").glob("step_report_map_data_*.json"))

    assert main(["verify", "--config", sqlite_config_path]) == 0
    assert json.loads(capsys.readouterr().out) == []


def test_verify_reports_mismatch(sqlite_config_path, tmp_path, capsys) -> None:
    main(["run", "--config", sqlite_config_path])
    capsys.readouterr()

    conn = sqlite3.connect(str(tmp_path / "destination.db"))
    with conn:
        conn.execute("DELETE FROM customer WHERE id = 1")
    conn.close()

    assert main(["verify", "--config", sqlite_config_path]) == 1
    mismatches = json.loads(capsys.readouterr().out)
    assert mismatches[0]["source_count"] == 3
    assert mismatches[0]["destination_count"] == 2


def test_run_failure_exit_code(memory_config_data, tmp_path, capsys) -> None:
    memory_config_data["source"]["options"]["documents"]["customer"]["records"].append({"id": 1, "name": "Dup"})
    path = tmp_path / "bad.json"
    path.write_text(json.dumps(memory_config_data))

    assert main(["run", "--config", str(path)]) == 1
    assert "Step map_data FAILED" in capsys.readouterr().out


def test_configuration_error_exit_code(memory_config_data, tmp_path) -> None:
    memory_config_data["source"]["type"] = "mongodb"
    path = tmp_path / "bad.json"
    path.write_text(json.dumps(memory_config_data))

    assert main(["run", "--config", str(path)]) == 1


def test_no_command_prints_help(capsys) -> None:
    assert main([]) == 2
    assert "usage" in capsys.readouterr().out
