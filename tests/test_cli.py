# ──────────────────────────────────────────────────────────────────────
# Petri Inherit — CLI Tests
# ──────────────────────────────────────────────────────────────────────

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest
from click.testing import CliRunner

import petri_inherit.cli as cli_mod
from petri_inherit.core.config_schema import ENV_MAX_MARKINGS, ENV_PROJECTION, ENV_PROTOCOL


PARENT = {
    "id": "parent",
    "places": [{"id": "p1", "tokens": 1}],
    "transitions": [{"id": "t1"}],
    "arcs": [
        {"source": "p1", "destination": "t1"},
        {"source": "t1", "destination": "p1"},
    ],
    "roles": [{"id": "clerk"}],
}

CHILD = {
    "id": "child",
    "type": "protocol",
    "places": [{"id": "p1", "tokens": 1}, {"id": "c_budget", "tokens": 1}, {"id": "c_log"}],
    "transitions": [{"id": "t1"}, {"id": "t2"}],
    "arcs": [
        {"source": "p1", "destination": "t1"},
        {"source": "t1", "destination": "p1"},
        {"source": "c_budget", "destination": "t2"},
        {"source": "t2", "destination": "c_log"},
    ],
}

CHILD_DISJOINT = {
    "id": "extension",
    "places": [{"id": "c_budget", "tokens": 1}, {"id": "c_log"}],
    "transitions": [{"id": "t2"}],
    "arcs": [
        {"source": "c_budget", "destination": "t2"},
        {"source": "t2", "destination": "c_log"},
    ],
}


@pytest.fixture(autouse=True)
def _isolate(monkeypatch):
    for name in (ENV_PROTOCOL, ENV_PROJECTION, ENV_MAX_MARKINGS):
        monkeypatch.delenv(name, raising=False)
    logger = logging.getLogger("petri_inherit")
    old_handlers = list(logger.handlers)
    old_level = logger.level
    yield
    logger.handlers[:] = old_handlers
    logger.setLevel(old_level)


def _write(tmp_path: Path, name: str, document: dict) -> str:
    path = tmp_path / name
    path.write_text(json.dumps(document), encoding="utf-8")
    return str(path)


def test_check_reports_protocol(tmp_path) -> None:
    runner = CliRunner()
    result = runner.invoke(
        cli_mod.cli,
        ["check", _write(tmp_path, "p.json", PARENT), _write(tmp_path, "c.json", CHILD)],
    )
    assert result.exit_code == 0, result.output
    assert result.output.strip() == "Protocol Inheritance"


def test_check_no_inheritance(tmp_path) -> None:
    runner = CliRunner()
    child = dict(CHILD, type=None)
    result = runner.invoke(
        cli_mod.cli,
        ["check", _write(tmp_path, "p.json", PARENT), _write(tmp_path, "c.json", child)],
    )
    assert result.exit_code == 0
    assert result.output.strip() == "No Inheritance"


def test_check_forbidden_kind(tmp_path) -> None:
    runner = CliRunner()
    result = runner.invoke(
        cli_mod.cli,
        [
            "check",
            _write(tmp_path, "p.json", PARENT),
            _write(tmp_path, "c.json", CHILD),
            "--no-protocol",
        ],
    )
    assert result.exit_code == 1
    assert "Protocol inheritance is forbidden" in result.output


def test_check_forbidden_via_environment(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv(ENV_PROTOCOL, "off")
    runner = CliRunner()
    result = runner.invoke(
        cli_mod.cli,
        ["check", _write(tmp_path, "p.json", PARENT), _write(tmp_path, "c.json", CHILD)],
    )
    assert result.exit_code == 1
    assert "forbidden" in result.output


def test_check_conformance_failure(tmp_path) -> None:
    child = json.loads(json.dumps(CHILD))
    child["places"].append({"id": "c_gate"})
    child["arcs"].append({"source": "c_gate", "destination": "t1", "type": "read"})
    runner = CliRunner()
    result = runner.invoke(
        cli_mod.cli,
        ["check", _write(tmp_path, "p.json", PARENT), _write(tmp_path, "c.json", child)],
    )
    assert result.exit_code == 1
    assert "does not meet PROTOCOL inheritance requirements" in result.output


def test_check_config_file_and_budget(tmp_path) -> None:
    config = _write(tmp_path, "settings.json", {"projection_enabled": False})
    runner = CliRunner()
    result = runner.invoke(
        cli_mod.cli,
        [
            "check",
            _write(tmp_path, "p.json", PARENT),
            _write(tmp_path, "c.json", dict(CHILD, type="projection")),
            "--config",
            config,
        ],
    )
    assert result.exit_code == 1
    assert "Projection inheritance is forbidden" in result.output

    result = runner.invoke(
        cli_mod.cli,
        [
            "check",
            _write(tmp_path, "p.json", PARENT),
            _write(tmp_path, "c.json", CHILD),
            "--max-markings",
            "1",
        ],
    )
    assert result.exit_code == 1
    assert "exceeded 1 markings" in result.output


def test_invalid_document(tmp_path) -> None:
    runner = CliRunner()
    bad = dict(PARENT, arcs=[{"source": "p1", "destination": "ghost"}])
    result = runner.invoke(
        cli_mod.cli,
        ["check", _write(tmp_path, "p.json", bad), _write(tmp_path, "c.json", CHILD)],
    )
    assert result.exit_code == 1
    assert "Invalid net document" in result.output


def test_graph_prints_json(tmp_path) -> None:
    runner = CliRunner()
    result = runner.invoke(cli_mod.cli, ["graph", _write(tmp_path, "c.json", CHILD)])
    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload["marking_count"] == 2
    assert payload["initial"] == "c_budget:1, c_log:0, p1:1"


def test_inspect_prints_summary(tmp_path) -> None:
    runner = CliRunner()
    result = runner.invoke(cli_mod.cli, ["inspect", _write(tmp_path, "c.json", CHILD)])
    assert result.exit_code == 0
    assert "PetriNet 'child'" in result.output
    assert "W_in" in result.output
    assert "dead_places: -" in result.output


def test_merge_prints_document(tmp_path) -> None:
    runner = CliRunner()
    result = runner.invoke(
        cli_mod.cli,
        [
            "merge",
            _write(tmp_path, "p.json", PARENT),
            _write(tmp_path, "c.json", CHILD_DISJOINT),
        ],
    )
    assert result.exit_code == 0, result.output
    merged = json.loads(result.output)
    assert {p["id"] for p in merged["places"]} == {"c_budget", "c_log", "p1"}
    assert [r["id"] for r in merged["roles"]] == ["clerk"]


def test_merge_conflict(tmp_path) -> None:
    runner = CliRunner()
    result = runner.invoke(
        cli_mod.cli,
        ["merge", _write(tmp_path, "p.json", PARENT), _write(tmp_path, "c.json", CHILD)],
    )
    assert result.exit_code == 1
    assert "Conflict: Child PetriNet already contains Place with ID 'p1'" in result.output


def test_clone_with_parent(tmp_path, monkeypatch) -> None:
    ids = iter(f"{i:024x}" for i in range(1, 100))
    monkeypatch.setattr("petri_inherit.net.cloner.new_object_id", lambda: next(ids))
    runner = CliRunner()
    result = runner.invoke(
        cli_mod.cli,
        [
            "clone",
            _write(tmp_path, "c.json", CHILD_DISJOINT),
            "--parent",
            _write(tmp_path, "p.json", PARENT),
        ],
    )
    assert result.exit_code == 0, result.output
    cloned = json.loads(result.output)
    assert cloned["transitions"][0]["id"] == f"{1:024x}"
    assert cloned["id"] == f"{4:024x}"


def test_clone_rejects_parent_ids(tmp_path) -> None:
    runner = CliRunner()
    result = runner.invoke(
        cli_mod.cli,
        [
            "clone",
            _write(tmp_path, "c.json", CHILD),
            "--parent",
            _write(tmp_path, "p.json", PARENT),
        ],
    )
    assert result.exit_code == 1
    assert "Transition ID 't1' already exists in parent PetriNet." in result.output


def test_json_logs_option(tmp_path) -> None:
    runner = CliRunner()
    result = runner.invoke(
        cli_mod.cli,
        ["--log-level", "info", "--json-logs", "graph", _write(tmp_path, "c.json", CHILD)],
    )
    assert result.exit_code == 0
    assert logging.getLogger("petri_inherit").level == logging.INFO


def test_main_returns_exit_code(tmp_path, monkeypatch) -> None:
    monkeypatch.setattr(
        "sys.argv",
        ["petri-inherit", "check", _write(tmp_path, "p.json", PARENT), str(tmp_path / "missing.json")],
    )
    assert cli_mod.main() == 2
