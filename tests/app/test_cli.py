from __future__ import annotations

from pathlib import Path

import orjson
from typer.testing import CliRunner

from app.cli import app

runner = CliRunner()


def test_layout_writes_render_model(tmp_path: Path, diagrams_dir: Path) -> None:
    output = tmp_path / "layout.json"

    result = runner.invoke(
        app, ["layout", str(diagrams_dir / "radial_feeder.json"), "--output", str(output)]
    )

    assert result.exit_code == 0, result.output
    payload = orjson.loads(output.read_bytes())
    assert [node["id"] for node in payload["nodes"]] == [
        "gen-1", "xfmr-1", "bus-1", "load-1", "load-2", "load-3",
    ]  # fmt: skip
    assert len(payload["connections"]) == 5
    assert all(conn["points"] for conn in payload["connections"])


def test_layout_prints_to_stdout(diagrams_dir: Path) -> None:
    result = runner.invoke(app, ["layout", str(diagrams_dir / "loop.json")])

    assert result.exit_code == 0, result.output
    payload = orjson.loads(result.stdout)
    assert len(payload["nodes"]) == 3


def test_layout_uses_config_file(tmp_path: Path, diagrams_dir: Path) -> None:
    config_path = tmp_path / "layout.yaml"
    config_path.write_text("layout:\n  margin: 0\n  layer_spacing: 200\n", encoding="utf-8")
    output = tmp_path / "layout.json"

    result = runner.invoke(
        app,
        [
            "--config",
            str(config_path),
            "layout",
            str(diagrams_dir / "radial_feeder.json"),
            "--output",
            str(output),
        ],
    )

    assert result.exit_code == 0, result.output
    nodes = {node["id"]: node for node in orjson.loads(output.read_bytes())["nodes"]}
    assert nodes["gen-1"]["position"]["y"] == 0
    assert nodes["xfmr-1"]["position"]["y"] == 200


def test_missing_config_fails(tmp_path: Path, diagrams_dir: Path) -> None:
    result = runner.invoke(
        app,
        ["--config", str(tmp_path / "nope.yaml"), "validate", str(diagrams_dir / "loop.json")],
    )

    assert result.exit_code == 1
    assert "Invalid configuration" in result.output


def test_validate_accepts_example(diagrams_dir: Path) -> None:
    result = runner.invoke(app, ["validate", str(diagrams_dir / "dual_source.json")])

    assert result.exit_code == 0, result.output
    assert "Valid diagram file" in result.output


def test_validate_reports_dangling_references(tmp_path: Path) -> None:
    path = tmp_path / "dangling.json"
    path.write_bytes(orjson.dumps([{"id": "a", "name": "A", "type": "Load", "loadIds": ["ghost"]}]))

    result = runner.invoke(app, ["validate", str(path)])

    assert result.exit_code == 1
    assert "a -> ghost" in result.output


def test_validate_reports_duplicate_ids(tmp_path: Path) -> None:
    path = tmp_path / "dupes.json"
    path.write_bytes(
        orjson.dumps(
            [
                {"id": "a", "name": "A", "type": "Load"},
                {"id": "a", "name": "A", "type": "Load"},
            ]
        )
    )

    result = runner.invoke(app, ["validate", str(path)])

    assert result.exit_code == 1
    assert "Duplicate equipment id" in result.output


def test_validate_missing_file(tmp_path: Path) -> None:
    result = runner.invoke(app, ["validate", str(tmp_path / "missing.json")])

    assert result.exit_code == 1
    assert "File not found" in result.output


def test_analyze_reports_cycles(diagrams_dir: Path) -> None:
    result = runner.invoke(app, ["analyze", str(diagrams_dir / "loop.json")])

    assert result.exit_code == 0, result.output
    assert "Equipment: 3" in result.output
    assert "Cycle:" in result.output


def test_path_prints_chain(diagrams_dir: Path) -> None:
    result = runner.invoke(app, ["path", str(diagrams_dir / "radial_feeder.json"), "gen-1", "load-2"])

    assert result.exit_code == 0, result.output
    assert "gen-1 -> xfmr-1 -> bus-1 -> load-2" in result.output


def test_path_unknown_equipment(diagrams_dir: Path) -> None:
    result = runner.invoke(app, ["path", str(diagrams_dir / "radial_feeder.json"), "gen-1", "nope"])

    assert result.exit_code == 1
    assert "Unknown equipment" in result.output


def test_validate_rejects_invalid_subtype_attributes(tmp_path: Path) -> None:
    path = tmp_path / "plasma.json"
    path.write_bytes(
        orjson.dumps([{"id": "g", "name": "G", "type": "Generator", "fuelType": "plasma"}])
    )

    validated = runner.invoke(app, ["validate", str(path)])
    laid_out = runner.invoke(app, ["layout", str(path)])

    assert validated.exit_code == 1
    assert "Validation failed" in validated.output
    assert laid_out.exit_code == 1
