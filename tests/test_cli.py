import json

from typer.testing import CliRunner

from umlflow.cli import app
from umlflow.parser import sample_keys

runner = CliRunner()


def test_parse_text():
    result = runner.invoke(app, ["parse", "--text", "A -> B: hi"])

    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data["statistics"]["entity_count"] == 2


def test_parse_file(tmp_path):
    source = tmp_path / "flow.puml"
    source.write_text("@startuml\nactor U\nU -> S: go\n@enduml\n", encoding="utf-8")

    result = runner.invoke(app, ["parse", "--file", str(source)])

    assert result.exit_code == 0
    assert json.loads(result.stdout)["entities"][0]["kind"] == "actor"


def test_parse_requires_input():
    result = runner.invoke(app, ["parse"])

    assert result.exit_code != 0


def test_samples():
    result = runner.invoke(app, ["samples"])

    assert result.stdout.split() == sample_keys()


def test_preview_and_path():
    preview = runner.invoke(app, ["preview", "--entity", "A", "--text", "A -> B\nB -> C"])
    assert json.loads(preview.stdout) == ["A", "B", "C"]

    found = runner.invoke(app, ["path", "--from", "A", "--to", "C", "--text", "A -> B\nB -> C"])
    assert json.loads(found.stdout) == ["A", "B", "C"]

    missing = runner.invoke(app, ["path", "--from", "C", "--to", "A", "--text", "A -> B\nB -> C"])
    assert missing.exit_code == 1


def test_animate_dry_run_streams_commands():
    result = runner.invoke(app, ["animate", "--dry-run", "--start", "A", "--text", "A -> B"])

    assert result.exit_code == 0
    commands = [json.loads(line) for line in result.stdout.splitlines() if line.startswith("{")]
    assert [c["target"] for c in commands if c["name"] == "highlight_object"] == ["A", "B"]


def test_animate_unknown_start():
    result = runner.invoke(app, ["animate", "--dry-run", "--start", "Z", "--text", "A -> B"])

    assert result.exit_code == 1


def test_render_writes_svg(tmp_path, monkeypatch):
    monkeypatch.setattr("umlflow.cli.settings.output_dir", str(tmp_path))

    result = runner.invoke(app, ["render", "--sample", "simple", "--output-name", "simple"])

    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert (tmp_path / "simple.svg").read_text(encoding="utf-8").startswith("<svg")
    assert data["entity_count"] == 2
