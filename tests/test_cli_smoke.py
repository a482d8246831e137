"""
Smoke tests for bin/analyze_claims.py
"""

import importlib.util
import json
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

CLI_PATH = Path(__file__).resolve().parent.parent / "bin" / "analyze_claims.py"


@pytest.fixture
def cli():
    spec = importlib.util.spec_from_file_location("analyze_claims", CLI_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def input_file(tmp_path, scenario_raw):
    raw = dict(scenario_raw)
    raw.pop("id")
    path = tmp_path / "planning.json"
    path.write_text(json.dumps(raw))
    return path


def run(cli, *argv):
    with patch.object(sys, "argv", ["analyze_claims.py", *argv]):
        return cli.main()


def test_json_output(cli, input_file, capsys):
    assert run(cli, str(input_file), "--json", "--insights", "-q") == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["inputId"] == "planning"
    assert payload["shape"]["primary"] == "constrained"
    assert payload["insights"][0]["type"] == "dissent"


def test_shape_only_export(cli, input_file, tmp_path):
    out = tmp_path / "out" / "result.json"
    assert run(cli, str(input_file), "--shape-only", "-o", str(out), "-q") == 0
    payload = json.loads(out.read_text())
    assert payload["shape"]["primary"] == "constrained"
    assert "graph" not in payload


def test_console_display(cli, input_file, capsys):
    assert run(cli, str(input_file), "--insights") == 0
    out = capsys.readouterr().out
    assert "CONSTRAINED" in out
    assert "Insights" in out


def test_missing_file(cli, tmp_path):
    assert run(cli, str(tmp_path / "missing.json")) == 1


def test_invalid_input(cli, tmp_path):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"edges": []}))
    assert run(cli, str(path)) == 1
