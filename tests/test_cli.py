import json
from pathlib import Path

import pytest

from molang_ls.__main__ import main


def test_resolve_prints_members(capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(SystemExit) as exc:
        main(["--resolve", "pokemon.species", "--context", "event:POKEMON_SENT_OUT"])
    assert exc.value.code == 0
    out = capsys.readouterr().out
    assert "pokemon.species: Struct" in out
    assert ".identifier: String" in out


def test_resolve_failure_exit_code(capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(SystemExit) as exc:
        main(["--resolve", "pokemon.level.extra"])
    assert exc.value.code == 1
    assert "not resolved" in capsys.readouterr().err


def test_resolve_with_custom_schema(capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    monkeypatch.chdir(tmp_path)
    schema = tmp_path / "schema.json"
    schema.write_text(json.dumps({"structs": {"box": {"functions": {"size": {"type": "Number"}}}}}))
    with pytest.raises(SystemExit) as exc:
        main(["--schema", str(schema), "--resolve", "box"])
    assert exc.value.code == 0
    out = capsys.readouterr().out
    assert "box: struct" in out
    assert ".size: Number" in out


def test_resolve_missing_schema(capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(SystemExit) as exc:
        main(["--schema", str(tmp_path / "nope.json"), "--resolve", "box"])
    assert exc.value.code == 2
    assert "Schema not loaded" in capsys.readouterr().err


def test_help_describes_transport_flags(capsys: pytest.CaptureFixture[str]):
    with pytest.raises(SystemExit) as exc:
        main(["--help"])
    assert exc.value.code == 0
    out = capsys.readouterr().out
    assert "Serve over stdin/stdout" in out
    assert "Port to listen on with --tcp" in out
    assert "VS Code" not in out
