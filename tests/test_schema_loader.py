import json
import threading
from pathlib import Path

import pytest

from molang_ls.schema import loader
from molang_ls.schema.loader import SchemaLoadError, SchemaService, parse_schema
from molang_ls.schema.model import StructMember, ValueMember


def test_bundled_schema_loads():
    schema = SchemaService()
    assert schema.load() is True
    assert schema.is_loaded()
    assert schema.load_error is None
    assert "event:POKEMON_SENT_OUT" in schema.runtime_names()
    assert "pokemon" in schema.struct_names()


def test_missing_schema_is_not_loaded(tmp_path: Path):
    schema = SchemaService()
    assert schema.load(tmp_path / "missing.json") is False
    assert not schema.is_loaded()
    assert "not found" in schema.load_error
    assert schema.runtime_names() == []
    assert schema.struct_names() == []
    assert schema.runtime_query_variables("event:ANY") == {}
    assert schema.struct("pokemon") is None
    assert schema.function_set("generalFunctions") is None
    assert schema.composition("pokemon") is None


@pytest.mark.parametrize("content", ["{not json", "[1, 2, 3]", '"text"'])
def test_malformed_schema_is_not_loaded(tmp_path: Path, content: str):
    path = tmp_path / "schema.json"
    path.write_text(content)
    schema = SchemaService()
    assert schema.load(path) is False
    assert not schema.is_loaded()
    assert schema.load_error


def test_failed_load_is_terminal(tmp_path: Path):
    schema = SchemaService()
    assert schema.load(tmp_path / "missing.json") is False
    path = tmp_path / "schema.json"
    path.write_text("{}")
    assert schema.load(path) is False
    assert not schema.is_loaded()


def test_load_is_idempotent(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    path = tmp_path / "schema.json"
    path.write_text(json.dumps({"structs": {"a": {"functions": {"x": {"type": "Number"}}}}}))
    calls = []
    original = loader.parse_schema

    def _counting(data):
        calls.append(data)
        return original(data)

    monkeypatch.setattr(loader, "parse_schema", _counting)
    schema = SchemaService()
    threads = [threading.Thread(target=schema.load, args=(path,)) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    assert schema.load(path) is True

    assert len(calls) == 1
    assert schema.struct_names() == ["a"]
    assert list(schema.struct("a").members) == ["x"]


def test_parse_schema_rejects_non_object_root():
    with pytest.raises(SchemaLoadError):
        parse_schema([])


def test_parse_schema_skips_wrong_shaped_fragments():
    document = parse_schema(
        {
            "structs": {
                "good": {
                    "functions": {
                        "ok": {"type": "Number", "returns": 5, "description": ["x"]},
                        "bad": "not an object",
                        "nested": {"type": "Struct", "struct_type": 12, "functions": []},
                    }
                },
                "broken": 3,
            },
            "function_sets": [],
            "runtimes": {"event:A": {"query": "nope"}},
            "structCompositions": {"good": {"registries": ["R1", 7, None], "custom_functions": 1}},
        }
    )

    assert list(document.structs) == ["good"]
    members = document.structs["good"].members
    assert set(members) == {"ok", "nested"}
    assert isinstance(members["ok"], ValueMember)
    assert members["ok"].returns is None
    assert members["ok"].description is None
    nested = members["nested"]
    assert isinstance(nested, StructMember)
    assert nested.struct_type is None
    assert nested.members is None
    assert nested.is_dead_end
    assert document.function_sets == {}
    assert document.runtimes["event:A"].query == {}
    assert document.compositions["good"].registries == ("R1",)
    assert document.compositions["good"].custom_functions == {}


def test_parse_member_params():
    document = parse_schema(
        {
            "structs": {
                "s": {
                    "functions": {
                        "f": {
                            "type": "Unit",
                            "params": [
                                {"name": "message", "type": "String"},
                                "junk",
                                {"name": "overlay", "type": "Boolean", "optional": True},
                            ],
                        }
                    }
                }
            }
        }
    )
    entry = document.structs["s"].members["f"]
    assert entry.is_callable
    assert entry.param_signature() == "message: String, overlay: Boolean?"
    assert entry.display_type == "Unit"


def test_untagged_member_is_value():
    document = parse_schema({"structs": {"s": {"functions": {"m": {"functions": {"x": {}}}}}}})
    assert isinstance(document.structs["s"].members["m"], ValueMember)
