import pytest

from molang_ls.schema.loader import SchemaService, parse_schema
from molang_ls.schema.resolver import ChainResolver

PRECEDENCE_SCHEMA = {
    "structs": {
        "widget": {
            "functions": {
                "a": {"type": "Number", "description": "own a"},
                "nested": {
                    "type": "Struct",
                    "struct_type": "gadget",
                    "functions": {"x": {"type": "String", "description": "inline x"}},
                },
                "hollow": {"type": "Struct"},
                "blank_ref": {"type": "Struct", "struct_type": ""},
                "inline_only": {
                    "type": "Struct",
                    "functions": {"leaf": {"type": "Boolean"}},
                },
                "count": {"type": "Number"},
            }
        },
        "gadget": {
            "functions": {
                "x": {"type": "Number", "description": "gadget x"},
                "y": {"type": "Number"},
            }
        },
        "pokemon": {"functions": {"level": {"type": "Number"}}},
    },
    "function_sets": {
        "R1": {"functions": {"a": {"type": "String", "source": "R1"}, "b": {"type": "String", "source": "R1"}}},
        "R2": {"functions": {"b": {"type": "String", "source": "R2"}, "c": {"type": "String", "source": "R2"}}},
    },
    "structCompositions": {
        "widget": {
            "registries": ["R1", "R2"],
            "custom_functions": {
                "c": {"type": "String", "source": "custom"},
                "d": {"type": "String", "source": "custom"},
            },
        },
        "orphan": {"registries": ["R2"]},
    },
    "runtimes": {
        "event:WIDGET_BUILT": {
            "query": {
                "widget": {"type": "Struct", "struct_type": "widget"},
                "score": {"type": "Number"},
            }
        },
        "event:GADGET_USED": {
            "query": {
                "gadget": {"type": "Struct"},
                "score": {"type": "String"},
            }
        },
    },
}


def make_service(data) -> SchemaService:
    return SchemaService.from_document(parse_schema(data))


@pytest.fixture
def service() -> SchemaService:
    return make_service(PRECEDENCE_SCHEMA)


@pytest.fixture
def resolver(service: SchemaService) -> ChainResolver:
    return ChainResolver(service)


@pytest.fixture
def bundled() -> ChainResolver:
    schema = SchemaService()
    assert schema.load()
    return ChainResolver(schema)
