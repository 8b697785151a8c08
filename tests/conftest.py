"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages and
provides a sample metadata dump shared by the generation and CLI tests.
"""

import copy
import json
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

# Insert local src directory at the beginning of sys.path
# This ensures that the local facadegen package is used, not any installed one
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

# Force reimport of facadegen modules if already imported
for module_name in list(sys.modules.keys()):
    if module_name.startswith("facadegen"):
        del sys.modules[module_name]

from facadegen.metadata.dump import DumpMetadataSource  # noqa: E402

PRIVATE = {"visibility": "private"}
INTERNAL = {"visibility": "internal"}

_SAMPLE_TYPES: list[dict[str, Any]] = [
    {
        "full_name": "Sample.PublicClass",
        "properties": [
            {
                "name": "PublicStaticIntProperty",
                "type": "int",
                "static": True,
                "get": {},
                "set": {},
            },
            {"name": "PublicIntProperty", "type": "int", "get": {}, "set": {}},
            {"name": "PublicPrivateIntProperty", "type": "int", "get": {}, "set": PRIVATE},
            {
                "name": "PublicGenericProperty",
                "type": {"name": "System.Collections.Generic.List`1", "args": ["int"]},
                "get": {},
                "set": {},
            },
            {
                "name": "PublicRefReadonlyIntProperty",
                "type": "int",
                "returns_by_ref": True,
                "read_only_ref": True,
                "get": {},
            },
            {"name": "InternalIntProperty", "type": "int", "get": INTERNAL, "set": INTERNAL},
            {
                "name": "InternalUnknownProperty",
                "type": "Sample.InternalStruct",
                "get": INTERNAL,
                "set": INTERNAL,
            },
            {
                "name": "PrivateRefReadonlyIntProperty",
                "type": "int",
                "returns_by_ref": True,
                "read_only_ref": True,
                "get": PRIVATE,
            },
            {"name": "Item", "type": "int", "index_parameters": 1, "get": {}},
        ],
        "fields": [
            {"name": "privateIntField", "type": "int"},
            {"name": "privateUnknownField", "type": "Sample.InternalStruct"},
            {"name": "MaxCount", "type": "int", "constant": True},
        ],
        "methods": [
            {"name": "PublicVoidMethod"},
            {
                "name": "PublicRefMethod",
                "return_type": "int",
                "returns_by_ref": True,
                "read_only_return": True,
                "parameters": [
                    {"name": "inParameter", "type": "int", "mode": "in"},
                    {"name": "outParameter", "type": "int", "mode": "out"},
                    {"name": "refParameter", "type": "int", "mode": "ref"},
                ],
            },
            {
                "name": "InternalStaticUnknownMethod",
                "static": True,
                "visibility": "internal",
                "return_type": "Sample.InternalStruct",
                "parameters": [
                    {"name": "intParameter", "type": "int"},
                    {"name": "unknownParameter", "type": "Sample.InternalStruct"},
                ],
            },
            {
                "name": "TryGet",
                "visibility": "private",
                "return_type": "bool",
                "parameters": [
                    {"name": "key", "type": "int"},
                    {"name": "value", "type": "string", "mode": "out"},
                ],
            },
            {
                "name": "Fill",
                "visibility": "private",
                "parameters": [
                    {"name": "target", "type": "Sample.InternalStruct", "mode": "out"},
                    {"name": "count", "type": "int", "mode": "ref"},
                ],
            },
            {
                "name": "get_PublicIntProperty",
                "return_type": "int",
                "special_name": True,
            },
            {"name": "<PublicVoidMethod>b__0", "visibility": "private", "compiler_generated": True},
        ],
    },
    {
        "full_name": "Sample.Fields",
        "fields": [
            {"name": "A", "type": "int", "visibility": "public"},
            {"name": "B", "type": "int"},
        ],
    },
    {
        "full_name": "Sample.Overloads",
        "methods": [
            {
                "name": "Foo",
                "visibility": "private",
                "parameters": [{"name": "x", "type": "int"}],
            },
            {"name": "Bar", "visibility": "private"},
            {
                "name": "Foo",
                "visibility": "private",
                "parameters": [{"name": "s", "type": "string"}],
            },
            {
                "name": "Foo",
                "visibility": "private",
                "parameters": [{"name": "x", "type": "int"}, {"name": "y", "type": "int"}],
            },
        ],
    },
    {
        "full_name": "Sample.Generics",
        "methods": [
            {
                "name": "Echo",
                "return_type": {"generic_parameter": "T"},
                "parameters": [{"name": "x", "type": {"generic_parameter": "T"}}],
                "generic_parameters": [
                    {
                        "name": "T",
                        "constraints": [
                            {
                                "name": "System.IEquatable`1",
                                "args": [{"generic_parameter": "T"}],
                            }
                        ],
                    }
                ],
            },
            {
                "name": "Wrap",
                "visibility": "private",
                "return_type": {
                    "name": "System.Collections.Generic.List`1",
                    "args": [{"generic_parameter": "T"}],
                },
                "parameters": [{"name": "value", "type": {"generic_parameter": "T"}}],
                "generic_parameters": [{"name": "T", "reference_type": True}],
            },
            {
                "name": "Parse",
                "visibility": "private",
                "return_type": "int",
                "parameters": [{"name": "text", "type": "string"}],
            },
            {
                "name": "Parse",
                "visibility": "private",
                "return_type": "int",
                "parameters": [
                    {"name": "items", "type": {"array": {"generic_parameter": "T"}}},
                ],
                "generic_parameters": [{"name": "T"}],
            },
            {
                "name": "Hide",
                "visibility": "private",
                "return_type": {"generic_parameter": "T"},
                "parameters": [{"name": "value", "type": {"generic_parameter": "T"}}],
                "generic_parameters": [{"name": "T", "constraints": ["Sample.InternalClass"]}],
            },
        ],
    },
    {
        "full_name": "Sample.Base",
        "properties": [{"name": "Name", "type": "string", "get": {}}],
        "methods": [
            {"name": "M"},
            {"name": "M", "parameters": [{"name": "x", "type": "int"}]},
            {"name": "Secret", "visibility": "private"},
        ],
    },
    {
        "full_name": "Sample.Derived",
        "base_type": "Sample.Base",
        "properties": [{"name": "Name", "type": "string", "get": {}}],
        "methods": [{"name": "M"}],
    },
    {
        "full_name": "Sample.ExplicitImpl",
        "interfaces": ["Sample.IGreeter"],
        "properties": [
            {"name": "Name", "type": "string", "get": {}},
            {
                "name": "Sample.IGreeter.Name",
                "type": "string",
                "get": {"name": "Sample.IGreeter.get_Name", "visibility": "private"},
            },
        ],
        "methods": [
            {"name": "Greet", "return_type": "string"},
            {"name": "Sample.IGreeter.Greet", "visibility": "private", "return_type": "string"},
        ],
        "interface_map": [
            {"interface_method": "Sample.IGreeter.Greet", "target": "Sample.IGreeter.Greet"},
            {
                "interface_method": "Sample.IGreeter.get_Name",
                "target": "Sample.IGreeter.get_Name",
            },
        ],
    },
    {
        "full_name": "Sample.IGreeter",
        "kind": "interface",
        "properties": [{"name": "Name", "type": "string", "get": {}}],
        "methods": [{"name": "Greet", "return_type": "string"}],
    },
    {
        "full_name": "Sample.Utility",
        "abstract": True,
        "sealed": True,
        "fields": [
            {"name": "counter", "type": "int", "static": True},
            {"name": "Version", "type": "string", "visibility": "public", "constant": True},
        ],
        "methods": [
            {
                "name": "Clamp",
                "static": True,
                "return_type": "int",
                "parameters": [
                    {"name": "value", "type": "int"},
                    {"name": "max", "type": "int", "default": {"kind": "integer", "value": 10}},
                ],
            },
        ],
    },
    {"full_name": "Sample.InternalStruct", "kind": "struct", "visible": False},
    {"full_name": "Sample.InternalClass", "visible": False},
    {"full_name": "Sample.Point", "kind": "struct"},
    {"full_name": "Sample.Callback", "kind": "delegate"},
    {"full_name": "Sample.CustomAttribute", "base_type": "System.Attribute"},
    {"full_name": "Sample.AbstractShape", "abstract": True},
    {"full_name": "Sample.<>c", "sealed": True, "compiler_generated": True},
    {"full_name": "Sample.Box`1", "generic_definition": True},
    {
        "full_name": "Sample.DerivedFromExternal",
        "base_type": "Other.ExternalBase",
        "methods": [{"name": "Local"}],
    },
]

_OTHER_TYPES: list[dict[str, Any]] = [
    {"full_name": "Other.ExternalBase", "methods": [{"name": "Inherited"}]},
]

SAMPLE_DUMP: dict[str, Any] = {
    "assemblies": [
        {"name": "Sample", "types": _SAMPLE_TYPES},
        {"name": "Other", "types": _OTHER_TYPES},
    ]
}

# Types the default discovery filter admits, in dump order.
_CANDIDATE_TYPES = [
    "Sample.PublicClass",
    "Sample.Fields",
    "Sample.Overloads",
    "Sample.Generics",
    "Sample.Base",
    "Sample.Derived",
    "Sample.ExplicitImpl",
    "Sample.Utility",
    "Sample.InternalClass",
    "Sample.Box`1",
    "Sample.DerivedFromExternal",
    "Other.ExternalBase",
]


def _make_dump(*extra_types: dict[str, Any]) -> dict[str, Any]:
    """A fresh copy of the sample dump with ``extra_types`` appended to the Sample assembly."""
    dump = copy.deepcopy(SAMPLE_DUMP)
    dump["assemblies"][0]["types"].extend(copy.deepcopy(list(extra_types)))
    return dump


@pytest.fixture
def sample_dump() -> dict[str, Any]:
    """A mutable copy of the sample metadata dump."""
    return _make_dump()


@pytest.fixture
def sample_source() -> DumpMetadataSource:
    """MetadataSource over the sample dump."""
    return DumpMetadataSource.from_dict(_make_dump())


@pytest.fixture
def sample_dump_path(tmp_path: Path) -> Path:
    """The sample dump written as JSON."""
    path = tmp_path / "sample.json"
    path.write_text(json.dumps(SAMPLE_DUMP), encoding="utf-8")
    return path


@pytest.fixture
def make_sample_dump() -> Callable[..., dict[str, Any]]:
    """Factory for sample dumps extended with extra types."""
    return _make_dump


@pytest.fixture
def candidate_types() -> list[str]:
    """Full names the default discovery filter admits from the sample dump."""
    return list(_CANDIDATE_TYPES)
