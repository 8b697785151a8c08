"""Pydantic schema of a metadata dump file.

A dump lists assemblies, their types and each type's declared members.
Type references are written either as a string (a full metadata name, a C#
keyword such as ``int``, optionally followed by an array suffix like
``[]`` or ``[,]``) or as an object::

    {"name": "System.Collections.Generic.List`1", "args": ["int"]}
    {"array": "string", "rank": 2}
    {"generic_parameter": "T"}
"""

from __future__ import annotations

from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from facadegen.metadata.models import PassingMode, Visibility

LiteralScalar = Union[str, bool, int, float, None]

TypeKind = Literal["class", "struct", "interface", "enum", "delegate"]


class _DumpModel(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)


class TypeRefModel(_DumpModel):
    name: str | None = None
    args: list[TypeSpec] = Field(default_factory=list)
    array: TypeSpec | None = None
    rank: int = Field(default=1, ge=1)
    generic_parameter: str | None = None
    value_type: bool | None = None
    visible: bool | None = None

    @model_validator(mode="after")
    def check_single_shape(self) -> TypeRefModel:
        shapes = [s for s in (self.name, self.array, self.generic_parameter) if s is not None]
        if len(shapes) != 1:
            raise ValueError("exactly one of 'name', 'array' or 'generic_parameter' is required")
        return self


TypeSpec = Union[str, TypeRefModel]


class LiteralModel(_DumpModel):
    kind: str
    value: LiteralScalar = None
    enum_type: TypeSpec | None = None
    flags: list[str] = Field(default_factory=list)


class ParameterModel(_DumpModel):
    name: str
    type: TypeSpec
    mode: PassingMode = PassingMode.BY_VALUE
    default: LiteralModel | None = None


class GenericParameterModel(_DumpModel):
    name: str
    reference_type: bool = False
    value_type: bool = False
    default_constructor: bool = False
    constraints: list[TypeSpec] = Field(default_factory=list)


class AccessorModel(_DumpModel):
    name: str | None = None
    visibility: Visibility = Visibility.PUBLIC


class PropertyModel(_DumpModel):
    name: str
    type: TypeSpec
    static: bool = False
    getter: AccessorModel | None = Field(default=None, alias="get")
    setter: AccessorModel | None = Field(default=None, alias="set")
    returns_by_ref: bool = False
    read_only_ref: bool = False
    index_parameters: int = Field(default=0, ge=0)
    compiler_generated: bool = False

    @model_validator(mode="after")
    def check_accessors(self) -> PropertyModel:
        if self.getter is None and self.setter is None:
            raise ValueError("a property needs at least one of 'get' or 'set'")
        return self


class FieldModel(_DumpModel):
    name: str
    type: TypeSpec
    static: bool = False
    visibility: Visibility = Visibility.PRIVATE
    constant: bool = False
    init_only: bool = False
    by_ref: bool = False
    compiler_generated: bool = False


class MethodModel(_DumpModel):
    name: str
    static: bool = False
    visibility: Visibility = Visibility.PUBLIC
    return_type: TypeSpec = "System.Void"
    returns_by_ref: bool = False
    read_only_return: bool = False
    parameters: list[ParameterModel] = Field(default_factory=list)
    generic_parameters: list[GenericParameterModel] = Field(default_factory=list)
    special_name: bool = False
    compiler_generated: bool = False


class InterfaceMappingModel(_DumpModel):
    interface_method: str
    target: str
    target_declaring_type: str | None = None
    target_visibility: Visibility = Visibility.PRIVATE


class TypeModel(_DumpModel):
    full_name: str
    kind: TypeKind = "class"
    visible: bool = True
    abstract: bool = False
    sealed: bool = False
    compiler_generated: bool = False
    generic_definition: bool = False
    base_type: str | None = None
    interfaces: list[str] = Field(default_factory=list)
    properties: list[PropertyModel] = Field(default_factory=list)
    fields: list[FieldModel] = Field(default_factory=list)
    methods: list[MethodModel] = Field(default_factory=list)
    interface_map: list[InterfaceMappingModel] = Field(default_factory=list)

    @property
    def effective_base_type(self) -> str | None:
        if self.base_type is not None or self.kind == "interface":
            return self.base_type
        return {
            "class": "System.Object",
            "struct": "System.ValueType",
            "enum": "System.Enum",
            "delegate": "System.MulticastDelegate",
        }[self.kind]


class AssemblyModel(_DumpModel):
    name: str
    types: list[TypeModel] = Field(default_factory=list)


class MetadataDump(_DumpModel):
    assemblies: list[AssemblyModel] = Field(default_factory=list)


TypeRefModel.model_rebuild()
LiteralModel.model_rebuild()
ParameterModel.model_rebuild()
GenericParameterModel.model_rebuild()
PropertyModel.model_rebuild()
FieldModel.model_rebuild()
MethodModel.model_rebuild()
