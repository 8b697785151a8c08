"""Immutable metadata snapshots describing compiled types and their members.

Everything here is built once per generation run from a MetadataSource and
never mutated afterwards, so snapshots can be shared freely between worker
threads.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, ClassVar


class Visibility(str, Enum):
    """Declared accessibility of a member or accessor."""

    PUBLIC = "public"
    PRIVATE = "private"
    INTERNAL = "internal"
    PROTECTED = "protected"
    PROTECTED_INTERNAL = "protected_internal"
    PRIVATE_PROTECTED = "private_protected"

    @property
    def is_public(self) -> bool:
        return self is Visibility.PUBLIC


class PassingMode(str, Enum):
    """How an argument is passed to a method parameter."""

    BY_VALUE = "by_value"
    IN = "in"
    OUT = "out"
    REF = "ref"

    @property
    def is_by_ref(self) -> bool:
        return self is not PassingMode.BY_VALUE

    @property
    def keyword(self) -> str:
        """C# modifier including trailing space, empty for by-value."""
        return "" if self is PassingMode.BY_VALUE else f"{self.value} "


class MemberKind(str, Enum):
    PROPERTY = "property"
    FIELD = "field"
    METHOD = "method"


@dataclass(frozen=True, slots=True)
class TypeRef:
    """Identity and shape of a type as seen in metadata.

    ``full_name`` is the raw metadata name: nested types are separated by
    ``+`` and generic types carry a `` `N`` arity marker per level
    (``Outer`1+Inner`2``). Generic arguments are supplied separately, in
    declaration order across all nesting levels.
    """

    full_name: str
    namespace: str | None = None
    generic_arguments: tuple[TypeRef, ...] = ()
    element_type: TypeRef | None = None
    array_rank: int = 0
    is_visible: bool = True
    is_by_ref: bool = False
    is_generic_parameter: bool = False
    is_value_type: bool = False
    is_interface: bool = False
    is_abstract: bool = False
    is_sealed: bool = False
    is_compiler_generated: bool = False
    is_generic_definition: bool = False
    assembly: str | None = None

    @classmethod
    def named(cls, full_name: str, **flags: Any) -> TypeRef:
        """Build a non-array, non-by-ref type, deriving the namespace from the name."""
        if "namespace" not in flags:
            outer = full_name.split("+", 1)[0]
            flags["namespace"] = outer.rpartition(".")[0] or None
        return cls(full_name=full_name, **flags)

    @classmethod
    def generic_parameter(cls, name: str) -> TypeRef:
        return cls(full_name=name, is_generic_parameter=True)

    def array_of(self, rank: int = 1) -> TypeRef:
        if rank < 1:
            raise ValueError(f"Array rank must be >= 1, got {rank}")
        return TypeRef(
            full_name=f"{self.full_name}[{',' * (rank - 1)}]",
            namespace=self.namespace,
            element_type=self,
            array_rank=rank,
            is_visible=self.is_visible,
            assembly=self.assembly,
        )

    def by_ref(self) -> TypeRef:
        if self.is_by_ref:
            return self
        return TypeRef(
            full_name=f"{self.full_name}&",
            namespace=self.namespace,
            element_type=self,
            is_visible=self.is_visible,
            is_by_ref=True,
            assembly=self.assembly,
        )

    def construct(self, *arguments: TypeRef) -> TypeRef:
        """Close a generic type over ``arguments``; visible only if all of them are."""
        return replace(
            self,
            generic_arguments=tuple(arguments),
            is_visible=self.is_visible and all(arg.is_visible for arg in arguments),
            is_generic_definition=False,
        )

    @property
    def is_array(self) -> bool:
        return self.array_rank > 0

    @property
    def is_generic_type(self) -> bool:
        return (
            not self.is_generic_parameter
            and not self.is_array
            and not self.is_by_ref
            and "`" in self.full_name
        )

    @property
    def is_static(self) -> bool:
        """Static classes are emitted as abstract + sealed."""
        return self.is_abstract and self.is_sealed

    @property
    def name(self) -> str:
        return self.full_name.rsplit("+", 1)[-1].rsplit(".", 1)[-1]

    @property
    def unwrapped(self) -> TypeRef:
        """The referenced type for a by-ref type, otherwise self."""
        if self.is_by_ref and self.element_type is not None:
            return self.element_type
        return self

    @property
    def identity(self) -> tuple[Any, ...]:
        """Structural identity, ignoring descriptive flags."""
        return (
            self.full_name,
            tuple(arg.identity for arg in self.generic_arguments),
            self.array_rank,
            self.is_by_ref,
            self.is_generic_parameter,
        )

    def __str__(self) -> str:
        return self.full_name


def _builtin(full_name: str, *, value_type: bool = True) -> TypeRef:
    return TypeRef.named(full_name, is_value_type=value_type, is_sealed=True)


VOID = _builtin("System.Void")
OBJECT = TypeRef.named("System.Object")
STRING = _builtin("System.String", value_type=False)
BOOLEAN = _builtin("System.Boolean")
CHAR = _builtin("System.Char")
SBYTE = _builtin("System.SByte")
BYTE = _builtin("System.Byte")
INT16 = _builtin("System.Int16")
UINT16 = _builtin("System.UInt16")
INT32 = _builtin("System.Int32")
UINT32 = _builtin("System.UInt32")
INT64 = _builtin("System.Int64")
UINT64 = _builtin("System.UInt64")
SINGLE = _builtin("System.Single")
DOUBLE = _builtin("System.Double")
DECIMAL = _builtin("System.Decimal")
VALUE_TYPE = TypeRef.named("System.ValueType", is_abstract=True)

BUILTIN_TYPES: dict[str, TypeRef] = {
    t.full_name: t
    for t in (
        VOID,
        OBJECT,
        STRING,
        BOOLEAN,
        CHAR,
        SBYTE,
        BYTE,
        INT16,
        UINT16,
        INT32,
        UINT32,
        INT64,
        UINT64,
        SINGLE,
        DOUBLE,
        DECIMAL,
    )
}


@dataclass(frozen=True, slots=True)
class LiteralValue:
    """A default parameter value as stored in metadata.

    ``kind`` is one of :class:`facadegen.generation.literals.LiteralKind`
    for values the literal renderer understands; any other string is kept
    so the renderer can report it.
    """

    kind: str
    value: Any = None
    enum_type: TypeRef | None = None
    flags: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class ParameterDescriptor:
    name: str
    parameter_type: TypeRef
    mode: PassingMode = PassingMode.BY_VALUE
    default: LiteralValue | None = None

    @property
    def signature_type(self) -> TypeRef:
        """The type as it appears in the method signature (by-ref when passed by reference)."""
        if self.mode.is_by_ref:
            return self.parameter_type.by_ref()
        return self.parameter_type


@dataclass(frozen=True, slots=True)
class GenericParameter:
    name: str
    reference_type: bool = False
    value_type: bool = False
    default_constructor: bool = False
    constraints: tuple[TypeRef, ...] = ()


@dataclass(frozen=True, slots=True)
class AccessorDescriptor:
    """A property get or set method."""

    name: str
    visibility: Visibility = Visibility.PUBLIC

    @property
    def is_public(self) -> bool:
        return self.visibility.is_public


@dataclass(frozen=True, slots=True, kw_only=True)
class MemberDescriptor:
    name: str
    declaring_type: TypeRef
    is_static: bool = False
    is_compiler_generated: bool = False

    kind: ClassVar[MemberKind]

    @property
    def is_public(self) -> bool:
        raise NotImplementedError


@dataclass(frozen=True, slots=True, kw_only=True)
class PropertyDescriptor(MemberDescriptor):
    property_type: TypeRef
    getter: AccessorDescriptor | None = None
    setter: AccessorDescriptor | None = None
    returns_by_ref: bool = False
    is_read_only_ref: bool = False
    index_parameter_count: int = 0

    kind: ClassVar[MemberKind] = MemberKind.PROPERTY

    @property
    def can_read(self) -> bool:
        return self.getter is not None

    @property
    def can_write(self) -> bool:
        return self.setter is not None

    @property
    def is_public(self) -> bool:
        return any(a is not None and a.is_public for a in (self.getter, self.setter))

    @property
    def is_indexer(self) -> bool:
        return self.index_parameter_count > 0

    @property
    def accessors(self) -> tuple[AccessorDescriptor, ...]:
        return tuple(a for a in (self.getter, self.setter) if a is not None)


@dataclass(frozen=True, slots=True, kw_only=True)
class FieldDescriptor(MemberDescriptor):
    field_type: TypeRef
    visibility: Visibility = Visibility.PRIVATE
    is_constant: bool = False
    is_init_only: bool = False
    is_by_ref: bool = False

    kind: ClassVar[MemberKind] = MemberKind.FIELD

    @property
    def is_public(self) -> bool:
        return self.visibility.is_public

    @property
    def is_writable(self) -> bool:
        return not (self.is_constant or self.is_init_only)


@dataclass(frozen=True, slots=True, kw_only=True)
class MethodDescriptor(MemberDescriptor):
    visibility: Visibility = Visibility.PUBLIC
    return_type: TypeRef = VOID
    returns_by_ref: bool = False
    is_read_only_return: bool = False
    parameters: tuple[ParameterDescriptor, ...] = ()
    generic_parameters: tuple[GenericParameter, ...] = ()
    is_special_name: bool = False

    kind: ClassVar[MemberKind] = MemberKind.METHOD

    @property
    def is_public(self) -> bool:
        return self.visibility.is_public

    @property
    def is_generic(self) -> bool:
        return bool(self.generic_parameters)

    @property
    def returns_void(self) -> bool:
        return self.return_type.full_name == VOID.full_name and not self.returns_by_ref

    @property
    def signature(self) -> tuple[Any, ...]:
        """Name, parameter types in order and generic arity."""
        return (
            self.name,
            tuple(p.signature_type.identity for p in self.parameters),
            len(self.generic_parameters),
        )


@dataclass(frozen=True, slots=True)
class MethodHandle:
    """Reference to an implementing method inside an interface map."""

    declaring_type: str
    name: str
    visibility: Visibility

    @property
    def is_private(self) -> bool:
        return self.visibility is Visibility.PRIVATE

CSHARP_KEYWORDS: dict[str, str] = {
    "System.Void": "void",
    "System.Object": "object",
    "System.SByte": "sbyte",
    "System.Byte": "byte",
    "System.Int16": "short",
    "System.UInt16": "ushort",
    "System.Int32": "int",
    "System.UInt32": "uint",
    "System.Int64": "long",
    "System.UInt64": "ulong",
    "System.Char": "char",
    "System.Single": "float",
    "System.Double": "double",
    "System.Boolean": "bool",
    "System.Decimal": "decimal",
    "System.String": "string",
}
