"""Trampoline descriptions and the default compiler producing them.

A trampoline is a delegate bound once to a specific member, so the facade
can reach a non-public member without per-call reflection. The generator
never builds the delegate itself: a :class:`TrampolineCompiler` returns the
C# expression that does, which the emitter places in ``ReflectionMembers``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from facadegen.core.errors import UnsupportedNativeCodegen
from facadegen.generation.naming import render_type_name
from facadegen.metadata.models import (
    FieldDescriptor,
    GenericParameter,
    MemberDescriptor,
    MethodDescriptor,
    PropertyDescriptor,
    TypeRef,
)


class TrampolineKind(str, Enum):
    GETTER = "get"
    SETTER = "set"
    INVOKE = "invoke"


@dataclass(frozen=True, slots=True)
class TrampolineSignature:
    """Declared shape of a trampoline.

    ``lookup`` names the ``ReflectionMembers`` property holding the member's
    metadata; ``name`` is the property that will hold the trampoline itself.
    ``parameters`` are full C# parameter declarations, the instance first
    for instance members.
    """

    kind: TrampolineKind
    lookup: str
    name: str
    return_type: str
    parameters: tuple[str, ...] = ()
    generic_parameters: tuple[GenericParameter, ...] = ()

    @property
    def is_generic(self) -> bool:
        return bool(self.generic_parameters)


@dataclass(frozen=True, slots=True)
class Trampoline:
    """A compiled trampoline.

    ``delegate_name`` is set when the emitter must declare a dedicated
    delegate type; otherwise ``delegate_type`` is a framework delegate.
    """

    signature: TrampolineSignature
    delegate_type: str
    factory: str
    delegate_name: str | None = None

    @property
    def uses_field_helpers(self) -> bool:
        return self.factory.startswith(("CreateGetFieldMethod<", "CreateSetFieldMethod<"))


class TrampolineCompiler(Protocol):
    def compile(self, member: MemberDescriptor, signature: TrampolineSignature) -> Trampoline:
        """Build a trampoline or raise :class:`UnsupportedNativeCodegen`."""
        ...


FUNC = "System.Func"
ACTION = "System.Action"


def _framework_delegate(base: str, arguments: list[TypeRef]) -> str:
    if not arguments:
        return base
    return render_type_name(TypeRef.named(f"{base}`{len(arguments)}").construct(*arguments))


class DelegateTrampolineCompiler:
    """Bind trampolines with ``CreateDelegate``, fields through a DynamicMethod.

    By-reference fields have no IL load/store the helpers could emit and are
    rejected.
    """

    def compile(self, member: MemberDescriptor, signature: TrampolineSignature) -> Trampoline:
        if isinstance(member, FieldDescriptor):
            return self._field(member, signature)
        if isinstance(member, PropertyDescriptor):
            return self._property(signature)
        if isinstance(member, MethodDescriptor):
            return self._method(signature)
        raise UnsupportedNativeCodegen.for_member(member.name, "unknown member kind")

    def _field(self, field: FieldDescriptor, signature: TrampolineSignature) -> Trampoline:
        if field.is_by_ref:
            raise UnsupportedNativeCodegen.for_member(
                field.name, "by-reference fields cannot be loaded through a DynamicMethod"
            )
        if field.is_constant:
            raise UnsupportedNativeCodegen.for_member(field.name, "constants have no storage")

        owner = [] if field.is_static else [field.declaring_type]
        if signature.kind is TrampolineKind.GETTER:
            delegate_type = _framework_delegate(FUNC, [*owner, field.field_type])
            factory = f"CreateGetFieldMethod<{delegate_type}>({signature.lookup})"
        else:
            delegate_type = _framework_delegate(ACTION, [*owner, field.field_type])
            factory = f"CreateSetFieldMethod<{delegate_type}>({signature.lookup})"
        return Trampoline(signature=signature, delegate_type=delegate_type, factory=factory)

    def _property(self, signature: TrampolineSignature) -> Trampoline:
        accessor = "GetMethod" if signature.kind is TrampolineKind.GETTER else "SetMethod"
        delegate_name = f"{signature.name}_Delegate"
        factory = (
            f"({delegate_name}){signature.lookup}.{accessor}"
            f".CreateDelegate(typeof({delegate_name}))"
        )
        return Trampoline(
            signature=signature,
            delegate_type=delegate_name,
            factory=factory,
            delegate_name=delegate_name,
        )

    def _method(self, signature: TrampolineSignature) -> Trampoline:
        if signature.is_generic:
            # generic methods bind one delegate per instantiation inside a generic holder
            delegate_name = "Delegate"
            type_arguments = ", ".join(f"typeof({g.name})" for g in signature.generic_parameters)
            method = f"{signature.lookup}.MakeGenericMethod({type_arguments})"
        else:
            delegate_name = f"{signature.lookup}_Delegate"
            method = signature.lookup
        factory = f"({delegate_name}){method}.CreateDelegate(typeof({delegate_name}))"
        return Trampoline(
            signature=signature,
            delegate_type=delegate_name,
            factory=factory,
            delegate_name=delegate_name,
        )
