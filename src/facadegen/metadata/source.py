"""The metadata query interface the generation pipeline depends on."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from enum import IntFlag
from typing import Protocol, runtime_checkable

from facadegen.metadata.models import (
    FieldDescriptor,
    MemberDescriptor,
    MethodDescriptor,
    MethodHandle,
    PropertyDescriptor,
    TypeRef,
)


class MemberMask(IntFlag):
    """Binding-flag style selector for member listings."""

    PUBLIC = 1
    NON_PUBLIC = 2
    INSTANCE = 4
    STATIC = 8
    ALL = PUBLIC | NON_PUBLIC | INSTANCE | STATIC

    def admits(self, member: MemberDescriptor) -> bool:
        visibility = MemberMask.PUBLIC if member.is_public else MemberMask.NON_PUBLIC
        scope = MemberMask.STATIC if member.is_static else MemberMask.INSTANCE
        return bool(self & visibility) and bool(self & scope)


@runtime_checkable
class MetadataSource(Protocol):
    """Synchronous, side-effect-free access to compiled type metadata.

    ``list_members`` returns members the type declares plus the ones it
    inherits, each carrying its own ``declaring_type`` so callers can tell
    them apart.
    """

    def list_types(self) -> Sequence[TypeRef]: ...

    def list_members(
        self, type_ref: TypeRef, mask: MemberMask = MemberMask.ALL
    ) -> Sequence[MemberDescriptor]: ...

    def get_interface_map(self, type_ref: TypeRef) -> Mapping[str, MethodHandle]: ...

    def is_assignable_to(self, candidate: TypeRef, target: TypeRef) -> bool: ...


def split_members(
    members: Sequence[MemberDescriptor],
) -> tuple[list[PropertyDescriptor], list[FieldDescriptor], list[MethodDescriptor]]:
    """Partition a member listing by kind, preserving discovery order."""
    properties: list[PropertyDescriptor] = []
    fields: list[FieldDescriptor] = []
    methods: list[MethodDescriptor] = []
    for member in members:
        if isinstance(member, PropertyDescriptor):
            properties.append(member)
        elif isinstance(member, FieldDescriptor):
            fields.append(member)
        elif isinstance(member, MethodDescriptor):
            methods.append(member)
    return properties, fields, methods
