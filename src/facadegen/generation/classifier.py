"""Member eligibility: which types get a facade and which of their members it exposes."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from facadegen.core.logging import get_logger
from facadegen.metadata.models import (
    FieldDescriptor,
    MemberDescriptor,
    MethodDescriptor,
    PropertyDescriptor,
    TypeRef,
)
from facadegen.metadata.source import MemberMask, MetadataSource, split_members

log = get_logger("generation.classifier")


@dataclass(frozen=True, slots=True)
class ClassifiedMembers:
    """Generation-eligible members of one type, in discovery order."""

    properties: tuple[PropertyDescriptor, ...]
    fields: tuple[FieldDescriptor, ...]
    methods: tuple[MethodDescriptor, ...]

    def __len__(self) -> int:
        return len(self.properties) + len(self.fields) + len(self.methods)


class MemberClassifier:
    """Filter types and members down to what a facade can expose.

    ``excluded_types`` lists types that never get a facade; any type
    assignable to one of them is excluded too (delegates and attributes by
    default).
    """

    def __init__(self, source: MetadataSource, excluded_types: Iterable[TypeRef] = ()) -> None:
        self._source = source
        self._excluded = tuple(excluded_types)

    @property
    def excluded_types(self) -> tuple[TypeRef, ...]:
        return self._excluded

    def is_candidate(self, type_ref: TypeRef) -> bool:
        """Type-level discovery filter: plain or static classes only."""
        if type_ref.is_value_type or type_ref.is_interface:
            return False
        # static classes are abstract + sealed
        if type_ref.is_abstract and not type_ref.is_static:
            return False
        if type_ref.is_compiler_generated:
            return False
        return not any(
            self._source.is_assignable_to(type_ref, excluded) for excluded in self._excluded
        )

    def classify(self, type_ref: TypeRef) -> ClassifiedMembers:
        members = self._source.list_members(type_ref, MemberMask.ALL)
        explicit = self._explicit_implementations(type_ref)

        eligible = [m for m in members if self._is_owned(type_ref, m)]
        properties, fields, methods = split_members(eligible)

        kept_properties = tuple(
            p
            for p in properties
            if not p.is_indexer
            and not any((p.declaring_type.full_name, a.name) in explicit for a in p.accessors)
        )
        kept_methods = tuple(
            m
            for m in methods
            if not m.is_special_name and (m.declaring_type.full_name, m.name) not in explicit
        )

        classified = ClassifiedMembers(
            properties=kept_properties,
            fields=tuple(fields),
            methods=kept_methods,
        )
        log.debug(
            "members_classified",
            type=type_ref.full_name,
            listed=len(members),
            eligible=len(classified),
        )
        return classified

    def _explicit_implementations(self, type_ref: TypeRef) -> frozenset[tuple[str, str]]:
        interface_map = self._source.get_interface_map(type_ref)
        return frozenset(
            (target.declaring_type, target.name)
            for target in interface_map.values()
            if target.is_private
        )

    @staticmethod
    def _is_owned(type_ref: TypeRef, member: MemberDescriptor) -> bool:
        if member.is_compiler_generated or member.declaring_type.is_compiler_generated:
            return False
        # members inherited from another assembly are not re-exposed
        return member.declaring_type.assembly == type_ref.assembly


def resolve_excluded_types(source: MetadataSource, names: Sequence[str]) -> list[TypeRef]:
    """Look configured exclusion names up in ``source``, falling back to a bare reference."""
    known = {t.full_name: t for t in source.list_types()}
    return [known.get(name) or TypeRef.named(name) for name in names]
