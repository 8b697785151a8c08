"""Overload identity: shadowing removal and stable ordinals for same-named methods."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import TypeVar

from facadegen.metadata.models import (
    FieldDescriptor,
    MemberDescriptor,
    MethodDescriptor,
    PropertyDescriptor,
    TypeRef,
)

AssignabilityCheck = Callable[[TypeRef, TypeRef], bool]

_Member = TypeVar("_Member", PropertyDescriptor, FieldDescriptor)


@dataclass(frozen=True, slots=True)
class OverloadInfo:
    is_overloaded: bool = False
    ordinal: int | None = None

    def backing_name(self, name: str) -> str:
        """Name of the metadata lookup behind a method, unique within the facade."""
        if self.ordinal is None:
            return name
        return f"{name}_{self.ordinal}"


def _is_hidden_by(
    member: MemberDescriptor, other: MemberDescriptor, is_assignable: AssignabilityCheck
) -> bool:
    """True when ``other`` is declared on a more derived type than ``member``."""
    declaring = member.declaring_type
    other_declaring = other.declaring_type
    if other_declaring.identity == declaring.identity:
        return False
    return is_assignable(other_declaring, declaring)


def disambiguate(
    methods: Sequence[MethodDescriptor],
    is_assignable: AssignabilityCheck,
) -> dict[MethodDescriptor, OverloadInfo]:
    """Assign overload ordinals to ``methods``, dropping shadowed ones.

    The result is keyed by the surviving methods in discovery order. Within
    a group of same-named methods, a method is dropped when another method
    with the same signature is declared on a type assignable to its own
    declaring type. Survivors of a group of two or more are numbered
    0..n-1 in discovery order.

    Methods with identical signatures on unrelated declaring types are both
    kept and numbered.
    """
    groups: dict[str, list[MethodDescriptor]] = {}
    for method in methods:
        groups.setdefault(method.name, []).append(method)

    survivors: dict[str, list[MethodDescriptor]] = {}
    for name, group in groups.items():
        survivors[name] = [
            method
            for method in group
            if not any(
                other is not method
                and other.signature == method.signature
                and _is_hidden_by(method, other, is_assignable)
                for other in group
            )
        ]

    result: dict[MethodDescriptor, OverloadInfo] = {}
    for method in methods:
        group = survivors[method.name]
        if method not in group:
            continue
        if len(group) < 2:
            result[method] = OverloadInfo()
        else:
            result[method] = OverloadInfo(is_overloaded=True, ordinal=group.index(method))
    return result


def hide_shadowed(
    members: Sequence[_Member],
    is_assignable: AssignabilityCheck,
) -> list[_Member]:
    """Keep only the most-derived property or field for each name."""
    return [
        member
        for member in members
        if not any(
            other is not member
            and other.name == member.name
            and _is_hidden_by(member, other, is_assignable)
            for other in members
        )
    ]
