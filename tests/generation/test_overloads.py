"""Tests for generation/overloads.py module.

Covers:
- disambiguate() ordinals and shadow removal
- hide_shadowed() for properties and fields
- OverloadInfo.backing_name()
"""

from __future__ import annotations

import pytest

from facadegen.generation.overloads import OverloadInfo, disambiguate, hide_shadowed
from facadegen.metadata.models import (
    INT32,
    STRING,
    AccessorDescriptor,
    MethodDescriptor,
    ParameterDescriptor,
    PropertyDescriptor,
    TypeRef,
)

BASE = TypeRef.named("Sample.Base")
DERIVED = TypeRef.named("Sample.Derived")
UNRELATED = TypeRef.named("Sample.Unrelated")


def is_assignable(candidate: TypeRef, target: TypeRef) -> bool:
    if candidate.identity == target.identity:
        return True
    return candidate.full_name == DERIVED.full_name and target.full_name == BASE.full_name


def method(name: str, declaring: TypeRef = BASE, *parameter_types: TypeRef) -> MethodDescriptor:
    return MethodDescriptor(
        name=name,
        declaring_type=declaring,
        parameters=tuple(ParameterDescriptor(f"p{i}", t) for i, t in enumerate(parameter_types)),
    )


class TestDisambiguate:
    """Overload ordinal tests."""

    def test_single_method_has_no_ordinal(self) -> None:
        only = method("Run")

        assert disambiguate([only], is_assignable) == {only: OverloadInfo()}

    def test_three_overloads_numbered_in_discovery_order(self) -> None:
        """Foo A, B, C get ordinals 0, 1, 2."""
        # Given
        a = method("Foo", BASE, INT32)
        b = method("Foo", BASE, STRING)
        c = method("Foo", BASE, INT32, INT32)

        # When
        result = disambiguate([a, b, c], is_assignable)

        # Then
        assert [result[m].ordinal for m in (a, b, c)] == [0, 1, 2]
        assert all(info.is_overloaded for info in result.values())

    @pytest.mark.parametrize("bar_position", [0, 1, 2, 3])
    def test_ordinals_ignore_unrelated_members(self, bar_position: int) -> None:
        a = method("Foo", BASE, INT32)
        b = method("Foo", BASE, STRING)
        c = method("Foo", BASE, INT32, INT32)
        methods = [a, b, c]
        methods.insert(bar_position, method("Bar"))

        result = disambiguate(methods, is_assignable)

        assert [result[m].ordinal for m in (a, b, c)] == [0, 1, 2]
        assert result[methods[bar_position]] == OverloadInfo()

    def test_result_keeps_discovery_order(self) -> None:
        methods = [method("Foo", BASE, INT32), method("Bar"), method("Foo", BASE, STRING)]

        assert list(disambiguate(methods, is_assignable)) == methods

    def test_shadowed_method_dropped(self) -> None:
        """Only the most-derived of two same-signature methods survives."""
        # Given
        derived_m = method("M", DERIVED)
        base_m = method("M", BASE)

        # When
        result = disambiguate([derived_m, base_m], is_assignable)

        # Then
        assert result == {derived_m: OverloadInfo()}

    def test_shadowing_survivor_numbered_with_remaining_overloads(self) -> None:
        derived_m = method("M", DERIVED)
        base_m = method("M", BASE)
        base_m_int = method("M", BASE, INT32)

        result = disambiguate([derived_m, base_m, base_m_int], is_assignable)

        assert list(result) == [derived_m, base_m_int]
        assert result[derived_m].ordinal == 0
        assert result[base_m_int].ordinal == 1

    def test_unrelated_declaring_types_both_kept(self) -> None:
        first = method("M", BASE, INT32)
        second = method("M", UNRELATED, INT32)

        result = disambiguate([first, second], is_assignable)

        assert [result[first].ordinal, result[second].ordinal] == [0, 1]


class TestHideShadowed:
    """hide_shadowed tests."""

    def _property(self, declaring: TypeRef) -> PropertyDescriptor:
        return PropertyDescriptor(
            name="Name",
            declaring_type=declaring,
            property_type=STRING,
            getter=AccessorDescriptor("get_Name"),
        )

    def test_keeps_most_derived(self) -> None:
        derived = self._property(DERIVED)
        base = self._property(BASE)

        assert hide_shadowed([derived, base], is_assignable) == [derived]

    def test_unrelated_kept(self) -> None:
        first = self._property(BASE)
        second = self._property(UNRELATED)

        assert hide_shadowed([first, second], is_assignable) == [first, second]


class TestOverloadInfo:
    """OverloadInfo tests."""

    def test_backing_name_without_ordinal(self) -> None:
        assert OverloadInfo().backing_name("Foo") == "Foo"

    def test_backing_name_with_ordinal(self) -> None:
        assert OverloadInfo(is_overloaded=True, ordinal=2).backing_name("Foo") == "Foo_2"
