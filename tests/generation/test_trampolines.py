"""Tests for generation/trampolines.py module."""

from __future__ import annotations

import pytest

from facadegen.core.errors import UnsupportedNativeCodegen
from facadegen.generation.trampolines import (
    DelegateTrampolineCompiler,
    TrampolineKind,
    TrampolineSignature,
)
from facadegen.metadata.models import (
    BOOLEAN,
    INT32,
    AccessorDescriptor,
    FieldDescriptor,
    GenericParameter,
    MethodDescriptor,
    PropertyDescriptor,
    TypeRef,
    Visibility,
)

FIELDS = TypeRef.named("Sample.Fields")


def field(name: str = "B", **kwargs: object) -> FieldDescriptor:
    return FieldDescriptor(name=name, declaring_type=FIELDS, field_type=INT32, **kwargs)


def signature(kind: TrampolineKind, lookup: str = "B", **kwargs: object) -> TrampolineSignature:
    suffix = {"get": "_Get", "set": "_Set", "invoke": "_Method"}[kind.value]
    return TrampolineSignature(
        kind=kind, lookup=lookup, name=f"{lookup}{suffix}", return_type="int", **kwargs
    )


class TestFieldTrampolines:
    """Field trampolines built through the DynamicMethod helpers."""

    def test_instance_getter(self) -> None:
        trampoline = DelegateTrampolineCompiler().compile(field(), signature(TrampolineKind.GETTER))

        assert trampoline.delegate_type == "System.Func<Sample.Fields, int>"
        assert trampoline.factory == "CreateGetFieldMethod<System.Func<Sample.Fields, int>>(B)"
        assert trampoline.delegate_name is None
        assert trampoline.uses_field_helpers

    def test_instance_setter(self) -> None:
        trampoline = DelegateTrampolineCompiler().compile(field(), signature(TrampolineKind.SETTER))

        assert trampoline.delegate_type == "System.Action<Sample.Fields, int>"
        assert trampoline.factory.startswith(
            "CreateSetFieldMethod<System.Action<Sample.Fields, int>>"
        )

    def test_static_field_has_no_owner_argument(self) -> None:
        compiler = DelegateTrampolineCompiler()

        getter = compiler.compile(field(is_static=True), signature(TrampolineKind.GETTER))
        setter = compiler.compile(field(is_static=True), signature(TrampolineKind.SETTER))

        assert getter.delegate_type == "System.Func<int>"
        assert setter.delegate_type == "System.Action<int>"

    @pytest.mark.parametrize("flags", [{"is_by_ref": True}, {"is_constant": True}])
    def test_unsupported_fields_raise(self, flags: dict[str, bool]) -> None:
        with pytest.raises(UnsupportedNativeCodegen) as exc_info:
            DelegateTrampolineCompiler().compile(field(**flags), signature(TrampolineKind.GETTER))

        assert exc_info.value.details["member"] == "B"


class TestPropertyTrampolines:
    """Property accessor trampolines."""

    def test_getter_binds_get_method(self) -> None:
        prop = PropertyDescriptor(
            name="Value",
            declaring_type=FIELDS,
            property_type=INT32,
            getter=AccessorDescriptor("get_Value", Visibility.PRIVATE),
        )

        trampoline = DelegateTrampolineCompiler().compile(
            prop, signature(TrampolineKind.GETTER, lookup="Value")
        )

        assert trampoline.delegate_name == "Value_Get_Delegate"
        assert trampoline.factory == (
            "(Value_Get_Delegate)Value.GetMethod.CreateDelegate(typeof(Value_Get_Delegate))"
        )
        assert not trampoline.uses_field_helpers

    def test_setter_binds_set_method(self) -> None:
        prop = PropertyDescriptor(
            name="Value",
            declaring_type=FIELDS,
            property_type=INT32,
            setter=AccessorDescriptor("set_Value", Visibility.PRIVATE),
        )

        trampoline = DelegateTrampolineCompiler().compile(
            prop, signature(TrampolineKind.SETTER, lookup="Value")
        )

        assert ".SetMethod.CreateDelegate(typeof(Value_Set_Delegate))" in trampoline.factory


class TestMethodTrampolines:
    """Method trampolines."""

    def test_non_generic_method(self) -> None:
        member = MethodDescriptor(
            name="TryGet",
            declaring_type=FIELDS,
            visibility=Visibility.PRIVATE,
            return_type=BOOLEAN,
        )

        trampoline = DelegateTrampolineCompiler().compile(
            member, signature(TrampolineKind.INVOKE, lookup="TryGet_1")
        )

        assert trampoline.delegate_name == "TryGet_1_Delegate"
        assert trampoline.signature.name == "TryGet_1_Method"
        assert trampoline.factory == (
            "(TryGet_1_Delegate)TryGet_1.CreateDelegate(typeof(TryGet_1_Delegate))"
        )

    def test_generic_method_instantiates_per_holder(self) -> None:
        parameters = (GenericParameter("T"), GenericParameter("U"))
        member = MethodDescriptor(
            name="Wrap",
            declaring_type=FIELDS,
            visibility=Visibility.PRIVATE,
            generic_parameters=parameters,
        )
        generic_signature = TrampolineSignature(
            kind=TrampolineKind.INVOKE,
            lookup="Wrap",
            name="Method",
            return_type="void",
            generic_parameters=parameters,
        )

        trampoline = DelegateTrampolineCompiler().compile(member, generic_signature)

        assert trampoline.delegate_name == "Delegate"
        assert trampoline.factory == (
            "(Delegate)Wrap.MakeGenericMethod(typeof(T), typeof(U))"
            ".CreateDelegate(typeof(Delegate))"
        )
