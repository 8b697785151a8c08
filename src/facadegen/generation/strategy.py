"""Per-member access strategy selection.

Every member of a facade is reached one of three ways:

Direct
    The member is public; the facade forwards to it.
Trampoline
    The member is non-public but everything its signature mentions is
    visible, so a delegate bound once to the member can be declared with a
    precise type.
DynamicInvoke
    Something in the signature is not visible (or the member is a
    constant); the facade goes through ``GetValue``/``SetValue``/``Invoke``
    on the member's metadata handle at call time.

The decision is made once per member and carried on the plan objects below,
so the emitter never re-inspects metadata to decide how to render a member.
"""

from __future__ import annotations

from collections.abc import Iterable, MutableSequence
from dataclasses import dataclass
from enum import Enum

from facadegen.core.errors import UnsupportedNativeCodegen
from facadegen.core.logging import get_logger, get_target
from facadegen.generation.literals import render_literal
from facadegen.generation.naming import render_return_type, render_type_name
from facadegen.generation.overloads import OverloadInfo
from facadegen.generation.report import Diagnostic, Severity
from facadegen.generation.trampolines import (
    Trampoline,
    TrampolineCompiler,
    TrampolineKind,
    TrampolineSignature,
)
from facadegen.metadata.models import (
    FieldDescriptor,
    MemberDescriptor,
    MethodDescriptor,
    ParameterDescriptor,
    PropertyDescriptor,
    TypeRef,
)

log = get_logger("generation.strategy")


class AccessStrategy(str, Enum):
    DIRECT = "direct"
    TRAMPOLINE = "trampoline"
    DYNAMIC_INVOKE = "dynamic_invoke"


@dataclass(frozen=True, slots=True)
class AccessorPlan:
    strategy: AccessStrategy
    trampoline: Trampoline | None = None


@dataclass(frozen=True, slots=True)
class PropertyPlan:
    member: PropertyDescriptor
    getter: AccessorPlan | None
    setter: AccessorPlan | None

    @property
    def accessors(self) -> tuple[AccessorPlan, ...]:
        return tuple(a for a in (self.getter, self.setter) if a is not None)

    @property
    def needs_lookup(self) -> bool:
        return any(a.strategy is not AccessStrategy.DIRECT for a in self.accessors)


@dataclass(frozen=True, slots=True)
class FieldPlan:
    member: FieldDescriptor
    getter: AccessorPlan
    setter: AccessorPlan | None

    @property
    def accessors(self) -> tuple[AccessorPlan, ...]:
        return tuple(a for a in (self.getter, self.setter) if a is not None)

    @property
    def needs_lookup(self) -> bool:
        return self.getter.strategy is not AccessStrategy.DIRECT


@dataclass(frozen=True, slots=True)
class MethodPlan:
    member: MethodDescriptor
    strategy: AccessStrategy
    overload: OverloadInfo
    trampoline: Trampoline | None = None

    @property
    def backing_name(self) -> str:
        return self.overload.backing_name(self.member.name)

    @property
    def needs_lookup(self) -> bool:
        return self.strategy is not AccessStrategy.DIRECT


@dataclass(frozen=True, slots=True)
class FacadePlan:
    """Everything the emitter needs to render one facade."""

    target: TypeRef
    properties: tuple[PropertyPlan, ...] = ()
    fields: tuple[FieldPlan, ...] = ()
    methods: tuple[MethodPlan, ...] = ()

    @property
    def is_static(self) -> bool:
        return self.target.is_static

    @property
    def uses_field_helpers(self) -> bool:
        return any(
            a.trampoline is not None and a.trampoline.uses_field_helpers
            for plan in self.fields
            for a in plan.accessors
        )

    def strategy_rows(self) -> list[tuple[str, str, str, str]]:
        """(kind, name, accessor, strategy) rows for reporting."""
        rows: list[tuple[str, str, str, str]] = []
        for prop in self.properties:
            for label, accessor in (("get", prop.getter), ("set", prop.setter)):
                if accessor is not None:
                    rows.append(("property", prop.member.name, label, accessor.strategy.value))
        for fld in self.fields:
            for label, accessor in (("get", fld.getter), ("set", fld.setter)):
                if accessor is not None:
                    rows.append(("field", fld.member.name, label, accessor.strategy.value))
        for method in self.methods:
            rows.append(("method", method.backing_name, "call", method.strategy.value))
        return rows


def instance_parameter(member: MemberDescriptor) -> tuple[str, ...]:
    if member.is_static:
        return ()
    return (f"{render_type_name(member.declaring_type)} instance",)


def render_parameter(parameter: ParameterDescriptor) -> str:
    """C# declaration of one parameter, including mode and default value."""
    declaration = (
        f"{parameter.mode.keyword}{render_type_name(parameter.parameter_type)} {parameter.name}"
    )
    if parameter.default is not None:
        declaration += f" = {render_literal(parameter.parameter_type, parameter.default)}"
    return declaration


def involved_types(member: MemberDescriptor) -> list[TypeRef]:
    """Every type a trampoline signature for ``member`` would mention."""
    types = [member.declaring_type]
    if isinstance(member, PropertyDescriptor):
        types.append(member.property_type)
    elif isinstance(member, FieldDescriptor):
        types.append(member.field_type)
    elif isinstance(member, MethodDescriptor):
        types.append(member.return_type)
        types.extend(p.parameter_type for p in member.parameters)
        types.extend(c for g in member.generic_parameters for c in g.constraints)
    return types


def all_visible(types: Iterable[TypeRef]) -> bool:
    return all(t.is_visible for t in types)


def select(member: MemberDescriptor) -> AccessStrategy:
    """Strategy for ``member`` before any trampoline is attempted.

    Property accessors are decided individually; for a property this
    returns the strategy of its least public accessor.
    """
    if isinstance(member, PropertyDescriptor):
        is_public = all(a.is_public for a in member.accessors)
    elif isinstance(member, FieldDescriptor) and member.is_constant and not member.is_public:
        return AccessStrategy.DYNAMIC_INVOKE
    else:
        is_public = member.is_public
    if is_public:
        return AccessStrategy.DIRECT
    if all_visible(involved_types(member)):
        return AccessStrategy.TRAMPOLINE
    return AccessStrategy.DYNAMIC_INVOKE


class StrategySelector:
    """Resolve members to plans, compiling trampolines where selected.

    The compiler is only consulted for members that selected Trampoline.
    When it raises :class:`UnsupportedNativeCodegen` the member falls back to
    DynamicInvoke and a warning diagnostic is recorded.
    """

    def __init__(self, compiler: TrampolineCompiler) -> None:
        self._compiler = compiler

    def plan_property(
        self, member: PropertyDescriptor, diagnostics: MutableSequence[Diagnostic]
    ) -> PropertyPlan:
        visible = all_visible(involved_types(member))
        getter = setter = None
        if member.getter is not None:
            getter = self._accessor(
                member,
                member.getter.is_public,
                visible,
                TrampolineSignature(
                    kind=TrampolineKind.GETTER,
                    lookup=member.name,
                    name=f"{member.name}_Get",
                    return_type=render_return_type(
                        member.property_type,
                        by_ref=member.returns_by_ref,
                        read_only=member.is_read_only_ref,
                    ),
                    parameters=instance_parameter(member),
                ),
                diagnostics,
            )
        if member.setter is not None:
            setter = self._accessor(
                member,
                member.setter.is_public,
                visible,
                TrampolineSignature(
                    kind=TrampolineKind.SETTER,
                    lookup=member.name,
                    name=f"{member.name}_Set",
                    return_type="void",
                    parameters=(
                        *instance_parameter(member),
                        f"{render_type_name(member.property_type)} value",
                    ),
                ),
                diagnostics,
            )
        return PropertyPlan(member=member, getter=getter, setter=setter)

    def plan_field(
        self, member: FieldDescriptor, diagnostics: MutableSequence[Diagnostic]
    ) -> FieldPlan:
        if member.is_constant:
            strategy = AccessStrategy.DIRECT if member.is_public else AccessStrategy.DYNAMIC_INVOKE
            return FieldPlan(member=member, getter=AccessorPlan(strategy), setter=None)

        visible = all_visible(involved_types(member))
        type_name = render_type_name(member.field_type)
        getter = self._accessor(
            member,
            member.is_public,
            visible,
            TrampolineSignature(
                kind=TrampolineKind.GETTER,
                lookup=member.name,
                name=f"{member.name}_Get",
                return_type=type_name,
                parameters=instance_parameter(member),
            ),
            diagnostics,
        )
        setter = None
        if member.is_writable:
            setter = self._accessor(
                member,
                member.is_public,
                visible,
                TrampolineSignature(
                    kind=TrampolineKind.SETTER,
                    lookup=member.name,
                    name=f"{member.name}_Set",
                    return_type="void",
                    parameters=(*instance_parameter(member), f"{type_name} value"),
                ),
                diagnostics,
            )
        return FieldPlan(member=member, getter=getter, setter=setter)

    def plan_method(
        self,
        member: MethodDescriptor,
        overload: OverloadInfo,
        diagnostics: MutableSequence[Diagnostic],
    ) -> MethodPlan:
        strategy = select(member)
        if strategy is not AccessStrategy.TRAMPOLINE:
            return MethodPlan(member=member, strategy=strategy, overload=overload)

        lookup = overload.backing_name(member.name)
        signature = TrampolineSignature(
            kind=TrampolineKind.INVOKE,
            lookup=lookup,
            name="Method" if member.is_generic else f"{lookup}_Method",
            return_type=render_return_type(
                member.return_type,
                by_ref=member.returns_by_ref,
                read_only=member.is_read_only_return,
            ),
            parameters=(
                *instance_parameter(member),
                *(render_parameter(p) for p in member.parameters),
            ),
            generic_parameters=member.generic_parameters,
        )
        trampoline = self._compile(member, signature, diagnostics)
        if trampoline is None:
            return MethodPlan(
                member=member, strategy=AccessStrategy.DYNAMIC_INVOKE, overload=overload
            )
        return MethodPlan(
            member=member,
            strategy=AccessStrategy.TRAMPOLINE,
            overload=overload,
            trampoline=trampoline,
        )

    def _accessor(
        self,
        member: MemberDescriptor,
        is_public: bool,
        visible: bool,
        signature: TrampolineSignature,
        diagnostics: MutableSequence[Diagnostic],
    ) -> AccessorPlan:
        if is_public:
            return AccessorPlan(AccessStrategy.DIRECT)
        if not visible:
            return AccessorPlan(AccessStrategy.DYNAMIC_INVOKE)
        trampoline = self._compile(member, signature, diagnostics)
        if trampoline is None:
            return AccessorPlan(AccessStrategy.DYNAMIC_INVOKE)
        return AccessorPlan(AccessStrategy.TRAMPOLINE, trampoline)

    def _compile(
        self,
        member: MemberDescriptor,
        signature: TrampolineSignature,
        diagnostics: MutableSequence[Diagnostic],
    ) -> Trampoline | None:
        try:
            return self._compiler.compile(member, signature)
        except UnsupportedNativeCodegen as e:
            type_name = get_target() or member.declaring_type.full_name
            log.warning(
                "trampoline_fallback",
                member=member.name,
                accessor=signature.kind.value,
                reason=e.details.get("reason", e.message),
            )
            diagnostics.append(
                Diagnostic.from_error(
                    e, type_name, severity=Severity.WARNING, member_name=member.name
                )
            )
            return None
