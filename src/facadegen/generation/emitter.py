"""Render a FacadePlan as C# source.

Blocks are built as tuples of lines at their own indentation depth and
indented when nested, so every block can be tested in isolation. The unit
text is joined exactly once, in :meth:`SourceEmitter.emit`.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from facadegen.config.models import GenerationConfig
from facadegen.generation.naming import (
    facade_class_name,
    render_cast,
    render_generic_parameters,
    render_open_generic_name,
    render_return_type,
    render_type_name,
)
from facadegen.generation.report import FacadeUnit
from facadegen.generation.strategy import (
    AccessorPlan,
    AccessStrategy,
    FacadePlan,
    FieldPlan,
    MethodPlan,
    PropertyPlan,
    render_parameter,
)
from facadegen.generation.trampolines import Trampoline
from facadegen.metadata.models import (
    MemberDescriptor,
    MethodDescriptor,
    PassingMode,
    TypeRef,
)

Block = tuple[str, ...]

HEADER: Block = (
    "// <auto-generated/>",
    "#pragma warning disable CS0618 // 'member' is obsolete",
)

LINE_ENDINGS = {"crlf": "\r\n", "lf": "\n"}

REFLECTION = "System.Reflection"
BINDING_FLAGS = f"{REFLECTION}.BindingFlags"
OPCODES = f"{REFLECTION}.Emit.OpCodes"

_FIELD_GETTER_HELPER: Block = (
    "public static T CreateGetFieldMethod<T>(",
    f"\t{REFLECTION}.FieldInfo field",
    ") where T : System.Delegate {",
    f"\t{REFLECTION}.Emit.DynamicMethod method = new(",
    '\t\tname: $"{field.Name}_Get",',
    "\t\treturnType: field.FieldType,",
    "\t\tparameterTypes: field.IsStatic ?",
    "\t\t\tnull :",
    "\t\t\t[field.DeclaringType],",
    "\t\trestrictedSkipVisibility: true",
    "\t);",
    "\tvar generator = method.GetILGenerator();",
    "\tif (field.IsStatic) {",
    f"\t\tgenerator.Emit({OPCODES}.Ldsfld, field);",
    "\t} else {",
    f"\t\tgenerator.Emit({OPCODES}.Ldarg_0);",
    f"\t\tgenerator.Emit({OPCODES}.Ldfld, field);",
    "\t}",
    f"\tgenerator.Emit({OPCODES}.Ret);",
    "\treturn (T)method.CreateDelegate(typeof(T));",
    "}",
)

_FIELD_SETTER_HELPER: Block = (
    "public static T CreateSetFieldMethod<T>(",
    f"\t{REFLECTION}.FieldInfo field",
    ") where T : System.Delegate {",
    f"\t{REFLECTION}.Emit.DynamicMethod method = new(",
    '\t\tname: $"{field.Name}_Set",',
    "\t\treturnType: null,",
    "\t\tparameterTypes: field.IsStatic ?",
    "\t\t\t[field.FieldType] :",
    "\t\t\t[field.DeclaringType, field.FieldType],",
    "\t\trestrictedSkipVisibility: true",
    "\t);",
    "\tvar generator = method.GetILGenerator();",
    "\tif (field.IsStatic) {",
    f"\t\tgenerator.Emit({OPCODES}.Ldarg_0);",
    f"\t\tgenerator.Emit({OPCODES}.Stsfld, field);",
    "\t} else {",
    f"\t\tgenerator.Emit({OPCODES}.Ldarg_0);",
    f"\t\tgenerator.Emit({OPCODES}.Ldarg_1);",
    f"\t\tgenerator.Emit({OPCODES}.Stfld, field);",
    "\t}",
    f"\tgenerator.Emit({OPCODES}.Ret);",
    "\treturn (T)method.CreateDelegate(typeof(T));",
    "}",
)


def indent(lines: Iterable[str], depth: int = 1) -> Block:
    prefix = "\t" * depth
    return tuple(f"{prefix}{line}" if line else line for line in lines)


def wrap(head: str, items: Sequence[str], tail: str) -> Block:
    """One item per line between ``head`` and ``tail``; a single line when empty."""
    if not items:
        return (f"{head}{tail}",)
    body = [f"\t{item}," for item in items[:-1]]
    body.append(f"\t{items[-1]}")
    return (head, *body, tail)


def join_blocks(blocks: Iterable[Block]) -> Block:
    """Blocks separated by one blank line, with a blank line before the first."""
    lines: list[str] = []
    for block in blocks:
        lines.append("")
        lines.extend(block)
    return tuple(lines)


def binding_flags(is_public: bool, is_static: bool) -> str:
    visibility = "Public" if is_public else "NonPublic"
    scope = "Static" if is_static else "Instance"
    return f"{BINDING_FLAGS}.{visibility} | {BINDING_FLAGS}.{scope}"


def _mentions_generic(type_ref: TypeRef, names: Sequence[str]) -> bool:
    if type_ref.is_generic_parameter:
        return type_ref.full_name in names
    if type_ref.element_type is not None and _mentions_generic(type_ref.element_type, names):
        return True
    return any(_mentions_generic(arg, names) for arg in type_ref.generic_arguments)


def type_expression(type_ref: TypeRef, generic_names: Sequence[str] = ()) -> str:
    """C# expression producing the ``System.Type`` of a parameter for ``GetMethod``.

    Method generic parameters cannot appear in ``typeof``; they are spelled
    with ``Type.MakeGenericMethodParameter`` and composed outwards.
    """
    if type_ref.is_by_ref:
        return f"{type_expression(type_ref.unwrapped, generic_names)}.MakeByRefType()"
    if not _mentions_generic(type_ref, generic_names):
        return f"typeof({render_type_name(type_ref)})"
    if type_ref.is_generic_parameter:
        position = list(generic_names).index(type_ref.full_name)
        return f"System.Type.MakeGenericMethodParameter({position})"
    if type_ref.is_array and type_ref.element_type is not None:
        element = type_expression(type_ref.element_type, generic_names)
        rank = "" if type_ref.array_rank == 1 else str(type_ref.array_rank)
        return f"{element}.MakeArrayType({rank})"
    arguments = ", ".join(type_expression(arg, generic_names) for arg in type_ref.generic_arguments)
    return f"typeof({render_open_generic_name(type_ref)}).MakeGenericType({arguments})"


def argument(name: str, mode: PassingMode) -> str:
    return f"{mode.keyword}{name}"


class SourceEmitter:
    """Turn one :class:`FacadePlan` into one :class:`FacadeUnit`."""

    def __init__(
        self,
        *,
        instance_member_name: str = "InstanceForHelper",
        facade_suffix: str = "Helper",
        line_ending: str = "crlf",
    ) -> None:
        self.instance_member_name = instance_member_name
        self.facade_suffix = facade_suffix
        self.newline = LINE_ENDINGS[line_ending]

    @classmethod
    def from_config(cls, config: GenerationConfig) -> SourceEmitter:
        return cls(
            instance_member_name=config.instance_member_name,
            facade_suffix=config.facade_suffix,
            line_ending=config.line_ending,
        )

    def facade_name(self, target: TypeRef) -> str:
        return facade_class_name(target, self.facade_suffix)

    def emit(self, plan: FacadePlan) -> FacadeUnit:
        target = plan.target
        name = self.facade_name(target)

        lines: list[str] = [*HEADER, ""]
        if target.namespace:
            lines.extend((f"namespace {target.namespace};", ""))

        blocks: list[Block] = []
        if not plan.is_static:
            blocks.append(
                (f"public {render_type_name(target)} {self.instance_member_name} {{ get; set; }}",)
            )
        blocks.extend(self.property_block(p) for p in plan.properties)
        blocks.extend(self.field_block(f) for f in plan.fields)
        blocks.extend(self.method_block(m) for m in plan.methods)
        if not plan.is_static:
            blocks.append(self.constructor_block(name, target))
        reflection_members = self.reflection_members_block(plan)
        if reflection_members:
            blocks.append(reflection_members)

        static = "static " if plan.is_static else ""
        lines.append(f"public {static}class {name} {{")
        lines.extend(indent(join_blocks(blocks)))
        lines.append("}")

        text = self.newline.join(lines) + self.newline
        return FacadeUnit(name=f"{name}.cs", text=text, type_name=target.full_name)

    # ------------------------------------------------------------------
    # Facade members
    # ------------------------------------------------------------------

    def _access_prefix(self, member: MemberDescriptor) -> str:
        if member.is_static:
            return render_type_name(member.declaring_type)
        return self.instance_member_name

    def _instance_argument(self, member: MemberDescriptor, *, placeholder: str = "") -> str:
        return placeholder if member.is_static else self.instance_member_name

    def constructor_block(self, name: str, target: TypeRef) -> Block:
        return (
            *wrap(f"public {name}(", [f"{render_type_name(target)} instance"], ") {"),
            f"\t{self.instance_member_name} = instance;",
            "}",
        )

    def property_block(self, plan: PropertyPlan) -> Block:
        member = plan.member
        # a value fetched through reflection is a copy, never a reference
        by_ref = member.returns_by_ref and not _is_dynamic(plan.getter)
        value_type = render_return_type(
            member.property_type, by_ref=by_ref, read_only=member.is_read_only_ref
        )
        static = "static " if member.is_static else ""
        lines = [f"public {static}{value_type} {member.name} {{"]
        ref = "ref " if by_ref else ""

        if plan.getter is not None:
            if plan.getter.strategy is AccessStrategy.DIRECT:
                getter = f"{ref}{self._access_prefix(member)}.{member.name}"
            elif plan.getter.strategy is AccessStrategy.TRAMPOLINE:
                trampoline = _require(plan.getter)
                instance = self._instance_argument(member)
                getter = f"{ref}ReflectionMembers.{trampoline.signature.name}({instance})"
            else:
                instance = self._instance_argument(member, placeholder="null")
                cast = render_cast(member.property_type)
                getter = f"{cast}ReflectionMembers.{member.name}.GetValue({instance})"
            lines.append(f"\tget => {getter};")

        if plan.setter is not None:
            lines.append(f"\tset => {self._setter(member, plan.setter)};")

        lines.append("}")
        return tuple(lines)

    def _setter(self, member: MemberDescriptor, accessor: AccessorPlan) -> str:
        if accessor.strategy is AccessStrategy.DIRECT:
            return f"{self._access_prefix(member)}.{member.name} = value"
        if accessor.strategy is AccessStrategy.TRAMPOLINE:
            trampoline = _require(accessor)
            arguments = "value" if member.is_static else f"{self.instance_member_name}, value"
            return f"ReflectionMembers.{trampoline.signature.name}({arguments})"
        instance = self._instance_argument(member, placeholder="null")
        return f"ReflectionMembers.{member.name}.SetValue({instance}, value)"

    def field_block(self, plan: FieldPlan) -> Block:
        member = plan.member
        static = "static " if member.is_static else ""
        lines = [f"public {static}{render_type_name(member.field_type)} {member.name} {{"]

        getter_plan = plan.getter
        if getter_plan.strategy is AccessStrategy.DIRECT:
            getter = f"{self._access_prefix(member)}.{member.name}"
        elif getter_plan.strategy is AccessStrategy.TRAMPOLINE:
            trampoline = _require(getter_plan)
            instance = self._instance_argument(member)
            getter = f"ReflectionMembers.{trampoline.signature.name}({instance})"
        elif member.is_constant:
            cast = render_cast(member.field_type)
            getter = f"{cast}ReflectionMembers.{member.name}.GetRawConstantValue()"
        else:
            instance = self._instance_argument(member, placeholder="null")
            cast = render_cast(member.field_type)
            getter = f"{cast}ReflectionMembers.{member.name}.GetValue({instance})"
        lines.append(f"\tget => {getter};")

        if plan.setter is not None:
            lines.append(f"\tset => {self._setter(member, plan.setter)};")

        lines.append("}")
        return tuple(lines)

    def method_block(self, plan: MethodPlan) -> Block:
        member = plan.member
        generic_list, where = render_generic_parameters(member.generic_parameters)
        dynamic = plan.strategy is AccessStrategy.DYNAMIC_INVOKE
        return_type = render_return_type(
            member.return_type,
            by_ref=member.returns_by_ref and not dynamic,
            read_only=member.is_read_only_return,
        )
        static = "static " if member.is_static else ""
        declaration = wrap(
            f"public {static}{return_type} {member.name}{generic_list}(",
            [render_parameter(p) for p in member.parameters],
            f"){where} {{",
        )
        if dynamic:
            body = self._dynamic_invoke_body(plan)
        else:
            body = self._forwarding_body(plan, generic_list)
        return (*declaration, *indent(body), "}")

    def _forwarding_body(self, plan: MethodPlan, generic_list: str) -> Block:
        member = plan.member
        arguments = [argument(p.name, p.mode) for p in member.parameters]
        if plan.strategy is AccessStrategy.DIRECT:
            target = f"{self._access_prefix(member)}.{member.name}{generic_list}"
        else:
            trampoline = plan.trampoline
            assert trampoline is not None
            if member.is_generic:
                holder = f"{plan.backing_name}_Generic{generic_list}"
                target = f"ReflectionMembers.{holder}.{trampoline.signature.name}"
            else:
                target = f"ReflectionMembers.{trampoline.signature.name}"
            if not member.is_static:
                arguments.insert(0, self.instance_member_name)

        if member.returns_void:
            statement = ""
        else:
            statement = "return ref " if member.returns_by_ref else "return "
        return wrap(f"{statement}{target}(", arguments, ");")

    def _dynamic_invoke_body(self, plan: MethodPlan) -> Block:
        member = plan.member
        instance = self._instance_argument(member, placeholder="null")
        method_info = f"ReflectionMembers.{plan.backing_name}"
        if member.is_generic:
            type_arguments = ", ".join(f"typeof({g.name})" for g in member.generic_parameters)
            method_info += f".MakeGenericMethod({type_arguments})"
        result = "" if member.returns_void else f"var result = {render_cast(member.return_type)}"

        lines: list[str] = []
        if member.parameters:
            values = ["null" if p.mode is PassingMode.OUT else p.name for p in member.parameters]
            lines.extend(wrap("var parameters = new object[] {", values, "};"))
            lines.append(f"{result}{method_info}.Invoke({instance}, parameters);")
            # out and ref arguments come back through the array
            for position, parameter in enumerate(member.parameters):
                if parameter.mode in (PassingMode.OUT, PassingMode.REF):
                    cast = render_cast(parameter.parameter_type)
                    lines.append(f"{parameter.name} = {cast}parameters[{position}];")
        else:
            lines.append(f"{result}{method_info}.Invoke({instance}, parameters: null);")
        if not member.returns_void:
            lines.append("return result;")
        return tuple(lines)

    # ------------------------------------------------------------------
    # ReflectionMembers
    # ------------------------------------------------------------------

    def reflection_members_block(self, plan: FacadePlan) -> Block:
        entries: list[Block] = []
        for prop in plan.properties:
            if prop.needs_lookup:
                entries.append(self._property_lookup(prop))
                entries.extend(_trampoline_entries(prop.accessors))
        for fld in plan.fields:
            if fld.needs_lookup:
                entries.append(self._field_lookup(fld))
                entries.extend(_trampoline_entries(fld.accessors))
        for method in plan.methods:
            if method.needs_lookup:
                entries.append(self._method_lookup(method))
                if method.trampoline is not None:
                    entries.append(self._method_trampoline(method, method.trampoline))
        if plan.uses_field_helpers:
            entries.extend((_FIELD_GETTER_HELPER, _FIELD_SETTER_HELPER))
        if not entries:
            return ()
        return (
            "public static class ReflectionMembers {",
            *indent(join_blocks(entries)),
            "}",
        )

    def _property_lookup(self, plan: PropertyPlan) -> Block:
        member = plan.member
        return (
            f"public static {REFLECTION}.PropertyInfo {member.name} {{ get; }} =",
            *indent(
                wrap(
                    f"typeof({render_type_name(member.declaring_type)}).GetProperty(",
                    [f'"{member.name}"', binding_flags(member.is_public, member.is_static)],
                    ");",
                )
            ),
        )

    def _field_lookup(self, plan: FieldPlan) -> Block:
        member = plan.member
        return (
            f"public static {REFLECTION}.FieldInfo {member.name} {{ get; }} =",
            *indent(
                wrap(
                    f"typeof({render_type_name(member.declaring_type)}).GetField(",
                    [f'"{member.name}"', binding_flags(member.is_public, member.is_static)],
                    ");",
                )
            ),
        )

    def _method_lookup(self, plan: MethodPlan) -> Block:
        member = plan.member
        flags = binding_flags(member.is_public, member.is_static)
        declaring = render_type_name(member.declaring_type)
        head = f"public static {REFLECTION}.MethodInfo {plan.backing_name} {{ get; }} ="
        if not plan.overload.is_overloaded:
            call = wrap(f"typeof({declaring}).GetMethod(", [f'"{member.name}"', flags], ");")
            return (head, *indent(call))

        call = [f"typeof({declaring}).GetMethod(", f'\t"{member.name}",']
        if member.is_generic:
            call.append(f"\tgenericParameterCount: {len(member.generic_parameters)},")
        call.extend((f"\t{flags},", "\tbinder: null,"))
        call.extend(indent(self._parameter_types(member)))
        call.extend(("\tmodifiers: null", ");"))
        return (head, *indent(call))

    def _parameter_types(self, member: MethodDescriptor) -> Block:
        if not member.parameters:
            return ("types: System.Type.EmptyTypes,",)
        generic_names = [g.name for g in member.generic_parameters]
        types = [type_expression(p.signature_type, generic_names) for p in member.parameters]
        return (*wrap("types: [", types, "],"),)

    def _method_trampoline(self, plan: MethodPlan, trampoline: Trampoline) -> Block:
        entry = _delegate_entry(trampoline)
        if not plan.member.is_generic:
            return entry
        generic_list, where = render_generic_parameters(plan.member.generic_parameters)
        return (
            f"public static class {plan.backing_name}_Generic{generic_list}{where} {{",
            *indent(entry),
            "}",
        )


def _is_dynamic(accessor: AccessorPlan | None) -> bool:
    return accessor is not None and accessor.strategy is AccessStrategy.DYNAMIC_INVOKE


def _require(accessor: AccessorPlan) -> Trampoline:
    assert accessor.trampoline is not None, "trampoline strategy without a trampoline"
    return accessor.trampoline


def _delegate_entry(trampoline: Trampoline) -> Block:
    signature = trampoline.signature
    lines: list[str] = []
    if trampoline.delegate_name is not None:
        lines.extend(
            wrap(
                f"public delegate {signature.return_type} {trampoline.delegate_name}(",
                list(signature.parameters),
                ");",
            )
        )
        lines.append("")
    lines.append(f"public static {trampoline.delegate_type} {signature.name} {{ get; }} =")
    lines.append(f"\t{trampoline.factory};")
    return tuple(lines)


def _trampoline_entries(accessors: Iterable[AccessorPlan]) -> list[Block]:
    return [_delegate_entry(a.trampoline) for a in accessors if a.trampoline is not None]
