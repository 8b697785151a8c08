"""C# spelling of metadata types.

``render_type_name`` is total: every TypeRef renders to something, with
non-visible types collapsing to ``object`` so generated signatures never
mention a type the facade's compilation unit cannot see.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from facadegen.metadata.models import CSHARP_KEYWORDS, GenericParameter, TypeRef

OBJECT_KEYWORD = "object"

_ARITY_RE = re.compile(r"`(\d+)")


def substitute_generic_arguments(
    raw_name: str,
    arguments: Sequence[str],
) -> str:
    """Replace each `` `N`` marker in ``raw_name`` with the next N arguments.

    Markers are consumed left to right, so a nested generic such as
    ``Outer`1.Inner`2`` with arguments ``[A, B, C]`` becomes
    ``Outer<A>.Inner<B, C>``. Text already substituted is never rescanned.
    A marker with no arguments left is kept verbatim (open generic
    definitions); surplus arguments are ignored.
    """
    parts: list[str] = []
    position = 0
    consumed = 0
    for match in _ARITY_RE.finditer(raw_name):
        count = int(match.group(1))
        if consumed >= len(arguments):
            break
        parts.append(raw_name[position : match.start()])
        parts.append(f"<{', '.join(arguments[consumed : consumed + count])}>")
        consumed += count
        position = match.end()
    parts.append(raw_name[position:])
    return "".join(parts)


def render_type_name(type_ref: TypeRef) -> str:
    """C# spelling of ``type_ref``.

    Rules, first match wins: non-visible -> ``object``; generic parameter ->
    its name; array -> element plus ``[]``/``[,]``; built-in -> keyword;
    otherwise the qualified name with nested types joined by ``.`` and
    generic arguments substituted for the arity markers.
    """
    if not type_ref.is_visible:
        return OBJECT_KEYWORD
    if type_ref.is_generic_parameter:
        return type_ref.full_name
    if type_ref.is_by_ref and type_ref.element_type is not None:
        return render_type_name(type_ref.element_type)
    if type_ref.is_array and type_ref.element_type is not None:
        commas = "," * (type_ref.array_rank - 1)
        return f"{render_type_name(type_ref.element_type)}[{commas}]"
    keyword = CSHARP_KEYWORDS.get(type_ref.full_name)
    if keyword is not None:
        return keyword

    type_name = type_ref.full_name.replace("+", ".")
    if not type_ref.generic_arguments:
        return type_name
    return substitute_generic_arguments(
        type_name,
        [render_type_name(arg) for arg in type_ref.generic_arguments],
    )


def render_open_generic_name(type_ref: TypeRef) -> str:
    """Unbound generic spelling for ``typeof``: ``Outer`1+Inner`2`` -> ``Outer<>.Inner<,>``."""
    type_name = type_ref.full_name.replace("+", ".")
    return _ARITY_RE.sub(lambda m: f"<{',' * (int(m.group(1)) - 1)}>", type_name)


def is_castable(type_ref: TypeRef) -> bool:
    """False when values of this type are already typed as ``object`` in the facade."""
    target = type_ref.unwrapped
    return target.is_visible and target.full_name != "System.Object"


def render_cast(type_ref: TypeRef) -> str:
    """Cast prefix converting an ``object`` back to ``type_ref``, or ``""``."""
    if not is_castable(type_ref):
        return ""
    return f"({render_type_name(type_ref.unwrapped)})"


def render_return_type(type_ref: TypeRef, *, by_ref: bool = False, read_only: bool = False) -> str:
    if not type_ref.is_visible:
        return OBJECT_KEYWORD
    prefix = ""
    if by_ref or type_ref.is_by_ref:
        prefix = "ref readonly " if read_only else "ref "
    return f"{prefix}{render_type_name(type_ref.unwrapped)}"


def _constraint_clause(parameter: GenericParameter) -> str | None:
    constraints: list[str] = []
    if parameter.reference_type:
        constraints.append("class")
    elif parameter.value_type:
        constraints.append("struct")
    for constraint in parameter.constraints:
        # struct constraints also surface as a System.ValueType base
        if constraint.full_name == "System.ValueType" or not constraint.is_visible:
            continue
        constraints.append(render_type_name(constraint))
    if parameter.default_constructor and not parameter.value_type:
        constraints.append("new()")
    if not constraints:
        return None
    return ", ".join(constraints)


def render_generic_parameters(
    parameters: Sequence[GenericParameter],
) -> tuple[str, str]:
    """Return ``("<T, U>", " where T : class")`` for a generic parameter list."""
    if not parameters:
        return "", ""
    parameter_list = f"<{', '.join(p.name for p in parameters)}>"
    clauses = []
    for parameter in parameters:
        clause = _constraint_clause(parameter)
        if clause is not None:
            clauses.append(f" where {parameter.name} : {clause}")
    return parameter_list, "".join(clauses)


def facade_class_name(target: TypeRef, suffix: str) -> str:
    """Facade class name: rendered name minus namespace, flattened to one identifier."""
    name = render_type_name(target)
    if target.namespace:
        prefix = f"{target.namespace}."
        if name.startswith(prefix):
            name = name[len(prefix) :]
    for token in (", ", ".", "<", ">"):
        name = name.replace(token, "_")
    return f"{name}{suffix}"
