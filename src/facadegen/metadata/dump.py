"""MetadataSource backed by a JSON or YAML metadata dump.

The dump only records what each type declares; this module reproduces the
reflection rules a live runtime would apply on top of that:

- a type's member listing includes non-private instance members inherited
  from base types that are themselves present in the dump;
- assignability follows base types and interfaces, with a small table of
  framework relations for types outside the dump;
- string type references pick up visibility and value-type-ness from the
  dump's own declarations, and are treated as visible framework types
  otherwise.
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import replace
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from facadegen.core.errors import MetadataError
from facadegen.core.logging import get_logger
from facadegen.metadata.models import (
    BUILTIN_TYPES,
    CSHARP_KEYWORDS,
    AccessorDescriptor,
    FieldDescriptor,
    GenericParameter,
    LiteralValue,
    MemberDescriptor,
    MethodDescriptor,
    MethodHandle,
    ParameterDescriptor,
    PropertyDescriptor,
    TypeRef,
    Visibility,
)
from facadegen.metadata.schema import (
    FieldModel,
    LiteralModel,
    MetadataDump,
    MethodModel,
    PropertyModel,
    TypeModel,
    TypeRefModel,
    TypeSpec,
)
from facadegen.metadata.source import MemberMask

log = get_logger("metadata.dump")

_KEYWORD_TYPES = {keyword: BUILTIN_TYPES[name] for name, keyword in CSHARP_KEYWORDS.items()}
_ARRAY_SUFFIX_RE = re.compile(r"^(?P<element>.+)\[(?P<commas>,*)\]$")

# Supertypes of framework types that never appear in a dump.
WELL_KNOWN_SUPERTYPES: dict[str, tuple[str, ...]] = {
    "System.MulticastDelegate": ("System.Delegate",),
    "System.Delegate": ("System.Object",),
    "System.Attribute": ("System.Object",),
    "System.Enum": ("System.ValueType",),
    "System.ValueType": ("System.Object",),
    "System.Exception": ("System.Object",),
}


def _format_location(loc: tuple[Any, ...]) -> str:
    return ".".join(str(part) for part in loc)


class DumpMetadataSource:
    """Serve type and member snapshots from a parsed :class:`MetadataDump`."""

    def __init__(self, dump: MetadataDump) -> None:
        self._dump = dump
        self._models: dict[str, tuple[TypeModel, str]] = {}
        for assembly in dump.assemblies:
            for type_model in assembly.types:
                if type_model.full_name in self._models:
                    raise MetadataError.invalid(
                        type_model.full_name, "type declared more than once"
                    )
                self._models[type_model.full_name] = (type_model, assembly.name)

        self._types: dict[str, TypeRef] = {
            name: self._declared_type(model, assembly)
            for name, (model, assembly) in self._models.items()
        }
        self._members: dict[str, tuple[MemberDescriptor, ...]] = {
            name: tuple(self._declared_members(model, self._types[name]))
            for name, (model, _) in self._models.items()
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> DumpMetadataSource:
        try:
            dump = MetadataDump.model_validate(data)
        except ValidationError as e:
            err = e.errors()[0]
            raise MetadataError.invalid(_format_location(err["loc"]), err["msg"]) from e
        return cls(dump)

    @classmethod
    def from_path(cls, path: Path) -> DumpMetadataSource:
        """Load a ``.json``, ``.yaml`` or ``.yml`` dump."""
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise MetadataError.unreadable(str(path), str(e)) from e

        try:
            if path.suffix.lower() in (".yaml", ".yml"):
                data = yaml.safe_load(text) or {}
            else:
                data = json.loads(text)
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise MetadataError.unreadable(str(path), str(e)) from e

        if not isinstance(data, dict):
            raise MetadataError.unreadable(str(path), "top-level value must be a mapping")

        source = cls.from_dict(data)
        log.debug("metadata_loaded", path=str(path), types=len(source._types))
        return source

    # ------------------------------------------------------------------
    # MetadataSource protocol
    # ------------------------------------------------------------------

    def list_types(self) -> Sequence[TypeRef]:
        return list(self._types.values())

    def get_type(self, full_name: str) -> TypeRef:
        try:
            return self._types[full_name]
        except KeyError:
            raise MetadataError.unknown_type(full_name) from None

    def list_members(
        self, type_ref: TypeRef, mask: MemberMask = MemberMask.ALL
    ) -> Sequence[MemberDescriptor]:
        self.get_type(type_ref.full_name)
        members: list[MemberDescriptor] = list(self._members[type_ref.full_name])
        for base_name in self._base_chain(type_ref.full_name):
            members.extend(
                member
                for member in self._members[base_name]
                if not member.is_static and not _is_private(member)
            )
        return [member for member in members if mask.admits(member)]

    def get_interface_map(self, type_ref: TypeRef) -> Mapping[str, MethodHandle]:
        model, _ = self._model(type_ref.full_name)
        return {
            mapping.interface_method: MethodHandle(
                declaring_type=mapping.target_declaring_type or model.full_name,
                name=mapping.target,
                visibility=mapping.target_visibility,
            )
            for mapping in model.interface_map
        }

    def is_assignable_to(self, candidate: TypeRef, target: TypeRef) -> bool:
        if candidate.identity == target.identity:
            return True
        if target.full_name == "System.Object" and not candidate.is_by_ref:
            return True
        seen: set[str] = set()
        pending = [candidate.full_name]
        while pending:
            name = pending.pop()
            if name in seen:
                continue
            seen.add(name)
            if name == target.full_name:
                return True
            pending.extend(self._supertypes(name))
        return False

    # ------------------------------------------------------------------
    # Resolution helpers
    # ------------------------------------------------------------------

    def _model(self, full_name: str) -> tuple[TypeModel, str]:
        try:
            return self._models[full_name]
        except KeyError:
            raise MetadataError.unknown_type(full_name) from None

    def _supertypes(self, full_name: str) -> tuple[str, ...]:
        entry = self._models.get(full_name)
        if entry is None:
            return WELL_KNOWN_SUPERTYPES.get(full_name, ())
        model, _ = entry
        base = model.effective_base_type
        return (*((base,) if base else ()), *model.interfaces)

    def _base_chain(self, full_name: str) -> Iterator[str]:
        model, _ = self._models[full_name]
        seen = {full_name}
        base = model.effective_base_type
        while base is not None and base in self._models and base not in seen:
            seen.add(base)
            yield base
            base = self._models[base][0].effective_base_type

    def _declared_type(self, model: TypeModel, assembly: str) -> TypeRef:
        kind = model.kind
        return TypeRef.named(
            model.full_name,
            is_visible=model.visible,
            is_value_type=kind in ("struct", "enum"),
            is_interface=kind == "interface",
            is_abstract=model.abstract or kind == "interface",
            is_sealed=model.sealed or kind in ("struct", "enum", "delegate"),
            is_compiler_generated=model.compiler_generated,
            is_generic_definition=model.generic_definition,
            assembly=assembly,
        )

    def resolve(self, spec: TypeSpec) -> TypeRef:
        """Turn a dump type reference into a TypeRef."""
        if isinstance(spec, str):
            return self._resolve_name(spec)
        if spec.generic_parameter is not None:
            return TypeRef.generic_parameter(spec.generic_parameter)
        if spec.array is not None:
            return self.resolve(spec.array).array_of(spec.rank)
        assert spec.name is not None
        resolved = self._resolve_name(spec.name)
        if spec.args:
            resolved = resolved.construct(*(self.resolve(arg) for arg in spec.args))
        return _apply_overrides(resolved, spec)

    def _resolve_name(self, name: str) -> TypeRef:
        name = name.strip()
        match = _ARRAY_SUFFIX_RE.match(name)
        if match:
            element = self._resolve_name(match.group("element"))
            return element.array_of(len(match.group("commas")) + 1)
        if name in _KEYWORD_TYPES:
            return _KEYWORD_TYPES[name]
        if name in self._types:
            return self._types[name]
        if name in BUILTIN_TYPES:
            return BUILTIN_TYPES[name]
        return TypeRef.named(name)

    def _literal(self, model: LiteralModel | None) -> LiteralValue | None:
        if model is None:
            return None
        enum_type = self.resolve(model.enum_type) if model.enum_type is not None else None
        return LiteralValue(
            kind=model.kind,
            value=model.value,
            enum_type=enum_type,
            flags=tuple(model.flags),
        )

    def _declared_members(self, model: TypeModel, declaring: TypeRef) -> Iterator[MemberDescriptor]:
        for prop in model.properties:
            yield self._property(prop, declaring)
        for fld in model.fields:
            yield self._field(fld, declaring)
        for method in model.methods:
            yield self._method(method, declaring)

    def _property(self, model: PropertyModel, declaring: TypeRef) -> PropertyDescriptor:
        getter = setter = None
        if model.getter is not None:
            getter = AccessorDescriptor(
                name=model.getter.name or f"get_{model.name}",
                visibility=model.getter.visibility,
            )
        if model.setter is not None:
            setter = AccessorDescriptor(
                name=model.setter.name or f"set_{model.name}",
                visibility=model.setter.visibility,
            )
        return PropertyDescriptor(
            name=model.name,
            declaring_type=declaring,
            is_static=model.static,
            is_compiler_generated=model.compiler_generated,
            property_type=self.resolve(model.type),
            getter=getter,
            setter=setter,
            returns_by_ref=model.returns_by_ref,
            is_read_only_ref=model.read_only_ref,
            index_parameter_count=model.index_parameters,
        )

    def _field(self, model: FieldModel, declaring: TypeRef) -> FieldDescriptor:
        return FieldDescriptor(
            name=model.name,
            declaring_type=declaring,
            is_static=model.static or model.constant,
            is_compiler_generated=model.compiler_generated,
            field_type=self.resolve(model.type),
            visibility=model.visibility,
            is_constant=model.constant,
            is_init_only=model.init_only,
            is_by_ref=model.by_ref,
        )

    def _method(self, model: MethodModel, declaring: TypeRef) -> MethodDescriptor:
        return MethodDescriptor(
            name=model.name,
            declaring_type=declaring,
            is_static=model.static,
            is_compiler_generated=model.compiler_generated,
            visibility=model.visibility,
            return_type=self.resolve(model.return_type),
            returns_by_ref=model.returns_by_ref,
            is_read_only_return=model.read_only_return,
            parameters=tuple(
                ParameterDescriptor(
                    name=p.name,
                    parameter_type=self.resolve(p.type),
                    mode=p.mode,
                    default=self._literal(p.default),
                )
                for p in model.parameters
            ),
            generic_parameters=tuple(
                GenericParameter(
                    name=g.name,
                    reference_type=g.reference_type,
                    value_type=g.value_type,
                    default_constructor=g.default_constructor,
                    constraints=tuple(self.resolve(c) for c in g.constraints),
                )
                for g in model.generic_parameters
            ),
            is_special_name=model.special_name,
        )


def _apply_overrides(type_ref: TypeRef, spec: TypeRefModel) -> TypeRef:
    changes: dict[str, Any] = {}
    if spec.value_type is not None:
        changes["is_value_type"] = spec.value_type
    if spec.visible is not None:
        changes["is_visible"] = spec.visible
    return replace(type_ref, **changes) if changes else type_ref


def _is_private(member: MemberDescriptor) -> bool:
    if isinstance(member, PropertyDescriptor):
        return all(a.visibility is Visibility.PRIVATE for a in member.accessors)
    visibility = getattr(member, "visibility", Visibility.PRIVATE)
    return visibility is Visibility.PRIVATE
