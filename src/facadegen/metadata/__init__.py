"""Metadata module exports."""

from facadegen.metadata.dump import DumpMetadataSource
from facadegen.metadata.models import (
    AccessorDescriptor,
    FieldDescriptor,
    GenericParameter,
    LiteralValue,
    MemberDescriptor,
    MemberKind,
    MethodDescriptor,
    MethodHandle,
    ParameterDescriptor,
    PassingMode,
    PropertyDescriptor,
    TypeRef,
    Visibility,
)
from facadegen.metadata.source import MemberMask, MetadataSource, split_members

__all__ = [
    "AccessorDescriptor",
    "DumpMetadataSource",
    "FieldDescriptor",
    "GenericParameter",
    "LiteralValue",
    "MemberDescriptor",
    "MemberKind",
    "MemberMask",
    "MetadataSource",
    "MethodDescriptor",
    "MethodHandle",
    "ParameterDescriptor",
    "PassingMode",
    "PropertyDescriptor",
    "TypeRef",
    "Visibility",
    "split_members",
]
