"""Facade generation pipeline.

Renderer (``naming``), classifier, overload disambiguator, strategy
selector and emitter, driven per type by ``pipeline.FacadeGenerator``.
"""

from facadegen.generation.classifier import ClassifiedMembers, MemberClassifier
from facadegen.generation.emitter import SourceEmitter
from facadegen.generation.literals import LiteralKind, render_literal
from facadegen.generation.naming import (
    facade_class_name,
    render_cast,
    render_generic_parameters,
    render_return_type,
    render_type_name,
    substitute_generic_arguments,
)
from facadegen.generation.overloads import OverloadInfo, disambiguate, hide_shadowed
from facadegen.generation.pipeline import FacadeGenerator, TypeResult
from facadegen.generation.report import Diagnostic, FacadeUnit, GenerationReport, Severity
from facadegen.generation.strategy import (
    AccessStrategy,
    FacadePlan,
    StrategySelector,
    select,
)
from facadegen.generation.trampolines import (
    DelegateTrampolineCompiler,
    Trampoline,
    TrampolineCompiler,
    TrampolineSignature,
)

__all__ = [
    "AccessStrategy",
    "ClassifiedMembers",
    "DelegateTrampolineCompiler",
    "Diagnostic",
    "FacadeGenerator",
    "FacadePlan",
    "FacadeUnit",
    "GenerationReport",
    "LiteralKind",
    "MemberClassifier",
    "OverloadInfo",
    "Severity",
    "SourceEmitter",
    "StrategySelector",
    "Trampoline",
    "TrampolineCompiler",
    "TrampolineSignature",
    "TypeResult",
    "disambiguate",
    "facade_class_name",
    "hide_shadowed",
    "render_cast",
    "render_generic_parameters",
    "render_literal",
    "render_return_type",
    "render_type_name",
    "select",
    "substitute_generic_arguments",
]
