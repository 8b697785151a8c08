"""Generation driver: discovery, per-type planning and emission, fan-out.

Per type the stages run in a fixed order:

1. reject target shapes a facade cannot wrap (non-visible, generic)
2. classify members
3. hide shadowed properties/fields, disambiguate method overloads
4. select an access strategy per member
5. emit the unit

Each type is independent, so ``generate_all`` runs them on a thread pool and
isolates failures per type.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

from facadegen.config.models import GenerationConfig
from facadegen.core.errors import FacadeGenError, InternalError, UnsupportedTypeShape
from facadegen.core.logging import generation_target, get_logger
from facadegen.generation.classifier import MemberClassifier, resolve_excluded_types
from facadegen.generation.emitter import SourceEmitter
from facadegen.generation.overloads import disambiguate, hide_shadowed
from facadegen.generation.report import Diagnostic, FacadeUnit, GenerationReport, Severity
from facadegen.generation.strategy import FacadePlan, StrategySelector
from facadegen.generation.trampolines import DelegateTrampolineCompiler, TrampolineCompiler
from facadegen.metadata.models import TypeRef
from facadegen.metadata.source import MetadataSource

log = get_logger("generation.pipeline")


@dataclass(slots=True)
class TypeResult:
    """Outcome for one type: a unit, or a skip/failure, plus diagnostics."""

    type_name: str
    unit: FacadeUnit | None = None
    skipped: bool = False
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def failed(self) -> bool:
        return self.unit is None and not self.skipped


class FacadeGenerator:
    def __init__(
        self,
        source: MetadataSource,
        config: GenerationConfig | None = None,
        compiler: TrampolineCompiler | None = None,
    ) -> None:
        self.source = source
        self.config = config or GenerationConfig()
        self.classifier = MemberClassifier(
            source, resolve_excluded_types(source, self.config.excluded_types)
        )
        self.selector = StrategySelector(compiler or DelegateTrampolineCompiler())
        self.emitter = SourceEmitter.from_config(self.config)
        self._type_filter = re.compile(self.config.type_filter) if self.config.type_filter else None

    def discover(self) -> list[TypeRef]:
        """Types eligible for a facade, in metadata order."""
        types = []
        for type_ref in self.source.list_types():
            if not self.classifier.is_candidate(type_ref):
                continue
            if self._type_filter is not None and not self._type_filter.search(type_ref.full_name):
                continue
            types.append(type_ref)
        return types

    def plan(self, type_ref: TypeRef, diagnostics: list[Diagnostic] | None = None) -> FacadePlan:
        """Classify and resolve every member of ``type_ref``.

        Raises:
            UnsupportedTypeShape: The type is not visible or is generic.
            UnsupportedLiteral: A default parameter value cannot be rendered.
        """
        if diagnostics is None:
            diagnostics = []
        if not type_ref.is_visible:
            raise UnsupportedTypeShape.for_type(type_ref.full_name, "type is not visible")
        if type_ref.is_generic_type or type_ref.is_generic_definition:
            raise UnsupportedTypeShape.for_type(
                type_ref.full_name, "generic types are not supported"
            )

        classified = self.classifier.classify(type_ref)
        is_assignable = self.source.is_assignable_to
        properties = hide_shadowed(classified.properties, is_assignable)
        fields = hide_shadowed(classified.fields, is_assignable)
        overloads = disambiguate(classified.methods, is_assignable)

        return FacadePlan(
            target=type_ref,
            properties=tuple(self.selector.plan_property(p, diagnostics) for p in properties),
            fields=tuple(self.selector.plan_field(f, diagnostics) for f in fields),
            methods=tuple(
                self.selector.plan_method(m, info, diagnostics) for m, info in overloads.items()
            ),
        )

    def generate(self, type_ref: TypeRef) -> TypeResult:
        """Generate one facade. Never raises; any error is recorded against this type only."""
        result = TypeResult(type_name=type_ref.full_name)
        with generation_target(type_ref.full_name):
            try:
                plan = self.plan(type_ref, result.diagnostics)
                result.unit = self.emitter.emit(plan)
            except UnsupportedTypeShape as e:
                result.skipped = True
                result.diagnostics.append(
                    Diagnostic.from_error(e, type_ref.full_name, severity=Severity.WARNING)
                )
                log.info("type_skipped", reason=e.details.get("reason"))
            except FacadeGenError as e:
                result.diagnostics.append(Diagnostic.from_error(e, type_ref.full_name))
                log.error("generation_failed", error=e.error_name, message=e.message)
            except Exception as e:
                error = InternalError.unexpected(str(e), exception=type(e).__name__)
                result.diagnostics.append(Diagnostic.from_error(error, type_ref.full_name))
                log.error(
                    "generation_unexpected_error",
                    error=str(e),
                    error_type=type(e).__name__,
                    exc_info=True,
                )
            else:
                log.debug("facade_generated", unit=result.unit.name)
        return result

    def generate_all(self, types: Sequence[TypeRef] | None = None) -> GenerationReport:
        """Generate facades for ``types`` (default: :meth:`discover`).

        Results are reported in input order regardless of completion order.
        """
        if types is None:
            types = self.discover()

        if self.config.max_workers == 1 or len(types) <= 1:
            results = [self.generate(t) for t in types]
        else:
            with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
                results = list(executor.map(self.generate, types))

        report = GenerationReport()
        for result in results:
            report.diagnostics.extend(result.diagnostics)
            if result.unit is not None:
                report.units.append(result.unit)
            elif result.skipped:
                report.skipped.append(result.type_name)
            else:
                report.failed.append(result.type_name)
        return report
