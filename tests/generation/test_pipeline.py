"""Tests for generation/pipeline.py module.

Covers:
- Discovery (default exclusions, type_filter, configured exclusions)
- Skipped target shapes vs failed types
- Per-type failure isolation
- Deterministic output across runs and worker counts
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from facadegen.config.models import GenerationConfig
from facadegen.core.errors import ErrorCode
from facadegen.generation.pipeline import FacadeGenerator
from facadegen.generation.report import Severity
from facadegen.metadata.dump import DumpMetadataSource

SKIPPED = ["Sample.InternalClass", "Sample.Box`1"]

BAD_DEFAULT = {
    "full_name": "Sample.BadDefault",
    "methods": [
        {
            "name": "Run",
            "parameters": [
                {"name": "id", "type": "System.Guid", "default": {"kind": "guid"}},
            ],
        }
    ],
}


def _two_type_dump(bad: dict[str, Any]) -> dict[str, Any]:
    good = {
        "full_name": "S.Good",
        "methods": [{"name": "Run", "static": True, "visibility": "public"}],
    }
    return {"assemblies": [{"name": "S", "types": [good, {"full_name": "S.Bad", **bad}]}]}


class RaisingCompiler:
    """Trampoline compiler that fails with an error outside the generator's own hierarchy."""

    def compile(self, member: Any, signature: Any) -> Any:
        raise RuntimeError(f"cannot compile {member.name}")


def _names(types: list[Any]) -> list[str]:
    return [t.full_name for t in types]


class TestDiscover:
    """Type discovery."""

    def test_given_default_config_when_discover_then_candidates_in_metadata_order(
        self, sample_source: DumpMetadataSource, candidate_types: list[str]
    ) -> None:
        # Given
        generator = FacadeGenerator(sample_source)

        # When
        discovered = generator.discover()

        # Then
        assert _names(discovered) == candidate_types

    def test_type_filter_is_a_regex_search(self, sample_source: DumpMetadataSource) -> None:
        config = GenerationConfig(type_filter=r"\.(Fields|Utility)$")

        discovered = FacadeGenerator(sample_source, config).discover()

        assert _names(discovered) == ["Sample.Fields", "Sample.Utility"]

    def test_excluded_type_removes_derived_types(self, sample_source: DumpMetadataSource) -> None:
        config = GenerationConfig(excluded_types=["Sample.Base"])

        names = _names(FacadeGenerator(sample_source, config).discover())

        assert "Sample.Base" not in names
        assert "Sample.Derived" not in names
        assert "Sample.Fields" in names


class TestGenerate:
    """Single-type generation."""

    @pytest.mark.parametrize("type_name", SKIPPED)
    def test_given_unsupported_shape_when_generate_then_skipped_not_failed(
        self, sample_source: DumpMetadataSource, type_name: str
    ) -> None:
        # Given
        generator = FacadeGenerator(sample_source)

        # When
        result = generator.generate(sample_source.get_type(type_name))

        # Then
        assert result.skipped
        assert not result.failed
        assert result.unit is None
        assert result.diagnostics[0].severity is Severity.WARNING
        assert result.diagnostics[0].code is ErrorCode.UNSUPPORTED_TYPE_SHAPE

    def test_given_unknown_literal_when_generate_then_failed(
        self, make_sample_dump: Callable[..., dict[str, Any]]
    ) -> None:
        # Given
        source = DumpMetadataSource.from_dict(make_sample_dump(BAD_DEFAULT))
        generator = FacadeGenerator(source)

        # When
        result = generator.generate(source.get_type("Sample.BadDefault"))

        # Then
        assert result.failed
        assert result.diagnostics[0].severity is Severity.ERROR
        assert result.diagnostics[0].code is ErrorCode.UNSUPPORTED_LITERAL
        assert "guid" in result.diagnostics[0].message

    def test_shadowed_overload_is_dropped(self, sample_source: DumpMetadataSource) -> None:
        plan = FacadeGenerator(sample_source).plan(sample_source.get_type("Sample.Derived"))

        assert [m.backing_name for m in plan.methods] == ["M_0", "M_1"]
        assert [m.member.declaring_type.full_name for m in plan.methods] == [
            "Sample.Derived",
            "Sample.Base",
        ]
        assert [p.member.declaring_type.full_name for p in plan.properties] == ["Sample.Derived"]

    def test_unit_records_type_name(self, sample_source: DumpMetadataSource) -> None:
        result = FacadeGenerator(sample_source).generate(sample_source.get_type("Sample.Fields"))

        assert result.unit is not None
        assert result.unit.type_name == "Sample.Fields"
        assert result.diagnostics == []


class TestGenerateAll:
    """Whole-run behavior."""

    def test_given_sample_when_generate_all_then_units_in_discovery_order(
        self, sample_source: DumpMetadataSource, candidate_types: list[str]
    ) -> None:
        # When
        report = FacadeGenerator(sample_source).generate_all()

        # Then
        expected = [name for name in candidate_types if name not in SKIPPED]
        assert [u.type_name for u in report.units] == expected
        assert report.skipped == SKIPPED
        assert report.failed == []
        assert report.ok
        assert len(report.warnings()) == len(SKIPPED)

    def test_given_failing_type_when_generate_all_then_others_still_generated(
        self, make_sample_dump: Callable[..., dict[str, Any]], candidate_types: list[str]
    ) -> None:
        # Given
        source = DumpMetadataSource.from_dict(make_sample_dump(BAD_DEFAULT))

        # When
        report = FacadeGenerator(source).generate_all()

        # Then
        assert report.failed == ["Sample.BadDefault"]
        assert not report.ok
        assert len(report.units) == len(candidate_types) - len(SKIPPED)
        assert [d.code for d in report.errors()] == [ErrorCode.UNSUPPORTED_LITERAL]

    def test_explicit_type_list(self, sample_source: DumpMetadataSource) -> None:
        types = [sample_source.get_type("Sample.Utility"), sample_source.get_type("Sample.Fields")]

        report = FacadeGenerator(sample_source).generate_all(types)

        assert [u.name for u in report.units] == ["UtilityHelper.cs", "FieldsHelper.cs"]

    def test_given_same_input_when_generated_twice_then_identical(
        self, sample_source: DumpMetadataSource
    ) -> None:
        """Output is a pure function of metadata and configuration."""
        first = FacadeGenerator(sample_source).generate_all()
        second = FacadeGenerator(sample_source).generate_all()

        assert [u.text for u in first.units] == [u.text for u in second.units]

    def test_given_worker_counts_when_generated_then_identical(
        self, sample_source: DumpMetadataSource
    ) -> None:
        sequential = FacadeGenerator(sample_source, GenerationConfig(max_workers=1))
        parallel = FacadeGenerator(sample_source, GenerationConfig(max_workers=4))

        first = sequential.generate_all()
        second = parallel.generate_all()

        assert [(u.name, u.text) for u in first.units] == [(u.name, u.text) for u in second.units]
        assert first.skipped == second.skipped

    def test_given_mistyped_float_default_when_generate_all_then_only_that_type_fails(
        self,
    ) -> None:
        # Given
        run = {
            "name": "Run",
            "visibility": "public",
            "parameters": [
                {
                    "name": "ratio",
                    "type": "System.Single",
                    "default": {"kind": "single", "value": "abc"},
                }
            ],
        }
        source = DumpMetadataSource.from_dict(_two_type_dump({"methods": [run]}))

        # When
        report = FacadeGenerator(source).generate_all()

        # Then
        assert [u.name for u in report.units] == ["GoodHelper.cs"]
        assert report.failed == ["S.Bad"]
        assert [d.code for d in report.errors()] == [ErrorCode.UNSUPPORTED_LITERAL]

    @pytest.mark.parametrize("max_workers", [1, 4])
    def test_given_unexpected_error_when_generate_all_then_recorded_as_internal(
        self, max_workers: int
    ) -> None:
        """An error outside FacadeGenError fails its own type, not the run."""
        # Given
        hidden = {"fields": [{"name": "count", "type": "int", "visibility": "private"}]}
        source = DumpMetadataSource.from_dict(_two_type_dump(hidden))
        generator = FacadeGenerator(
            source, GenerationConfig(max_workers=max_workers), compiler=RaisingCompiler()
        )

        # When
        report = generator.generate_all()

        # Then
        assert [u.type_name for u in report.units] == ["S.Good"]
        assert report.failed == ["S.Bad"]
        errors = report.errors()
        assert [d.code for d in errors] == [ErrorCode.INTERNAL_ERROR]
        assert errors[0].type_name == "S.Bad"
        assert "cannot compile count" in errors[0].message
