"""facadegen generate command - write facades for every eligible type."""

import time
from pathlib import Path

import click

from facadegen.cli.utils import load_cli_config, open_metadata
from facadegen.core.formatting import format_duration, pluralize, summarize_counts
from facadegen.core.progress import spinner, status
from facadegen.generation.pipeline import FacadeGenerator
from facadegen.generation.report import Severity
from facadegen.output.writer import OutputWriter


@click.command()
@click.argument("metadata", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "-o",
    "--output",
    type=click.Path(file_okay=False, path_type=Path),
    help="Output folder (default: output.directory from config)",
)
@click.option("-f", "--filter", "type_filter", help="Regex pattern for filter types")
@click.option(
    "--exclude",
    "excluded",
    multiple=True,
    help="Exclude a type and everything assignable to it (repeatable)",
)
@click.option("--workers", type=int, help="Types generated in parallel")
@click.option(
    "--line-ending",
    type=click.Choice(["crlf", "lf"]),
    help="Line ending of generated sources",
)
@click.pass_context
def generate_command(
    ctx: click.Context,
    metadata: Path,
    output: Path | None,
    type_filter: str | None,
    excluded: tuple[str, ...],
    workers: int | None,
    line_ending: str | None,
) -> None:
    """Generate access facades for the types in METADATA.

    METADATA is a JSON or YAML metadata dump. Exits with status 1 when
    any type failed; skipped types are reported but are not failures.
    """
    generation: dict[str, object] = {
        "type_filter": type_filter,
        "max_workers": workers,
        "line_ending": line_ending,
    }
    if excluded:
        generation["excluded_types"] = list(excluded)
    config = load_cli_config(
        ctx,
        generation=generation,
        output={"directory": str(output) if output is not None else None},
    )

    source = open_metadata(metadata)
    generator = FacadeGenerator(source, config.generation)

    start = time.perf_counter()
    types = generator.discover()
    status(f"Found {pluralize(len(types), 'eligible type')} in {metadata.name}")
    with spinner(f"Generating {pluralize(len(types), 'facade')}"):
        report = generator.generate_all(types)

    directory = Path(config.output.directory)
    written = OutputWriter(directory).write(report.units)
    elapsed = format_duration(time.perf_counter() - start)

    for diagnostic in report.diagnostics:
        style = "warning" if diagnostic.severity is Severity.WARNING else "error"
        status(str(diagnostic), style=style, indent=2)

    summary = summarize_counts(len(written), len(report.skipped), len(report.failed))
    status(f"{summary} in {directory} ({elapsed})", style="success" if report.ok else "error")

    if not report.ok:
        ctx.exit(1)
