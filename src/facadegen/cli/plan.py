"""facadegen plan command - show the access strategy of every member of a type."""

import json
from pathlib import Path

import click

from facadegen.cli.utils import load_cli_config, open_metadata
from facadegen.core.errors import GenerationError, MetadataError
from facadegen.core.progress import get_console, make_strategy_table, status
from facadegen.generation.pipeline import FacadeGenerator
from facadegen.generation.report import Diagnostic


@click.command()
@click.argument("metadata", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("type_name")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def plan_command(ctx: click.Context, metadata: Path, type_name: str, as_json: bool) -> None:
    """Show how each member of TYPE_NAME would be exposed.

    TYPE_NAME is the full metadata name, e.g. Sample.PublicClass.
    """
    config = load_cli_config(ctx)
    source = open_metadata(metadata)
    generator = FacadeGenerator(source, config.generation)

    diagnostics: list[Diagnostic] = []
    try:
        type_ref = source.get_type(type_name)
        plan = generator.plan(type_ref, diagnostics)
    except (MetadataError, GenerationError) as e:
        raise click.ClickException(str(e)) from e

    rows = plan.strategy_rows()
    if as_json:
        click.echo(
            json.dumps(
                {
                    "type": type_ref.full_name,
                    "facade": generator.emitter.facade_name(type_ref),
                    "members": [
                        {"kind": kind, "name": name, "accessor": accessor, "strategy": strategy}
                        for kind, name, accessor, strategy in rows
                    ],
                    "diagnostics": [d.to_dict() for d in diagnostics],
                },
                indent=2,
            )
        )
        return

    title = f"{type_ref.full_name} -> {generator.emitter.facade_name(type_ref)}"
    get_console().print(make_strategy_table(title, rows))
    for diagnostic in diagnostics:
        status(str(diagnostic), style="warning", indent=2)
