"""facadegen CLI - facadegen command."""

import click

from facadegen.cli.generate import generate_command
from facadegen.cli.plan import plan_command
from facadegen.core.logging import configure_logging


@click.group()
@click.version_option(version="0.1.0", prog_name="facadegen")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """facadegen - generate C# access facades from type metadata."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    configure_logging(level="DEBUG" if verbose else "INFO")


cli.add_command(generate_command, name="generate")
cli.add_command(plan_command, name="plan")


if __name__ == "__main__":
    cli()
