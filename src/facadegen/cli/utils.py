"""CLI utilities."""

from pathlib import Path
from typing import Any

import click

from facadegen.config.loader import load_config
from facadegen.config.models import FacadeGenConfig
from facadegen.core.errors import ConfigError, MetadataError
from facadegen.core.logging import configure_logging
from facadegen.metadata.dump import DumpMetadataSource


def load_cli_config(ctx: click.Context, **overrides: Any) -> FacadeGenConfig:
    """Load config for a command and reapply logging from it.

    ``overrides`` are per-section dicts; ``None`` values are dropped so
    unset options fall through to files and environment.

    Raises:
        click.ClickException: If the configuration is invalid
    """
    kwargs = {
        section: {k: v for k, v in values.items() if v is not None}
        for section, values in overrides.items()
    }
    kwargs = {section: values for section, values in kwargs.items() if values}
    try:
        config = load_config(Path.cwd(), **kwargs)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e

    if ctx.obj and ctx.obj.get("verbose"):
        config.logging.level = "DEBUG"
    configure_logging(config=config.logging)
    return config


def open_metadata(path: Path) -> DumpMetadataSource:
    """Load a metadata dump, turning metadata errors into CLI errors."""
    try:
        return DumpMetadataSource.from_path(path)
    except MetadataError as e:
        raise click.ClickException(str(e)) from e
