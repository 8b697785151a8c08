"""Config module exports."""

from facadegen.config.loader import load_config
from facadegen.config.models import (
    FacadeGenConfig,
    GenerationConfig,
    LoggingConfig,
    LogOutputConfig,
    OutputConfig,
)

__all__ = [
    "load_config",
    "FacadeGenConfig",
    "GenerationConfig",
    "LoggingConfig",
    "LogOutputConfig",
    "OutputConfig",
]
