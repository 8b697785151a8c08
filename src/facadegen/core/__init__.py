"""Core module exports."""

from facadegen.core.errors import (
    ConfigError,
    ErrorCode,
    FacadeGenError,
    GenerationError,
    InternalError,
    MetadataError,
    UnsupportedLiteral,
    UnsupportedNativeCodegen,
    UnsupportedTypeShape,
)
from facadegen.core.logging import (
    clear_target,
    configure_logging,
    generation_target,
    get_logger,
    get_target,
    set_target,
)

__all__ = [
    # Errors
    "ConfigError",
    "ErrorCode",
    "FacadeGenError",
    "GenerationError",
    "InternalError",
    "MetadataError",
    "UnsupportedLiteral",
    "UnsupportedNativeCodegen",
    "UnsupportedTypeShape",
    # Logging
    "clear_target",
    "configure_logging",
    "generation_target",
    "get_logger",
    "get_target",
    "set_target",
]
