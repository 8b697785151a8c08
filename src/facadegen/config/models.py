"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (FACADEGEN__SECTION__KEY)
3. Working-directory YAML (.facadegen.yaml)
4. Global YAML (~/.config/facadegen/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    FACADEGEN__<SECTION>__<KEY>=<VALUE>

Examples:
    FACADEGEN__LOGGING__LEVEL=DEBUG
    FACADEGEN__GENERATION__MAX_WORKERS=8
    FACADEGEN__OUTPUT__DIRECTORY=build/facades
"""

import re
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
LineEnding = Literal["crlf", "lf"]

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class LogOutputConfig(BaseModel):
    """Single logging output configuration.

    Env vars: Not directly configurable via env (use YAML for multi-output).
    """

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        FACADEGEN__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description=(
            "Root log level. DEBUG adds metadata loading, member classification "
            "and per-facade events."
        ),
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class GenerationConfig(BaseModel):
    """Facade generation configuration.

    Env vars:
        FACADEGEN__GENERATION__INSTANCE_MEMBER_NAME: Wrapped-instance property name
        FACADEGEN__GENERATION__FACADE_SUFFIX: Suffix appended to facade class names
        FACADEGEN__GENERATION__TYPE_FILTER: Regex matched against type full names
        FACADEGEN__GENERATION__LINE_ENDING: crlf or lf
        FACADEGEN__GENERATION__MAX_WORKERS: Parallel generation workers
    """

    instance_member_name: str = Field(
        default="InstanceForHelper",
        description="Name of the facade property holding the wrapped instance.",
    )
    facade_suffix: str = Field(
        default="Helper",
        description="Appended to the target type name to form the facade class name.",
    )
    excluded_types: list[str] = Field(
        default_factory=lambda: ["System.Delegate", "System.Attribute"],
        description="Types (and everything assignable to them) that never get a facade.",
    )
    type_filter: str | None = Field(
        default=None,
        description="Regular expression; only types whose full name matches are generated.",
    )
    line_ending: LineEnding = Field(
        default="crlf",
        description="Line ending of generated sources.",
    )
    max_workers: int = Field(
        default=4,
        description="Types generated in parallel. 1 generates sequentially.",
    )

    @field_validator("instance_member_name", "facade_suffix")
    @classmethod
    def validate_identifier(cls, v: str) -> str:
        if not _IDENTIFIER_RE.match(v):
            raise ValueError(f"Must be a C# identifier, got {v!r}")
        return v

    @field_validator("type_filter")
    @classmethod
    def validate_type_filter(cls, v: str | None) -> str | None:
        if v is None:
            return v
        try:
            re.compile(v)
        except re.error as e:
            raise ValueError(f"Invalid regular expression: {e}") from e
        return v

    @field_validator("max_workers")
    @classmethod
    def validate_max_workers(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"max_workers must be >= 1, got {v}")
        return v


class OutputConfig(BaseModel):
    """Output configuration.

    Env vars:
        FACADEGEN__OUTPUT__DIRECTORY: Folder receiving generated sources
    """

    directory: str = Field(
        default="Generated",
        description="Output folder. Relative paths resolve against the working directory.",
    )


class FacadeGenConfig(BaseModel):
    """Root configuration for facadegen.

    All settings can be configured via:
    1. Environment variables: FACADEGEN__SECTION__KEY
    2. YAML config files (working directory or global)
    3. Direct kwargs to load_config()
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    generation: GenerationConfig = Field(default_factory=GenerationConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
