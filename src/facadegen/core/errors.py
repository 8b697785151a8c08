"""facadegen error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Metadata
- 4xxx: Generation
- 9xxx: Internal
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002
    CONFIG_FILE_NOT_FOUND = 2004

    # Metadata (3xxx)
    METADATA_UNREADABLE = 3001
    METADATA_INVALID = 3002
    METADATA_UNKNOWN_TYPE = 3003

    # Generation (4xxx)
    UNSUPPORTED_TYPE_SHAPE = 4001
    UNSUPPORTED_LITERAL = 4002
    UNSUPPORTED_NATIVE_CODEGEN = 4003

    # Internal (9xxx)
    INTERNAL_ERROR = 9001


@dataclass(frozen=True, slots=True)
class FacadeGenError(Exception):
    """Base error with structured context for diagnostics."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'UNSUPPORTED_LITERAL')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(FacadeGenError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )

    @classmethod
    def file_not_found(cls, path: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_FILE_NOT_FOUND,
            message=f"Config file not found: {path}",
            details={"path": path},
        )


class MetadataError(FacadeGenError):
    """Errors reading or resolving a metadata dump."""

    @classmethod
    def unreadable(cls, path: str, reason: str) -> "MetadataError":
        return cls(
            code=ErrorCode.METADATA_UNREADABLE,
            message=f"Failed to read metadata at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid(cls, location: str, reason: str) -> "MetadataError":
        return cls(
            code=ErrorCode.METADATA_INVALID,
            message=f"Invalid metadata at '{location}': {reason}",
            details={"location": location, "reason": reason},
        )

    @classmethod
    def unknown_type(cls, name: str) -> "MetadataError":
        return cls(
            code=ErrorCode.METADATA_UNKNOWN_TYPE,
            message=f"Type not found in metadata: {name}",
            details={"type": name},
        )


class GenerationError(FacadeGenError):
    """Base for errors raised while generating one facade."""


class UnsupportedTypeShape(GenerationError):
    """The target type cannot have a facade (non-visible or open generic)."""

    @classmethod
    def for_type(cls, type_name: str, reason: str) -> "UnsupportedTypeShape":
        return cls(
            code=ErrorCode.UNSUPPORTED_TYPE_SHAPE,
            message=f"Cannot generate source for '{type_name}': {reason}",
            details={"type": type_name, "reason": reason},
        )


class UnsupportedLiteral(GenerationError):
    """A default parameter value has a kind with no C# literal form."""

    @classmethod
    def for_value(cls, kind: str, value: Any) -> "UnsupportedLiteral":
        return cls(
            code=ErrorCode.UNSUPPORTED_LITERAL,
            message=f"Unknown value: {kind} ({value!r})",
            details={"kind": kind, "value": repr(value)},
        )


class UnsupportedNativeCodegen(GenerationError):
    """A trampoline could not be produced for a member."""

    @classmethod
    def for_member(cls, member_name: str, reason: str) -> "UnsupportedNativeCodegen":
        return cls(
            code=ErrorCode.UNSUPPORTED_NATIVE_CODEGEN,
            message=f"Cannot build trampoline for '{member_name}': {reason}",
            retryable=True,
            details={"member": member_name, "reason": reason},
        )


class InternalError(FacadeGenError):
    """Internal/unexpected errors."""

    @classmethod
    def unexpected(cls, reason: str, **details: Any) -> "InternalError":
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"Internal error: {reason}",
            details=details,
        )
