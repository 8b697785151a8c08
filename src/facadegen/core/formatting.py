"""Summary formatting utilities for consistent terminal output.

Design principles:
- Every summary fits on one line (~80 chars max)
- Grammatically correct (1 facade vs 2 facades)
"""

from __future__ import annotations


def pluralize(count: int, singular: str, plural: str | None = None) -> str:
    """Return grammatically correct singular/plural form.

    Args:
        count: The number of items
        singular: Singular form (e.g., "facade")
        plural: Plural form (default: singular + "s")

    Returns:
        Formatted string like "1 facade" or "3 facades"
    """
    if plural is None:
        plural = singular + "s"
    word = singular if count == 1 else plural
    return f"{count} {word}"


def format_duration(seconds: float) -> str:
    """Format a duration in seconds to a human-readable string.

    Examples:
        0.345 -> "0.3s"
        90.0 -> "1m 30s"
        3661.0 -> "1h 1m"
    """
    if seconds < 0:
        raise ValueError("Duration must be non-negative")

    if seconds < 60:
        return f"{seconds:.1f}s"

    minutes = int(seconds // 60)
    remaining_secs = int(seconds % 60)

    if minutes < 60:
        return f"{minutes}m {remaining_secs}s"

    hours = minutes // 60
    remaining_mins = minutes % 60
    return f"{hours}h {remaining_mins}m"


def summarize_counts(generated: int, skipped: int, failed: int) -> str:
    """One-line run summary, omitting zero skip/failure counts.

    Examples:
        (3, 0, 0) -> "3 facades generated"
        (3, 1, 2) -> "3 facades generated, 1 type skipped, 2 types failed"
    """
    parts = [f"{pluralize(generated, 'facade')} generated"]
    if skipped:
        parts.append(f"{pluralize(skipped, 'type')} skipped")
    if failed:
        parts.append(f"{pluralize(failed, 'type')} failed")
    return ", ".join(parts)
