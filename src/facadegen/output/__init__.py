"""Output module exports."""

from facadegen.output.writer import OutputWriter

__all__ = ["OutputWriter"]
