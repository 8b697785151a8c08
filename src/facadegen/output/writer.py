"""Write generated units to disk."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from facadegen.core.logging import get_logger
from facadegen.generation.report import FacadeUnit

log = get_logger("output.writer")


class OutputWriter:
    """Write each unit to ``<directory>/<unit.name>``, creating the directory on demand.

    Text is written byte-for-byte: line endings were already normalized by
    the emitter and must not be translated again.
    """

    def __init__(self, directory: Path) -> None:
        self.directory = directory

    def path_for(self, unit: FacadeUnit) -> Path:
        return self.directory / unit.name

    def write(self, units: Iterable[FacadeUnit]) -> list[Path]:
        written: list[Path] = []
        for unit in units:
            if not written:
                self.directory.mkdir(parents=True, exist_ok=True)
            path = self.path_for(unit)
            with path.open("w", encoding="utf-8", newline="") as f:
                f.write(unit.text)
            written.append(path)
        log.info("units_written", directory=str(self.directory), count=len(written))
        return written
