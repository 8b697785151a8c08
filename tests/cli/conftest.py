"""Shared fixtures for CLI command tests."""

from collections.abc import Generator
from pathlib import Path
from unittest.mock import patch

import pytest


@pytest.fixture
def work_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[Path, None, None]:
    """Run commands from an empty directory with no global config."""
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.chdir(work)
    for name in ("FACADEGEN__GENERATION__MAX_WORKERS", "FACADEGEN__OUTPUT__DIRECTORY"):
        monkeypatch.delenv(name, raising=False)
    with patch("facadegen.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "global.yaml"):
        yield work
