"""Helper utilities for constructing temporary packages in tests."""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Mapping

from semtype.orchestrator import Orchestrator, RunOutcome


class SourceBuilder:
    """Writes sources into a throwaway package directory and runs semtype on it."""

    def __init__(self, tmp_path: Path) -> None:
        self.root = tmp_path / "pkg"
        self.root.mkdir()
        self._orchestrator = Orchestrator()

    def write(self, files: Mapping[str, str]) -> None:
        """Write `path -> contents` entries into the package."""
        for relative, content in files.items():
            path = self.root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            normalised = textwrap.dedent(content).lstrip("\n")
            path.write_text(normalised, encoding="utf-8")

    def replace(self, files: Mapping[str, str]) -> None:
        """Make `files` the complete set of Python sources in the package root."""
        for existing in self.root.glob("*.py"):
            if existing.name not in files:
                existing.unlink()
        self.write(files)

    def run(self, **kwargs: object) -> RunOutcome:
        """Run the versioning pipeline against the package."""
        return self._orchestrator.run(self.root, **kwargs)  # type: ignore[arg-type]

    @property
    def state_path(self) -> Path:
        return self.root.resolve() / "semtype.json"


__all__ = ["SourceBuilder"]
