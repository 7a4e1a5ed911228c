"""Pipeline orchestration: load state, snapshot, classify, bump, persist."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from .config import SemtypeConfig, load_config
from .diff import ApiDiff, DiffClassifier
from .logging import get_logger
from .models import State, Version
from .snapshot import SnapshotBuilder
from .source_scanner import SourceScanner
from .stores import StateStore
from .versioning import next_version


@dataclass
class RunOutcome:
    """Result of a single versioning run."""

    previous: Version
    version: Version
    diff: ApiDiff
    state_path: Path
    persisted: bool


class Orchestrator:
    """Coordinates one full, sequential versioning pass over a source directory."""

    def __init__(
        self,
        scanner: SourceScanner | None = None,
        builder: SnapshotBuilder | None = None,
        classifier: DiffClassifier | None = None,
        store_factory: Callable[[Path], StateStore] | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.logger = logger or get_logger("orchestrator")
        self._scanner = scanner
        self.builder = builder or SnapshotBuilder(logger=self.logger)
        self.classifier = classifier or DiffClassifier()
        self._store_factory = store_factory or (
            lambda path: StateStore(path, logger=self.logger)
        )

    def run(
        self,
        directory: str | Path,
        *,
        state_path: str | Path | None = None,
        dry_run: bool = False,
    ) -> RunOutcome:
        """Compute the next version for ``directory`` and persist it unless dry-run."""
        source_dir = Path(directory).expanduser().resolve()
        self.logger.debug("Starting run for %s", source_dir)
        config = self._load_config(source_dir)
        resolved_state = config.resolve_state_path(state_path)

        store = self._store_factory(resolved_state)
        previous_state = store.load()

        scanner = self._scanner or SourceScanner.from_config(config, logger=self.logger)
        package = scanner.scan(source_dir)
        current = self.builder.build(package)

        diff = self.classifier.compare(previous_state.exported, current)
        version = next_version(previous_state.version, diff.classification)
        self._report(diff, previous_state.version, version)

        persisted = False
        if not dry_run:
            store.persist(State(version=version, exported=current))
            persisted = True

        return RunOutcome(
            previous=previous_state.version,
            version=version,
            diff=diff,
            state_path=resolved_state,
            persisted=persisted,
        )

    def _load_config(self, source_dir: Path) -> SemtypeConfig:
        config = load_config(source_dir)
        if config.state is not None:
            self.logger.debug("Using state location from config: %s", config.state)
        return config

    def _report(self, diff: ApiDiff, previous: Version, version: Version) -> None:
        for change, partition, name in diff.entries():
            self.logger.info("%s %s: %s", change, partition, name)
        self.logger.info(
            "%s change: %s -> %s", diff.classification.value, previous, version
        )


def run(
    directory: str | Path,
    *,
    state_path: Optional[str | Path] = None,
    dry_run: bool = False,
) -> RunOutcome:
    """Convenience wrapper running the default pipeline."""
    return Orchestrator().run(directory, state_path=state_path, dry_run=dry_run)


__all__ = ["Orchestrator", "RunOutcome", "run"]
