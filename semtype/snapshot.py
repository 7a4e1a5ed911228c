"""Exported-API snapshot construction."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from .logging import get_logger
from .models import ExportedApi, ParsedModule, ParsedPackage
from .normalizer import DeclarationNormalizer
from .source_scanner import SourceScanner, iter_declarations


class SnapshotBuilder:
    """Folds normalized declarations of a package into one ExportedApi."""

    def __init__(
        self,
        normalizer: DeclarationNormalizer | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.logger = logger or get_logger("snapshot")
        self.normalizer = normalizer or DeclarationNormalizer(logger=self.logger)

    def build(self, package: ParsedPackage) -> ExportedApi:
        return self.build_from_modules(package.modules)

    def build_from_modules(self, modules: Iterable[ParsedModule]) -> ExportedApi:
        exported = ExportedApi()
        for module in modules:
            for declaration in iter_declarations(module):
                normalized = self.normalizer.normalize(declaration)
                if normalized is None:
                    continue
                target = exported.partition(normalized.partition)
                if normalized.name in target:
                    # Later definitions shadow earlier ones, as at import time.
                    self.logger.debug(
                        "%s %s redefined in %s",
                        normalized.partition,
                        normalized.name,
                        module.path,
                    )
                target[normalized.name] = normalized.signature
        self.logger.debug(
            "Snapshot holds %d types and %d functions",
            len(exported.types),
            len(exported.functions),
        )
        return exported


def build_from_directory(
    root: str | Path,
    scanner: SourceScanner | None = None,
    builder: SnapshotBuilder | None = None,
) -> ExportedApi:
    """Scan ``root`` and return its exported API; parse failures propagate."""
    scanner = scanner or SourceScanner()
    builder = builder or SnapshotBuilder()
    return builder.build(scanner.scan(root))


__all__ = ["SnapshotBuilder", "build_from_directory"]
