"""Snapshot comparison and change classification."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Mapping, Sequence, Tuple

from .models import FUNCTIONS, TYPES, Classification, ExportedApi


@dataclass(frozen=True)
class PartitionDiff:
    """Name-level changes within one partition (types or functions)."""

    removed: Sequence[str] = ()
    changed: Sequence[str] = ()
    added: Sequence[str] = ()

    @property
    def is_breaking(self) -> bool:
        return bool(self.removed or self.changed)


@dataclass(frozen=True)
class ApiDiff:
    """Summary of how the exported API moved between two snapshots."""

    types: PartitionDiff = field(default_factory=PartitionDiff)
    functions: PartitionDiff = field(default_factory=PartitionDiff)

    @property
    def classification(self) -> Classification:
        partitions = (self.types, self.functions)
        if any(partition.is_breaking for partition in partitions):
            return Classification.BREAKING
        if any(partition.added for partition in partitions):
            return Classification.ADDITIVE
        return Classification.NO_CHANGE

    def entries(self) -> List[Tuple[str, str, str]]:
        """Return ``(change, partition, name)`` rows in a stable order for reporting."""
        rows: List[Tuple[str, str, str]] = []
        for label, partition in ((TYPES, self.types), (FUNCTIONS, self.functions)):
            rows.extend(("removed", label, name) for name in partition.removed)
            rows.extend(("changed", label, name) for name in partition.changed)
            rows.extend(("added", label, name) for name in partition.added)
        return rows


def compare_partition(
    previous: Mapping[str, str], current: Mapping[str, str]
) -> PartitionDiff:
    removed = sorted(set(previous) - set(current))
    added = sorted(set(current) - set(previous))
    changed = sorted(
        name for name in set(previous) & set(current) if previous[name] != current[name]
    )
    return PartitionDiff(removed=tuple(removed), changed=tuple(changed), added=tuple(added))


class DiffClassifier:
    """Compares exported-API snapshots; breaking beats additive beats no-change."""

    def compare(self, previous: ExportedApi, current: ExportedApi) -> ApiDiff:
        return ApiDiff(
            types=compare_partition(previous.types, current.types),
            functions=compare_partition(previous.functions, current.functions),
        )

    def classify(self, previous: ExportedApi, current: ExportedApi) -> Classification:
        return self.compare(previous, current).classification


__all__ = ["ApiDiff", "DiffClassifier", "PartitionDiff", "compare_partition"]
