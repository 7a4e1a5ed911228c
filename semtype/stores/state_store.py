"""Persistent record of the last computed version and exported API."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, Optional

from ..logging import get_logger
from ..models import BASELINE_VERSION, ExportedApi, State
from ..versioning import parse_version


class StateStoreError(RuntimeError):
    """Raised when the state file cannot be written."""


class StateStore:
    """Reads and replaces the JSON state file for one source directory."""

    def __init__(self, path: Path, logger: logging.Logger | None = None) -> None:
        self.path = Path(path)
        self.logger = logger or get_logger("state")

    def load(self) -> State:
        """Return the persisted state, or the baseline when it is missing or corrupt."""
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            self.logger.debug("No state at %s; starting from %s", self.path, BASELINE_VERSION)
            return State()
        except (OSError, ValueError, RecursionError) as exc:
            self.logger.warning("Discarding unreadable state %s: %s", self.path, exc)
            return State()

        state = _state_from_dict(data, self.logger)
        if state is None:
            self.logger.warning("Discarding malformed state %s", self.path)
            return State()
        return state

    def persist(self, state: State) -> None:
        """Replace the state file atomically; the previous file survives any failure."""
        payload = json.dumps(_state_to_dict(state), indent=2, sort_keys=True) + "\n"
        directory = self.path.parent
        tmp_name: Optional[str] = None
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=directory
            )
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
            os.replace(tmp_name, self.path)
            tmp_name = None
        except OSError as exc:
            raise StateStoreError(f"Failed to write state file {self.path}: {exc}") from exc
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    self.logger.debug("Could not remove temporary file %s", tmp_name)
        self.logger.debug("Persisted version %s to %s", state.version, self.path)


def _state_to_dict(state: State) -> Dict[str, object]:
    return {
        "version": str(state.version),
        "exported": {
            "types": dict(state.exported.types),
            "functions": dict(state.exported.functions),
        },
    }


def _state_from_dict(payload: object, logger: logging.Logger) -> Optional[State]:
    if not isinstance(payload, dict):
        return None
    exported = payload.get("exported")
    if not isinstance(exported, dict):
        return None
    types = _string_map(exported.get("types", {}))
    functions = _string_map(exported.get("functions", {}))
    if types is None or functions is None:
        return None
    version = parse_version(payload.get("version"), logger=logger)
    return State(version=version, exported=ExportedApi(types=types, functions=functions))


def _string_map(value: object) -> Optional[Dict[str, str]]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        return None
    if not all(isinstance(k, str) and isinstance(v, str) for k, v in value.items()):
        return None
    return dict(value)


__all__ = ["StateStore", "StateStoreError"]
