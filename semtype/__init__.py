"""Infer semantic versions from changes to a package's exported API."""

from .models import Classification, ExportedApi, State, Version
from .orchestrator import Orchestrator, RunOutcome

__all__ = [
    "Classification",
    "ExportedApi",
    "Orchestrator",
    "RunOutcome",
    "State",
    "Version",
]
