"""Core data models shared across semtype components."""

from __future__ import annotations

import ast
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Optional, Tuple, Union

TYPES = "types"
FUNCTIONS = "functions"


@dataclass
class ParsedModule:
    """One parsed source file belonging to the analysed package."""

    path: str
    tree: ast.Module
    exports: Optional[Tuple[str, ...]] = None


@dataclass
class ParsedPackage:
    """All parsed modules of a source directory, in processing order."""

    root: Path
    modules: list[ParsedModule] = field(default_factory=list)


@dataclass(frozen=True)
class TypeDeclaration:
    """A class statement; the structured type of the host language."""

    name: str
    node: ast.ClassDef
    module: str
    exports: Optional[Tuple[str, ...]] = None
    owner: Optional[str] = None


@dataclass(frozen=True)
class AliasDeclaration:
    """A type alias (``type X = ...`` or ``X: TypeAlias = ...``)."""

    name: str
    node: ast.stmt
    module: str
    exports: Optional[Tuple[str, ...]] = None
    owner: Optional[str] = None


@dataclass(frozen=True)
class FunctionDeclaration:
    """A function, or a method when ``owner`` names the enclosing class."""

    name: str
    node: Union[ast.FunctionDef, ast.AsyncFunctionDef]
    module: str
    exports: Optional[Tuple[str, ...]] = None
    owner: Optional[str] = None


Declaration = Union[TypeDeclaration, AliasDeclaration, FunctionDeclaration]


@dataclass(frozen=True)
class NormalizedDeclaration:
    """Canonical public shape of a single declaration."""

    name: str
    partition: str
    signature: str


@dataclass
class ExportedApi:
    """Exported-API snapshot partitioned into types and callables."""

    types: Dict[str, str] = field(default_factory=dict)
    functions: Dict[str, str] = field(default_factory=dict)

    def partition(self, name: str) -> Dict[str, str]:
        if name == TYPES:
            return self.types
        if name == FUNCTIONS:
            return self.functions
        raise KeyError(f"Unknown partition: {name}")

    def is_empty(self) -> bool:
        return not self.types and not self.functions


@dataclass(frozen=True, order=True)
class Version:
    """Semantic version triple ordered lexicographically."""

    major: int = 0
    minor: int = 0
    patch: int = 0

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


BASELINE_VERSION = Version(0, 0, 0)


class Classification(str, Enum):
    """Outcome of comparing two snapshots, ordered by precedence."""

    NO_CHANGE = "no-change"
    ADDITIVE = "additive"
    BREAKING = "breaking"


@dataclass
class State:
    """Durable record of the last computed version and its snapshot."""

    version: Version = BASELINE_VERSION
    exported: ExportedApi = field(default_factory=ExportedApi)


__all__ = [
    "AliasDeclaration",
    "BASELINE_VERSION",
    "Classification",
    "Declaration",
    "ExportedApi",
    "FUNCTIONS",
    "FunctionDeclaration",
    "NormalizedDeclaration",
    "ParsedModule",
    "ParsedPackage",
    "State",
    "TYPES",
    "TypeDeclaration",
    "Version",
]
