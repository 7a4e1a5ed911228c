"""Canonical rendering of exported declarations.

A normalized signature is produced by ``ast.unparse`` over a reduced view of
the declaration, so comments, whitespace, docstrings and function bodies never
reach it. Visibility follows ``pydoc.visiblename``, the same rule ``help()``
applies: dunder names are public, other underscore names are private, and a
literal module ``__all__`` decides which top-level names are exported.
"""

from __future__ import annotations

import ast
import logging
import pydoc
from typing import List, Optional, Sequence, Tuple

from .logging import get_logger
from .models import (
    FUNCTIONS,
    TYPES,
    AliasDeclaration,
    Declaration,
    FunctionDeclaration,
    NormalizedDeclaration,
    TypeDeclaration,
)

_RENDER_ERRORS = (ValueError, TypeError, AttributeError, RecursionError)


def qualified_name(declaration: Declaration) -> str:
    """Return the snapshot key of a declaration (``Owner.member`` for members)."""
    if declaration.owner:
        return f"{declaration.owner}.{declaration.name}"
    return declaration.name


def is_public(declaration: Declaration) -> bool:
    """Return True when every segment of the declaration's path is visible."""
    segments = qualified_name(declaration).split(".")
    if not pydoc.visiblename(segments[0], all=_as_list(declaration.exports)):
        return False
    return all(pydoc.visiblename(segment) for segment in segments[1:])


def _as_list(exports: Optional[Tuple[str, ...]]) -> Optional[List[str]]:
    return list(exports) if exports is not None else None


class DeclarationNormalizer:
    """Maps a parsed declaration to its normalized public shape."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or get_logger("normalizer")

    def normalize(self, declaration: Declaration) -> Optional[NormalizedDeclaration]:
        """Return the normalized declaration, or None when it is not exported."""
        if not is_public(declaration):
            return None

        name = qualified_name(declaration)
        try:
            if isinstance(declaration, TypeDeclaration):
                return NormalizedDeclaration(name, TYPES, render_class(declaration.node))
            if isinstance(declaration, AliasDeclaration):
                return NormalizedDeclaration(name, TYPES, render_alias(declaration.node))
            if isinstance(declaration, FunctionDeclaration):
                return NormalizedDeclaration(name, FUNCTIONS, render_function(declaration.node))
        except _RENDER_ERRORS as exc:
            self.logger.warning(
                "Failed to render %s in %s: %s", name, declaration.module, exc
            )
            return None
        raise TypeError(f"Unsupported declaration kind: {type(declaration).__name__}")


def render_function(node: ast.FunctionDef | ast.AsyncFunctionDef) -> str:
    """Render decorators, async marker, type parameters, parameters and return type."""
    keyword = "async def" if isinstance(node, ast.AsyncFunctionDef) else "def"
    header = f"{keyword}{_render_type_params(node)}({ast.unparse(node.args)})"
    if node.returns is not None:
        header += f" -> {ast.unparse(node.returns)}"
    return "\n".join([*_render_decorators(node.decorator_list), header])


def render_class(node: ast.ClassDef) -> str:
    """Render the class header followed by its public data members in declared order."""
    arguments = [ast.unparse(base) for base in node.bases]
    arguments.extend(ast.unparse(keyword) for keyword in node.keywords)
    header = f"class{_render_type_params(node)}"
    if arguments:
        header += f"({', '.join(arguments)})"
    lines = [*_render_decorators(node.decorator_list), f"{header}:"]
    lines.extend(f"    {member}" for member in _public_members(node.body))
    return "\n".join(lines)


def render_alias(node: ast.stmt) -> str:
    return ast.unparse(node)


def _public_members(body: Sequence[ast.stmt]) -> List[str]:
    members: List[str] = []
    for stmt in body:
        if isinstance(stmt, ast.AnnAssign) and isinstance(stmt.target, ast.Name):
            if pydoc.visiblename(stmt.target.id):
                members.append(f"{stmt.target.id}: {ast.unparse(stmt.annotation)}")
        elif isinstance(stmt, ast.Assign):
            for target in stmt.targets:
                for name in _assigned_names(target):
                    if pydoc.visiblename(name):
                        members.append(name)
    return members


def _assigned_names(target: ast.expr) -> List[str]:
    if isinstance(target, ast.Name):
        return [target.id]
    if isinstance(target, (ast.Tuple, ast.List)):
        names: List[str] = []
        for element in target.elts:
            names.extend(_assigned_names(element))
        return names
    return []


def _render_decorators(decorators: Sequence[ast.expr]) -> List[str]:
    return [f"@{ast.unparse(decorator)}" for decorator in decorators]


def _render_type_params(node: ast.AST) -> str:
    params = getattr(node, "type_params", None)
    if not params:
        return ""
    return f"[{', '.join(ast.unparse(param) for param in params)}]"


__all__ = [
    "DeclarationNormalizer",
    "is_public",
    "qualified_name",
    "render_alias",
    "render_class",
    "render_function",
]
