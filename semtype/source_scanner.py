"""Source discovery and parsing for the analysed package directory."""

from __future__ import annotations

import ast
import logging
import os
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Tuple

from .config import SemtypeConfig
from .logging import get_logger
from .models import (
    AliasDeclaration,
    Declaration,
    FunctionDeclaration,
    ParsedModule,
    ParsedPackage,
    TypeDeclaration,
)

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".venv",
    "venv",
    "node_modules",
    "__pycache__",
    ".pytest_cache",
    ".mypy_cache",
    ".tox",
    ".idea",
    "build",
    "dist",
}

_SOURCE_SUFFIX = ".py"
_PACKAGE_INIT = "__init__"


class SourceParseError(RuntimeError):
    """Raised when a source file cannot be read or parsed."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Failed to parse {path}: {reason}")
        self.path = path
        self.reason = reason


@dataclass
class IgnoreRule:
    """Represents an ignore rule parsed from .gitignore or .semtype.yml."""

    pattern: str
    directory_only: bool
    anchored: bool
    negate: bool
    has_slash: bool

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if not self.pattern:
            return False
        if self.directory_only and not is_dir:
            return False

        if self.anchored or self.has_slash:
            if fnmatchcase(rel_path, self.pattern):
                return True
            if self.directory_only and rel_path.startswith(f"{self.pattern}/"):
                return True
            return False

        return any(fnmatchcase(part, self.pattern) for part in rel_path.split("/"))


def _build_ignore_rule(pattern: str, negate: bool = False) -> IgnoreRule | None:
    pattern = pattern.strip()
    if not pattern:
        return None

    directory_only = pattern.endswith("/")
    if directory_only:
        pattern = pattern[:-1]

    anchored = pattern.startswith("/")
    if anchored:
        pattern = pattern[1:]

    return IgnoreRule(
        pattern=pattern,
        directory_only=directory_only,
        anchored=anchored,
        negate=negate,
        has_slash="/" in pattern,
    )


def _parse_gitignore(path: Path) -> List[IgnoreRule]:
    if not path.exists():
        return []

    rules: List[IgnoreRule] = []
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        negate = line.startswith("!")
        if negate:
            line = line[1:]
        rule = _build_ignore_rule(line, negate=negate)
        if rule is not None:
            rules.append(rule)
    return rules


def _load_ignore_rules(root: Path, exclude_paths: Sequence[str]) -> List[IgnoreRule]:
    rules = _parse_gitignore(root / ".gitignore")
    for pattern in exclude_paths:
        rule = _build_ignore_rule(pattern)
        if rule is not None:
            rules.append(rule)
    return rules


def _should_ignore(rel_path: str, is_dir: bool, rules: Sequence[IgnoreRule]) -> bool:
    ignored = False
    for rule in rules:
        if rule.matches(rel_path, is_dir):
            ignored = not rule.negate
    return ignored


def _is_private_module(path: Path) -> bool:
    return path.stem.startswith("_") and path.stem != _PACKAGE_INIT


class SourceScanner:
    """Collects and parses the Python modules that make up one package directory."""

    def __init__(
        self,
        *,
        recursive: bool = False,
        exclude_paths: Sequence[str] = (),
        logger: logging.Logger | None = None,
    ) -> None:
        self.recursive = recursive
        self.exclude_paths = list(exclude_paths)
        self.logger = logger or get_logger("scanner")

    @classmethod
    def from_config(
        cls, config: SemtypeConfig, logger: logging.Logger | None = None
    ) -> "SourceScanner":
        return cls(
            recursive=config.recursive,
            exclude_paths=config.exclude_paths,
            logger=logger,
        )

    def scan(self, root: str | Path) -> ParsedPackage:
        """Parse every public module under ``root``; any parse failure is fatal."""
        root_path = Path(root).expanduser().resolve()
        if not root_path.exists():
            raise FileNotFoundError(f"Source directory not found: {root}")
        if not root_path.is_dir():
            raise NotADirectoryError(f"Source path is not a directory: {root}")

        rules = _load_ignore_rules(root_path, self.exclude_paths)
        package = ParsedPackage(root=root_path)
        for path in sorted(self._iter_files(root_path, rules)):
            rel_path = path.relative_to(root_path).as_posix()
            tree = self._parse(path)
            exports = _module_exports(tree)
            if exports is not None:
                self.logger.debug("%s restricts exports to %d names via __all__", rel_path, len(exports))
            package.modules.append(ParsedModule(path=rel_path, tree=tree, exports=exports))

        self.logger.debug("Parsed %d modules under %s", len(package.modules), root_path)
        return package

    def _iter_files(self, root: Path, rules: Sequence[IgnoreRule]) -> Iterator[Path]:
        for dirpath, dirnames, filenames in os.walk(root):
            current_dir = Path(dirpath)
            rel_dir = current_dir.relative_to(root).as_posix() if current_dir != root else ""

            if not self.recursive:
                dirnames[:] = []
            else:
                kept = []
                for name in dirnames:
                    if name in _EXCLUDED_DIRS or name.startswith("_"):
                        continue
                    rel_path = f"{rel_dir}/{name}" if rel_dir else name
                    if _should_ignore(rel_path, True, rules):
                        continue
                    kept.append(name)
                dirnames[:] = kept

            for filename in filenames:
                path = current_dir / filename
                if path.suffix != _SOURCE_SUFFIX or _is_private_module(path):
                    continue
                rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
                if _should_ignore(rel_path, False, rules):
                    continue
                yield path

    @staticmethod
    def _parse(path: Path) -> ast.Module:
        try:
            source = path.read_bytes()
        except OSError as exc:
            raise SourceParseError(path, str(exc)) from exc
        try:
            return ast.parse(source, filename=str(path))
        except (SyntaxError, ValueError) as exc:
            raise SourceParseError(path, str(exc)) from exc


def _module_exports(tree: ast.Module) -> Optional[Tuple[str, ...]]:
    """Return the literal ``__all__`` of a module, or None when it is absent or dynamic.

    Plain assignments set the names; ``+=``, ``.extend()`` and ``.append()``
    with literal strings add to them. Any other mutation makes ``__all__``
    dynamic, and a dynamic ``__all__`` stays dynamic until reassigned.
    """
    exports: Optional[Tuple[str, ...]] = None
    for stmt in tree.body:
        if isinstance(stmt, ast.Assign) and any(_is_all_name(t) for t in stmt.targets):
            exports = _literal_names(stmt.value)
        elif isinstance(stmt, ast.AnnAssign) and _is_all_name(stmt.target):
            exports = _literal_names(stmt.value) if stmt.value is not None else None
        elif isinstance(stmt, ast.AugAssign) and _is_all_name(stmt.target):
            added = _literal_names(stmt.value) if isinstance(stmt.op, ast.Add) else None
            exports = exports + added if exports is not None and added is not None else None
        elif (
            isinstance(stmt, ast.Expr)
            and isinstance(stmt.value, ast.Call)
            and isinstance(stmt.value.func, ast.Attribute)
            and _is_all_name(stmt.value.func.value)
        ):
            added = _mutation_names(stmt.value)
            exports = exports + added if exports is not None and added is not None else None
        elif isinstance(stmt, ast.Delete) and any(_is_all_name(t) for t in stmt.targets):
            exports = None
    return exports


def _is_all_name(node: Optional[ast.expr]) -> bool:
    return isinstance(node, ast.Name) and node.id == "__all__"


def _literal_names(value: ast.expr) -> Optional[Tuple[str, ...]]:
    try:
        names = ast.literal_eval(value)
    except (ValueError, TypeError, SyntaxError, MemoryError, RecursionError):
        return None
    if isinstance(names, (list, tuple)) and all(isinstance(n, str) for n in names):
        return tuple(names)
    return None


def _mutation_names(call: ast.Call) -> Optional[Tuple[str, ...]]:
    """Names added by ``__all__.extend(...)`` or ``__all__.append(...)``; None otherwise."""
    method = call.func.attr  # type: ignore[attr-defined]
    if len(call.args) != 1 or call.keywords:
        return None
    if method == "extend":
        return _literal_names(call.args[0])
    if method == "append":
        arg = call.args[0]
        if isinstance(arg, ast.Constant) and isinstance(arg.value, str):
            return (arg.value,)
    return None


def _is_type_alias_annotation(annotation: ast.expr) -> bool:
    if isinstance(annotation, ast.Name):
        return annotation.id == "TypeAlias"
    if isinstance(annotation, ast.Attribute):
        return annotation.attr == "TypeAlias"
    return False


def iter_declarations(module: ParsedModule) -> Iterator[Declaration]:
    """Yield the tracked declaration kinds of a module, including class members."""
    yield from _iter_body(module.tree.body, module, owner=None)


def _iter_body(
    body: Sequence[ast.stmt], module: ParsedModule, owner: Optional[str]
) -> Iterator[Declaration]:
    type_alias = getattr(ast, "TypeAlias", None)
    for stmt in body:
        if isinstance(stmt, ast.ClassDef):
            yield TypeDeclaration(
                name=stmt.name,
                node=stmt,
                module=module.path,
                exports=module.exports,
                owner=owner,
            )
            nested_owner = f"{owner}.{stmt.name}" if owner else stmt.name
            yield from _iter_body(stmt.body, module, owner=nested_owner)
        elif isinstance(stmt, (ast.FunctionDef, ast.AsyncFunctionDef)):
            yield FunctionDeclaration(
                name=stmt.name,
                node=stmt,
                module=module.path,
                exports=module.exports,
                owner=owner,
            )
        elif type_alias is not None and isinstance(stmt, type_alias):
            yield AliasDeclaration(
                name=stmt.name.id,
                node=stmt,
                module=module.path,
                exports=module.exports,
                owner=owner,
            )
        elif (
            owner is None
            and isinstance(stmt, ast.AnnAssign)
            and isinstance(stmt.target, ast.Name)
            and _is_type_alias_annotation(stmt.annotation)
        ):
            yield AliasDeclaration(
                name=stmt.target.id,
                node=stmt,
                module=module.path,
                exports=module.exports,
            )


__all__ = ["IgnoreRule", "SourceParseError", "SourceScanner", "iter_declarations"]
