"""Version parsing and precedence-based bumping."""

from __future__ import annotations

import logging
import re

from .logging import get_logger
from .models import BASELINE_VERSION, Classification, Version

_VERSION_PATTERN = re.compile(r"([0-9]+)\.([0-9]+)\.([0-9]+)")


def parse_version(text: object, logger: logging.Logger | None = None) -> Version:
    """Parse ``M.m.p``; malformed input degrades to the baseline version."""
    match = _VERSION_PATTERN.fullmatch(text) if isinstance(text, str) else None
    if match is None:
        (logger or get_logger("versioning")).warning(
            "Ignoring malformed version %r; starting over from %s", text, BASELINE_VERSION
        )
        return BASELINE_VERSION
    major, minor, patch = (int(part) for part in match.groups())
    return Version(major, minor, patch)


def next_version(previous: Version, classification: Classification) -> Version:
    """Return the version following ``previous``; always strictly greater."""
    if classification is Classification.BREAKING:
        return Version(previous.major + 1, 0, 0)
    if classification is Classification.ADDITIVE:
        return Version(previous.major, previous.minor + 1, 0)
    return Version(previous.major, previous.minor, previous.patch + 1)


__all__ = ["next_version", "parse_version"]
