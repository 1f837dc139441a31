"""Sandbox path resolution — confines client paths to the root directory."""

from __future__ import annotations

import logging
import posixpath
import re
from pathlib import Path

from restfiles.exceptions import InvalidPathError

logger = logging.getLogger(__name__)

_DRIVE_PREFIX = re.compile(r"^[A-Za-z]:")


def normalize_relative(relative_path: str) -> str:
    """Collapse ``.``/``..`` segments of a client path.

    Backslashes count as separators. Returns ``""`` for the root itself.
    Raises InvalidPathError for absolute, drive-prefixed or NUL-containing
    input and for paths that climb above the root.
    """
    if "\x00" in relative_path:
        raise InvalidPathError("Path contains a null byte", relative_path)

    candidate = relative_path.replace("\\", "/")
    if candidate.startswith("/") or _DRIVE_PREFIX.match(candidate):
        raise InvalidPathError(f"Absolute paths are not allowed: {relative_path}", relative_path)

    if not candidate.strip("/"):
        return ""

    normalized = posixpath.normpath(candidate)
    if normalized == ".":
        return ""
    if normalized == ".." or normalized.startswith("../"):
        raise InvalidPathError(f"Path escapes the root directory: {relative_path}", relative_path)
    return normalized


def is_within(root: Path, target: Path) -> bool:
    """Segment-wise containment check (``/srv/files-evil`` is not in ``/srv/files``)."""
    return target == root or root in target.parents


def resolve_path(root: Path, relative_path: str) -> Path:
    """Turn a client-supplied relative path into an absolute path under ``root``."""
    try:
        normalized = normalize_relative(relative_path)
    except InvalidPathError:
        logger.warning("Rejected path outside sandbox: %r", relative_path)
        raise

    target = root / normalized if normalized else root
    if not is_within(root, target):
        logger.warning("Rejected path outside sandbox: %r", relative_path)
        raise InvalidPathError(f"Path escapes the root directory: {relative_path}", relative_path)
    return target


def check_segment(name: str) -> str:
    """Validate a single file name (no separators, no traversal)."""
    if (
        not name
        or name in (".", "..")
        or "/" in name
        or "\\" in name
        or "\x00" in name
        or _DRIVE_PREFIX.match(name)
    ):
        raise InvalidPathError(f"Invalid file name: {name!r}", name)
    return name
