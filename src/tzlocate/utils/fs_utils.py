"""Filesystem/path utility functions for the project.

This module focuses on project-root related path helpers.
"""

# all annotations are stored as strings and not evaluated at runtime, which can provide a minor performance improvement
from __future__ import annotations

import os
import re
import typing as t
from functools import lru_cache

if t.TYPE_CHECKING:
    from pathlib import Path

SLASH = "/"
SLASHB = "\\"


def urealpath(path: str) -> str:
    """Return the real path with symlinks resolved, slashes internally."""
    return volume_convert(os.path.realpath(path))


@lru_cache
def project_root(file: str | Path | None = None) -> str:
    """Return the absolute project root directory.

    If ``file`` is provided, its path is appended relative to the project root.

    Args:
        file: Optional path (relative to project root) to append.

    Returns:
        The project root path (optionally joined with ``file``).
    """
    # Go up from this file to src/, then one more level to the repository root
    parts = [os.path.dirname(__file__), "..", "..", ".."]
    if file:
        parts.append(str(file))
    return urealpath(os.path.join(*parts))


def volume_convert(fname: str) -> str:
    """Convert volume paths to os-compatible paths."""
    fname = fname.replace(SLASHB, SLASH)
    if vol_type() == "win":
        fname = re.sub(r"^/mnt/([a-zA-Z])/", lambda m: f"{m.group(1).upper()}:/", fname)
    else:
        fname = re.sub(r"^([a-zA-Z]):/", lambda m: f"/mnt/{m.group(1).lower()}/", fname)
    return fname


@lru_cache
def vol_type() -> t.Literal["win", "unx"]:
    """Return the volume type of the current OS."""
    return "win" if os.name == "nt" else "unx"
