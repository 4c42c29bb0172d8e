"""Path canonicalization and containment checks for the IPC tree.

Every path the IPC watcher touches is resolved through here first. A path
is trusted only if its fully symlink-resolved form is the expected base
directory or sits beneath it. Anything that cannot be resolved (missing,
unreadable, symlink loop) is rejected rather than assumed safe.
"""

from __future__ import annotations

import os
import stat
from pathlib import Path


class BoundaryViolation(Exception):
    """A path escaped its expected base directory or could not be verified."""

    def __init__(self, message: str, path: Path | str | None = None) -> None:
        super().__init__(message)
        self.path = str(path) if path is not None else None


def canonicalize(path: Path | str) -> Path:
    """Absolute, symlink-free form of an existing path."""
    try:
        return Path(path).resolve(strict=True)
    except (OSError, RuntimeError) as err:
        raise BoundaryViolation(f"Cannot resolve path: {err}", path) from err


def is_within_boundary(base: Path | str, candidate: Path | str) -> bool:
    """True if canonical(candidate) is canonical(base) or a descendant of it."""
    try:
        return canonicalize(candidate).is_relative_to(canonicalize(base))
    except BoundaryViolation:
        return False


def resolve_within(base: Path | str, candidate: Path | str) -> Path:
    """Return the canonical candidate, or raise if it leaves the base."""
    canonical_base = canonicalize(base)
    canonical = canonicalize(candidate)
    if not canonical.is_relative_to(canonical_base):
        raise BoundaryViolation(f"Path escapes {canonical_base}", canonical)
    return canonical


def require_regular_file(path: Path | str) -> os.stat_result:
    """lstat the entry without following symlinks; reject anything but a plain file."""
    try:
        st = os.lstat(path)
    except OSError as err:
        raise BoundaryViolation(f"Cannot stat entry: {err}", path) from err
    if not stat.S_ISREG(st.st_mode):
        raise BoundaryViolation("Not a regular file", path)
    return st
