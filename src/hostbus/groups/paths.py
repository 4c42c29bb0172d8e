"""Group folder validation and centralized path construction."""

from __future__ import annotations

import re
from pathlib import Path

from hostbus.infrastructure.config import GROUPS_DIR, IPC_DIR, IPC_ERRORS_DIR_NAME
from hostbus.ipc.boundary import BoundaryViolation, canonicalize, resolve_within

GROUP_FOLDER_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_-]{0,63}$")
RESERVED_FOLDERS = frozenset({"global", IPC_ERRORS_DIR_NAME})


class InvalidGroupFolderError(ValueError):
    pass


def is_valid_group_folder(folder: object) -> bool:
    """Folder names become directory names, so only a safe subset is allowed."""
    if not isinstance(folder, str) or folder != folder.strip():
        return False
    if not GROUP_FOLDER_PATTERN.match(folder):
        return False
    return folder.lower() not in RESERVED_FOLDERS


def assert_valid_group_folder(folder: str) -> None:
    if not is_valid_group_folder(folder):
        raise InvalidGroupFolderError(f'Invalid group folder "{folder}"')


def resolve_group_ipc_path(folder: str, ipc_root: Path | None = None) -> Path:
    """Canonical IPC namespace directory for a group.

    Raises InvalidGroupFolderError for unsafe names and BoundaryViolation if
    the directory is missing or resolves to anything other than
    `<ipc-root>/<folder>` itself (for example a symlink to another group).
    """
    assert_valid_group_folder(folder)
    root = canonicalize(ipc_root or IPC_DIR)
    canonical = resolve_within(root, root / folder)
    if canonical != root / folder:
        raise BoundaryViolation(f"Group IPC directory aliases {canonical}", root / folder)
    return canonical


class GroupPaths:
    """Centralized path construction for group-related directories."""

    @staticmethod
    def group_dir(folder: str) -> Path:
        """Root directory for a group: groups/{folder}"""
        return GROUPS_DIR / folder

    @staticmethod
    def ipc_dir(folder: str, ipc_root: Path | None = None) -> Path:
        """IPC namespace directory: data/ipc/{folder}"""
        return (ipc_root or IPC_DIR) / folder

    @staticmethod
    def ipc_messages_dir(folder: str, ipc_root: Path | None = None) -> Path:
        """IPC messages directory: data/ipc/{folder}/messages"""
        return (ipc_root or IPC_DIR) / folder / "messages"

    @staticmethod
    def ipc_tasks_dir(folder: str, ipc_root: Path | None = None) -> Path:
        """IPC tasks directory: data/ipc/{folder}/tasks"""
        return (ipc_root or IPC_DIR) / folder / "tasks"

    @staticmethod
    def ipc_errors_dir(ipc_root: Path | None = None) -> Path:
        """Quarantine directory: data/ipc/errors"""
        return (ipc_root or IPC_DIR) / IPC_ERRORS_DIR_NAME
