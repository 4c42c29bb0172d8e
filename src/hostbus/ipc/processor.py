"""Consumes the pending envelopes of a single group's IPC namespace."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from hostbus.groups.authorization import AuthContext, AuthorizationPolicy
from hostbus.groups.paths import GroupPaths, InvalidGroupFolderError, resolve_group_ipc_path
from hostbus.groups.types import RegisteredGroup
from hostbus.infrastructure.logger import logger
from hostbus.ipc.boundary import BoundaryViolation, require_regular_file, resolve_within
from hostbus.ipc.deps import IpcDeps
from hostbus.ipc.dispatcher import IpcCommandDispatcher
from hostbus.ipc.envelopes import decode_message_envelope
from hostbus.ipc.quarantine import QuarantineSink


class NamespaceProcessor:
    """Processes ``<ipc-root>/<group>/messages`` and ``<ipc-root>/<group>/tasks``.

    Each file is either deleted (handled, including refused requests) or
    quarantined (something went wrong while handling it). Files that fail the
    boundary checks are left alone: they are not trustworthy enough to move.
    """

    def __init__(
        self,
        ipc_root: Path,
        main_group_folder: str,
        dispatcher: IpcCommandDispatcher,
        deps: IpcDeps,
    ) -> None:
        self._ipc_root = ipc_root
        self._main_group_folder = main_group_folder
        self._dispatcher = dispatcher
        self._deps = deps

    async def process(
        self,
        source_group: str,
        registered_groups: dict[str, RegisteredGroup],
        quarantine: QuarantineSink,
    ) -> None:
        is_main = source_group == self._main_group_folder
        try:
            group_root = resolve_group_ipc_path(source_group, self._ipc_root)
        except (InvalidGroupFolderError, BoundaryViolation) as err:
            logger.warning("Skipping invalid IPC group folder", source_group=source_group, error=str(err))
            return

        ipc_root = group_root.parent
        messages_dir = self._subdir(GroupPaths.ipc_messages_dir(source_group, ipc_root), source_group)
        if messages_dir:
            await self._process_messages(messages_dir, source_group, is_main, registered_groups, quarantine)

        tasks_dir = self._subdir(GroupPaths.ipc_tasks_dir(source_group, ipc_root), source_group)
        if tasks_dir:
            await self._process_tasks(tasks_dir, source_group, is_main, quarantine)

    # --- Messages ---

    async def _process_messages(
        self,
        messages_dir: Path,
        source_group: str,
        is_main: bool,
        registered_groups: dict[str, RegisteredGroup],
        quarantine: QuarantineSink,
    ) -> None:
        for file_path in self._pending_files(messages_dir, source_group):
            canonical = self._accept(file_path, messages_dir, source_group)
            if canonical is None:
                continue
            try:
                data = json.loads(canonical.read_text(encoding="utf-8"))
                await self._send(data, source_group, is_main, registered_groups)
                canonical.unlink()
            except Exception:
                logger.exception("Error processing IPC message", file=file_path.name, source_group=source_group)
                quarantine.move(file_path, source_group, messages_dir)

    async def _send(
        self,
        data: Any,
        source_group: str,
        is_main: bool,
        registered_groups: dict[str, RegisteredGroup],
    ) -> None:
        envelope = decode_message_envelope(data)
        if envelope is None:
            logger.debug("Ignoring IPC file without a message request", source_group=source_group)
            return

        target_group = registered_groups.get(envelope.chat_jid)
        auth = AuthorizationPolicy(AuthContext(source_group=source_group, is_main=is_main))
        if not auth.can_send_message(target_group.folder if target_group else None):
            logger.warning("Unauthorized IPC message attempt blocked", chat_jid=envelope.chat_jid, source_group=source_group)
            return

        await self._deps.send_message(envelope.chat_jid, envelope.text)
        logger.info("IPC message sent", chat_jid=envelope.chat_jid, source_group=source_group)

    # --- Tasks ---

    async def _process_tasks(
        self,
        tasks_dir: Path,
        source_group: str,
        is_main: bool,
        quarantine: QuarantineSink,
    ) -> None:
        for file_path in self._pending_files(tasks_dir, source_group):
            canonical = self._accept(file_path, tasks_dir, source_group)
            if canonical is None:
                continue
            try:
                data = json.loads(canonical.read_text(encoding="utf-8"))
                await self._dispatcher.dispatch(data, source_group, is_main, self._deps)
                canonical.unlink()
            except Exception:
                logger.exception("Error processing IPC task", file=file_path.name, source_group=source_group)
                quarantine.move(file_path, source_group, tasks_dir)

    # --- Filesystem checks ---

    def _subdir(self, expected: Path, source_group: str) -> Path | None:
        """Canonical ``messages``/``tasks`` dir, only if it is exactly where it should be."""
        name = expected.name
        if not expected.exists() and not expected.is_symlink():
            return None
        try:
            canonical = resolve_within(expected.parent, expected)
        except BoundaryViolation as err:
            logger.warning(f"Rejected IPC {name} directory outside group IPC root", source_group=source_group, error=str(err))
            return None
        if canonical != expected:
            logger.warning(f"Rejected aliased IPC {name} directory", source_group=source_group, target=str(canonical))
            return None
        if not canonical.is_dir():
            logger.warning(f"IPC {name} path is not a directory", source_group=source_group)
            return None
        return canonical

    def _pending_files(self, directory: Path, source_group: str) -> list[Path]:
        try:
            return sorted(p for p in directory.iterdir() if p.name.endswith(".json"))
        except OSError as err:
            logger.error(f"Error reading IPC {directory.name} directory", source_group=source_group, error=str(err))
            return []

    def _accept(self, file_path: Path, directory: Path, source_group: str) -> Path | None:
        """Canonical path of a plain file inside ``directory``, or None to skip it."""
        try:
            require_regular_file(file_path)
            return resolve_within(directory, file_path)
        except BoundaryViolation as err:
            logger.warning(
                f"Rejected IPC {directory.name} file",
                file=file_path.name,
                source_group=source_group,
                error=str(err),
            )
            return None
