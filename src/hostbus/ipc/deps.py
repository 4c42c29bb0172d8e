"""Host capabilities the IPC watcher and its handlers call out to."""

from __future__ import annotations

from typing import Protocol

from hostbus.groups.types import RegisteredGroup
from hostbus.scheduling.snapshot_writer import AvailableGroup
from hostbus.scheduling.task_service import TaskManager


class IpcDeps(Protocol):
    """Implemented by the Orchestrator; tests pass a fake."""

    task_manager: TaskManager

    async def send_message(self, jid: str, text: str) -> None: ...

    def registered_groups(self) -> dict[str, RegisteredGroup]: ...

    def register_group(self, jid: str, group: RegisteredGroup) -> None: ...

    async def sync_group_metadata(self, force: bool) -> None: ...

    def get_available_groups(self) -> list[AvailableGroup]: ...

    def write_groups_snapshot(
        self,
        group_folder: str,
        is_main: bool,
        available_groups: list[AvailableGroup],
        registered_jids: set[str],
    ) -> None: ...
