import json
from pathlib import Path
from typing import Any, Callable

import pytest

from hostbus.groups.types import RegisteredGroup
from hostbus.ipc.watcher import IpcWatcher, IpcWatcherConfig
from hostbus.scheduling.snapshot_writer import AvailableGroup, SnapshotWriter
from hostbus.scheduling.task_service import TaskManager


def _group(name: str, folder: str) -> RegisteredGroup:
    return RegisteredGroup(name=name, folder=folder, trigger="@Andy", added_at="2024-01-01T00:00:00+00:00")


class FakeDeps:
    """In-memory IpcDeps with a real TaskManager."""

    def __init__(self, task_manager: TaskManager, ipc_root: Path) -> None:
        self.task_manager = task_manager
        self.groups: dict[str, RegisteredGroup] = {
            "main@g.us": _group("Main", "main"),
            "team@g.us": _group("Team", "team"),
            "other@g.us": _group("Other", "other"),
        }
        self.sent: list[tuple[str, str]] = []
        self.send_error: Exception | None = None
        self.synced: list[bool] = []
        self.available: list[AvailableGroup] = []
        self.snapshots: list[tuple[str, bool, list[AvailableGroup], set[str]]] = []
        self._snapshot_writer = SnapshotWriter(ipc_root)

    async def send_message(self, jid: str, text: str) -> None:
        if self.send_error:
            raise self.send_error
        self.sent.append((jid, text))

    def registered_groups(self) -> dict[str, RegisteredGroup]:
        return dict(self.groups)

    def register_group(self, jid: str, group: RegisteredGroup) -> None:
        self.groups[jid] = group

    async def sync_group_metadata(self, force: bool) -> None:
        self.synced.append(force)

    def get_available_groups(self) -> list[AvailableGroup]:
        return list(self.available)

    def write_groups_snapshot(
        self,
        group_folder: str,
        is_main: bool,
        available_groups: list[AvailableGroup],
        registered_jids: set[str],
    ) -> None:
        self.snapshots.append((group_folder, is_main, available_groups, registered_jids))
        self._snapshot_writer.write_groups(group_folder, is_main, available_groups, registered_jids)


@pytest.fixture
def ipc_root(tmp_path: Path) -> Path:
    root = tmp_path / "ipc"
    root.mkdir()
    return root


@pytest.fixture
def deps(task_manager: TaskManager, ipc_root: Path) -> FakeDeps:
    return FakeDeps(task_manager, ipc_root)


@pytest.fixture
def watcher(deps: FakeDeps, ipc_root: Path) -> IpcWatcher:
    return IpcWatcher(deps, IpcWatcherConfig(ipc_root=ipc_root, poll_interval=60, use_watchfiles=False))


@pytest.fixture
def drop(ipc_root: Path) -> Callable[..., Path]:
    """Write an envelope into ``<ipc_root>/<group>/<kind>/<name>``."""

    def _drop(group: str, kind: str, name: str, payload: Any) -> Path:
        directory = ipc_root / group / kind
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / name
        path.write_text(payload if isinstance(payload, str) else json.dumps(payload))
        return path

    return _drop
