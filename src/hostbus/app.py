"""Orchestrator class: composes services, wires subsystems."""

from __future__ import annotations

from aiohttp import web

from hostbus.groups.paths import GroupPaths
from hostbus.groups.types import RegisteredGroup
from hostbus.infrastructure.config import INJECT_HOST, INJECT_PORT, INJECT_SECRET
from hostbus.infrastructure.database import AppDatabase, database
from hostbus.infrastructure.logger import logger
from hostbus.ipc.watcher import IpcWatcher, IpcWatcherConfig
from hostbus.messaging.channel_registry import ChannelRegistry
from hostbus.messaging.inject_server import InjectDeps, start_inject_server
from hostbus.messaging.types import Channel
from hostbus.scheduling.snapshot_writer import AvailableGroup, SnapshotWriter
from hostbus.scheduling.task_service import TaskManager


class Orchestrator:
    """Composes all services and manages the application lifecycle.

    Also the host side of the IPC bus: it implements IpcDeps, so handlers
    reach channels, the group registry and the task store through it.
    """

    def __init__(
        self,
        db: AppDatabase | None = None,
        channel_registry: ChannelRegistry | None = None,
        watcher_config: IpcWatcherConfig | None = None,
    ) -> None:
        self._db = db or database
        self._channel_registry = channel_registry or ChannelRegistry()
        self._watcher_config = watcher_config or IpcWatcherConfig()
        self._snapshot_writer = SnapshotWriter(self._watcher_config.ipc_root)
        self._registered_groups: dict[str, RegisteredGroup] = {}
        self._ipc_watcher: IpcWatcher | None = None
        self._inject_runner: web.AppRunner | None = None
        self.task_manager: TaskManager | None = None  # type: ignore[assignment]

    def add_channel(self, channel: Channel) -> None:
        self._channel_registry.register(channel)

    async def start(self) -> None:
        """Initialize all services and start the IPC watcher."""
        logger.info("Starting host...")

        if not self._db.is_open:
            self._db.init()

        self._registered_groups = self._db.group_repo.get_all_registered_groups()
        logger.info("Loaded registered groups", count=len(self._registered_groups))

        self.task_manager = TaskManager(self._db.task_repo)

        for channel in self._channel_registry.get_all():
            try:
                await channel.connect()
            except Exception:
                logger.exception("Failed to connect channel", channel=channel.name)

        self._ipc_watcher = IpcWatcher(self, self._watcher_config)
        self._ipc_watcher.start()

        if INJECT_HOST and INJECT_PORT and INJECT_SECRET:
            self._inject_runner = await start_inject_server(
                INJECT_HOST,
                INJECT_PORT,
                InjectDeps(
                    secret=INJECT_SECRET,
                    registered_groups=self.registered_groups,
                    message_repo=self._db.message_repo,
                ),
            )
        else:
            logger.info("Inject endpoint disabled (INJECT_HOST/INJECT_PORT/INJECT_SECRET not all set)")

        logger.info("Host started successfully")

    async def shutdown(self) -> None:
        """Gracefully shut down all services."""
        logger.info("Shutting down host...")

        if self._inject_runner:
            await self._inject_runner.cleanup()
            self._inject_runner = None
        if self._ipc_watcher:
            self._ipc_watcher.stop()
            self._ipc_watcher = None
        await self._channel_registry.disconnect_all()
        self._db.close()

        logger.info("Host shut down complete")

    # --- IpcDeps ---

    async def send_message(self, jid: str, text: str) -> None:
        channel = self._channel_registry.find_connected_by_jid(jid)
        if not channel:
            raise LookupError(f"No connected channel for JID {jid}")
        await channel.send_message(jid, text)

    def registered_groups(self) -> dict[str, RegisteredGroup]:
        return dict(self._registered_groups)

    def register_group(self, jid: str, group: RegisteredGroup) -> None:
        self._db.group_repo.set_registered_group(jid, group)
        self._registered_groups[jid] = group
        GroupPaths.group_dir(group.folder).mkdir(parents=True, exist_ok=True)
        logger.info("Group registered", jid=jid, name=group.name, folder=group.folder)

    async def sync_group_metadata(self, force: bool) -> None:
        await self._channel_registry.sync_all_metadata(force)

    def get_available_groups(self) -> list[AvailableGroup]:
        """Get all known group chats as available groups."""
        chats = self._db.message_repo.get_all_chats()
        return [
            AvailableGroup(
                jid=chat.jid,
                name=chat.name,
                last_activity=chat.last_message_time,
                is_registered=chat.jid in self._registered_groups,
            )
            for chat in chats
            if chat.is_group
        ]

    def write_groups_snapshot(
        self,
        group_folder: str,
        is_main: bool,
        available_groups: list[AvailableGroup],
        registered_jids: set[str],
    ) -> None:
        self._snapshot_writer.write_groups(group_folder, is_main, available_groups, registered_jids)
