"""IPC watcher: scans per-group IPC namespaces for requests from containers."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from pathlib import Path

from watchfiles import awatch

from hostbus.infrastructure.config import (
    IPC_DIR,
    IPC_ERRORS_DIR_NAME,
    IPC_POLL_INTERVAL,
    IPC_USE_WATCHFILES,
    MAIN_GROUP_FOLDER,
)
from hostbus.infrastructure.logger import logger
from hostbus.infrastructure.poll_loop import PollLoop, start_poll_loop
from hostbus.ipc.boundary import BoundaryViolation, canonicalize
from hostbus.ipc.deps import IpcDeps
from hostbus.ipc.dispatcher import IpcCommandDispatcher
from hostbus.ipc.handlers.group_handlers import RefreshGroupsHandler, RegisterGroupHandler
from hostbus.ipc.handlers.task_handlers import (
    CancelTaskHandler,
    PauseTaskHandler,
    ResumeTaskHandler,
    ScheduleTaskHandler,
)
from hostbus.ipc.processor import NamespaceProcessor
from hostbus.ipc.quarantine import QuarantineSink


@dataclass
class IpcWatcherConfig:
    ipc_root: Path = field(default_factory=lambda: IPC_DIR)
    poll_interval: float = IPC_POLL_INTERVAL
    main_group_folder: str = MAIN_GROUP_FOLDER
    # watchfiles only wakes the poll loop early; scans still run one at a time
    use_watchfiles: bool = IPC_USE_WATCHFILES


def build_dispatcher() -> IpcCommandDispatcher:
    return IpcCommandDispatcher([
        ScheduleTaskHandler(),
        PauseTaskHandler(),
        ResumeTaskHandler(),
        CancelTaskHandler(),
        RefreshGroupsHandler(),
        RegisterGroupHandler(),
    ])


class IpcWatcher:
    """Watches the IPC directory tree for requests from containers.

    A group's identity is the name of the directory its files were found
    in. Nothing inside a file can change who the request is from.
    """

    def __init__(self, deps: IpcDeps, config: IpcWatcherConfig | None = None) -> None:
        self._deps = deps
        self._config = config or IpcWatcherConfig()
        self._dispatcher = build_dispatcher()
        self._processor = NamespaceProcessor(
            self._config.ipc_root,
            self._config.main_group_folder,
            self._dispatcher,
            deps,
        )
        self._running = False
        self._poll_loop: PollLoop | None = None
        self._watch_task: asyncio.Task[None] | None = None
        self._watch_stop: asyncio.Event | None = None

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        if self._running:
            logger.debug("IPC watcher already running, skipping duplicate start")
            return
        self._running = True
        self._config.ipc_root.mkdir(parents=True, exist_ok=True)

        self._poll_loop = start_poll_loop("IPC watcher", self._config.poll_interval, self.scan_once)
        if self._config.use_watchfiles:
            self._watch_stop = asyncio.Event()
            self._watch_task = asyncio.create_task(self._watch_loop(self._watch_stop))

        logger.info(
            "IPC watcher started (per-group namespaces)",
            ipc_root=str(self._config.ipc_root),
            commands=self._dispatcher.commands,
            watchfiles=self._config.use_watchfiles,
        )

    def stop(self) -> None:
        if not self._running:
            return
        self._running = False
        if self._watch_stop:
            self._watch_stop.set()
            self._watch_stop = None
        if self._watch_task:
            self._watch_task.cancel()
            self._watch_task = None
        if self._poll_loop:
            self._poll_loop.stop()
            self._poll_loop = None
        logger.info("IPC watcher stopped")

    async def scan_once(self) -> None:
        """Process every group namespace once, in directory order."""
        try:
            ipc_root = canonicalize(self._config.ipc_root)
            group_folders = sorted(
                entry.name
                for entry in ipc_root.iterdir()
                if entry.name != IPC_ERRORS_DIR_NAME and entry.is_dir()
            )
        except (OSError, BoundaryViolation) as err:
            logger.error("Error reading IPC base directory", error=str(err))
            return

        if not group_folders:
            return

        try:
            quarantine = QuarantineSink.open(ipc_root)
        except (OSError, BoundaryViolation) as err:
            logger.error("IPC errors directory unusable, skipping scan", error=str(err))
            return

        registered_groups = self._deps.registered_groups()

        for source_group in group_folders:
            await self._processor.process(source_group, registered_groups, quarantine)

    async def _watch_loop(self, stop_event: asyncio.Event) -> None:
        """Wake the poll loop as soon as something changes under the IPC root."""
        try:
            async for _changes in awatch(self._config.ipc_root, stop_event=stop_event, debounce=200):
                if self._poll_loop:
                    self._poll_loop.trigger()
        except asyncio.CancelledError:
            pass
        except Exception:
            logger.exception("watchfiles error, continuing with poll only")
