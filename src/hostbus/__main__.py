"""Entry point: python -m hostbus"""

from __future__ import annotations

import argparse
import asyncio
import signal
from pathlib import Path

from hostbus.infrastructure.config import IPC_DIR, IPC_POLL_INTERVAL, IPC_USE_WATCHFILES
from hostbus.infrastructure.logger import install_exception_hooks, logger
from hostbus.ipc.watcher import IpcWatcherConfig


def parse_args(argv: list[str] | None = None) -> IpcWatcherConfig:
    parser = argparse.ArgumentParser(prog="hostbus", description="Run the host IPC bus")
    parser.add_argument("--ipc-root", type=Path, default=IPC_DIR, help="Root of the per-group IPC namespaces")
    parser.add_argument(
        "--poll-interval", type=float, default=IPC_POLL_INTERVAL, help="Seconds between scans (default: %(default)s)"
    )
    parser.add_argument(
        "--no-watchfiles",
        dest="use_watchfiles",
        action="store_false",
        default=IPC_USE_WATCHFILES,
        help="Rely on polling only",
    )
    args = parser.parse_args(argv)
    if args.poll_interval <= 0:
        parser.error("--poll-interval must be positive")
    return IpcWatcherConfig(
        ipc_root=args.ipc_root.resolve(),
        poll_interval=args.poll_interval,
        use_watchfiles=args.use_watchfiles,
    )


async def main(config: IpcWatcherConfig) -> None:
    from hostbus.app import Orchestrator

    orchestrator = Orchestrator(watcher_config=config)
    shutdown_event = asyncio.Event()

    def signal_handler() -> None:
        logger.info("Received shutdown signal")
        shutdown_event.set()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, signal_handler)

    try:
        await orchestrator.start()
        await shutdown_event.wait()
    finally:
        await orchestrator.shutdown()


def run() -> None:
    install_exception_hooks()
    config = parse_args()
    try:
        asyncio.run(main(config))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
