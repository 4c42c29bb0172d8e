"""Writes the available-groups snapshot for containers to read."""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from hostbus.groups.paths import GroupPaths


@dataclass
class AvailableGroup:
    jid: str
    name: str
    last_activity: str
    is_registered: bool


class SnapshotWriter:
    """Writes JSON snapshot files into a group's IPC namespace."""

    def __init__(self, ipc_root: Path | None = None) -> None:
        self._ipc_root = ipc_root

    def write_groups(
        self,
        group_folder: str,
        is_main: bool,
        groups: list[AvailableGroup],
        registered_jids: set[str],
    ) -> None:
        """Write available groups snapshot. Only main sees all groups."""
        ipc_dir = GroupPaths.ipc_dir(group_folder, self._ipc_root)
        ipc_dir.mkdir(parents=True, exist_ok=True)

        visible = [
            {
                "jid": g.jid,
                "name": g.name,
                "lastActivity": g.last_activity,
                "isRegistered": g.is_registered or g.jid in registered_jids,
            }
            for g in groups
        ] if is_main else []

        # Atomic write (tmp + rename) so the container never reads a partial file
        snapshot = ipc_dir / "available_groups.json"
        tmp_path = snapshot.with_suffix(".json.tmp")
        tmp_path.write_text(
            json.dumps({"groups": visible, "lastSync": datetime.now(timezone.utc).isoformat()}, indent=2)
        )
        tmp_path.rename(snapshot)
