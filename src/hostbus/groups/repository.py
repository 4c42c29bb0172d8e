"""Registered group persistence."""

from __future__ import annotations

import json
import sqlite3

from hostbus.groups.types import RegisteredGroup


def _safe_parse(raw: str) -> dict | None:
    try:
        parsed = json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        return None
    return parsed if isinstance(parsed, dict) else None


class GroupRepository:
    def __init__(self, db: sqlite3.Connection) -> None:
        self._db = db

    def get_registered_group(self, jid: str) -> RegisteredGroup | None:
        row = self._db.execute("SELECT * FROM registered_groups WHERE jid = ?", (jid,)).fetchone()
        if not row:
            return None
        return self._row_to_group(row)

    def set_registered_group(self, jid: str, group: RegisteredGroup) -> None:
        self._db.execute(
            """INSERT OR REPLACE INTO registered_groups
               (jid, name, folder, trigger_pattern, added_at, container_config, requires_trigger, channel)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                jid,
                group.name,
                group.folder,
                group.trigger,
                group.added_at,
                json.dumps(group.container_config) if group.container_config else None,
                1 if group.requires_trigger is None or group.requires_trigger else 0,
                group.channel,
            ),
        )
        self._db.commit()

    def get_all_registered_groups(self) -> dict[str, RegisteredGroup]:
        rows = self._db.execute("SELECT * FROM registered_groups").fetchall()
        return {row["jid"]: self._row_to_group(row) for row in rows}

    def _row_to_group(self, row: sqlite3.Row) -> RegisteredGroup:
        container_config = _safe_parse(row["container_config"]) if row["container_config"] else None

        requires_trigger: bool | None = None
        rt_val = row["requires_trigger"]
        if rt_val is not None:
            requires_trigger = rt_val == 1

        return RegisteredGroup(
            name=row["name"],
            folder=row["folder"],
            trigger=row["trigger_pattern"],
            added_at=row["added_at"],
            channel=row["channel"],
            container_config=container_config,
            requires_trigger=requires_trigger,
        )
