"""Scheduled task persistence."""

from __future__ import annotations

import sqlite3

from hostbus.scheduling.types import ScheduledTask

_COLUMNS = (
    "id",
    "group_folder",
    "chat_jid",
    "prompt",
    "schedule_type",
    "schedule_value",
    "context_mode",
    "next_run",
    "status",
    "created_at",
)

# Identity and ownership never change after creation
_MUTABLE_COLUMNS = frozenset({"prompt", "schedule_type", "schedule_value", "context_mode", "next_run", "status"})


class TaskRepository:
    def __init__(self, db: sqlite3.Connection) -> None:
        self._db = db

    def create_task(self, task: ScheduledTask) -> None:
        placeholders = ", ".join(f":{c}" for c in _COLUMNS)
        with self._db:
            self._db.execute(
                f"INSERT INTO scheduled_tasks ({', '.join(_COLUMNS)}) VALUES ({placeholders})",
                task.model_dump(include=set(_COLUMNS)),
            )

    def get_task_by_id(self, id: str) -> ScheduledTask | None:
        row = self._db.execute("SELECT * FROM scheduled_tasks WHERE id = ?", (id,)).fetchone()
        return self._row_to_task(row) if row else None

    def get_tasks_for_group(self, group_folder: str) -> list[ScheduledTask]:
        return self._select("WHERE group_folder = ?", (group_folder,))

    def get_all_tasks(self) -> list[ScheduledTask]:
        return self._select()

    def update_task(self, id: str, **updates: str | None) -> bool:
        """Set the given columns (None values are skipped). Returns False if no such task."""
        unknown = set(updates) - _MUTABLE_COLUMNS
        if unknown:
            raise ValueError(f"Cannot update task columns: {sorted(unknown)}")
        changes = {k: v for k, v in updates.items() if v is not None}
        if not changes:
            return False
        assignments = ", ".join(f"{k} = :{k}" for k in changes)
        with self._db:
            cursor = self._db.execute(
                f"UPDATE scheduled_tasks SET {assignments} WHERE id = :task_id", {**changes, "task_id": id}
            )
        return cursor.rowcount > 0

    def delete_task(self, id: str) -> bool:
        with self._db:
            cursor = self._db.execute("DELETE FROM scheduled_tasks WHERE id = ?", (id,))
        return cursor.rowcount > 0

    def _select(self, where: str = "", params: tuple = ()) -> list[ScheduledTask]:
        rows = self._db.execute(
            f"SELECT * FROM scheduled_tasks {where} ORDER BY created_at DESC, id", params
        ).fetchall()
        return [self._row_to_task(row) for row in rows]

    def _row_to_task(self, row: sqlite3.Row) -> ScheduledTask:
        data = {c: row[c] for c in _COLUMNS}
        data["context_mode"] = data["context_mode"] or "isolated"
        return ScheduledTask.model_validate(data)
