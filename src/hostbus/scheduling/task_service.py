"""Task manager: centralized task lifecycle and next-run computation."""

from __future__ import annotations

import random
import re
import string
import time
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from croniter import croniter

from hostbus.groups.authorization import AuthContext, AuthorizationPolicy
from hostbus.infrastructure.config import TIMEZONE
from hostbus.scheduling.repository import TaskRepository
from hostbus.scheduling.types import ContextMode, ScheduledTask

_INTERVAL_PATTERN = re.compile(r"[+-]?\d+")

# 36**6 suffixes per millisecond. Not cryptographic: ids only need to be
# unique at the volume of tasks a single host creates.
_TASK_ID_SUFFIX_LEN = 6
_TASK_ID_ALPHABET = string.ascii_lowercase + string.digits


class InvalidScheduleError(ValueError):
    """A schedule value that cannot be turned into a next run time."""


class TaskNotFoundError(LookupError):
    pass


def generate_task_id() -> str:
    rand = "".join(random.choices(_TASK_ID_ALPHABET, k=_TASK_ID_SUFFIX_LEN))
    return f"task-{int(time.time() * 1000)}-{rand}"


def _utc_iso(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).isoformat()


class TaskManager:
    def __init__(self, task_repo: TaskRepository, tz: str = TIMEZONE) -> None:
        self._task_repo = task_repo
        self._tz = ZoneInfo(tz)

    # --- CRUD ---

    def create(
        self,
        group_folder: str,
        chat_jid: str,
        prompt: str,
        schedule_type: str,
        schedule_value: str,
        context_mode: ContextMode = "isolated",
    ) -> ScheduledTask:
        """Validate the schedule, persist a new active task and return it.

        Raises InvalidScheduleError before anything is written if the
        schedule cannot be computed.
        """
        next_run = self.compute_next_run(schedule_type, schedule_value)

        task = ScheduledTask(
            id=generate_task_id(),
            group_folder=group_folder,
            chat_jid=chat_jid,
            prompt=prompt,
            schedule_type=schedule_type,  # type: ignore[arg-type]
            schedule_value=schedule_value,
            context_mode=context_mode,
            next_run=next_run,
            status="active",
            created_at=_utc_iso(datetime.now(timezone.utc)),
        )
        self._task_repo.create_task(task)
        return task

    def get_by_id(self, id: str) -> ScheduledTask | None:
        return self._task_repo.get_task_by_id(id)

    def get_all(self) -> list[ScheduledTask]:
        return self._task_repo.get_all_tasks()

    def get_for_group(self, group_folder: str) -> list[ScheduledTask]:
        return self._task_repo.get_tasks_for_group(group_folder)

    # --- Lifecycle ---

    def pause(self, id: str) -> None:
        self._task_repo.update_task(id, status="paused")

    def resume(self, id: str) -> None:
        self._task_repo.update_task(id, status="active")

    def cancel(self, id: str) -> None:
        self._task_repo.delete_task(id)

    # --- Authorization ---

    def get_authorized(self, task_id: str, source_group: str, is_main: bool) -> ScheduledTask:
        task = self._task_repo.get_task_by_id(task_id)
        if not task:
            raise TaskNotFoundError(f"Task not found: {task_id}")
        auth = AuthorizationPolicy(AuthContext(source_group=source_group, is_main=is_main))
        if not auth.can_manage_task(task.group_folder):
            raise PermissionError(f"Unauthorized task management: {task_id}")
        return task

    # --- Scheduling ---

    def compute_next_run(self, schedule_type: str, schedule_value: str) -> str:
        """Return the first run time as a UTC ISO-8601 string.

        cron     -- next fire time of the expression in the configured zone
        interval -- now plus a positive number of milliseconds
        once     -- the given timestamp verbatim, even if it is in the past;
                    naive timestamps are read in the configured zone
        """
        if schedule_type == "cron":
            try:
                # six-field expressions carry seconds first
                cron = croniter(schedule_value, datetime.now(self._tz), second_at_beginning=True)
                return _utc_iso(cron.get_next(datetime))
            except (ValueError, KeyError):
                raise InvalidScheduleError(f"Invalid cron expression: {schedule_value}")
        elif schedule_type == "interval":
            value = schedule_value.strip()
            if not _INTERVAL_PATTERN.fullmatch(value) or int(value) <= 0:
                raise InvalidScheduleError(f"Invalid interval: {schedule_value}")
            return _utc_iso(datetime.now(timezone.utc) + timedelta(milliseconds=int(value)))
        elif schedule_type == "once":
            try:
                scheduled = datetime.fromisoformat(schedule_value.strip())
            except ValueError:
                raise InvalidScheduleError(f"Invalid timestamp: {schedule_value}")
            if scheduled.tzinfo is None:
                scheduled = scheduled.replace(tzinfo=self._tz)
            return _utc_iso(scheduled)
        raise InvalidScheduleError(f"Unknown schedule type: {schedule_type}")
