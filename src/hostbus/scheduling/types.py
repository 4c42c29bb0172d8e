"""Scheduling domain types."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel

ScheduleType = Literal["cron", "interval", "once"]
ContextMode = Literal["group", "isolated"]
TaskStatus = Literal["active", "paused"]


class ScheduledTask(BaseModel):
    id: str
    group_folder: str
    chat_jid: str
    prompt: str
    schedule_type: ScheduleType
    schedule_value: str
    context_mode: ContextMode = "isolated"
    next_run: str | None = None
    status: TaskStatus = "active"
    created_at: str = ""
