"""Task IPC handlers: schedule, pause, resume, cancel."""

from __future__ import annotations

from abc import abstractmethod
from typing import Any

from hostbus.groups.authorization import AuthContext, AuthorizationPolicy
from hostbus.infrastructure.logger import logger
from hostbus.ipc.dispatcher import HandlerContext, IpcCommandHandler, IpcHandlerError
from hostbus.ipc.envelopes import ScheduleTaskCommand, TaskRefCommand
from hostbus.scheduling.task_service import InvalidScheduleError, TaskNotFoundError
from hostbus.scheduling.types import ScheduledTask


# --- ScheduleTaskHandler ---


class ScheduleTaskHandler(IpcCommandHandler):
    command = "schedule_task"
    required_fields = ("prompt", "schedule_type", "schedule_value", "targetJid")

    async def validate(self, data: dict[str, Any]) -> ScheduleTaskCommand:
        return ScheduleTaskCommand.model_validate(data)

    async def execute(self, payload: ScheduleTaskCommand, context: HandlerContext) -> None:
        registered_groups = context.deps.registered_groups()
        target_group = registered_groups.get(payload.target_jid)
        if not target_group:
            raise IpcHandlerError("Cannot schedule task: target group not registered", {"targetJid": payload.target_jid})

        target_folder = target_group.folder
        auth = AuthorizationPolicy(AuthContext(source_group=context.source_group, is_main=context.is_main))
        if not auth.can_schedule_task(target_folder):
            raise IpcHandlerError("Unauthorized schedule_task attempt blocked", {"targetFolder": target_folder})

        try:
            task = context.deps.task_manager.create(
                group_folder=target_folder,
                chat_jid=payload.target_jid,
                prompt=payload.prompt,
                schedule_type=payload.schedule_type,
                schedule_value=payload.schedule_value,
                context_mode=payload.context_mode,
            )
        except InvalidScheduleError as err:
            raise IpcHandlerError(str(err), {"scheduleType": payload.schedule_type, "scheduleValue": payload.schedule_value})

        logger.info(
            "Task created via IPC",
            task_id=task.id,
            source_group=context.source_group,
            target_folder=target_folder,
            context_mode=task.context_mode,
            next_run=task.next_run,
        )


# --- Pause / resume / cancel ---


class _ManageTaskHandler(IpcCommandHandler):
    """Shared lookup + ownership check for commands that act on one task."""

    required_fields = ("taskId",)
    action = ""
    done = ""

    async def validate(self, data: dict[str, Any]) -> str:
        return TaskRefCommand.model_validate(data).task_id

    async def execute(self, task_id: str, context: HandlerContext) -> None:
        try:
            task = context.deps.task_manager.get_authorized(task_id, context.source_group, context.is_main)
        except (TaskNotFoundError, PermissionError) as err:
            raise IpcHandlerError(f"Unauthorized task {self.action} attempt", {"taskId": task_id, "reason": str(err)})
        self.apply(task, context)
        logger.info(f"Task {self.done} via IPC", task_id=task_id, source_group=context.source_group)

    @abstractmethod
    def apply(self, task: ScheduledTask, context: HandlerContext) -> None: ...


class PauseTaskHandler(_ManageTaskHandler):
    command = "pause_task"
    action = "pause"
    done = "paused"

    def apply(self, task: ScheduledTask, context: HandlerContext) -> None:
        context.deps.task_manager.pause(task.id)


class ResumeTaskHandler(_ManageTaskHandler):
    command = "resume_task"
    action = "resume"
    done = "resumed"

    def apply(self, task: ScheduledTask, context: HandlerContext) -> None:
        context.deps.task_manager.resume(task.id)


class CancelTaskHandler(_ManageTaskHandler):
    command = "cancel_task"
    action = "cancel"
    done = "cancelled"

    def apply(self, task: ScheduledTask, context: HandlerContext) -> None:
        context.deps.task_manager.cancel(task.id)
