"""Group IPC handlers: register_group, refresh_groups."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from hostbus.groups.authorization import AuthContext, AuthorizationPolicy
from hostbus.groups.paths import is_valid_group_folder
from hostbus.groups.types import RegisteredGroup
from hostbus.infrastructure.logger import logger
from hostbus.ipc.dispatcher import HandlerContext, IpcCommandHandler, IpcHandlerError
from hostbus.ipc.envelopes import RefreshGroupsCommand, RegisterGroupCommand


# --- RegisterGroupHandler ---


class RegisterGroupHandler(IpcCommandHandler):
    command = "register_group"
    required_fields = ("jid", "name", "folder", "trigger")

    async def validate(self, data: dict[str, Any]) -> RegisterGroupCommand:
        return RegisterGroupCommand.model_validate(data)

    async def execute(self, payload: RegisterGroupCommand, context: HandlerContext) -> None:
        auth = AuthorizationPolicy(AuthContext(source_group=context.source_group, is_main=context.is_main))
        if not auth.can_register_group():
            raise IpcHandlerError("Unauthorized register_group attempt blocked")

        if not is_valid_group_folder(payload.folder):
            raise IpcHandlerError("Invalid register_group request - unsafe folder name", {"folder": payload.folder})

        context.deps.register_group(
            payload.jid,
            RegisteredGroup(
                name=payload.name,
                folder=payload.folder,
                trigger=payload.trigger,
                added_at=datetime.now(timezone.utc).isoformat(),
                container_config=payload.container_config,
                requires_trigger=payload.requires_trigger,
            ),
        )

        logger.info("Group registered via IPC", source_group=context.source_group, jid=payload.jid, folder=payload.folder)


# --- RefreshGroupsHandler ---


class RefreshGroupsHandler(IpcCommandHandler):
    command = "refresh_groups"

    async def validate(self, data: dict[str, Any]) -> RefreshGroupsCommand:
        return RefreshGroupsCommand.model_validate(data)

    async def execute(self, _payload: RefreshGroupsCommand, context: HandlerContext) -> None:
        auth = AuthorizationPolicy(AuthContext(source_group=context.source_group, is_main=context.is_main))
        if not auth.can_refresh_groups():
            raise IpcHandlerError("Unauthorized refresh_groups attempt blocked")

        logger.info("Group metadata refresh requested via IPC", source_group=context.source_group)
        await context.deps.sync_group_metadata(True)
        registered_groups = context.deps.registered_groups()
        available_groups = context.deps.get_available_groups()
        context.deps.write_groups_snapshot(
            context.source_group, True, available_groups, set(registered_groups.keys())
        )
