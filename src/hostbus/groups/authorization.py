"""Fine-grained authorization policy."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class AuthContext:
    source_group: str
    is_main: bool


class AuthorizationPolicy:
    """Authorization checks for requests from one tenant.

    ``source_group`` must come from the IPC directory the request was found
    in, never from the request body. The main tenant may act on any group;
    every other tenant only on its own folder.
    """

    def __init__(self, ctx: AuthContext) -> None:
        self._ctx = ctx

    @property
    def source_group(self) -> str:
        return self._ctx.source_group

    @property
    def is_main(self) -> bool:
        return self._ctx.is_main

    def _owns(self, folder: str | None) -> bool:
        return self._ctx.is_main or (folder is not None and folder == self._ctx.source_group)

    def can_send_message(self, target_group_folder: str | None) -> bool:
        """``None`` means the chat is not registered; only main may message it."""
        return self._owns(target_group_folder)

    def can_schedule_task(self, target_group_folder: str) -> bool:
        return self._owns(target_group_folder)

    def can_manage_task(self, task_group_folder: str) -> bool:
        return self._owns(task_group_folder)

    def can_register_group(self) -> bool:
        return self._ctx.is_main

    def can_refresh_groups(self) -> bool:
        return self._ctx.is_main
