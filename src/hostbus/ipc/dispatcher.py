"""IPC command dispatcher and base handler."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, TYPE_CHECKING

from hostbus.infrastructure.logger import logger
from hostbus.ipc.envelopes import ensure_object, missing_fields

if TYPE_CHECKING:
    from hostbus.ipc.deps import IpcDeps


class IpcHandlerError(Exception):
    """A request the host understood and refused.

    Denied authorization, missing fields and invalid schedules end up here.
    The dispatcher logs these and the file counts as handled.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.details = details or {}


@dataclass
class HandlerContext:
    source_group: str
    is_main: bool
    deps: IpcDeps


class IpcCommandHandler(ABC):
    """Base class for IPC command handlers."""

    required_fields: tuple[str, ...] = ()

    @property
    @abstractmethod
    def command(self) -> str: ...

    @abstractmethod
    async def validate(self, data: dict[str, Any]) -> Any: ...

    @abstractmethod
    async def execute(self, payload: Any, context: HandlerContext) -> None: ...

    def check_required(self, data: dict[str, Any]) -> None:
        missing = missing_fields(data, *self.required_fields)
        if missing:
            raise IpcHandlerError("Missing required fields", {"missing": missing})

    async def handle(self, data: dict[str, Any], source_group: str, is_main: bool, deps: IpcDeps) -> None:
        context = HandlerContext(source_group=source_group, is_main=is_main, deps=deps)
        self.check_required(data)
        validated = await self.validate(data)
        await self.execute(validated, context)


class IpcCommandDispatcher:
    """Routes IPC commands to registered handlers."""

    def __init__(self, handlers: list[IpcCommandHandler]) -> None:
        self._handlers: dict[str, IpcCommandHandler] = {h.command: h for h in handlers}

    @property
    def commands(self) -> list[str]:
        return sorted(self._handlers)

    async def dispatch(self, data: Any, source_group: str, is_main: bool, deps: IpcDeps) -> None:
        """Run the handler for ``data["type"]``.

        Refusals are logged and swallowed; anything else (bad JSON shape,
        decode errors, store or channel failures) propagates to the caller.
        """
        data = ensure_object(data)
        command_type = data.get("type")
        handler = self._handlers.get(command_type) if isinstance(command_type, str) else None
        if not handler:
            logger.warning("Unknown IPC task type", type=command_type, source_group=source_group)
            return
        try:
            await handler.handle(data, source_group, is_main, deps)
        except IpcHandlerError as err:
            logger.warning(err.args[0], command=command_type, source_group=source_group, **err.details)
