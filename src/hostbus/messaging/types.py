"""Messaging domain types and Channel protocol."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from pydantic import BaseModel


class NewMessage(BaseModel):
    id: str
    chat_jid: str
    sender: str
    sender_name: str
    content: str
    timestamp: str
    is_from_me: bool = False
    is_bot_message: bool = False


class ChatInfo(BaseModel):
    """Metadata for any chat the host has seen, registered or not."""

    jid: str
    name: str
    last_message_time: str
    channel: str = ""
    is_group: bool = False


@runtime_checkable
class Channel(Protocol):
    """A chat transport plugged into the host.

    ``owns_jid`` decides routing; the first connected channel that owns a
    jid delivers messages to it.
    """

    name: str

    async def connect(self) -> None: ...

    async def send_message(self, jid: str, text: str) -> None: ...

    def is_connected(self) -> bool: ...

    def owns_jid(self, jid: str) -> bool: ...

    async def disconnect(self) -> None: ...

    async def sync_metadata(self, force: bool = False) -> None:
        """Refresh chat names and group membership from the transport."""
        ...
