"""Registry pattern for multiple channels."""

from __future__ import annotations

from hostbus.infrastructure.logger import logger
from hostbus.messaging.types import Channel


class ChannelRegistry:
    """Channels by name, in registration order. Routes jids to their owner."""

    def __init__(self) -> None:
        self._channels: dict[str, Channel] = {}

    def register(self, channel: Channel) -> None:
        if channel.name in self._channels:
            raise ValueError(f'Channel "{channel.name}" is already registered')
        self._channels[channel.name] = channel

    def find_by_jid(self, jid: str) -> Channel | None:
        for channel in self._channels.values():
            if channel.owns_jid(jid):
                return channel
        return None

    def find_connected_by_jid(self, jid: str) -> Channel | None:
        for channel in self._channels.values():
            if channel.owns_jid(jid) and channel.is_connected():
                return channel
        return None

    def get_all(self) -> list[Channel]:
        return list(self._channels.values())

    async def sync_all_metadata(self, force: bool = False) -> None:
        """Sync every channel; one failing transport does not stop the rest."""
        for name, channel in self._channels.items():
            try:
                await channel.sync_metadata(force)
            except Exception:
                logger.exception("Channel metadata sync failed", channel=name)

    async def disconnect_all(self) -> None:
        for name, channel in self._channels.items():
            try:
                await channel.disconnect()
            except Exception:
                logger.exception("Error disconnecting channel", channel=name)
