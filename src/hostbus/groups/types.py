"""Group domain types."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class RegisteredGroup(BaseModel):
    """A tenant, keyed by its chat jid in the registry mapping."""

    name: str
    folder: str
    trigger: str
    added_at: str
    channel: str | None = None
    container_config: dict[str, Any] | None = None  # Passed through to the container runner untouched
    requires_trigger: bool | None = True  # Default: true for groups, false for solo chats
