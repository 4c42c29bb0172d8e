"""Typed views of the JSON envelopes containers drop into their IPC namespace.

Envelopes are untrusted input. Required fields are checked by the handler
that owns the command type, then the body is decoded into one of these
models; a wrongly typed field surfaces as a pydantic ValidationError.

None of these models carries the sender's identity. Any ``sourceGroup`` or
similar claim in the body is ignored: the sender is the namespace directory
the file was found in.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from hostbus.scheduling.types import ContextMode


class Envelope(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class MessageEnvelope(Envelope):
    model_config = ConfigDict(extra="ignore", frozen=True, coerce_numbers_to_str=True)

    type: Literal["message"]
    chat_jid: str = Field(alias="chatJid")
    text: str


class ScheduleTaskCommand(Envelope):
    model_config = ConfigDict(extra="ignore", frozen=True, coerce_numbers_to_str=True)

    type: Literal["schedule_task"]
    prompt: str
    # Not a Literal: an unknown schedule type is a rejected request, not a malformed file
    schedule_type: str
    schedule_value: str
    target_jid: str = Field(alias="targetJid")
    context_mode: ContextMode = "isolated"

    @field_validator("context_mode", mode="before")
    @classmethod
    def _default_context_mode(cls, value: Any) -> str:
        return "group" if value == "group" else "isolated"


class TaskRefCommand(Envelope):
    type: Literal["pause_task", "resume_task", "cancel_task"]
    task_id: str = Field(alias="taskId")


class RefreshGroupsCommand(Envelope):
    type: Literal["refresh_groups"]


class RegisterGroupCommand(Envelope):
    type: Literal["register_group"]
    jid: str
    name: str
    folder: str
    trigger: str
    requires_trigger: bool | None = Field(default=None, alias="requiresTrigger")
    container_config: dict[str, Any] | None = Field(default=None, alias="containerConfig")


def ensure_object(data: Any) -> dict[str, Any]:
    """Envelopes must be JSON objects; anything else is a malformed file."""
    if not isinstance(data, dict):
        raise ValueError(f"IPC envelope must be a JSON object, got {type(data).__name__}")
    return data


def missing_fields(data: dict[str, Any], *names: str) -> list[str]:
    """Required fields that are absent or empty."""
    return [name for name in names if data.get(name) in (None, "")]


def decode_message_envelope(data: Any) -> MessageEnvelope | None:
    """Decode a message request, or None if the file is not one.

    Files without ``type: "message"`` or with an empty ``chatJid``/``text``
    are not send requests; the caller discards them.
    """
    data = ensure_object(data)
    if data.get("type") != "message" or missing_fields(data, "chatJid", "text"):
        return None
    return MessageEnvelope.model_validate(data)
