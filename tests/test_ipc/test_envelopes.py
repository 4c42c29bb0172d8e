"""Tests for envelope decoding."""

import pytest
from pydantic import ValidationError

from hostbus.ipc.envelopes import (
    RegisterGroupCommand,
    ScheduleTaskCommand,
    decode_message_envelope,
    ensure_object,
    missing_fields,
)


def _schedule(**overrides):
    data = {
        "type": "schedule_task",
        "prompt": "ping",
        "schedule_type": "interval",
        "schedule_value": "5000",
        "targetJid": "team@g.us",
    }
    data.update(overrides)
    return data


class TestMessageEnvelope:
    def test_decodes_message(self):
        envelope = decode_message_envelope({"type": "message", "chatJid": "team@g.us", "text": "hi"})
        assert envelope.chat_jid == "team@g.us"
        assert envelope.text == "hi"

    def test_identity_claims_ignored(self):
        envelope = decode_message_envelope(
            {"type": "message", "chatJid": "team@g.us", "text": "hi", "sourceGroup": "main", "isMain": True}
        )
        assert not hasattr(envelope, "sourceGroup")
        assert "sourceGroup" not in envelope.model_dump()

    @pytest.mark.parametrize(
        "data",
        [
            {"type": "other", "chatJid": "team@g.us", "text": "hi"},
            {"chatJid": "team@g.us", "text": "hi"},
            {"type": "message", "text": "hi"},
            {"type": "message", "chatJid": "team@g.us", "text": ""},
        ],
    )
    def test_not_a_send_request(self, data):
        assert decode_message_envelope(data) is None

    def test_non_object_rejected(self):
        with pytest.raises(ValueError, match="JSON object"):
            decode_message_envelope(["message"])

    def test_numeric_text_sent_as_string(self):
        envelope = decode_message_envelope({"type": "message", "chatJid": "team@g.us", "text": 42})
        assert envelope.text == "42"

    def test_wrong_field_type_rejected(self):
        with pytest.raises(ValidationError):
            decode_message_envelope({"type": "message", "chatJid": "team@g.us", "text": {"nested": True}})


class TestScheduleTaskCommand:
    def test_numeric_schedule_value_accepted(self):
        command = ScheduleTaskCommand.model_validate(_schedule(schedule_value=5000))
        assert command.schedule_value == "5000"

    def test_context_mode_defaults_to_isolated(self):
        assert ScheduleTaskCommand.model_validate(_schedule()).context_mode == "isolated"
        assert ScheduleTaskCommand.model_validate(_schedule(context_mode="shared")).context_mode == "isolated"
        assert ScheduleTaskCommand.model_validate(_schedule(context_mode="group")).context_mode == "group"

    def test_unknown_schedule_type_still_decodes(self):
        assert ScheduleTaskCommand.model_validate(_schedule(schedule_type="weekly")).schedule_type == "weekly"


class TestRegisterGroupCommand:
    def test_optional_fields(self):
        command = RegisterGroupCommand.model_validate({
            "type": "register_group",
            "jid": "new@g.us",
            "name": "New",
            "folder": "new",
            "trigger": "@Andy",
            "requiresTrigger": False,
            "containerConfig": {"timeout": 1000},
        })
        assert command.requires_trigger is False
        assert command.container_config == {"timeout": 1000}


class TestHelpers:
    def test_ensure_object(self):
        assert ensure_object({"a": 1}) == {"a": 1}
        with pytest.raises(ValueError):
            ensure_object("text")

    def test_missing_fields(self):
        assert missing_fields({"a": "x", "b": "", "c": None}, "a", "b", "c", "d") == ["b", "c", "d"]
        assert missing_fields({"n": 0, "f": False}, "n", "f") == []
