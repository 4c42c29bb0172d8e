"""Tests for group repository."""

import pytest

from hostbus.groups.types import RegisteredGroup


@pytest.fixture
def group_repo(db):
    return db.group_repo


def _group(name: str = "Test Group", folder: str = "test", trigger: str = "@Andy") -> RegisteredGroup:
    return RegisteredGroup(
        name=name,
        folder=folder,
        trigger=trigger,
        added_at="2024-01-01T00:00:00+00:00",
        channel="whatsapp",
    )


class TestGroupRepository:
    def test_set_and_get(self, group_repo):
        group_repo.set_registered_group("test@g.us", _group())
        result = group_repo.get_registered_group("test@g.us")
        assert result is not None
        assert result.name == "Test Group"
        assert result.folder == "test"
        assert result.channel == "whatsapp"

    def test_get_nonexistent(self, group_repo):
        assert group_repo.get_registered_group("nonexistent@g.us") is None

    def test_get_all(self, group_repo):
        group_repo.set_registered_group("g1@g.us", _group(name="Group 1", folder="g1"))
        group_repo.set_registered_group("g2@g.us", _group(name="Group 2", folder="g2"))
        all_groups = group_repo.get_all_registered_groups()
        assert set(all_groups) == {"g1@g.us", "g2@g.us"}

    def test_upsert_overwrites(self, group_repo):
        group_repo.set_registered_group("test@g.us", _group(name="Old Name"))
        group_repo.set_registered_group("test@g.us", _group(name="New Name"))
        assert group_repo.get_registered_group("test@g.us").name == "New Name"

    def test_container_config_roundtrip(self, group_repo):
        group = _group()
        group.container_config = {"timeout": 600000, "additionalMounts": []}
        group_repo.set_registered_group("test@g.us", group)
        result = group_repo.get_registered_group("test@g.us")
        assert result.container_config == {"timeout": 600000, "additionalMounts": []}

    def test_corrupt_container_config_ignored(self, group_repo, db):
        group_repo.set_registered_group("test@g.us", _group())
        db.db.execute("UPDATE registered_groups SET container_config = '[1, 2' WHERE jid = 'test@g.us'")
        assert group_repo.get_registered_group("test@g.us").container_config is None

    def test_requires_trigger_default(self, group_repo):
        group_repo.set_registered_group("test@g.us", _group())
        assert group_repo.get_registered_group("test@g.us").requires_trigger is True

    def test_requires_trigger_false(self, group_repo):
        group = _group()
        group.requires_trigger = False
        group_repo.set_registered_group("test@g.us", group)
        assert group_repo.get_registered_group("test@g.us").requires_trigger is False
