"""Tests for task repository."""

import pytest

from hostbus.scheduling.types import ScheduledTask


@pytest.fixture
def task_repo(db):
    return db.task_repo


def _task(
    id: str = "task-1",
    group_folder: str = "main",
    status: str = "active",
    created_at: str = "2024-01-01T00:00:00+00:00",
) -> ScheduledTask:
    return ScheduledTask(
        id=id,
        group_folder=group_folder,
        chat_jid="test@g.us",
        prompt="Test prompt",
        schedule_type="once",
        schedule_value="2024-01-01T00:00:00",
        next_run="2024-01-01T00:00:00+00:00",
        status=status,
        created_at=created_at,
    )


class TestTaskCRUD:
    def test_create_and_get(self, task_repo):
        task_repo.create_task(_task())
        result = task_repo.get_task_by_id("task-1")
        assert result is not None
        assert result.prompt == "Test prompt"
        assert result.context_mode == "isolated"

    def test_get_nonexistent(self, task_repo):
        assert task_repo.get_task_by_id("nonexistent") is None

    def test_update(self, task_repo):
        task_repo.create_task(_task())
        task_repo.update_task("task-1", status="paused")
        assert task_repo.get_task_by_id("task-1").status == "paused"

    def test_update_ignores_none(self, task_repo):
        task_repo.create_task(_task())
        task_repo.update_task("task-1", status=None)
        assert task_repo.get_task_by_id("task-1").status == "active"

    def test_delete(self, task_repo):
        task_repo.create_task(_task())
        task_repo.delete_task("task-1")
        assert task_repo.get_task_by_id("task-1") is None

    def test_get_tasks_for_group(self, task_repo):
        task_repo.create_task(_task(id="t1", group_folder="main"))
        task_repo.create_task(_task(id="t2", group_folder="other"))
        results = task_repo.get_tasks_for_group("main")
        assert [t.id for t in results] == ["t1"]

    def test_get_all_tasks_newest_first(self, task_repo):
        task_repo.create_task(_task(id="old", created_at="2024-01-01T00:00:00+00:00"))
        task_repo.create_task(_task(id="new", created_at="2024-02-01T00:00:00+00:00"))
        assert [t.id for t in task_repo.get_all_tasks()] == ["new", "old"]


class TestUpdateGuards:
    def test_update_missing_task(self, task_repo):
        assert task_repo.update_task("nope", status="paused") is False

    def test_update_reports_change(self, task_repo):
        task_repo.create_task(_task())
        assert task_repo.update_task("task-1", next_run="2025-01-01T00:00:00+00:00") is True
        assert task_repo.get_task_by_id("task-1").next_run == "2025-01-01T00:00:00+00:00"

    @pytest.mark.parametrize("column", ["group_folder", "created_at", "status = 'x'; --"])
    def test_immutable_or_unknown_columns_rejected(self, task_repo, column):
        task_repo.create_task(_task())
        with pytest.raises(ValueError, match="Cannot update"):
            task_repo.update_task("task-1", **{column: "x"})
        assert task_repo.get_task_by_id("task-1").group_folder == "main"

    def test_delete_reports_missing(self, task_repo):
        assert task_repo.delete_task("nope") is False
