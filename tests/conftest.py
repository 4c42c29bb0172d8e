import pytest

from hostbus.infrastructure.database import AppDatabase
from hostbus.scheduling.task_service import TaskManager


@pytest.fixture
def db() -> AppDatabase:
    """Create an in-memory database for testing."""
    app_db = AppDatabase()
    app_db._init_test()
    return app_db


@pytest.fixture
def task_manager(db: AppDatabase) -> TaskManager:
    return TaskManager(db.task_repo, tz="UTC")
