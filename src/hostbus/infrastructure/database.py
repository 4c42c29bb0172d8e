"""SQLite database schema and AppDatabase composition root."""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import TYPE_CHECKING

from hostbus.infrastructure.config import STORE_DIR
from hostbus.infrastructure.logger import logger

if TYPE_CHECKING:
    from hostbus.groups.repository import GroupRepository
    from hostbus.messaging.repository import MessageRepository
    from hostbus.scheduling.repository import TaskRepository

SCHEMA_VERSION = 1

_SCHEMA = """
CREATE TABLE IF NOT EXISTS chats (
    jid TEXT PRIMARY KEY,
    name TEXT,
    last_message_time TEXT,
    channel TEXT,
    is_group INTEGER DEFAULT 0
);

CREATE TABLE IF NOT EXISTS messages (
    id TEXT,
    chat_jid TEXT,
    sender TEXT,
    sender_name TEXT,
    content TEXT,
    timestamp TEXT,
    is_from_me INTEGER,
    is_bot_message INTEGER DEFAULT 0,
    PRIMARY KEY (id, chat_jid),
    FOREIGN KEY (chat_jid) REFERENCES chats(jid)
);
CREATE INDEX IF NOT EXISTS idx_messages_chat_time ON messages(chat_jid, timestamp);

-- Times are UTC ISO-8601 strings
CREATE TABLE IF NOT EXISTS scheduled_tasks (
    id TEXT PRIMARY KEY,
    group_folder TEXT NOT NULL,
    chat_jid TEXT NOT NULL,
    prompt TEXT NOT NULL,
    schedule_type TEXT NOT NULL,
    schedule_value TEXT NOT NULL,
    context_mode TEXT DEFAULT 'isolated',
    next_run TEXT,
    status TEXT DEFAULT 'active',
    created_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_tasks_group ON scheduled_tasks(group_folder);
CREATE INDEX IF NOT EXISTS idx_tasks_next_run ON scheduled_tasks(status, next_run);

CREATE TABLE IF NOT EXISTS registered_groups (
    jid TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    folder TEXT NOT NULL UNIQUE,
    trigger_pattern TEXT NOT NULL,
    added_at TEXT NOT NULL,
    container_config TEXT,
    requires_trigger INTEGER DEFAULT 1,
    channel TEXT
);
"""


def create_schema(db: sqlite3.Connection) -> None:
    """Create all tables and indexes. Safe to call multiple times (IF NOT EXISTS)."""
    db.executescript(_SCHEMA)
    db.execute(f"PRAGMA user_version = {SCHEMA_VERSION}")


class AppDatabase:
    """Owns the connection and exposes one repository per domain."""

    def __init__(self) -> None:
        self._db: sqlite3.Connection | None = None
        self.message_repo: MessageRepository = None  # type: ignore[assignment]
        self.task_repo: TaskRepository = None  # type: ignore[assignment]
        self.group_repo: GroupRepository = None  # type: ignore[assignment]

    @property
    def db(self) -> sqlite3.Connection:
        assert self._db is not None, "Database not initialized. Call init() first."
        return self._db

    @property
    def is_open(self) -> bool:
        return self._db is not None

    def init(self, path: Path | None = None) -> None:
        """Open (or create) the database file, by default ``store/messages.db``."""
        db_path = path or STORE_DIR / "messages.db"
        db_path.parent.mkdir(parents=True, exist_ok=True)
        self._open(str(db_path))
        # Readers (the message loop, operators with sqlite3) shouldn't block IPC writes
        self.db.execute("PRAGMA journal_mode=WAL")
        self.db.execute("PRAGMA busy_timeout=5000")
        logger.info("Database opened", path=str(db_path))

    def _init_test(self) -> None:
        """For tests only. Creates a fresh in-memory database."""
        self._open(":memory:")

    def close(self) -> None:
        if self._db is not None:
            self._db.close()
            self._db = None

    def _open(self, target: str) -> None:
        self.close()
        self._db = sqlite3.connect(target)
        self._db.row_factory = sqlite3.Row
        create_schema(self._db)

        # Import here to avoid circular imports
        from hostbus.groups.repository import GroupRepository
        from hostbus.messaging.repository import MessageRepository
        from hostbus.scheduling.repository import TaskRepository

        self.message_repo = MessageRepository(self._db)
        self.task_repo = TaskRepository(self._db)
        self.group_repo = GroupRepository(self._db)


# Singleton instance
database = AppDatabase()
