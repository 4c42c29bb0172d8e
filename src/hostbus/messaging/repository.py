"""Message and chat metadata persistence."""

from __future__ import annotations

import sqlite3

from hostbus.messaging.types import ChatInfo, NewMessage


class MessageRepository:
    """Stores inbound messages and the chats they belong to."""

    def __init__(self, db: sqlite3.Connection) -> None:
        self._db = db

    # --- Messages ---

    def store_message(self, msg: NewMessage) -> None:
        """Insert a message; a repeated (id, chat_jid) is ignored."""
        with self._db:
            self._db.execute(
                """INSERT OR IGNORE INTO messages
                   (id, chat_jid, sender, sender_name, content, timestamp, is_from_me, is_bot_message)
                   VALUES (:id, :chat_jid, :sender, :sender_name, :content, :timestamp, :is_from_me, :is_bot_message)""",
                msg.model_dump(),
            )

    def get_messages_since(self, chat_jid: str, since_timestamp: str) -> list[NewMessage]:
        """Non-bot messages in a chat newer than ``since_timestamp``, oldest first."""
        rows = self._db.execute(
            """SELECT id, chat_jid, sender, sender_name, content, timestamp, is_from_me, is_bot_message
               FROM messages
               WHERE chat_jid = ? AND timestamp > ? AND is_bot_message = 0
               ORDER BY timestamp""",
            (chat_jid, since_timestamp),
        ).fetchall()
        return [NewMessage.model_validate(dict(row)) for row in rows]

    # --- Chats ---

    def upsert_chat(
        self,
        jid: str,
        timestamp: str,
        name: str | None = None,
        channel: str | None = None,
        is_group: bool | None = None,
    ) -> None:
        """Record activity in a chat.

        New chats are named after their jid until a name is known. For
        existing chats only the fields that were passed are overwritten, and
        ``last_message_time`` never moves backwards.
        """
        with self._db:
            self._db.execute(
                """INSERT INTO chats (jid, name, last_message_time, channel, is_group)
                   VALUES (:jid, COALESCE(:name, :jid), :ts, COALESCE(:channel, ''), COALESCE(:is_group, 0))
                   ON CONFLICT(jid) DO UPDATE SET
                       last_message_time = MAX(COALESCE(last_message_time, ''), excluded.last_message_time),
                       name = COALESCE(:name, name),
                       channel = COALESCE(:channel, channel),
                       is_group = COALESCE(:is_group, is_group)""",
                {
                    "jid": jid,
                    "ts": timestamp,
                    "name": name or None,
                    "channel": channel or None,
                    "is_group": None if is_group is None else int(is_group),
                },
            )

    def update_chat_name(self, jid: str, name: str) -> None:
        """Set a chat's display name, creating the chat if it is unknown."""
        with self._db:
            self._db.execute(
                """INSERT INTO chats (jid, name, last_message_time, channel, is_group)
                   VALUES (?, ?, '', '', 0)
                   ON CONFLICT(jid) DO UPDATE SET name = excluded.name""",
                (jid, name),
            )

    def get_all_chats(self) -> list[ChatInfo]:
        """All chats, most recently active first."""
        rows = self._db.execute(
            "SELECT jid, name, last_message_time, channel, is_group FROM chats ORDER BY last_message_time DESC"
        ).fetchall()
        return [
            ChatInfo(
                jid=row["jid"],
                name=row["name"] or row["jid"],
                last_message_time=row["last_message_time"] or "",
                channel=row["channel"] or "",
                is_group=bool(row["is_group"]),
            )
            for row in rows
        ]
