"""
Message log module.

Append-only persistence of relayed chat messages.
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime
from typing import List

from common.constants import DEFAULT_HISTORY_LIMIT
from server.storage.database import Database


@dataclass
class ChatMessageRecord:
    """Persisted chat message."""
    sender: str
    content: str
    timestamp: datetime


class MessageLog:
    """Async facade over the messages table."""

    def __init__(self, database: Database):
        self.database = database

    async def append(self, sender: str, content: str, timestamp: datetime):
        await asyncio.to_thread(self._append, sender, content, timestamp)

    async def history(self, limit: int = DEFAULT_HISTORY_LIMIT) -> List[ChatMessageRecord]:
        """Return the most recent ``limit`` messages, oldest first."""
        return await asyncio.to_thread(self._history, limit)

    def _append(self, sender: str, content: str, timestamp: datetime):
        with self.database.connect() as conn:
            conn.execute(
                'INSERT INTO messages (sender, content, timestamp) VALUES (?, ?, ?)',
                (sender, content, timestamp.isoformat())
            )

    def _history(self, limit: int) -> List[ChatMessageRecord]:
        with self.database.connect() as conn:
            rows = conn.execute(
                'SELECT sender, content, timestamp FROM messages ORDER BY message_id DESC LIMIT ?',
                (limit,)
            ).fetchall()
        return [
            ChatMessageRecord(row['sender'], row['content'], datetime.fromisoformat(row['timestamp']))
            for row in reversed(rows)
        ]
