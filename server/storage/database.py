"""
SQLite database access for the chat server.

Each operation opens its own connection, so store calls can safely run in
worker threads.
"""

import sqlite3
from contextlib import contextmanager
from typing import Iterator

from common.constants import DEFAULT_DATABASE_PATH
from server.utils.logger import logger


class Database:
    """Owns the SQLite file and its schema."""

    def __init__(self, path: str = DEFAULT_DATABASE_PATH):
        self.path = path

    @contextmanager
    def connect(self) -> Iterator[sqlite3.Connection]:
        """Yield a connection; commit on success, roll back on error, always close."""
        conn = sqlite3.connect(self.path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def init_schema(self):
        """Create the users and messages tables if they do not already exist."""
        with self.connect() as conn:
            # Username is the primary key; one record per identity.
            conn.execute('''
                CREATE TABLE IF NOT EXISTS users (
                    username TEXT PRIMARY KEY,
                    password_hash TEXT NOT NULL,
                    is_online INTEGER NOT NULL DEFAULT 0,
                    connected_at TEXT
                )
            ''')
            conn.execute('''
                CREATE TABLE IF NOT EXISTS messages (
                    message_id INTEGER PRIMARY KEY AUTOINCREMENT,
                    sender TEXT NOT NULL,
                    content TEXT NOT NULL,
                    timestamp TEXT NOT NULL
                )
            ''')
        logger.info(f"Database initialized at {self.path}")
