"""
Credential store module.

Persists one record per username: password digest, online flag and the time of
the last successful connect.
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from server.storage.database import Database

UPDATABLE_FIELDS = ('password_hash', 'is_online', 'connected_at')


@dataclass
class UserRecord:
    """Persisted user record."""
    username: str
    password_hash: str
    is_online: bool = False
    connected_at: Optional[datetime] = None


def _to_db(field: str, value: Any) -> Any:
    if field == 'is_online':
        return 1 if value else 0
    if field == 'connected_at' and isinstance(value, datetime):
        return value.isoformat()
    return value


def _row_to_record(row) -> UserRecord:
    connected_at = row['connected_at']
    return UserRecord(
        username=row['username'],
        password_hash=row['password_hash'],
        is_online=bool(row['is_online']),
        connected_at=datetime.fromisoformat(connected_at) if connected_at else None
    )


class CredentialStore:
    """Async facade over the users table; every call runs in a worker thread."""

    def __init__(self, database: Database):
        self.database = database

    async def find_by_username(self, username: str) -> Optional[UserRecord]:
        return await asyncio.to_thread(self._find_by_username, username)

    async def create(self, record: UserRecord):
        """Insert a new record. Raises sqlite3.IntegrityError if the username exists."""
        await asyncio.to_thread(self._create, record)

    async def upsert(self, username: str, **fields):
        """
        Update the given fields of a user record.

        If no record exists one is inserted, which requires a ``password_hash``;
        without one the call is a no-op. Unknown field names raise ValueError.
        """
        unknown = set(fields) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f"Unknown user fields: {', '.join(sorted(unknown))}")
        if not fields:
            return
        await asyncio.to_thread(self._upsert, username, fields)

    async def set_offline(self, username: str):
        await asyncio.to_thread(self._update, username, {'is_online': False})

    async def mark_all_offline(self) -> int:
        """Reset every online flag; used at startup after an unclean shutdown."""
        return await asyncio.to_thread(self._mark_all_offline)

    def _find_by_username(self, username: str) -> Optional[UserRecord]:
        with self.database.connect() as conn:
            row = conn.execute(
                'SELECT username, password_hash, is_online, connected_at FROM users WHERE username = ?',
                (username,)
            ).fetchone()
        return _row_to_record(row) if row else None

    def _create(self, record: UserRecord):
        with self.database.connect() as conn:
            conn.execute(
                'INSERT INTO users (username, password_hash, is_online, connected_at) VALUES (?, ?, ?, ?)',
                (record.username, record.password_hash,
                 _to_db('is_online', record.is_online), _to_db('connected_at', record.connected_at))
            )

    def _update(self, username: str, fields: dict) -> int:
        columns = ', '.join(f"{name} = ?" for name in fields)
        values = [_to_db(name, value) for name, value in fields.items()]
        with self.database.connect() as conn:
            cursor = conn.execute(f'UPDATE users SET {columns} WHERE username = ?', (*values, username))
            return cursor.rowcount

    def _upsert(self, username: str, fields: dict):
        if self._update(username, fields):
            return
        if 'password_hash' not in fields:
            return
        self._create(UserRecord(
            username=username,
            password_hash=fields['password_hash'],
            is_online=bool(fields.get('is_online', False)),
            connected_at=fields.get('connected_at')
        ))

    def _mark_all_offline(self) -> int:
        with self.database.connect() as conn:
            return conn.execute('UPDATE users SET is_online = 0 WHERE is_online = 1').rowcount
