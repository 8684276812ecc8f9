"""
Session registry module.

In-memory table of which live connection is authenticated as which username.
All access goes through a lock that is never held across I/O.
"""

import asyncio
from typing import Dict, List, Optional

from server.chat.connection import Connection


class DuplicateRegistrationError(Exception):
    """The connection already has a session."""


class UsernameInUseError(Exception):
    """An exclusive registration found a live session for the same username."""


class SessionRegistry:
    """Maps connections to the usernames they authenticated as."""

    def __init__(self):
        self._sessions: Dict[Connection, str] = {}
        self._lock = asyncio.Lock()

    async def register(self, connection: Connection, username: str, exclusive: bool = False):
        """
        Associate ``connection`` with ``username``.

        Raises DuplicateRegistrationError if the connection is already registered.
        With ``exclusive`` set, raises UsernameInUseError when another connection
        holds a session for the same username; check and insert are atomic.
        """
        async with self._lock:
            if connection in self._sessions:
                raise DuplicateRegistrationError(f"{connection!r} already registered as {self._sessions[connection]}")
            if exclusive and username in self._sessions.values():
                raise UsernameInUseError(username)
            self._sessions[connection] = username

    async def unregister(self, connection: Connection) -> Optional[str]:
        """Remove the session and return its username, or None if there was none."""
        async with self._lock:
            return self._sessions.pop(connection, None)

    async def snapshot(self) -> List[Connection]:
        """Point-in-time copy of all registered connections."""
        async with self._lock:
            return list(self._sessions)

    async def username_for(self, connection: Connection) -> Optional[str]:
        async with self._lock:
            return self._sessions.get(connection)

    async def is_active(self, username: str) -> bool:
        """True if any registered connection is authenticated as ``username``."""
        async with self._lock:
            return username in self._sessions.values()
