"""
Broadcast hub module.

Delivers one text to a set of connections. Each recipient gets its own send
task, so the caller never waits on any recipient and a failure is contained
to the recipient it happened on.
"""

import asyncio
from typing import Iterable, Set

from server.chat.connection import Connection
from server.utils.logger import logger


class BroadcastHub:
    """Fan-out of chat lines and presence announcements."""

    def __init__(self):
        self._pending: Set[asyncio.Task] = set()

    async def broadcast(self, text: str, connections: Iterable[Connection]) -> int:
        """
        Schedule ``text`` for every open connection in ``connections``.

        Returns as soon as the sends are scheduled; never raises for a
        recipient's failure. Returns the number of recipients scheduled.
        """
        targets = [connection for connection in connections if connection.is_open]
        if not targets:
            return 0

        logger.debug(f"Broadcasting to {len(targets)} connections: {text}")
        for connection in targets:
            task = asyncio.create_task(self._deliver(connection, text))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)
        return len(targets)

    @property
    def pending(self) -> int:
        """Sends scheduled but not yet finished."""
        return len(self._pending)

    async def flush(self):
        """Wait for every send scheduled so far."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def close(self):
        """Cancel sends still in flight, e.g. to a stalled peer at shutdown."""
        for task in list(self._pending):
            task.cancel()
        await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def _deliver(self, connection: Connection, text: str):
        try:
            await connection.send(text)
        except Exception as e:
            logger.log_send_failure(connection.id, e)
