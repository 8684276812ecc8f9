"""
Connection wrapper around a single client websocket.
"""

import itertools
from enum import Enum

from websockets.protocol import State

_connection_ids = itertools.count(1)


class ConnectionState(Enum):
    """Lifecycle of a connection as seen by the handler."""
    UNAUTHENTICATED = 'unauthenticated'
    AUTHENTICATED = 'authenticated'
    CLOSED = 'closed'


class Connection:
    """
    A client's duplex text channel.

    Hashes by identity so it can key the session registry. Binary frames are
    decoded as UTF-8 and handled like text frames.
    """

    def __init__(self, websocket):
        self.websocket = websocket
        self.id = next(_connection_ids)
        self.state = ConnectionState.UNAUTHENTICATED

    def __repr__(self):
        return f"<Connection id={self.id} state={self.state.value}>"

    @property
    def remote_address(self):
        return getattr(self.websocket, 'remote_address', None)

    @property
    def is_open(self) -> bool:
        return self.state is not ConnectionState.CLOSED and self.websocket.state is State.OPEN

    async def send(self, text: str):
        await self.websocket.send(text)

    async def recv(self) -> str:
        """Wait for the next frame. Raises websockets.ConnectionClosed when the peer is gone."""
        frame = await self.websocket.recv()
        if isinstance(frame, (bytes, bytearray)):
            return bytes(frame).decode('utf-8', errors='replace')
        return frame

    async def close(self, code: int = 1000, reason: str = ''):
        self.state = ConnectionState.CLOSED
        await self.websocket.close(code, reason)

    def __aiter__(self):
        return self._frames()

    async def _frames(self):
        while True:
            yield await self.recv()
