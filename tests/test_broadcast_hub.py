#!/usr/bin/env python3
"""
Unit tests for server/chat/broadcast_hub.py

Delivery goes to open connections only, and one recipient's failure or
slowness never affects the others or the caller.
"""

import asyncio
import unittest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from websockets.protocol import State

from server.chat.broadcast_hub import BroadcastHub
from server.chat.connection import Connection, ConnectionState
from tests.fakes import FakeWebSocket


class TestBroadcastHub(unittest.IsolatedAsyncioTestCase):

    async def asyncSetUp(self):
        self.hub = BroadcastHub()
        self.sockets = [FakeWebSocket() for _ in range(3)]
        self.connections = [Connection(ws) for ws in self.sockets]

    async def asyncTearDown(self):
        await self.hub.close()

    async def test_delivers_to_every_open_connection(self):
        scheduled = await self.hub.broadcast('hello', self.connections)
        await self.hub.flush()

        self.assertEqual(scheduled, 3)
        for ws in self.sockets:
            self.assertEqual(ws.sent, ['hello'])
        self.assertEqual(self.hub.pending, 0)

    async def test_skips_closed_connections(self):
        self.sockets[0].state = State.CLOSED
        self.connections[1].state = ConnectionState.CLOSED

        scheduled = await self.hub.broadcast('hello', self.connections)
        await self.hub.flush()

        self.assertEqual(scheduled, 1)
        self.assertEqual(self.sockets[0].sent, [])
        self.assertEqual(self.sockets[1].sent, [])
        self.assertEqual(self.sockets[2].sent, ['hello'])

    async def test_send_failure_is_contained(self):
        self.sockets[1].fail_sends = True

        await self.hub.broadcast('hello', self.connections)
        await self.hub.flush()

        self.assertEqual(self.sockets[0].sent, ['hello'])
        self.assertEqual(self.sockets[1].sent, [])
        self.assertEqual(self.sockets[2].sent, ['hello'])

    async def test_unexpected_exception_is_contained(self):
        async def explode(text):
            raise RuntimeError("socket buffer gone")

        self.sockets[0].send = explode
        await self.hub.broadcast('hello', self.connections)
        await self.hub.flush()

        self.assertEqual(self.sockets[1].sent, ['hello'])
        self.assertEqual(self.sockets[2].sent, ['hello'])

    async def test_stalled_recipient_does_not_block_caller(self):
        release = asyncio.Event()

        async def stalled_send(text):
            await release.wait()

        self.sockets[0].send = stalled_send
        # Returns at once even though one send never completes
        scheduled = await asyncio.wait_for(self.hub.broadcast('hello', self.connections), timeout=1)
        self.assertEqual(scheduled, 3)

        await asyncio.sleep(0.01)
        self.assertEqual(self.sockets[1].sent, ['hello'])
        self.assertEqual(self.sockets[2].sent, ['hello'])
        self.assertEqual(self.hub.pending, 1)

        release.set()
        await self.hub.flush()
        self.assertEqual(self.hub.pending, 0)

    async def test_later_lines_pass_a_stalled_recipient(self):
        release = asyncio.Event()

        async def stalled_send(text):
            await release.wait()

        self.sockets[0].send = stalled_send
        for line in ('one', 'two', 'three'):
            await asyncio.wait_for(self.hub.broadcast(line, self.connections), timeout=1)
        await asyncio.sleep(0.01)

        self.assertEqual(self.sockets[1].sent, ['one', 'two', 'three'])
        self.assertEqual(self.sockets[2].sent, ['one', 'two', 'three'])
        release.set()

    async def test_close_cancels_stalled_sends(self):
        async def stalled_send(text):
            await asyncio.Event().wait()

        self.sockets[0].send = stalled_send
        await self.hub.broadcast('hello', self.connections)
        await asyncio.sleep(0.01)
        self.assertEqual(self.hub.pending, 1)

        await asyncio.wait_for(self.hub.close(), timeout=1)
        self.assertEqual(self.hub.pending, 0)

    async def test_empty_set(self):
        self.assertEqual(await self.hub.broadcast('hello', []), 0)
        self.assertEqual(self.hub.pending, 0)


if __name__ == '__main__':
    unittest.main()
