"""
Chat client module.

This module handles client-side chat messaging functionality.
"""

import asyncio
import sys
from typing import Optional

from websockets.asyncio.client import connect
from websockets.exceptions import ConnectionClosed

from client.utils.config import ClientConfig
from common.constants import Notices
from common.protocol_definitions import create_auth_message, is_error_notice


class ChatClient:
    """Client-side chat functionality."""

    def __init__(self, config: ClientConfig):
        self.config = config
        self.websocket = None
        self.last_error: Optional[str] = None

    async def connect(self) -> bool:
        """
        Open the websocket and authenticate.

        Returns False (and stores the server's notice in ``last_error``) if the
        server answers with an error instead of AUTH_SUCCESS.
        """
        self.websocket = await connect(self.config.get_url())
        await self.websocket.send(create_auth_message(self.config.username, self.config.password))

        try:
            reply = await self.websocket.recv()
        except ConnectionClosed:
            self.last_error = Notices.AUTH_FAILED
            await self.close()
            return False

        if reply != Notices.AUTH_SUCCESS:
            self.last_error = reply if is_error_notice(reply) else f"Unexpected reply: {reply}"
            await self.close()
            return False
        return True

    async def send_chat(self, text: str) -> bool:
        """Send a chat message."""
        if not self.websocket:
            print("[ERROR] Not connected to server")
            return False

        try:
            await self.websocket.send(text)
            return True
        except ConnectionClosed as e:
            print(f"[ERROR] Failed to send message: {e}")
            return False

    async def receive(self) -> str:
        """Wait for the next line from the server."""
        return await self.websocket.recv()

    async def close(self):
        if self.websocket is not None:
            await self.websocket.close()
            self.websocket = None

    async def run_interactive(self):
        """Print server lines and forward stdin lines until either side ends."""
        printer = asyncio.create_task(self._print_incoming())
        try:
            while not printer.done():
                line = await asyncio.to_thread(sys.stdin.readline)
                if not line:
                    break
                if not await self.send_chat(line.rstrip('\n')):
                    break
        finally:
            printer.cancel()
            await self.close()

    async def _print_incoming(self):
        try:
            async for message in self.websocket:
                print(message)
        except ConnectionClosed:
            print("[INFO] Connection closed by server")
