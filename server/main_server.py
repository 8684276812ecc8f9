#!/usr/bin/env python3
"""
Broadcast Chat Server - Main Entry Point

This is the main entry point for the server application.
It wires the session registry, broadcast hub, connection handler and the
SQLite-backed stores into a websocket server.
"""

import argparse
import asyncio
from contextlib import asynccontextmanager
from typing import Optional

from websockets.asyncio.server import serve as websocket_serve

from server.auth.password_hasher import PasswordHasher
from server.chat.broadcast_hub import BroadcastHub
from server.chat.connection import Connection
from server.chat.connection_handler import ConnectionHandler
from server.chat.session_registry import SessionRegistry
from server.storage.credential_store import CredentialStore
from server.storage.database import Database
from server.storage.message_log import MessageLog
from server.utils.config import ServerConfig
from server.utils.logger import logger


class ChatServer:
    """Main server class that integrates all functionality."""

    def __init__(self, config: Optional[ServerConfig] = None):
        self.config = config or ServerConfig()

        # Persistence
        self.database = Database(self.config.database_path)
        self.credential_store = CredentialStore(self.database)
        self.message_log = MessageLog(self.database)

        # Core
        self.registry = SessionRegistry()
        self.hub = BroadcastHub()
        self.handler = ConnectionHandler(
            registry=self.registry,
            hub=self.hub,
            credential_store=self.credential_store,
            message_log=self.message_log,
            hasher=PasswordHasher(self.config.bcrypt_rounds),
            allow_duplicate_sessions=self.config.allow_duplicate_sessions
        )

        self._server = None

    @property
    def port(self) -> Optional[int]:
        """Port actually bound, once serving."""
        if self._server is None:
            return None
        return self._server.sockets[0].getsockname()[1]

    async def handle_client(self, websocket):
        """Handle individual client connection."""
        await self.handler.handle(Connection(websocket))

    async def prepare(self):
        """Create the schema and clear presence flags left by a previous run."""
        await asyncio.to_thread(self.database.init_schema)
        reset = await self.credential_store.mark_all_offline()
        if reset:
            logger.warning(f"Reset {reset} users left online by a previous run")

    @asynccontextmanager
    async def serve(self):
        """Serve until the context exits."""
        await self.prepare()
        async with websocket_serve(self.handle_client, self.config.host, self.config.port) as server:
            self._server = server
            addr = ', '.join(str(sock.getsockname()) for sock in server.sockets)
            logger.info(f"Server listening on {addr}")
            try:
                yield self
            finally:
                self._server = None
                await self.hub.close()

    async def start(self):
        """Start the server and run forever."""
        async with self.serve():
            await self._server.serve_forever()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Broadcast Chat Server')
    parser.add_argument('--host', type=str, default=None,
                        help='Host to bind to (default: 0.0.0.0 or CHAT_HOST)')
    parser.add_argument('--port', type=int, default=None,
                        help='Websocket port (default: 8080 or PORT)')
    parser.add_argument('--database', type=str, default=None,
                        help='SQLite database file (default: chat.db or CHAT_DATABASE_PATH)')
    parser.add_argument('--logs-dir', type=str, default=None,
                        help='Directory for chat history log (default: logs or CHAT_LOG_DIR)')
    parser.add_argument('--log-level', type=str, default=None,
                        help='Console log level (default: INFO or CHAT_LOG_LEVEL)')
    parser.add_argument('--single-session', action='store_true',
                        help='Reject a login while the same username is already connected')
    return parser


def config_from_args(args: argparse.Namespace) -> ServerConfig:
    """Environment first, then command-line overrides."""
    config = ServerConfig.from_env()
    if args.host is not None:
        config.host = args.host
    if args.port is not None:
        config.port = args.port
    if args.database is not None:
        config.database_path = args.database
    if args.logs_dir is not None:
        config.logs_dir = args.logs_dir
    if args.log_level is not None:
        config.log_level = args.log_level.upper()
    if args.single_session:
        config.allow_duplicate_sessions = False
    return config


def main(argv=None):
    args = build_parser().parse_args(argv)
    config = config_from_args(args)
    logger.configure(**config.get_log_settings())

    server = ChatServer(config)
    info = config.get_connection_info()
    logger.info(f"Server binding to {info['host']}:{info['port']}")
    try:
        asyncio.run(server.start())
    except KeyboardInterrupt:
        logger.info("Server shutting down...")
    except Exception as e:
        logger.log_error("server", e)
        raise


if __name__ == "__main__":
    main()
