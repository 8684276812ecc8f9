"""
Connection handler module.

Drives one connection through UNAUTHENTICATED -> AUTHENTICATED -> CLOSED:
the first frame is a credential payload, later frames are chat text, and the
close event removes the session and announces the departure.
"""

import asyncio
from collections import Counter
from datetime import datetime
from typing import Callable, Optional

from websockets.exceptions import ConnectionClosed

from common.constants import Notices
from common.protocol_definitions import (
    AuthFormatError, AuthPayload, parse_auth_payload, format_timestamp,
    create_joined_notice, create_left_notice, create_chat_line
)
from server.auth.password_hasher import PasswordHasher
from server.chat.broadcast_hub import BroadcastHub
from server.chat.connection import Connection, ConnectionState
from server.chat.session_registry import SessionRegistry, UsernameInUseError
from server.storage.credential_store import CredentialStore, UserRecord
from server.storage.message_log import MessageLog
from server.utils.logger import logger


class _Rejected(Exception):
    """Auth ended with a notice for the client; carries that notice."""

    def __init__(self, notice: str):
        super().__init__(notice)
        self.notice = notice


class ConnectionHandler:
    """Per-connection state machine shared by all connection tasks."""

    def __init__(self, registry: SessionRegistry, hub: BroadcastHub,
                 credential_store: CredentialStore, message_log: MessageLog,
                 hasher: PasswordHasher, allow_duplicate_sessions: bool = True,
                 clock: Callable[[], datetime] = datetime.now):
        self.registry = registry
        self.hub = hub
        self.credential_store = credential_store
        self.message_log = message_log
        self.hasher = hasher
        self.allow_duplicate_sessions = allow_duplicate_sessions
        self.clock = clock
        self._logins_in_progress: Counter = Counter()

    async def handle(self, connection: Connection):
        """Run the full lifecycle of one connection."""
        logger.log_connection(connection.remote_address, connection.id)
        try:
            username = await self.authenticate(connection)
            if username is None:
                return

            async for frame in connection:
                await self.handle_chat(connection, username, frame)
        except ConnectionClosed:
            pass
        finally:
            await self.handle_close(connection)

    async def authenticate(self, connection: Connection) -> Optional[str]:
        """
        Consume the first frame and authenticate it.

        Returns the username once the connection is registered, or None after
        the connection was sent an error notice and closed.
        """
        frame = await connection.recv()

        try:
            payload = parse_auth_payload(frame)
        except AuthFormatError as e:
            logger.log_protocol_error(connection.id, e.notice)
            await self._reject(connection, e.notice)
            return None

        try:
            record = await self._check_credentials(connection, payload)
        except _Rejected as e:
            await self._reject(connection, e.notice)
            return None
        except Exception as e:
            logger.log_error("authentication", e)
            await self._reject(connection, Notices.AUTH_FAILED)
            return None

        username = payload.username
        # Counts from the online flag being set until the session is registered.
        self._logins_in_progress[username] += 1
        try:
            try:
                await self._record_login(connection, payload, record)
            except Exception as e:
                logger.log_error("authentication", e)
                await self._reject(connection, Notices.AUTH_FAILED)
                return None
            return await self._enter_authenticated(connection, username)
        finally:
            self._logins_in_progress[username] -= 1
            if not self._logins_in_progress[username]:
                del self._logins_in_progress[username]

    async def _check_credentials(self, connection: Connection, payload: AuthPayload) -> Optional[UserRecord]:
        """Look up and verify; returns the stored record, or None for a new username."""
        username = payload.username
        record = await self.credential_store.find_by_username(username)

        if record is not None:
            matches = await asyncio.to_thread(self.hasher.verify, payload.password, record.password_hash)
            if not matches:
                logger.log_wrong_password(username, connection.id)
                raise _Rejected(Notices.WRONG_PASSWORD)

        if not self.allow_duplicate_sessions and await self.registry.is_active(username):
            logger.log_rejected_duplicate(username, connection.id)
            raise _Rejected(Notices.ALREADY_CONNECTED)

        return record

    async def _record_login(self, connection: Connection, payload: AuthPayload, record: Optional[UserRecord]):
        username = payload.username
        if record is None:
            password_hash = await asyncio.to_thread(self.hasher.hash, payload.password)
            await self.credential_store.create(UserRecord(
                username=username,
                password_hash=password_hash,
                is_online=True,
                connected_at=self.clock()
            ))
            logger.log_registration(username, connection.id)
        else:
            await self.credential_store.upsert(username, is_online=True, connected_at=self.clock())
            logger.log_login(username, connection.id)

    async def _enter_authenticated(self, connection: Connection, username: str) -> Optional[str]:
        connection.state = ConnectionState.AUTHENTICATED
        try:
            await connection.send(Notices.AUTH_SUCCESS)
        except ConnectionClosed:
            await self._mark_offline_if_last(username, own_logins=1)
            raise

        try:
            await self.registry.register(connection, username, exclusive=not self.allow_duplicate_sessions)
        except UsernameInUseError:
            # Lost a race with another login for the same name after the pre-check.
            logger.log_rejected_duplicate(username, connection.id)
            await self._reject(connection, Notices.ALREADY_CONNECTED)
            return None

        await self.hub.broadcast(create_joined_notice(username), await self.registry.snapshot())
        return username

    async def handle_chat(self, connection: Connection, username: str, frame: str):
        """Log and relay one chat frame; whitespace-only frames are dropped."""
        text = frame.strip()
        if not text:
            return

        now = self.clock()
        logger.log_chat(username, connection.id, text)
        try:
            await self.message_log.append(username, text, now)
        except Exception as e:
            logger.log_error("message logging", e)

        line = create_chat_line(format_timestamp(now), username, text)
        await self.hub.broadcast(line, await self.registry.snapshot())

    async def handle_close(self, connection: Connection):
        """Tear down the session, if any, and announce the departure."""
        connection.state = ConnectionState.CLOSED
        username = await self.registry.unregister(connection)
        if username is None:
            return

        logger.log_disconnect(username, connection.id)
        await self._mark_offline_if_last(username)
        await self.hub.broadcast(create_left_notice(username), await self.registry.snapshot())

    async def _still_present(self, username: str, own_logins: int) -> bool:
        if await self.registry.is_active(username):
            return True
        return self._logins_in_progress[username] > own_logins

    async def _mark_offline_if_last(self, username: str, own_logins: int = 0):
        """
        Clear the online flag unless another session or login holds the name.

        ``own_logins`` is how many of the in-progress logins belong to the
        caller itself.
        """
        if await self._still_present(username, own_logins):
            return
        try:
            await self.credential_store.set_offline(username)
            # A login may have set the flag again while the write was in flight.
            if await self._still_present(username, own_logins):
                await self.credential_store.upsert(username, is_online=True)
        except Exception as e:
            logger.log_error("marking user offline", e)

    async def _reject(self, connection: Connection, notice: str):
        try:
            await connection.send(notice)
        except ConnectionClosed:
            pass
        try:
            await connection.close()
        except Exception as e:
            logger.log_error("closing connection", e)
        connection.state = ConnectionState.CLOSED
