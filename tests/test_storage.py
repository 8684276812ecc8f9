#!/usr/bin/env python3
"""
Unit tests for the SQLite-backed stores in server/storage/
"""

import sqlite3
import tempfile
import unittest
from datetime import datetime, timedelta

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from server.auth.password_hasher import PasswordHasher
from server.storage.credential_store import CredentialStore, UserRecord
from server.storage.database import Database
from server.storage.message_log import MessageLog

NOW = datetime(2024, 5, 1, 13, 2, 3)


class StorageTestCase(unittest.IsolatedAsyncioTestCase):

    async def asyncSetUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.database = Database(str(Path(self._tmp.name) / 'chat.db'))
        self.database.init_schema()

    async def asyncTearDown(self):
        self._tmp.cleanup()


class TestCredentialStore(StorageTestCase):

    async def asyncSetUp(self):
        await super().asyncSetUp()
        self.store = CredentialStore(self.database)

    async def test_find_missing_user(self):
        self.assertIsNone(await self.store.find_by_username('nobody'))

    async def test_create_and_find(self):
        await self.store.create(UserRecord('alice', 'digest', True, NOW))

        record = await self.store.find_by_username('alice')
        self.assertEqual(record, UserRecord('alice', 'digest', True, NOW))

    async def test_create_twice_fails(self):
        await self.store.create(UserRecord('alice', 'digest', True, NOW))
        with self.assertRaises(sqlite3.IntegrityError):
            await self.store.create(UserRecord('alice', 'other', True, NOW))

    async def test_upsert_updates_existing(self):
        await self.store.create(UserRecord('alice', 'digest', False, NOW))
        later = NOW + timedelta(hours=1)

        await self.store.upsert('alice', is_online=True, connected_at=later)

        record = await self.store.find_by_username('alice')
        self.assertTrue(record.is_online)
        self.assertEqual(record.connected_at, later)
        self.assertEqual(record.password_hash, 'digest')

    async def test_upsert_inserts_when_digest_given(self):
        await self.store.upsert('bob', password_hash='d2', is_online=True, connected_at=NOW)
        self.assertEqual(await self.store.find_by_username('bob'), UserRecord('bob', 'd2', True, NOW))

    async def test_upsert_without_digest_does_not_insert(self):
        await self.store.upsert('ghost', is_online=True)
        self.assertIsNone(await self.store.find_by_username('ghost'))

    async def test_upsert_rejects_unknown_fields(self):
        with self.assertRaises(ValueError):
            await self.store.upsert('alice', nickname='al')

    async def test_set_offline(self):
        await self.store.create(UserRecord('alice', 'digest', True, NOW))
        await self.store.set_offline('alice')

        record = await self.store.find_by_username('alice')
        self.assertFalse(record.is_online)
        self.assertEqual(record.connected_at, NOW)

    async def test_set_offline_unknown_user_is_harmless(self):
        await self.store.set_offline('nobody')
        self.assertIsNone(await self.store.find_by_username('nobody'))

    async def test_mark_all_offline(self):
        await self.store.create(UserRecord('alice', 'd', True, NOW))
        await self.store.create(UserRecord('bob', 'd', True, NOW))
        await self.store.create(UserRecord('carol', 'd', False, NOW))

        self.assertEqual(await self.store.mark_all_offline(), 2)
        for name in ('alice', 'bob', 'carol'):
            self.assertFalse((await self.store.find_by_username(name)).is_online)

    async def test_schema_init_is_idempotent(self):
        await self.store.create(UserRecord('alice', 'digest', True, NOW))
        self.database.init_schema()
        self.assertIsNotNone(await self.store.find_by_username('alice'))


class TestMessageLog(StorageTestCase):

    async def asyncSetUp(self):
        await super().asyncSetUp()
        self.log = MessageLog(self.database)

    async def test_append_and_history(self):
        for i in range(5):
            await self.log.append('alice', f"message {i}", NOW + timedelta(seconds=i))

        history = await self.log.history(limit=3)

        self.assertEqual([m.content for m in history], ['message 2', 'message 3', 'message 4'])
        self.assertEqual(history[-1].sender, 'alice')
        self.assertEqual(history[-1].timestamp, NOW + timedelta(seconds=4))

    async def test_empty_history(self):
        self.assertEqual(await self.log.history(), [])


class TestPasswordHasher(unittest.TestCase):

    def setUp(self):
        self.hasher = PasswordHasher(rounds=4)

    def test_hash_verifies(self):
        digest = self.hasher.hash('secret')
        self.assertNotIn('secret', digest)
        self.assertTrue(self.hasher.verify('secret', digest))
        self.assertFalse(self.hasher.verify('wrongpw', digest))

    def test_digests_are_salted(self):
        self.assertNotEqual(self.hasher.hash('secret'), self.hasher.hash('secret'))

    def test_malformed_digest_raises(self):
        with self.assertRaises(ValueError):
            self.hasher.verify('secret', 'plaintext')


if __name__ == '__main__':
    unittest.main()
