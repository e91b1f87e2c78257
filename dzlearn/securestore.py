"""String key/value stores used for the session pointer and per-user blobs.

``KeyringStore`` is the device-secure option (OS keyring). ``SqlBlobStore``
keeps large JSON documents in the app database. ``MemoryStore`` is the
unencrypted fallback for hosts without a keyring and for tests.
"""
import asyncio
from typing import Dict, Optional

import keyring
from keyring.errors import KeyringError, PasswordDeleteError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from .db import Blob, now_ms
from .errors import StorageError


class SecureStore:
    """Backend interface: async string get/set/delete by key. Subclasses implement all three."""

    async def get_item(self, key: str) -> Optional[str]:
        raise NotImplementedError

    async def set_item(self, key: str, value: str) -> None:
        raise NotImplementedError

    async def delete_item(self, key: str) -> None:
        raise NotImplementedError


class MemoryStore(SecureStore):
    def __init__(self):
        self._data: Dict[str, str] = {}

    async def get_item(self, key):
        return self._data.get(key)

    async def set_item(self, key, value):
        self._data[key] = value

    async def delete_item(self, key):
        self._data.pop(key, None)

    def __contains__(self, key):
        return key in self._data


class KeyringStore(SecureStore):
    def __init__(self, service: str):
        self.service = service

    def _delete(self, key: str) -> None:
        try:
            keyring.delete_password(self.service, key)
        except PasswordDeleteError:
            pass  # nothing stored under this key

    async def get_item(self, key):
        try:
            return await asyncio.to_thread(keyring.get_password, self.service, key)
        except KeyringError as e:
            raise StorageError("Secure storage is unavailable") from e

    async def set_item(self, key, value):
        try:
            await asyncio.to_thread(keyring.set_password, self.service, key, value)
        except KeyringError as e:
            raise StorageError("Secure storage is unavailable") from e

    async def delete_item(self, key):
        try:
            await asyncio.to_thread(self._delete, key)
        except KeyringError as e:
            raise StorageError("Secure storage is unavailable") from e


class SqlBlobStore(SecureStore):
    def __init__(self, session_factory: sessionmaker):
        self._sessions = session_factory

    def _get(self, key):
        with self._sessions() as db:
            row = db.get(Blob, key)
            return row.value if row else None

    def _set(self, key, value):
        with self._sessions() as db:
            row = db.get(Blob, key)
            if row is None:
                db.add(Blob(key=key, value=value, updated_at=now_ms()))
            else:
                row.value = value
            db.commit()

    def _delete(self, key):
        with self._sessions() as db:
            row = db.get(Blob, key)
            if row is not None:
                db.delete(row)
                db.commit()

    async def _run(self, fn, *args):
        try:
            return await asyncio.to_thread(fn, *args)
        except SQLAlchemyError as e:
            raise StorageError("Local storage is unavailable") from e

    async def get_item(self, key):
        return await self._run(self._get, key)

    async def set_item(self, key, value):
        await self._run(self._set, key, value)

    async def delete_item(self, key):
        await self._run(self._delete, key)
