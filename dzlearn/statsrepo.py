# statsrepo.py
import asyncio

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from .db import Stat, now_ms
from .errors import StorageError

class StatsRepo:
    """Per-user integer counters, one row per (username, key)."""

    def __init__(self, session_factory: sessionmaker):
        self._sessions = session_factory

    def _get(self, username: str, key: str) -> int:
        with self._sessions() as db:
            value = db.execute(
                select(Stat.value).where(Stat.username == username, Stat.key == key)
            ).scalar_one_or_none()
            return value or 0

    def _set(self, username: str, key: str, value: int) -> None:
        with self._sessions() as db:
            row = db.execute(
                select(Stat).where(Stat.username == username, Stat.key == key)
            ).scalar_one_or_none()
            if row is None:
                db.add(Stat(username=username, key=key, value=value, updated_at=now_ms()))
            else:
                row.value = value
                row.updated_at = now_ms()
            db.commit()

    async def get_stat(self, username: str, key: str) -> int:
        try:
            return await asyncio.to_thread(self._get, username, key)
        except SQLAlchemyError as e:
            raise StorageError("Could not read stat") from e

    async def set_stat(self, username: str, key: str, value: int) -> None:
        try:
            await asyncio.to_thread(self._set, username, key, value)
        except SQLAlchemyError as e:
            raise StorageError("Could not save stat") from e

    async def increment_stat(self, username: str, key: str, delta: int = 1) -> int:
        current = await self.get_stat(username, key)
        value = current + delta
        await self.set_stat(username, key, value)
        return value
