# authrepo.py
import asyncio
import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from .db import User
from .errors import DuplicateUserError, StorageError
from .records import UserRecord

log = logging.getLogger(__name__)

def _to_record(row: User) -> UserRecord:
    return UserRecord(username=row.username, password_hash=row.password_hash, salt=row.salt,
                      iters=row.iters, created_at=row.created_at)

class CredentialStore:
    """Durable user table. Insert and exact lookup only, no update or delete."""

    def __init__(self, session_factory: sessionmaker):
        self._sessions = session_factory

    def _insert(self, record: UserRecord) -> None:
        with self._sessions() as db:
            db.add(User(username=record.username, password_hash=record.password_hash,
                        salt=record.salt, iters=record.iters, created_at=record.created_at))
            try:
                db.commit()
            except IntegrityError as e:
                db.rollback()
                raise DuplicateUserError() from e

    def _lookup(self, username: str) -> Optional[UserRecord]:
        with self._sessions() as db:
            row = db.get(User, username)
            return _to_record(row) if row else None

    async def create_user(self, record: UserRecord) -> None:
        try:
            await asyncio.to_thread(self._insert, record)
        except SQLAlchemyError as e:
            raise StorageError("Could not save user") from e
        log.debug("stored user %s", record.username)

    async def get_user(self, username: str) -> Optional[UserRecord]:
        try:
            return await asyncio.to_thread(self._lookup, username)
        except SQLAlchemyError as e:
            raise StorageError("Could not read user") from e
