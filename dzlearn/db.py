# db.py
import time

from sqlalchemy import (Column, ForeignKey, Integer, String, Text, UniqueConstraint,
                        create_engine, event)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

Base = declarative_base()

def now_ms() -> int:
    return int(time.time() * 1000)

class User(Base):
    __tablename__ = "users"
    # primary key doubles as the uniqueness constraint on usernames
    username = Column(String(128), primary_key=True)
    password_hash = Column(String(128), nullable=False)
    salt = Column(String(64), nullable=False)
    iters = Column(Integer, nullable=False)
    created_at = Column(Integer, nullable=False)

class Stat(Base):
    __tablename__ = "stats"
    __table_args__ = (UniqueConstraint("username", "key"),)
    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(128), ForeignKey("users.username", ondelete="CASCADE"), nullable=False)
    key = Column(String(128), nullable=False)
    value = Column(Integer, nullable=False, default=0)
    updated_at = Column(Integer, nullable=False, default=now_ms)

class Blob(Base):
    __tablename__ = "kv_store"
    key = Column(String(255), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(Integer, nullable=False, default=now_ms, onupdate=now_ms)

def _sqlite_fk_pragma(dbapi_conn, _record):
    cur = dbapi_conn.cursor()
    cur.execute("PRAGMA foreign_keys=ON")
    cur.close()

def make_engine(url: str) -> Engine:
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            # one shared connection, otherwise every worker thread sees an empty db
            kwargs["poolclass"] = StaticPool
        engine = create_engine(url, **kwargs)
        event.listen(engine, "connect", _sqlite_fk_pragma)
    else:
        engine = create_engine(url)
    return engine

def init_db(engine: Engine) -> sessionmaker:
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)
