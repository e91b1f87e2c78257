import asyncio
import os
import sys

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from dzlearn.app import build_app
from dzlearn.config import Config
from dzlearn.db import init_db, make_engine
from dzlearn.securestore import MemoryStore

TEST_ITERS = 1_000


@pytest.fixture
def engine():
    engine = make_engine("sqlite://")
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return init_db(engine)


@pytest.fixture
def config():
    return Config(db_url="sqlite://", secure_backend="memory", pbkdf2_iters=TEST_ITERS)


@pytest.fixture
def app(config, engine):
    # blobs in memory: the loads run concurrently and sqlite:// shares one connection
    return build_app(config, engine=engine, secure_store=MemoryStore(), blob_store=MemoryStore())


@pytest.fixture
def run():
    return asyncio.run
