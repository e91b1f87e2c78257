"""Wires the database, secure storage, session manager and stores together."""
import asyncio
import logging
from typing import Optional

from sqlalchemy.engine import Engine

from .authrepo import CredentialStore
from .config import Config
from .db import init_db, make_engine
from .securestore import KeyringStore, MemoryStore, SecureStore, SqlBlobStore
from .session import SessionContext, SessionManager
from .statsrepo import StatsRepo
from .stores import LanguageStore, ProgressStore, SavedStore

log = logging.getLogger(__name__)


class App:
    def __init__(self, engine: Engine, secure_store: SecureStore, blob_store: SecureStore,
                 iterations: int):
        self.engine = engine
        sessions = init_db(engine)
        self.credentials = CredentialStore(sessions)
        self.stats = StatsRepo(sessions)
        self.secure_store = secure_store
        self.blob_store = blob_store
        self.context = SessionContext()
        self.auth = SessionManager(self.credentials, secure_store, self.context, iterations)
        self.progress = ProgressStore(blob_store, self.context)
        self.saved = SavedStore(blob_store, self.context)
        self.language = LanguageStore(secure_store)
        self.auth.subscribe(self.saved)
        self.auth.subscribe(self.progress)

    async def start(self) -> None:
        """App start: session recovery and language in parallel, then the user's data."""
        await asyncio.gather(self.auth.hydrate(), self.language.load())
        await self.auth.load_user_stores()
        log.info("started as %s", self.auth.current_username or "guest")

    def close(self) -> None:
        self.engine.dispose()


def build_app(config: Optional[Config] = None, engine: Optional[Engine] = None,
              secure_store: Optional[SecureStore] = None,
              blob_store: Optional[SecureStore] = None) -> App:
    config = config or Config.from_env()
    engine = engine or make_engine(config.db_url)
    if secure_store is None:
        if config.secure_backend == "memory":
            secure_store = MemoryStore()
        else:
            secure_store = KeyringStore(config.keyring_service)
    if blob_store is None:
        # keyring backends cap secret sizes; progress documents grow without bound
        blob_store = SqlBlobStore(init_db(engine))
    return App(engine, secure_store, blob_store, config.pbkdf2_iters)
