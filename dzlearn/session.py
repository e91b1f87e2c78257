"""Session manager: signup, login, logout and app-start recovery.

The current user lives in an explicit ``SessionContext`` that is handed to
every user-scoped store, so storage keys are always derived from the same
pointer the manager flips. Stores subscribe to the manager and are reset and
reloaded whenever the user changes.
"""
import asyncio
import enum
import logging
from typing import Callable, List, Optional, Protocol

from .auth.keys import PBKDF2_PARAMS
from .auth.login import make_login_record, verify_login_hash
from .authrepo import CredentialStore
from .errors import (DuplicateUserError, InvalidCredentialsError, NotFoundError,
                     ValidationError)
from .securestore import SecureStore

log = logging.getLogger(__name__)

CURRENT_USER_KEY = "auth.currentUser"
GUEST = "guest"
MIN_PASSWORD_LEN = 6


class SessionState(enum.Enum):
    LOGGED_OUT = "logged_out"
    SIGNING_UP = "signing_up"
    LOGGING_IN = "logging_in"
    LOGGED_IN = "logged_in"


class SessionContext:
    """Holds the current username. Only ``SessionManager`` assigns it."""

    def __init__(self):
        self.current_username: Optional[str] = None

    def scoped_key(self, base_key: str) -> str:
        return f"{base_key}:user:{self.current_username or GUEST}"


class ScopedStore(Protocol):
    def reset_memory_only(self) -> None: ...

    async def load(self) -> None: ...


def validate_signup(username: str, password: str, confirm_password: str) -> str:
    username = username.strip()
    if not username:
        raise ValidationError("Username is required")
    if not password:
        raise ValidationError("Password is required")
    if len(password) < MIN_PASSWORD_LEN:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LEN} characters")
    if password != confirm_password:
        raise ValidationError("Passwords must match")
    return username


class SessionManager:
    def __init__(self, credentials: CredentialStore, secure_store: SecureStore,
                 context: Optional[SessionContext] = None,
                 iterations: int = PBKDF2_PARAMS["iterations"]):
        self.credentials = credentials
        self.secure_store = secure_store
        self.context = context or SessionContext()
        self.iterations = iterations
        self.state = SessionState.LOGGED_OUT
        self.loading = False
        self._stores: List[ScopedStore] = []
        self._lock: Optional[asyncio.Lock] = None
        self._lock_loop = None

    def _session_lock(self) -> asyncio.Lock:
        # signup/login/logout/hydrate never interleave; on 3.9 a Lock binds to
        # the loop current at construction, so build it inside the running loop
        loop = asyncio.get_running_loop()
        if self._lock is None or self._lock_loop is not loop:
            self._lock = asyncio.Lock()
            self._lock_loop = loop
        return self._lock

    @property
    def current_username(self) -> Optional[str]:
        return self.context.current_username

    def subscribe(self, store: ScopedStore) -> Callable[[], None]:
        self._stores.append(store)

        def unsubscribe():
            if store in self._stores:
                self._stores.remove(store)
        return unsubscribe

    async def _reload_stores(self) -> None:
        for store in self._stores:
            store.reset_memory_only()
        await asyncio.gather(*(store.load() for store in self._stores))

    async def load_user_stores(self) -> None:
        async with self._session_lock():
            await self._reload_stores()

    async def _activate(self, username: str) -> None:
        await self.secure_store.set_item(CURRENT_USER_KEY, username)
        # pointer first: the stores compute their keys from it while loading
        self.context.current_username = username
        self.state = SessionState.LOGGED_IN
        await self._reload_stores()

    def _begin(self, state: SessionState) -> SessionState:
        previous = self.state
        self.state = state
        self.loading = True
        return previous

    async def signup(self, username: str, password: str, confirm_password: str) -> None:
        username = validate_signup(username, password, confirm_password)
        async with self._session_lock():
            previous = self._begin(SessionState.SIGNING_UP)
            try:
                if await self.credentials.get_user(username):
                    raise DuplicateUserError()
                record = await asyncio.to_thread(make_login_record, username, password,
                                                 self.iterations)
                await self.credentials.create_user(record)
                await self._activate(username)
                log.info("signed up %s", username)
            except Exception:
                if self.state is SessionState.SIGNING_UP:
                    self.state = previous
                raise
            finally:
                self.loading = False

    async def login(self, username: str, password: str) -> None:
        username = username.strip()
        async with self._session_lock():
            previous = self._begin(SessionState.LOGGING_IN)
            try:
                record = await self.credentials.get_user(username)
                if record is None:
                    raise NotFoundError()
                ok = await asyncio.to_thread(verify_login_hash, password, record)
                if not ok:
                    raise InvalidCredentialsError()
                await self._activate(username)
                log.info("logged in %s", username)
            except Exception:
                if self.state is SessionState.LOGGING_IN:
                    self.state = previous
                raise
            finally:
                self.loading = False

    async def logout(self) -> None:
        async with self._session_lock():
            username = self.context.current_username
            await self.secure_store.delete_item(CURRENT_USER_KEY)
            # durable blobs stay; the same user gets them back on next login
            for store in self._stores:
                store.reset_memory_only()
            self.context.current_username = None
            self.state = SessionState.LOGGED_OUT
            log.info("logged out %s", username)

    async def hydrate(self) -> None:
        async with self._session_lock():
            username = await self.secure_store.get_item(CURRENT_USER_KEY)
            if username and await self.credentials.get_user(username):
                self.context.current_username = username
                self.state = SessionState.LOGGED_IN
                return
            if username:
                log.info("discarding stale session for %s", username)
                await self.secure_store.delete_item(CURRENT_USER_KEY)
            self.context.current_username = None
            self.state = SessionState.LOGGED_OUT
