"""
Tests for the credential table, stats repo and key/value stores.
"""

import keyring
import keyring.backend
import keyring.errors
import pytest

from dzlearn.auth import make_login_record
from dzlearn.authrepo import CredentialStore
from dzlearn.errors import DuplicateUserError, StorageError
from dzlearn.securestore import KeyringStore, MemoryStore, SecureStore, SqlBlobStore
from dzlearn.statsrepo import StatsRepo


class TestCredentialStore:

    def test_create_and_get(self, session_factory, run):
        store = CredentialStore(session_factory)
        record = make_login_record("alice", "secret1", iterations=1000)

        async def scenario():
            await store.create_user(record)
            return await store.get_user("alice")

        assert run(scenario()) == record

    def test_missing_user_returns_none(self, session_factory, run):
        store = CredentialStore(session_factory)
        assert run(store.get_user("nobody")) is None

    def test_lookup_is_case_sensitive(self, session_factory, run):
        store = CredentialStore(session_factory)

        async def scenario():
            await store.create_user(make_login_record("alice", "secret1", iterations=1000))
            return await store.get_user("Alice")

        assert run(scenario()) is None

    def test_duplicate_insert_hits_constraint(self, session_factory, run):
        store = CredentialStore(session_factory)
        first = make_login_record("alice", "secret1", iterations=1000)
        second = make_login_record("alice", "other-password", iterations=1000)

        async def scenario():
            await store.create_user(first)
            with pytest.raises(DuplicateUserError) as exc:
                await store.create_user(second)
            assert exc.value.message == "Username already exists"
            return await store.get_user("alice")

        assert run(scenario()) == first


class TestStatsRepo:

    def _seed(self, session_factory, run):
        run(CredentialStore(session_factory).create_user(
            make_login_record("alice", "secret1", iterations=1000)))
        return StatsRepo(session_factory)

    def test_missing_stat_is_zero(self, session_factory, run):
        stats = self._seed(session_factory, run)
        assert run(stats.get_stat("alice", "streak")) == 0

    def test_set_then_overwrite(self, session_factory, run):
        stats = self._seed(session_factory, run)

        async def scenario():
            await stats.set_stat("alice", "streak", 3)
            await stats.set_stat("alice", "streak", 7)
            return await stats.get_stat("alice", "streak")

        assert run(scenario()) == 7

    def test_increment(self, session_factory, run):
        stats = self._seed(session_factory, run)

        async def scenario():
            assert await stats.increment_stat("alice", "cards_seen") == 1
            assert await stats.increment_stat("alice", "cards_seen", 4) == 5
            return await stats.get_stat("alice", "cards_seen")

        assert run(scenario()) == 5


class TestBlobStores:

    @pytest.fixture(params=["memory", "sql"])
    def store(self, request, session_factory):
        if request.param == "memory":
            return MemoryStore()
        return SqlBlobStore(session_factory)

    def test_get_set_delete(self, store, run):
        async def scenario():
            assert await store.get_item("k") is None
            await store.set_item("k", "v1")
            await store.set_item("k", "v2")
            assert await store.get_item("k") == "v2"
            await store.delete_item("k")
            assert await store.get_item("k") is None
            await store.delete_item("k")

        run(scenario())


class DictKeyring(keyring.backend.KeyringBackend):
    priority = 1

    def __init__(self):
        super().__init__()
        self.data = {}

    def get_password(self, service, username):
        return self.data.get((service, username))

    def set_password(self, service, username, password):
        self.data[(service, username)] = password

    def delete_password(self, service, username):
        if (service, username) not in self.data:
            raise keyring.errors.PasswordDeleteError(username)
        del self.data[(service, username)]


class TestKeyringStore:

    @pytest.fixture
    def backend(self):
        previous = keyring.get_keyring()
        backend = DictKeyring()
        keyring.set_keyring(backend)
        yield backend
        keyring.set_keyring(previous)

    def test_values_live_under_service(self, backend, run):
        store = KeyringStore("Dzardzongke-test")

        async def scenario():
            await store.set_item("auth.currentUser", "alice")
            return await store.get_item("auth.currentUser")

        assert run(scenario()) == "alice"
        assert backend.data == {("Dzardzongke-test", "auth.currentUser"): "alice"}

    def test_deleting_missing_key_is_noop(self, backend, run):
        run(KeyringStore("Dzardzongke-test").delete_item("auth.currentUser"))
        assert backend.data == {}

    def test_backend_failure_is_storage_error(self, backend, run, monkeypatch):
        def broken(*_args):
            raise keyring.errors.KeyringError("locked")
        monkeypatch.setattr(backend, "get_password", broken)

        with pytest.raises(StorageError):
            run(KeyringStore("Dzardzongke-test").get_item("auth.currentUser"))


class TestSecureStoreInterface:

    @pytest.mark.parametrize("call", [
        lambda s: s.get_item("k"),
        lambda s: s.set_item("k", "v"),
        lambda s: s.delete_item("k"),
    ])
    def test_base_class_is_abstract(self, call, run):
        with pytest.raises(NotImplementedError):
            run(call(SecureStore()))
