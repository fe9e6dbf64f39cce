from __future__ import annotations

import pytest

from userstore.locking import StorageLockError
from userstore.models import User, UserPayload
from userstore.storage import SharedStorage, UserStorage


@pytest.fixture()
def storage() -> UserStorage:
    store = UserStorage()
    store.create(User(id="u-1", name="Ada", email="ada@x.com"))
    store.create(User(id="u-2", name="Grace", email="grace@x.com"))
    return store


def test_get_by_id_returns_equal_record(storage: UserStorage) -> None:
    assert storage.get_by_id("u-1") == User(id="u-1", name="Ada", email="ada@x.com")
    assert storage.get_by_id("missing") is None


def test_create_keeps_its_own_copy() -> None:
    store = UserStorage()
    user = User(id="u-1", name="Ada", email="ada@x.com")
    store.create(user)

    user.name = "Mutated"

    assert store.get_by_id("u-1").name == "Ada"


def test_returned_records_are_copies(storage: UserStorage) -> None:
    fetched = storage.get_by_id("u-1")
    fetched.name = "Changed"
    for user in storage.fetch():
        user.email = "changed@x.com"

    assert storage.get_by_id("u-1") == User(id="u-1", name="Ada", email="ada@x.com")
    assert storage.get_by_id("u-2").email == "grace@x.com"


def test_fetch_lists_every_record(storage: UserStorage) -> None:
    users = storage.fetch()
    assert sorted(user.id for user in users) == ["u-1", "u-2"]
    assert {user.name for user in users} == {"Ada", "Grace"}


def test_update_replaces_name_and_email_only(storage: UserStorage) -> None:
    updated = storage.update("u-1", UserPayload(name="Ada L.", email="lovelace@x.com"))

    assert updated == User(id="u-1", name="Ada L.", email="lovelace@x.com")
    assert storage.get_by_id("u-1") == updated

    updated.name = "Not stored"
    assert storage.get_by_id("u-1").name == "Ada L."


def test_update_missing_leaves_store_unchanged(storage: UserStorage) -> None:
    before = sorted((u.id, u.name, u.email) for u in storage.fetch())

    assert storage.update("missing", UserPayload(name="x", email="y")) is None

    assert sorted((u.id, u.name, u.email) for u in storage.fetch()) == before


def test_delete_removes_record(storage: UserStorage) -> None:
    deleted = storage.delete("u-1")

    assert deleted == User(id="u-1", name="Ada", email="ada@x.com")
    assert storage.get_by_id("u-1") is None
    assert "u-1" not in storage
    assert [user.id for user in storage.fetch()] == ["u-2"]


def test_delete_missing_is_a_noop(storage: UserStorage) -> None:
    assert storage.delete("missing") is None
    assert len(storage) == 2


def test_size_tracks_creates_minus_deletes() -> None:
    store = UserStorage()
    for index in range(5):
        store.create(User(id=f"u-{index}", name=f"user{index}", email=f"{index}@x.com"))
    store.delete("u-0")
    store.delete("u-3")
    store.delete("u-3")

    assert len(store) == 3
    assert len(store.fetch()) == 3


def test_shared_storage_yields_the_wrapped_store() -> None:
    inner = UserStorage()
    shared = SharedStorage(inner)

    with shared.locked() as users:
        assert users is inner
        users.create(User(id="u-1", name="Ada", email="ada@x.com"))

    assert len(inner) == 1
    assert not shared.poisoned


def test_failed_critical_section_poisons_shared_storage() -> None:
    shared = SharedStorage()

    with pytest.raises(KeyError):
        with shared.locked():
            raise KeyError("boom")

    assert shared.poisoned
    with pytest.raises(StorageLockError):
        with shared.locked():
            pass

    shared.clear_poison()
    with shared.locked() as users:
        assert len(users) == 0
