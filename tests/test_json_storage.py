"""
Tests for JsonStorage against a temporary JSON file.
"""
from __future__ import annotations

import json
import os
import stat
import sys
import threading
from pathlib import Path

import pytest

# Make the social_api package importable when running tests from a checkout
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from social_api.domain.records import ZERO_TIME, User  # noqa: E402
from social_api.repositories.json_storage import (  # noqa: E402
    JsonStorage,
    NotFoundError,
    StorageIOError,
)


@pytest.fixture()
def db_file(tmp_path):
    return tmp_path / "db.json"


@pytest.fixture()
def store(db_file):
    storage = JsonStorage(db_file)
    storage.ensure_db()
    return storage


def test_ensure_db_creates_empty_document(db_file):
    JsonStorage(db_file).ensure_db()

    assert json.loads(db_file.read_text(encoding="utf-8")) == {"users": {}, "posts": {}}


@pytest.mark.skipif(os.name == "nt", reason="POSIX permissions only")
def test_ensure_db_restricts_file_to_owner(db_file):
    JsonStorage(db_file).ensure_db()

    assert stat.S_IMODE(db_file.stat().st_mode) == 0o600


def test_ensure_db_is_idempotent(store, db_file):
    store.create_user("a@x.com", "p", "A", 30)
    before = db_file.read_bytes()

    store.ensure_db()
    JsonStorage(db_file).ensure_db()

    assert db_file.read_bytes() == before


def test_create_then_get_user(store):
    created = store.create_user("a@x.com", "secret", "Alice", 30)
    fetched = store.get_user("a@x.com")

    assert fetched.email == "a@x.com"
    assert fetched.password == "secret"
    assert fetched.name == "Alice"
    assert fetched.age == 30
    assert fetched.created_at == created.created_at
    assert fetched.created_at != ZERO_TIME


def test_create_user_does_not_overwrite_existing(store):
    store.create_user("a@x.com", "p1", "First", 20)

    returned = store.create_user("a@x.com", "p2", "Second", 40)

    # the return value reflects the arguments, not what is stored
    assert returned.name == "Second"
    persisted = JsonStorage(store.path).get_user("a@x.com")
    assert persisted.name == "First"
    assert persisted.password == "p1"
    assert persisted.age == 20


def test_update_user_replaces_record_and_drops_created_at(store):
    store.create_user("a@x.com", "p", "A", 30)

    updated = store.update_user("a@x.com", "p2", "A2", 31)

    assert updated == User(email="a@x.com", password="p2", name="A2", age=31)
    fetched = store.get_user("a@x.com")
    assert fetched == updated
    assert fetched.created_at == ZERO_TIME


def test_update_missing_user_raises_and_leaves_file_untouched(store, db_file):
    store.create_user("a@x.com", "p", "A", 30)
    before = db_file.read_bytes()

    with pytest.raises(NotFoundError, match="user doesn't exist"):
        store.update_user("ghost@x.com", "p", "G", 1)

    assert db_file.read_bytes() == before


def test_get_missing_user_returns_zero_value(store):
    user = store.get_user("ghost@x.com")

    assert user == User()
    assert user.is_zero()


def test_email_keys_are_case_sensitive(store):
    store.create_user("a@x.com", "p", "lower", 1)
    store.create_user("A@x.com", "p", "upper", 2)

    assert store.get_user("a@x.com").name == "lower"
    assert store.get_user("A@x.com").name == "upper"


def test_delete_user(store):
    store.create_user("a@x.com", "p", "A", 30)

    store.delete_user("a@x.com")

    assert store.get_user("a@x.com").is_zero()


def test_delete_missing_user_is_noop(store, db_file):
    store.create_user("a@x.com", "p", "A", 30)
    before = db_file.read_bytes()

    store.delete_user("ghost@x.com")

    assert db_file.read_bytes() == before


def test_posts_are_filtered_by_owner(store):
    store.create_user("a@x.com", "p", "A", 30)
    store.create_user("b@x.com", "p", "B", 31)
    a1 = store.create_post("a@x.com", "a1")
    a2 = store.create_post("a@x.com", "a2")
    store.create_post("b@x.com", "b1")

    posts = store.get_posts("a@x.com")

    assert {p.id for p in posts} == {a1.id, a2.id}
    assert store.get_posts("nobody@x.com") == []


def test_post_ids_are_unique(store):
    ids = {store.create_post("a@x.com", f"post {i}").id for i in range(20)}

    assert len(ids) == 20


def test_create_post_allows_unknown_owner_by_default(store):
    post = store.create_post("ghost@x.com", "orphan")

    assert [p.id for p in store.get_posts("ghost@x.com")] == [post.id]


def test_create_post_can_require_existing_owner(db_file):
    strict = JsonStorage(db_file, enforce_post_owner=True)
    strict.ensure_db()

    with pytest.raises(NotFoundError):
        strict.create_post("ghost@x.com", "orphan")
    assert strict.get_posts("ghost@x.com") == []

    strict.create_user("a@x.com", "p", "A", 30)
    assert strict.create_post("a@x.com", "hi").text == "hi"


def test_delete_missing_post_is_noop(store, db_file):
    store.create_post("a@x.com", "hi")
    before = db_file.read_bytes()

    store.delete_post("no-such-id")

    assert db_file.read_bytes() == before


def test_user_and_post_scenario(store):
    store.create_user("a@x.com", "p", "A", 30)
    first = store.create_post("a@x.com", "hi")
    store.create_post("a@x.com", "bye")

    assert sorted(p.text for p in store.get_posts("a@x.com")) == ["bye", "hi"]

    store.delete_post(first.id)

    remaining = store.get_posts("a@x.com")
    assert [p.text for p in remaining] == ["bye"]


def test_missing_file_is_recreated_lazily(store, db_file):
    store.create_user("a@x.com", "p", "A", 30)
    db_file.unlink()

    assert store.get_user("a@x.com").is_zero()
    assert db_file.exists()


def test_corrupt_file_raises_storage_io_error(db_file):
    db_file.write_text("{not json", encoding="utf-8")
    store = JsonStorage(db_file)

    with pytest.raises(StorageIOError):
        store.get_user("a@x.com")
    with pytest.raises(StorageIOError):
        store.create_post("a@x.com", "hi")


def test_malformed_records_raise_storage_io_error(db_file):
    db_file.write_text(json.dumps({"users": {"a@x.com": "oops"}, "posts": {}}), encoding="utf-8")

    with pytest.raises(StorageIOError):
        JsonStorage(db_file).get_user("a@x.com")


def test_unreadable_path_raises_storage_io_error(tmp_path):
    # a directory exists but cannot be read as a file
    with pytest.raises(StorageIOError):
        JsonStorage(tmp_path).get_posts("a@x.com")


def test_unwritable_path_raises_storage_io_error(tmp_path):
    store = JsonStorage(tmp_path / "missing-dir" / "db.json")

    with pytest.raises(StorageIOError):
        store.ensure_db()


def test_null_sections_decode_as_empty(db_file):
    db_file.write_text(json.dumps({"users": None}), encoding="utf-8")
    store = JsonStorage(db_file)

    assert store.get_user("a@x.com").is_zero()
    store.create_user("a@x.com", "p", "A", 30)
    assert json.loads(db_file.read_text(encoding="utf-8"))["posts"] == {}


def test_concurrent_post_creation_loses_nothing(store):
    def worker(n: int) -> None:
        for i in range(10):
            store.create_post("a@x.com", f"{n}-{i}")

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(store.get_posts("a@x.com")) == 80


def test_wrongly_typed_fields_raise_storage_io_error(db_file):
    db_file.write_text(
        json.dumps({"users": {"a@x.com": {"createdAt": 1700000000, "email": "a@x.com"}}, "posts": {}}),
        encoding="utf-8",
    )

    with pytest.raises(StorageIOError):
        JsonStorage(db_file).get_user("a@x.com")


def test_non_object_section_raises_storage_io_error(db_file):
    db_file.write_text(json.dumps({"users": [], "posts": {}}), encoding="utf-8")

    with pytest.raises(StorageIOError):
        JsonStorage(db_file).get_user("a@x.com")
